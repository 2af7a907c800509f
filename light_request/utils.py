#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from typing import Any, TypeVar

from .exceptions import ExpectationNotMetException

_T = TypeVar("_T")


def expect_type(typ: type[_T], value: Any) -> _T:
    """Asserts a value is of the given type and returns it as that type.

    This is essentially typing.cast, but with a runtime assertion. If the runtime
    assertion isn't needed, typing.cast should be preferred.

    :param typ: The expected type.
    :param value: The value which is expected to be the given type.
    :returns: The given value cast as the given type.
    :raises ExpectationNotMetException: If the value does not match the type.
    """
    if not isinstance(value, typ):
        raise ExpectationNotMetException(
            f"Expected {typ}, found {type(value)}: {value}"
        )
    return value


def expect_optional_str(value: Any) -> str | None:
    """Asserts a value is either ``None`` or a string."""
    if value is None:
        return None
    return expect_type(str, value)


def to_bytes(chunk: bytes | bytearray | memoryview | str) -> bytes:
    """Convert a chunk of body data to bytes, encoding text as UTF-8."""
    match chunk:
        case bytes():
            return chunk
        case bytearray():
            return bytes(chunk)
        case memoryview():
            return chunk.tobytes()
        case str():
            return chunk.encode("utf-8")
        case _:
            raise ExpectationNotMetException(
                f"Expected a bytes-like or str chunk, found {type(chunk)}"
            )
