#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from collections.abc import AsyncIterable, Iterator
from inspect import iscoroutinefunction
from typing import Any, Protocol, TypeGuard, runtime_checkable


@runtime_checkable
class BytesReader(Protocol):
    """A protocol for objects that support reading bytes from them."""

    def read(self, size: int = -1, /) -> bytes | str: ...


@runtime_checkable
class AsyncByteStream(Protocol):
    """A file-like object with an async read method."""

    async def read(self, size: int = -1, /) -> bytes | str: ...


# Every shape of source a request payload may be drained from. Chunks may be text,
# which is encoded as UTF-8 when buffered.
type StreamSource = (
    AsyncByteStream
    | BytesReader
    | AsyncIterable[bytes | str]
    | Iterator[bytes | str]
)


def is_bytes_reader(obj: Any) -> TypeGuard[BytesReader]:
    """Determines whether the given object conforms to the BytesReader protocol.

    This is necessary to distinguish this from an async reader, since runtime_checkable
    doesn't make that distinction.

    :param obj: The object to inspect.
    """
    return isinstance(obj, BytesReader) and not iscoroutinefunction(
        getattr(obj, "read")
    )


def is_stream_source(obj: Any) -> TypeGuard[StreamSource]:
    """Determines whether the given object can be drained as a chunked source.

    Bytes and strings are iterable but not iterators, so they are never treated as
    sources.

    :param obj: The object to inspect.
    """
    if isinstance(obj, str | bytes | bytearray | memoryview):
        return False
    if isinstance(obj, AsyncIterable | Iterator):
        return True
    return callable(getattr(obj, "read", None))
