#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0

from collections.abc import AsyncIterator, Iterator
from io import BytesIO
from typing import Any

import pytest

from light_request._private.payload import PendingSource, coerce_payload
from light_request.async_utils import async_list
from light_request.mediatypes import JsonBlob


def test_no_payload() -> None:
    headers: dict[str, Any] = {}

    assert coerce_payload(None, headers) is None
    assert headers == {}


def test_text_payload() -> None:
    headers: dict[str, Any] = {}

    assert coerce_payload("hello", headers) == b"hello"
    assert headers == {"content-length": "5"}


def test_text_length_counts_bytes() -> None:
    headers: dict[str, Any] = {}

    assert coerce_payload("héllo", headers) == "héllo".encode()
    assert headers["content-length"] == "6"


@pytest.mark.parametrize(
    "value", [b"ABC", bytearray(b"ABC"), memoryview(b"ABC")]
)
def test_bytes_payload(value: Any) -> None:
    headers: dict[str, Any] = {}
    payload = coerce_payload(value, headers)

    assert payload == b"ABC"
    assert isinstance(payload, bytes)
    assert headers == {"content-length": "3"}


def test_empty_text_means_no_body() -> None:
    headers: dict[str, Any] = {}

    assert coerce_payload("", headers) is None
    assert "content-length" not in headers


@pytest.mark.parametrize("value", [b"", bytearray(), memoryview(b"")])
def test_empty_bytes_is_zero_length_body(value: Any) -> None:
    headers: dict[str, Any] = {}
    payload = coerce_payload(value, headers)

    assert payload == b""
    assert isinstance(payload, bytes)
    assert headers == {"content-length": "0"}


def test_json_payload() -> None:
    headers: dict[str, Any] = {}
    payload = coerce_payload({"a": 1}, headers)

    assert payload == b'{"a":1}'
    assert isinstance(payload, JsonBlob)
    assert payload.as_json() == {"a": 1}
    assert headers == {"content-type": "application/json", "content-length": "7"}


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, b"0"),
        (False, b"false"),
        ({}, b"{}"),
        ([], b"[]"),
        ([1, "two", None], b'[1,"two",null]'),
        ({"name": "é"}, '{"name":"é"}'.encode()),
    ],
)
def test_values_serialized_as_json(value: Any, expected: bytes) -> None:
    headers: dict[str, Any] = {}

    assert coerce_payload(value, headers) == expected
    assert headers["content-length"] == str(len(expected))


def test_caller_content_type_preserved() -> None:
    headers: dict[str, Any] = {"content-type": "application/vnd.api+json"}
    coerce_payload({"a": 1}, headers)

    assert headers["content-type"] == "application/vnd.api+json"


def test_caller_content_length_preserved() -> None:
    headers: dict[str, Any] = {"content-length": "99"}
    coerce_payload("hello", headers)

    assert headers["content-length"] == "99"


def test_unserializable_value_raises() -> None:
    with pytest.raises(TypeError):
        coerce_payload(object(), {})


def _chunks() -> Iterator[bytes]:
    yield b"a"
    yield b"b"


async def _async_chunks() -> AsyncIterator[bytes]:
    yield b"a"


@pytest.mark.parametrize(
    "source",
    [BytesIO(b"abc"), _chunks(), _async_chunks(), async_list([b"a"]), iter([b"a"])],
)
def test_stream_like_payload_is_pending(source: Any) -> None:
    headers: dict[str, Any] = {}
    payload = coerce_payload(source, headers)

    assert payload == PendingSource(source)
    assert "content-length" not in headers
    assert "content-type" not in headers
