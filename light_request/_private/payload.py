#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from dataclasses import dataclass
from typing import Any

from ..interfaces import StreamSource, is_stream_source
from ..mediatypes import JSON_MEDIA_TYPE, JsonBlob
from ..utils import to_bytes


@dataclass(frozen=True)
class PendingSource:
    """A stream-like payload that has not been drained yet."""

    source: StreamSource


# The payload of a request as decided at construction time: a concrete buffer, a
# source still to be drained by ``prepare``, or no body at all.
type Payload = bytes | PendingSource | None


def coerce_payload(value: Any, headers: dict[str, Any]) -> Payload:
    """Classify a request payload and apply the headers it implies.

    Stream-like values are left pending. Empty text means there is no body. Text
    and bytes-like values are used as they are, with text encoded as UTF-8; empty
    bytes are a concrete, zero-length body. Anything else is serialized to JSON and
    ``content-type`` defaults to ``application/json``. For concrete payloads
    ``content-length`` is set unless the caller already supplied it.

    :param value: The payload given by the caller.
    :param headers: The normalized headers of the request being built. Updated in
        place.
    :returns: The classified payload.
    """
    payload: Payload
    if value is None or (isinstance(value, str) and not value):
        return None
    if is_stream_source(value):
        return PendingSource(value)
    if isinstance(value, str | bytes | bytearray | memoryview):
        payload = to_bytes(value)
    else:
        payload = JsonBlob.from_json(value)
        headers["content-type"] = headers.get("content-type") or JSON_MEDIA_TYPE

    headers.setdefault("content-length", str(len(payload)))
    return payload
