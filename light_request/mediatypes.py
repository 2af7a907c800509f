#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import json
from typing import Any

JSON_MEDIA_TYPE = "application/json"


def dumps_compact(value: Any) -> str:
    """Serialize a value to JSON without insignificant whitespace.

    Non-ASCII characters are written as-is so that the encoded length matches what
    a JavaScript ``JSON.stringify`` client would send.
    """
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class JsonBlob(bytes):
    """Bytes that contain json data which can be lazily loaded."""

    _json = None

    def as_json(self) -> Any:
        """Converts the bytes to the value they encode."""
        if self._json is None:
            self._json = json.loads(self.decode(encoding="utf-8"))
        return self._json

    @staticmethod
    def from_json(j: Any) -> "JsonBlob":
        """Constructs a JsonBlob from a JSON-serializable value."""
        json_blob = JsonBlob(dumps_compact(j).encode(encoding="utf-8"))
        json_blob._json = j  # pylint: disable=protected-access
        return json_blob
