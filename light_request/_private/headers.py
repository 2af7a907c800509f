#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from collections.abc import Mapping
from typing import Any

from . import format_host
from .url import ResolvedURL

DEFAULT_USER_AGENT = "lightMyRequest"
DEFAULT_HOST = "localhost:80"

_DEFAULT_PORTS = {"https": 443}


def normalize_headers(
    headers: Mapping[str, Any] | None,
    url: ResolvedURL,
    authority: str | None = None,
) -> dict[str, Any]:
    """Build a fresh header dict keyed by lowercase header name.

    When the same name is given in several casings, the one iterated last wins.
    ``user-agent`` and ``host`` get defaults when absent or empty.

    :param headers: The caller's headers. Never modified.
    :param url: The resolved request URL, used to derive ``host``.
    :param authority: Fallback ``host`` for URLs without host information.
    """
    normalized: dict[str, Any] = {}
    for name, value in (headers or {}).items():
        normalized[name.lower()] = value

    normalized["user-agent"] = normalized.get("user-agent") or DEFAULT_USER_AGENT
    normalized["host"] = (
        normalized.get("host") or host_from_url(url) or authority or DEFAULT_HOST
    )
    return normalized


def host_from_url(url: ResolvedURL) -> str | None:
    """Derive a ``host`` header value from a resolved URL.

    An explicit port is used as-is. Otherwise the port is implied by the scheme:
    443 for ``https`` and 80 for anything else.
    """
    if url.host is not None:
        return url.host
    if url.scheme is not None and url.hostname:
        port = _DEFAULT_PORTS.get(url.scheme, 80)
        return format_host(url.hostname, port)
    return None
