#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs, quote, urlencode, urlsplit

from ..exceptions import URLParseError
from . import URI, format_host

# Characters encodeURIComponent-style serializers leave unescaped in addition to
# the ones urllib.parse.quote always leaves alone.
_QUERY_SAFE = "!*'()"


@dataclass(kw_only=True, frozen=True)
class ResolvedURL:
    """The components of a request URL after query parameters have been merged."""

    scheme: str | None
    """The scheme without its trailing colon, or None for a bare path."""

    hostname: str | None
    """The lowercased hostname, without IPv6 brackets."""

    port: int | None
    """An explicit port number."""

    pathname: str
    """The path component, ``/`` when the URL has none."""

    query: str | None
    """The query string of the URL as given, without the leading ``?``."""

    path: str
    """The request target: ``pathname`` followed by the merged query, if any."""

    @property
    def host(self) -> str | None:
        """``hostname:port`` when the URL carries an explicit port."""
        if self.port is None or self.hostname is None:
            return None
        return format_host(self.hostname, self.port)


def resolve_url(
    url: str | URI | Mapping[str, Any], query: Mapping[str, Any] | None = None
) -> ResolvedURL:
    """Resolve a request URL and merge extra query parameters into it.

    Parameters from ``query`` win over parameters of the same name already present
    in the URL. When ``query`` serializes to nothing the URL's own path and query are
    kept exactly as given.

    :param url: A URL string, a :py:class:`URI`, or a mapping of ``URI`` fields.
    :param query: Extra query parameters.
    :raises URLParseError: If the URL cannot be parsed.
    """
    raw = _url_to_string(url)
    try:
        parsed = urlsplit(raw)
        # Accessing the port validates it.
        port = parsed.port
    except ValueError as e:
        raise URLParseError(f"Unable to parse URL {raw!r}: {e}") from e

    pathname = parsed.path or "/"
    # urlsplit drops an empty query, but "/x?" must round-trip as given.
    has_query = "?" in raw.split("#", 1)[0]
    path = f"{pathname}?{parsed.query}" if has_query else pathname

    if query and serialize_query(query):
        merged = merge_query(parsed.query, query)
        path = f"{pathname}?{merged}" if merged else pathname

    return ResolvedURL(
        scheme=parsed.scheme or None,
        hostname=parsed.hostname,
        port=port,
        pathname=pathname,
        query=parsed.query if has_query else None,
        path=path,
    )


def merge_query(original: str, overrides: Mapping[str, Any]) -> str:
    """Overlay ``overrides`` onto a query string and serialize the result.

    Keys already in ``original`` keep their position; new keys are appended.
    """
    combined: dict[str, Any] = dict(parse_qs(original, keep_blank_values=True))
    combined.update(overrides)
    return serialize_query(combined)


def serialize_query(params: Mapping[str, Any]) -> str:
    """Serialize query parameters, repeating the key for each value of a list."""
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        if isinstance(value, list | tuple):
            pairs.extend((key, _format_query_value(v)) for v in value)
        else:
            pairs.append((key, _format_query_value(value)))
    return urlencode(pairs, safe=_QUERY_SAFE, quote_via=quote)


def _format_query_value(value: Any) -> str:
    match value:
        case bool():
            return "true" if value else "false"
        case str():
            return value
        case int():
            return str(value)
        case float() if value.is_integer():
            return str(int(value))
        case float():
            return repr(value)
        case _:
            return ""


def _url_to_string(url: str | URI | Mapping[str, Any]) -> str:
    match url:
        case str():
            return url
        case URI():
            return url.build()
        case Mapping():
            try:
                return URI(**url).build()
            except TypeError as e:
                raise URLParseError(f"Invalid URL components {dict(url)!r}: {e}") from e
        case _:
            raise URLParseError(
                f"Expected a URL string, URI, or mapping, found {type(url)}"
            )
