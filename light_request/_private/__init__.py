#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import re
from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from ipaddress import IPv4Address, IPv6Address, ip_address
from urllib.parse import urlunsplit

from ..exceptions import URLParseError

# RFC 3986 reg-name: unreserved, percent-encoded, and sub-delimiter characters.
_REG_NAME_MATCHER = re.compile(r"^(?:%[0-9A-Fa-f]{2}|[A-Za-z0-9._~\-!$&'()*+,;=])*$")


class HostType(Enum):
    """Enumeration of possible host types."""

    IPv6 = "IPv6"
    """Host is an IPv6 address."""

    IPv4 = "IPv4"
    """Host is an IPv4 address."""

    DOMAIN = "DOMAIN"
    """Host type is a domain name."""

    UNKNOWN = "UNKNOWN"
    """Host type is unknown."""


def host_type(host: str) -> HostType:
    """Classify a host, given without IPv6 brackets."""
    try:
        address = ip_address(host)
    except ValueError:
        if _REG_NAME_MATCHER.match(host):
            return HostType.DOMAIN
        return HostType.UNKNOWN
    if isinstance(address, IPv6Address):
        return HostType.IPv6
    if isinstance(address, IPv4Address):
        return HostType.IPv4
    return HostType.UNKNOWN


def format_host(hostname: str, port: int | None = None) -> str:
    """Join a hostname and optional port, bracketing IPv6 hosts."""
    host = f"[{hostname}]" if host_type(hostname) is HostType.IPv6 else hostname
    if port is None:
        return host
    return f"{host}:{port}"


@dataclass(kw_only=True, frozen=True)
class URI:
    """Structured form of a request URL.

    Every component is optional, so a bare path such as ``URI(path="/users")`` is as
    valid as a fully qualified URL.
    """

    scheme: str | None = None
    """For example ``http`` or ``https``."""

    username: str | None = None
    """Username part of the userinfo URI component."""

    password: str | None = None
    """Password part of the userinfo URI component."""

    host: str | None = None
    """The hostname, for example ``example.com``."""

    port: int | None = None
    """An explicit port number."""

    path: str | None = None
    """Path component of the URI."""

    query: str | None = None
    """Query component of the URI as string."""

    fragment: str | None = None
    """Part of the URI specification, never part of the request target."""

    def __post_init__(self) -> None:
        """Validate host and port components."""
        if self.host is not None and host_type(self.host) is HostType.UNKNOWN:
            raise URLParseError(f"Invalid host: {self.host}")
        if self.port is not None and not 0 <= self.port <= 65535:
            raise URLParseError(f"Invalid port: {self.port}")

    @cached_property
    def netloc(self) -> str:
        """Construct netloc string in format ``{username}:{password}@{host}:{port}``

        ``username``, ``password``, and ``port`` are only included if set. ``password``
        is ignored, unless ``username`` is also set.
        """
        if self.host is None:
            return ""

        if self.username is not None:
            password = "" if self.password is None else f":{self.password}"
            userinfo = f"{self.username}{password}@"
        else:
            userinfo = ""

        return f"{userinfo}{format_host(self.host, self.port)}"

    def build(self) -> str:
        """Construct URI string representation.

        Returns a string of the form
        ``{scheme}://{username}:{password}@{host}:{port}{path}?{query}#{fragment}``
        """
        path = self.path or ""
        if self.host is not None and path and not path.startswith("/"):
            path = f"/{path}"
        return urlunsplit(
            (self.scheme or "", self.netloc, path, self.query or "", self.fragment or "")
        )
