#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import logging
import os
import warnings
from collections.abc import AsyncIterator, Callable, Mapping
from dataclasses import dataclass, fields
from typing import Any, Self

from ...utils import expect_optional_str
from .. import URI
from ..emitter import (
    BodyEmitter,
    CloseEvent,
    DataEvent,
    EmitterState,
    EndEvent,
    ErrorEvent,
    Simulation,
    StreamEvent,
)
from ..headers import normalize_headers
from ..payload import Payload, coerce_payload
from ..url import resolve_url

logger = logging.getLogger(__name__)

DEFAULT_REMOTE_ADDRESS = "127.0.0.1"

_SIMULATION_KEYS = frozenset(f.name for f in fields(Simulation))

# camelCase spellings accepted by RequestOptions.from_mapping.
_OPTION_ALIASES = {"remoteAddress": "remote_address"}

# Warnings are attributed to the first caller outside this package.
_PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__))) + os.sep


def parse_simulation(simulate: Simulation | Mapping[str, Any] | None) -> Simulation:
    """Build a :py:class:`Simulation` from a mapping of flags.

    Unrecognized keys are ignored. End-of-stream is only suppressed by an explicit
    ``False``; the other flags take the truthiness of their values.
    """
    if simulate is None:
        return Simulation()
    if isinstance(simulate, Simulation):
        return simulate

    ignored = set(simulate) - _SIMULATION_KEYS
    if ignored:
        logger.debug("Ignoring unrecognized simulation options: %s", sorted(ignored))
    flags = {key: bool(value) for key, value in simulate.items() if key not in ignored}
    flags["end"] = simulate.get("end", True) is not False
    return Simulation(**flags)


@dataclass(kw_only=True)
class RequestOptions:
    """Description of a request to synthesize.

    :param url: The request URL as a string, :py:class:`URI`, or mapping of ``URI``
        fields.
    :param method: The HTTP method, case-insensitive. Defaults to ``GET``.
    :param remote_address: The simulated peer address. Defaults to ``127.0.0.1``.
    :param headers: Request headers, case-insensitive names.
    :param query: Query parameters to merge into the URL's own query string.
    :param payload: The request body.
    :param body: Deprecated alias of ``payload``. Merged into ``payload`` on
        construction; ``payload`` wins if both are given.
    :param authority: ``host`` header value for URLs without host information.
    :param simulate: Delivery edge cases to reproduce.
    """

    url: str | URI | Mapping[str, Any] = "/"
    method: str | None = None
    remote_address: str | None = None
    headers: Mapping[str, Any] | None = None
    query: Mapping[str, Any] | None = None
    payload: Any = None
    body: Any = None
    authority: str | None = None
    simulate: Simulation | Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.body is not None:
            warnings.warn(
                "The 'body' option is deprecated, use 'payload' instead.",
                DeprecationWarning,
                stacklevel=3,
                skip_file_prefixes=(_PACKAGE_DIR,),
            )
            if self.payload is None:
                self.payload = self.body
            self.body = None

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> Self:
        """Build options from a mapping that may use camelCase option names."""
        renamed = {_OPTION_ALIASES.get(key, key): v for key, v in options.items()}
        return cls(**renamed)


@dataclass(frozen=True)
class Connection:
    """The simulated connection a :py:class:`MockRequest` arrived on."""

    remote_address: str = DEFAULT_REMOTE_ADDRESS


class MockRequest:
    """An in-memory inbound HTTP request for driving server-side handlers in tests.

    The request exposes the usual fields (``url``, ``http_version``, ``method``,
    ``headers``, ``connection``) and a body that is delivered the way a socket would
    deliver it: asynchronously, in response to pulls, exactly once. The ``simulate``
    option reproduces delivery edge cases such as split chunks, injected errors, early
    close, and a missing end-of-stream.

    If the payload is a stream, :py:meth:`prepare` must be awaited before the body is
    read.
    """

    def __init__(self, options: RequestOptions | None = None) -> None:
        """
        :param options: Description of the request. See :py:class:`RequestOptions`.
        """
        options = options or RequestOptions()
        resolved = resolve_url(options.url, options.query)

        self.url: str = resolved.path
        self.http_version: str = "1.1"
        self.method: str = (expect_optional_str(options.method) or "GET").upper()
        self.headers: dict[str, Any] = normalize_headers(
            options.headers, resolved, expect_optional_str(options.authority)
        )
        self.connection = Connection(
            remote_address=expect_optional_str(options.remote_address)
            or DEFAULT_REMOTE_ADDRESS
        )

        payload = coerce_payload(options.payload, self.headers)
        self._emitter = BodyEmitter(payload, parse_simulation(options.simulate))
        self._teardown: list[Callable[[], Any]] = []
        logger.debug("Created mock request %s %s", self.method, self.url)

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> Self:
        """Create a request from a mapping of options.

        Both snake_case and camelCase (``remoteAddress``) option names are accepted.
        """
        return cls(RequestOptions.from_mapping(options))

    @property
    def payload(self) -> Payload:
        """The payload to be emitted."""
        return self._emitter.payload

    @property
    def simulate(self) -> Simulation:
        return self._emitter.simulate

    @property
    def state(self) -> EmitterState:
        return self._emitter.state

    @property
    def is_done(self) -> bool:
        """Whether the body has been emitted."""
        return self._emitter.is_done

    @property
    def closed(self) -> bool:
        """Whether a simulated close has been signaled."""
        return self._emitter.closed

    async def prepare(self, callback: Callable[[], None] | None = None) -> None:
        """Make the body ready to be pulled.

        A stream payload is drained into a buffer and ``content-length`` is set from
        it, unless already present. For any other payload this completes at once.

        :param callback: Called with no arguments once preparation is complete.
        """
        payload = await self._emitter.prepare()
        if payload is not None:
            self.headers.setdefault("content-length", str(len(payload)))
        if callback is not None:
            callback()

    def pull(self, size: int = -1) -> None:
        """Request the body. Events are emitted on a later turn of the event loop.

        :param size: The number of bytes the consumer would like. Ignored.
        """
        self._emitter.pull(size)

    async def next_event(self) -> StreamEvent:
        """Wait for the next body event, pulling if none is buffered."""
        return await self._emitter.next_event()

    async def events(self) -> AsyncIterator[StreamEvent]:
        """Iterate over body events up to and including end-of-stream."""
        while True:
            event = await self.next_event()
            yield event
            if isinstance(event, EndEvent):
                return

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iter_chunks()

    async def _iter_chunks(self) -> AsyncIterator[bytes]:
        async for event in self.events():
            match event:
                case DataEvent(chunk=chunk):
                    yield chunk
                case ErrorEvent(error=error):
                    raise error
                case CloseEvent() | EndEvent():
                    pass

    async def consume_body(self) -> bytes:
        """Iterate over request body and return as bytes."""
        body = b""
        async for chunk in self:
            body += chunk
        return body

    def on_destroy(self, callback: Callable[[], Any]) -> None:
        """Register a callback to run when the request is destroyed.

        Adapters use this to stop work tied to the request, such as a task feeding
        the body into another framework's stream.
        """
        self._teardown.append(callback)

    def destroy(self) -> None:
        """Accepts a teardown request.

        The request itself holds nothing to release, so its fields and body are left
        as they are. Callbacks registered with :py:meth:`on_destroy` are run once.
        """
        self._emitter.destroy()
        teardown, self._teardown = self._teardown, []
        for callback in teardown:
            callback()

    def __repr__(self) -> str:
        return (
            f"MockRequest(method={self.method!r}, url={self.url!r}, "
            f"headers={self.headers!r})"
        )


def create_request(**options: Any) -> MockRequest:
    """Create a :py:class:`MockRequest` from keyword options.

    Accepts the fields of :py:class:`RequestOptions`.
    """
    return MockRequest(RequestOptions(**options))
