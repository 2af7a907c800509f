#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum

from ..async_utils import read_stream_source
from ..exceptions import SimulatedError, StreamStateError
from .payload import Payload, PendingSource

logger = logging.getLogger(__name__)


@dataclass(kw_only=True, frozen=True)
class Simulation:
    """Delivery edge cases a request body stream should reproduce.

    :param end: Whether to signal end-of-stream after the body.
    :param split: Whether to deliver the body as two chunks, the first byte and then
        the remainder.
    :param error: Whether to signal a :py:class:`SimulatedError` after the body.
    :param close: Whether to signal close after the body.
    """

    end: bool = True
    split: bool = False
    error: bool = False
    close: bool = False


class EmitterState(Enum):
    """Lifecycle of a request body."""

    PENDING = "PENDING"
    """The payload is a source that has not been drained yet."""

    READY = "READY"
    """The payload is a concrete buffer, or there is none."""

    EMITTING = "EMITTING"
    """The first pull is delivering the body."""

    DONE = "DONE"
    """The body has been delivered. Further pulls only re-signal end-of-stream."""


@dataclass(frozen=True)
class DataEvent:
    """A chunk of the request body."""

    chunk: bytes


@dataclass(frozen=True)
class ErrorEvent:
    """An error signaled by the body stream."""

    error: Exception


@dataclass(frozen=True)
class CloseEvent:
    """The body stream was closed."""


@dataclass(frozen=True)
class EndEvent:
    """End of the body stream."""


type StreamEvent = DataEvent | ErrorEvent | CloseEvent | EndEvent


class BodyEmitter:
    """Single-shot producer of a request body.

    The body is produced in response to pulls. Each pull is handled on a later turn of
    the event loop, never synchronously. The first pull delivers the whole body along
    with any simulated signals; later pulls only repeat end-of-stream.
    """

    def __init__(self, payload: Payload, simulate: Simulation | None = None) -> None:
        """
        :param payload: The classified request payload.
        :param simulate: The delivery edge cases to reproduce.
        """
        self._payload = payload
        self._simulate = simulate or Simulation()
        self._state = (
            EmitterState.PENDING
            if isinstance(payload, PendingSource)
            else EmitterState.READY
        )
        self._is_done = False
        self._closed = False
        self._pull_scheduled = False
        self._events: deque[StreamEvent] = deque()
        self._waiter: asyncio.Future[None] | None = None
        self._drain: asyncio.Task[bytes] | None = None

    @property
    def payload(self) -> Payload:
        """The payload, replaced by its buffer once a pending source is prepared."""
        return self._payload

    @property
    def simulate(self) -> Simulation:
        return self._simulate

    @property
    def state(self) -> EmitterState:
        return self._state

    @property
    def is_done(self) -> bool:
        """Whether the first pull has run."""
        return self._is_done

    @property
    def closed(self) -> bool:
        """Whether a close signal has been emitted."""
        return self._closed

    async def prepare(self) -> bytes | None:
        """Drain a pending source into a buffer.

        Does nothing if the payload is already concrete. Overlapping calls share a
        single drain of the source.

        :returns: The concrete payload, or None if there is no body.
        """
        if isinstance(self._payload, PendingSource):
            if self._drain is None:
                self._drain = asyncio.get_running_loop().create_task(
                    read_stream_source(self._payload.source)
                )
            buffered = await self._drain
            if isinstance(self._payload, PendingSource):
                logger.debug("Buffered %s bytes from stream payload", len(buffered))
                self._payload = buffered
                self._state = EmitterState.READY
        return self._payload

    def pull(self, size: int = -1) -> None:
        """Request the body.

        Delivery is scheduled for the next turn of the event loop. Pulls made while
        one is already scheduled are coalesced into it. The whole body is delivered at
        once, so ``size`` is only a hint.

        :param size: The number of bytes the consumer would like. Ignored.
        :raises StreamStateError: If the payload is a source that hasn't been
            prepared.
        """
        if self._state is EmitterState.PENDING:
            raise StreamStateError(
                "The request payload is a stream that has not been prepared. "
                "Await prepare() before reading the body."
            )
        if self._pull_scheduled:
            return
        self._pull_scheduled = True
        asyncio.get_running_loop().call_soon(self._on_pull)

    def _on_pull(self) -> None:
        self._pull_scheduled = False
        if self._is_done:
            if self._simulate.end is not False:
                self._push(EndEvent())
            self._wake()
            return

        self._is_done = True
        self._state = EmitterState.EMITTING
        payload = self._payload
        if isinstance(payload, bytes) and payload:
            if self._simulate.split:
                self._push(DataEvent(payload[:1]))
                if len(payload) > 1:
                    self._push(DataEvent(payload[1:]))
            else:
                self._push(DataEvent(payload))

        if self._simulate.error:
            self._push(ErrorEvent(SimulatedError("Simulated")))

        if self._simulate.close:
            self._closed = True
            self._push(CloseEvent())

        self._state = EmitterState.DONE
        if self._simulate.end is not False:
            self._push(EndEvent())

        logger.debug("Emitted request body with simulation %s", self._simulate)
        self._wake()

    def _push(self, event: StreamEvent) -> None:
        self._events.append(event)

    def _wake(self) -> None:
        if self._events and self._waiter is not None and not self._waiter.done():
            self._waiter.set_result(None)

    async def next_event(self) -> StreamEvent:
        """Wait for the next event of the body stream, pulling if none is buffered.

        If a pull produces nothing, as happens after the body when end-of-stream is
        suppressed, this waits until something is emitted, which may be never.
        """
        while not self._events:
            if self._waiter is None or self._waiter.done():
                self._waiter = asyncio.get_running_loop().create_future()
            waiter = self._waiter
            self.pull()
            await waiter
        return self._events.popleft()

    def destroy(self) -> None:
        """Accepts a teardown request. There is nothing to release."""
