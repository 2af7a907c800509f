#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0

import asyncio

import pytest

from light_request import SimulatedError, StreamStateError
from light_request._private.emitter import (
    BodyEmitter,
    CloseEvent,
    DataEvent,
    EmitterState,
    EndEvent,
    ErrorEvent,
    Simulation,
    StreamEvent,
)
from light_request._private.payload import PendingSource
from light_request.async_utils import async_list


async def collect(emitter: BodyEmitter) -> list[StreamEvent]:
    events: list[StreamEvent] = []
    while True:
        event = await emitter.next_event()
        events.append(event)
        if isinstance(event, EndEvent):
            return events


def test_initial_state() -> None:
    assert BodyEmitter(b"abc").state is EmitterState.READY
    assert BodyEmitter(None).state is EmitterState.READY
    assert BodyEmitter(PendingSource(iter([b"a"]))).state is EmitterState.PENDING


def test_default_simulation() -> None:
    assert BodyEmitter(None).simulate == Simulation(
        end=True, split=False, error=False, close=False
    )


@pytest.mark.asyncio
async def test_pull_is_deferred() -> None:
    emitter = BodyEmitter(b"abc")
    emitter.pull()

    assert not emitter.is_done
    assert emitter.state is EmitterState.READY

    await asyncio.sleep(0)

    assert emitter.is_done
    assert emitter.state is EmitterState.DONE


@pytest.mark.asyncio
async def test_single_chunk() -> None:
    emitter = BodyEmitter(b"ABC")
    assert await collect(emitter) == [DataEvent(b"ABC"), EndEvent()]


@pytest.mark.asyncio
async def test_no_payload_only_ends() -> None:
    emitter = BodyEmitter(None)
    assert await collect(emitter) == [EndEvent()]


@pytest.mark.asyncio
async def test_split() -> None:
    emitter = BodyEmitter(bytes([0x41, 0x42, 0x43]), Simulation(split=True))

    assert await collect(emitter) == [
        DataEvent(bytes([0x41])),
        DataEvent(bytes([0x42, 0x43])),
        EndEvent(),
    ]


@pytest.mark.asyncio
async def test_split_single_byte() -> None:
    emitter = BodyEmitter(b"A", Simulation(split=True))
    assert await collect(emitter) == [DataEvent(b"A"), EndEvent()]


@pytest.mark.asyncio
async def test_signal_order() -> None:
    emitter = BodyEmitter(b"ABC", Simulation(error=True, close=True))
    events = await collect(emitter)

    assert [type(event) for event in events] == [
        DataEvent,
        ErrorEvent,
        CloseEvent,
        EndEvent,
    ]
    error = events[1]
    assert isinstance(error, ErrorEvent)
    assert isinstance(error.error, SimulatedError)
    assert str(error.error) == "Simulated"
    assert emitter.closed


@pytest.mark.asyncio
async def test_error_without_payload() -> None:
    emitter = BodyEmitter(None, Simulation(error=True))
    events = await collect(emitter)

    assert [type(event) for event in events] == [ErrorEvent, EndEvent]


@pytest.mark.asyncio
async def test_later_pulls_only_signal_end() -> None:
    emitter = BodyEmitter(b"ABC", Simulation(split=True))
    await collect(emitter)

    assert await emitter.next_event() == EndEvent()
    assert await emitter.next_event() == EndEvent()
    assert emitter.is_done
    assert emitter.state is EmitterState.DONE


@pytest.mark.asyncio
async def test_end_suppressed() -> None:
    emitter = BodyEmitter(b"ABC", Simulation(end=False))

    assert await emitter.next_event() == DataEvent(b"ABC")
    with pytest.raises(TimeoutError):
        await asyncio.wait_for(emitter.next_event(), timeout=0.05)

    # Further pulls still produce nothing.
    emitter.pull()
    await asyncio.sleep(0)
    assert not emitter._events


@pytest.mark.asyncio
async def test_end_suppressed_with_signals() -> None:
    emitter = BodyEmitter(None, Simulation(end=False, error=True, close=True))

    assert isinstance(await emitter.next_event(), ErrorEvent)
    assert await emitter.next_event() == CloseEvent()
    with pytest.raises(TimeoutError):
        await asyncio.wait_for(emitter.next_event(), timeout=0.05)


@pytest.mark.asyncio
async def test_pulls_are_coalesced() -> None:
    emitter = BodyEmitter(b"ABC")
    emitter.pull()
    emitter.pull(1)
    await asyncio.sleep(0)

    assert list(emitter._events) == [DataEvent(b"ABC"), EndEvent()]


@pytest.mark.asyncio
async def test_pull_before_prepare_raises() -> None:
    emitter = BodyEmitter(PendingSource(async_list([b"a"])))

    with pytest.raises(StreamStateError):
        emitter.pull()
    assert not emitter.is_done


@pytest.mark.asyncio
async def test_prepare_drains_source() -> None:
    emitter = BodyEmitter(PendingSource(async_list([b"he", "llo"])))

    assert await emitter.prepare() == b"hello"
    assert emitter.payload == b"hello"
    assert emitter.state is EmitterState.READY
    assert await collect(emitter) == [DataEvent(b"hello"), EndEvent()]


@pytest.mark.asyncio
async def test_prepare_concrete_payload_is_noop() -> None:
    emitter = BodyEmitter(b"abc")

    assert await emitter.prepare() == b"abc"
    assert emitter.state is EmitterState.READY


@pytest.mark.asyncio
async def test_prepare_empty_source() -> None:
    emitter = BodyEmitter(PendingSource(async_list([])))

    assert await emitter.prepare() == b""
    assert await collect(emitter) == [EndEvent()]


@pytest.mark.asyncio
async def test_overlapping_prepares_drain_once() -> None:
    drained: list[bytes] = []

    async def source():
        for chunk in (b"he", b"llo"):
            await asyncio.sleep(0)
            drained.append(chunk)
            yield chunk

    emitter = BodyEmitter(PendingSource(source()))
    results = await asyncio.gather(emitter.prepare(), emitter.prepare())

    assert results == [b"hello", b"hello"]
    assert drained == [b"he", b"llo"]
    assert await emitter.prepare() == b"hello"


@pytest.mark.asyncio
async def test_overlapping_prepares_share_sync_source() -> None:
    emitter = BodyEmitter(PendingSource(iter([b"a", b"b", b"c"])))
    results = await asyncio.gather(emitter.prepare(), emitter.prepare())

    assert results == [b"abc", b"abc"]
    assert emitter.payload == b"abc"


def test_destroy_is_noop() -> None:
    emitter = BodyEmitter(b"abc")
    emitter.destroy()

    assert emitter.payload == b"abc"
    assert not emitter.is_done
