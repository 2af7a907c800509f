#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
import asyncio
import logging
from typing import Any
from unittest import mock

from aiohttp import HttpVersion11, StreamReader, web
from aiohttp.test_utils import make_mocked_request

from ..emitter import CloseEvent, DataEvent, EndEvent, ErrorEvent
from . import MockRequest

logger = logging.getLogger(__name__)

# Buffer limit of the payload stream, aiohttp's default for request bodies.
_STREAM_LIMIT = 2**16

# Strong references to running feeders so they aren't garbage collected mid-body.
_feeders: set[asyncio.Task[None]] = set()


async def to_aiohttp_request(
    request: MockRequest, *, app: web.Application | None = None
) -> web.Request:
    """Convert a :py:class:`MockRequest` into an ``aiohttp.web.Request``.

    The mock is prepared, then its body events are fed into the aiohttp payload
    stream by a background task: data chunks are fed as they are emitted, a simulated
    error is set on the stream, and end-of-stream feeds EOF. With end-of-stream
    suppressed, reads of the body never complete and the feeding task keeps
    waiting until :py:meth:`MockRequest.destroy` cancels it.

    :param request: The mock request to convert.
    :param app: The application the request belongs to. A mock application is used
        if not given.
    :returns: A request that can be passed directly to an aiohttp handler.
    """
    await request.prepare()

    loop = asyncio.get_running_loop()
    protocol = mock.Mock(_reading_paused=False)
    payload = StreamReader(protocol, _STREAM_LIMIT, loop=loop)

    feeder = loop.create_task(_feed(request, payload))
    _feeders.add(feeder)
    feeder.add_done_callback(_feeders.discard)
    request.on_destroy(feeder.cancel)

    kwargs: dict[str, Any] = {}
    if app is not None:
        kwargs["app"] = app

    return make_mocked_request(
        request.method,
        request.url,
        headers={name: str(value) for name, value in request.headers.items()},
        version=HttpVersion11,
        transport=_create_transport(request.connection.remote_address),
        payload=payload,
        **kwargs,
    )


async def _feed(request: MockRequest, payload: StreamReader) -> None:
    async for event in request.events():
        match event:
            case DataEvent(chunk=chunk):
                payload.feed_data(chunk)
            case ErrorEvent(error=error):
                payload.set_exception(error)
            case CloseEvent():
                logger.debug("Mock request closed while feeding aiohttp payload")
            case EndEvent():
                payload.feed_eof()


def _create_transport(remote_address: str) -> mock.Mock:
    transport = mock.Mock()

    def get_extra_info(key: str) -> Any:
        if key == "peername":
            return (remote_address, 0)
        return None

    transport.get_extra_info.side_effect = get_extra_info
    return transport
