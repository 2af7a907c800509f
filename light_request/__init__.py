#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0

"""In-memory inbound HTTP requests for testing server-side request handlers."""

from ._private import URI
from ._private.emitter import (
    CloseEvent,
    DataEvent,
    EmitterState,
    EndEvent,
    ErrorEvent,
    Simulation,
    StreamEvent,
)
from ._private.http import Connection, MockRequest, RequestOptions, create_request
from ._private.payload import Payload, PendingSource
from .exceptions import (
    LightRequestException,
    SimulatedError,
    StreamStateError,
    URLParseError,
)

__version__ = "0.1.0"

__all__ = (
    "CloseEvent",
    "Connection",
    "DataEvent",
    "EmitterState",
    "EndEvent",
    "ErrorEvent",
    "LightRequestException",
    "MockRequest",
    "Payload",
    "PendingSource",
    "RequestOptions",
    "Simulation",
    "SimulatedError",
    "StreamEvent",
    "StreamStateError",
    "URI",
    "URLParseError",
    "create_request",
)
