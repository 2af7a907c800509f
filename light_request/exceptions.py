#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0


class LightRequestException(Exception):
    """Base exception type for all exceptions raised by light-request."""


class ExpectationNotMetException(LightRequestException):
    """Exception type for exceptions thrown by unmet assertions."""


class URLParseError(LightRequestException, ValueError):
    """Raised when a request URL cannot be parsed into its components."""


class StreamStateError(LightRequestException):
    """Raised when the body emitter is driven out of order, for example pulled
    before its payload has been prepared."""


class SimulatedError(LightRequestException):
    """The error injected into a request body stream by ``Simulation(error=True)``.

    It is a requested signal for exercising a consumer's error handling, not a fault
    of the mock request itself.
    """

    def __init__(self, message: str = "Simulated") -> None:
        super().__init__(message)
