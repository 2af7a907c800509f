#  Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
#  SPDX-License-Identifier: Apache-2.0
from asyncio import iscoroutine, sleep
from collections.abc import AsyncIterable, Iterable, Iterator

from .exceptions import ExpectationNotMetException
from .interfaces import AsyncByteStream, StreamSource, is_bytes_reader
from .utils import to_bytes


async def async_list[E](lst: Iterable[E]) -> AsyncIterable[E]:
    """Turn an Iterable into an AsyncIterable."""
    for x in lst:
        await sleep(0)
        yield x


async def read_stream_source(source: StreamSource) -> bytes:
    """Drain a stream-like source and return everything it produced as bytes.

    Readers are read to exhaustion with a single ``read()``, awaiting it when the
    reader is async. Iterables are consumed chunk by chunk. Text chunks are encoded
    as UTF-8.

    :param source: The source to drain.
    :raises ExpectationNotMetException: If the source is not stream-like.
    """
    if is_bytes_reader(source):
        return to_bytes(source.read())

    match source:
        case AsyncByteStream():
            result = source.read()
            if iscoroutine(result):
                result = await result
            return to_bytes(result)
        case AsyncIterable():
            chunks: list[bytes] = []
            async for chunk in source:
                chunks.append(to_bytes(chunk))
            return b"".join(chunks)
        case Iterator():
            chunks = []
            for chunk in source:
                chunks.append(to_bytes(chunk))
                # Yield to the loop between chunks, as an async source would.
                await sleep(0)
            return b"".join(chunks)
        case _:
            raise ExpectationNotMetException(
                f"Expected a stream-like source, found {type(source)}"
            )
