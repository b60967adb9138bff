"""
The authenticated call primitives: unary and streaming.

The calls do not interpret the HTTP statuses: non-2xx responses are returned
as is, since only the higher-level operations know which statuses they expect
and how to interpret the domain-specific error payloads (see `errors.check_status`).

Only the transport-level failures are raised here, as `errors.TransportError`.
"""
import asyncio
import json
import logging
import ssl
from typing import AsyncIterator, Optional, Tuple, Union

import aiohttp

from kready._cogs.clients import auth, errors
from kready._cogs.helpers import typedefs

default_logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = 'application/json'
MERGE_PATCH_CONTENT_TYPE = 'application/merge-patch+json'

# A request body: either pre-serialised, or a JSON-serialisable object.
Payload = Union[None, str, bytes, object]


async def request(
        method: str,
        path: str,  # relative to the server root.
        body: Payload = None,
        *,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
        streaming: bool = False,
) -> aiohttp.ClientResponse:
    """
    Send a request and return the response unread, with the status received.
    """
    logger = logger if logger is not None else default_logger
    method = method.upper()
    url = context.server.rstrip('/') + '/' + path.lstrip('/')
    headers = {
        'Content-Type': MERGE_PATCH_CONTENT_TYPE if method == 'PATCH' else JSON_CONTENT_TYPE,
    }
    data: Optional[Union[str, bytes]]
    if body is None or isinstance(body, (str, bytes)):
        data = body
    else:
        data = json.dumps(body)

    # The streams can last for as long as the server keeps them open.
    timeout = aiohttp.ClientTimeout(
        total=None if streaming else context.settings.networking.request_timeout,
        sock_connect=context.settings.networking.connect_timeout,
    )

    logger.debug(f"Requesting: {method} {url}")
    try:
        response = await context.session.request(
            method=method,
            url=url,
            data=data,
            headers=headers,
            timeout=timeout,
        )
    except (aiohttp.ClientConnectionError, ssl.SSLError, asyncio.TimeoutError) as e:
        logger.debug(f"Request failed: {method} {url} -> {e!r}")
        raise errors.TransportError(f"{method} {url} failed: {e}") from e
    logger.debug(f"Responded: {method} {url} -> {response.status}")
    return response


async def call(
        method: str,
        path: str,  # relative to the server root.
        body: Payload = None,
        *,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> Tuple[int, str]:
    """
    Perform a unary call: return the status and the fully read body as text.
    """
    response = await request(method, path, body, context=context, logger=logger)
    try:
        async with response:
            # E.g. the HTML error pages of the proxies can be in any encoding.
            text = await response.text(errors='replace')
    except (aiohttp.ClientConnectionError, aiohttp.ClientPayloadError, asyncio.TimeoutError) as e:
        raise errors.TransportError(f"{method.upper()} {path} failed while reading: {e}") from e
    return response.status, text


async def stream(
        method: str,
        path: str,  # relative to the server root.
        body: Payload = None,
        *,
        context: auth.APIContext,
        logger: Optional[typedefs.Logger] = None,
) -> aiohttp.ClientResponse:
    """
    Perform a streaming call: return the live response with its status.

    The body is not read. The caller owns the response and must close it,
    e.g. with ``async with response: ...``, and reads ``response.content``
    incrementally (see `iter_jsonlines`). The responses still open when
    the context is closed are closed with it.
    """
    response = await request(method, path, body, context=context, logger=logger, streaming=True)
    context.add_response(response)
    return response


async def iter_jsonlines(
        content: aiohttp.StreamReader,
        chunk_size: int = 1024 * 1024,
) -> AsyncIterator[bytes]:
    """
    Iterate line by line over the response's content.

    Usage::

        async with response:
            async for line in iter_jsonlines(response.content):
                pass

    This is an equivalent of::

        async for line in response.content:
            pass

    Except that the aiohttp's line iteration fails if the accumulated buffer
    length is above 2**17 bytes, i.e. 128 KB (`aiohttp.streams.DEFAULT_LIMIT`
    for the buffer's low-watermark, multiplied by 2 for the high-watermark).
    The objects in the watch-streams can be much longer, up to MBs in length.
    """

    # Minimize the memory footprint by keeping at most 2 copies of a yielded line in memory
    # (in the buffer and as a yielded value), and at most 1 copy of other lines (in the buffer).
    buffer = b''
    async for data in content.iter_chunked(chunk_size):
        buffer += data
        del data

        start = 0
        index = buffer.find(b'\n', start)
        while index >= 0:
            line = buffer[start:index]
            if line:
                yield line
            del line
            start = index + 1
            index = buffer.find(b'\n', start)

        if start > 0:
            buffer = buffer[start:]

    if buffer:
        yield buffer
