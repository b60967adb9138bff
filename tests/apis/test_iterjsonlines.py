from unittest.mock import Mock

import pytest

from kready._cogs.clients.api import iter_jsonlines


def make_content(*chunks: bytes) -> Mock:
    async def iter_chunked(n: int):
        for chunk in chunks:
            yield chunk
    return Mock(iter_chunked=iter_chunked)


async def collect(content) -> list:
    return [line async for line in iter_jsonlines(content)]


@pytest.mark.parametrize('chunks', [
    pytest.param((), id='no-chunks'),
    pytest.param((b'',), id='empty-chunk'),
    pytest.param((b'\n\n\n',), id='only-newlines'),
])
async def test_nothing_is_yielded_from_empty_streams(chunks):
    lines = await collect(make_content(*chunks))
    assert lines == []


@pytest.mark.parametrize('chunks', [
    pytest.param((b'{"a": 1}\n{"b": 2}',), id='one-chunk'),
    pytest.param((b'\n\n{"a": 1}\n\n{"b": 2}\n\n',), id='one-chunk-empty-lines'),
    pytest.param((b'\n\n{"a"', b': 1}\n\n{"', b'b": 2}\n\n'), id='split-lines'),
    pytest.param((b'{"a": 1}\n', b'{"b": 2}\n'), id='chunk-per-line'),
    pytest.param((b'{', b'"', b'a', b'"', b': 1}\n{"b": 2}'), id='tiny-chunks'),
])
async def test_lines_are_reassembled_from_chunks(chunks):
    lines = await collect(make_content(*chunks))
    assert lines == [b'{"a": 1}', b'{"b": 2}']


async def test_long_lines_above_aiohttp_limits():
    long_value = b'x' * (2 ** 18)
    lines = await collect(make_content(b'{"a": "', long_value, b'"}\n{"b": 2}\n'))
    assert lines == [b'{"a": "' + long_value + b'"}', b'{"b": 2}']


async def test_chunk_size_is_passed_through():
    requested_sizes = []

    async def iter_chunked(n: int):
        requested_sizes.append(n)
        yield b'line\n'

    lines = [line async for line in iter_jsonlines(Mock(iter_chunked=iter_chunked), chunk_size=123)]
    assert lines == [b'line']
    assert requested_sizes == [123]
