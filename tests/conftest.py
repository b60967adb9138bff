import json
import logging
import re
import time
from unittest.mock import AsyncMock, MagicMock

import pytest

from kready._cogs.clients.auth import APIContext
from kready._cogs.configs.configuration import ClientSettings
from kready._cogs.structs.credentials import ConnectionInfo
from kready._cogs.structs.references import ObjectReference, Resource

#
# Basic structs & settings.
#


@pytest.fixture()
def resource():
    return Resource('kready.dev', 'v1', 'kreadyexamples', kind='KreadyExample')


@pytest.fixture()
def core_resource():
    return Resource('', 'v1', 'pods', kind='Pod')


@pytest.fixture()
def namespace():
    return 'ns'


@pytest.fixture()
def ref(resource, namespace):
    return ObjectReference(resource=resource, namespace=namespace, name='name1')


@pytest.fixture()
def settings():
    settings = ClientSettings()
    settings.polling.creation_interval = 0.01
    settings.polling.readiness_interval = 0.01
    return settings


@pytest.fixture()
def logger():
    return logging.getLogger('kready.test')


#
# Mocks for the API server.
# 1. We do not test the aiohttp client, we test the layers on top of it,
#    so the HTTP server is faked and is assumed to be functional.
# 2. No external calls must be made under any circumstances.
#    The unit-tests must be fully isolated from the environment.
#

@pytest.fixture()
def hostname():
    """ A fake hostname to be used in all aiohttp/aresponses tests. """
    return 'fake-host'


@pytest.fixture()
def fake_info(hostname, namespace):
    return ConnectionInfo(server=f'https://{hostname}', token='fake-token',
                          default_namespace=namespace, source='fake-source')


@pytest.fixture()
async def fake_context(fake_info, settings):
    context = APIContext(fake_info, settings=settings)
    async with context:
        yield context


@pytest.fixture()
def resp_mocker(fake_context, aresponses):
    """
    A factory of server-side callbacks for `aresponses` with mocking/spying.

    The value of the fixture is a function, which return a coroutine mock.
    That coroutine mock should be passed to `aresponses.add` as a response
    callback function. When called, it calls the mock defined by the function's
    arguments (specifically, return_value or side_effects).

    The difference from passing the responses directly to `aresponses.add`
    is that it is possible to assert on whether the response was handled
    by that callback at all (i.e. HTTP URL & method matched), especially
    if there are multiple responses registered.

    Sample usage::

        def test_me(resp_mocker):
            response = aiohttp.web.json_response({'a': 'b'})
            callback = resp_mocker(return_value=response)
            aresponses.add(hostname, '/path/', 'get', callback)
            do_something()
            assert callback.called
            assert callback.call_count == 1
            assert callback.call_args_list[0][0][0]['data'] == {...}
    """
    def resp_maker(*args, **kwargs):
        actual_response = MagicMock(*args, **kwargs)

        async def resp_mock_effect(request):
            # The request's content can be read inside of the handler only. We preserve
            # the data into the request's storage, so that they could be asserted later.
            text = await request.text()
            try:
                request['data'] = json.loads(text) if text else None
            except json.JSONDecodeError:
                request['data'] = text

            # Get a response/error as it was intended (via return_value/side_effect).
            return actual_response()

        return AsyncMock(side_effect=resp_mock_effect)
    return resp_maker


#
# Helpers for the timing checks.
#

@pytest.fixture()
def timer():
    return Timer()


class Timer:
    """
    A helper context manager to measure the time of the code-blocks.

    Usage:

        with Timer() as timer:
            do_something()

        print(f"Executed in {timer.seconds}s.")
        assert timer.seconds < 5.0
    """

    def __init__(self):
        super().__init__()
        self._ts = None
        self._te = None

    @property
    def seconds(self):
        if self._ts is None:
            return None
        elif self._te is None:
            return time.perf_counter() - self._ts
        else:
            return self._te - self._ts

    def __enter__(self):
        self._ts = time.perf_counter()
        self._te = None
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._te = time.perf_counter()


#
# Helpers for the logging checks.
#

@pytest.fixture()
def assert_logs(caplog):
    """
    A function to assert the logs are present (by pattern).

    The listed message patterns MUST be present, in the order specified.
    Some other log messages can also be present, but they are ignored.
    """
    caplog.set_level(logging.DEBUG)

    def assert_logs_fn(patterns, prohibited=[]):
        __traceback_hide__ = True
        remaining_patterns = list(patterns)
        for message in caplog.messages:
            if remaining_patterns and re.search(remaining_patterns[0], message):
                remaining_patterns[:1] = []

            # Check that the prohibited patterns do not appear in any message.
            for pattern in prohibited:
                if re.search(pattern, message):
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")

        if remaining_patterns:
            raise AssertionError(f"Few patterns were missed: {remaining_patterns!r}")

    return assert_logs_fn
