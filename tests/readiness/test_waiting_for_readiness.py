import asyncio

import aiohttp.web
import pytest

from kready._cogs.clients.errors import APINotFoundError, ParseError, TransportError
from kready._core.engines.readiness import PollingStoppedError, PollingTimeoutError, \
                                           fetch_status, wait_for_ready

NOT_READY = {'status': {'conditions': [
    {'type': 'Ready', 'status': 'Unknown', 'reason': 'Deploying', 'message': 'Be patient.'},
]}}
READY = {'status': {'conditions': [
    {'type': 'Ready', 'status': 'True'},
]}}


@pytest.fixture()
def read_mock(mocker):
    return mocker.patch('kready._cogs.clients.fetching.read_obj')


async def test_status_is_fetched_fresh(
        resp_mocker, aresponses, hostname, fake_context, ref):

    get_mock1 = resp_mocker(return_value=aiohttp.web.json_response(NOT_READY))
    get_mock2 = resp_mocker(return_value=aiohttp.web.json_response(READY))
    aresponses.add(hostname, ref.url, 'get', get_mock1)
    aresponses.add(hostname, ref.url, 'get', get_mock2)

    status1 = await fetch_status(context=fake_context, ref=ref)
    status2 = await fetch_status(context=fake_context, ref=ref)

    assert not status1.ready
    assert status2.ready


async def test_readiness_is_awaited(
        resp_mocker, aresponses, hostname, fake_context, ref, settings, assert_logs):

    get_mock1 = resp_mocker(return_value=aiohttp.web.json_response({}))
    get_mock2 = resp_mocker(return_value=aiohttp.web.json_response(NOT_READY))
    get_mock3 = resp_mocker(return_value=aiohttp.web.json_response(READY))
    aresponses.add(hostname, ref.url, 'get', get_mock1)
    aresponses.add(hostname, ref.url, 'get', get_mock2)
    aresponses.add(hostname, ref.url, 'get', get_mock3)

    result = await wait_for_ready(context=fake_context, ref=ref, settings=settings)

    assert result is None
    assert get_mock1.call_count == 1
    assert get_mock2.call_count == 1
    assert get_mock3.call_count == 1
    assert_logs([
        r"The object is not ready yet: no readiness condition\.",
        r"The object is not ready yet: Unknown \(Deploying: Be patient\.\)",
        r"The object is ready\.",
    ])


@pytest.mark.parametrize('error', [
    APINotFoundError(404, 'boo!'),
    TransportError('boo!'),
], ids=['api', 'transport'])
async def test_errors_escalate_instantly(fake_context, ref, settings, read_mock, error):
    read_mock.side_effect = [error, READY]

    with pytest.raises(type(error)):
        await wait_for_ready(context=fake_context, ref=ref, settings=settings)

    assert read_mock.call_count == 1


async def test_malformed_statuses_escalate_instantly(fake_context, ref, settings, read_mock):
    read_mock.side_effect = [{'status': {'conditions': 'boo!'}}, READY]

    with pytest.raises(ParseError):
        await wait_for_ready(context=fake_context, ref=ref, settings=settings)

    assert read_mock.call_count == 1


async def test_timeout(fake_context, ref, settings, read_mock, timer):
    read_mock.return_value = NOT_READY

    with timer, pytest.raises(PollingTimeoutError) as e:
        await wait_for_ready(context=fake_context, ref=ref, settings=settings, timeout=0.1)

    assert 0.09 <= timer.seconds < 0.5
    assert str(e.value) == "Timed out waiting for the readiness of ns/name1."


async def test_timeout_is_a_builtin_timeout(fake_context, ref, settings, read_mock):
    read_mock.return_value = NOT_READY

    with pytest.raises(TimeoutError):
        await wait_for_ready(context=fake_context, ref=ref, settings=settings, timeout=0)


async def test_stopper_interrupts_the_sleep(fake_context, ref, settings, read_mock, timer):
    settings.polling.readiness_interval = 10
    read_mock.return_value = NOT_READY
    stopper = asyncio.Event()
    asyncio.get_running_loop().call_later(0.05, stopper.set)

    with timer, pytest.raises(PollingStoppedError) as e:
        await wait_for_ready(context=fake_context, ref=ref, settings=settings, stopper=stopper)

    assert timer.seconds < 1.0
    assert read_mock.call_count == 1
    assert str(e.value) == "Stopped waiting for the readiness of ns/name1."
