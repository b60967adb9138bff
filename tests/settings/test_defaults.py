from unittest.mock import AsyncMock

import kready


def test_declared_public_interface_and_promised_defaults():
    settings = kready.ClientSettings()
    assert settings.credentials.kubeconfig_envvar == 'KUBECONFIG'
    assert settings.credentials.kubeconfig_path == '~/.kube/config'
    assert settings.credentials.serviceaccount_dir == '/var/run/secrets/kubernetes.io/serviceaccount'
    assert settings.credentials.incluster_server == 'https://kubernetes.default.svc:443'
    assert settings.networking.request_timeout == 300
    assert settings.networking.connect_timeout is None
    assert settings.polling.creation_interval == 0.5
    assert settings.polling.readiness_interval == 1.0
    assert settings.polling.creation_timeout is None
    assert settings.polling.readiness_timeout is None
    assert settings.polling.error_tolerance == 5
    assert settings.exposure.upgrade_to_https == True


def test_settings_are_not_shared():
    settings1 = kready.ClientSettings()
    settings2 = kready.ClientSettings()
    settings1.polling.error_tolerance = 0
    assert settings2.polling.error_tolerance == 5


async def test_request_timeouts_are_passed_to_the_session(mocker, fake_context, settings):
    settings.networking.request_timeout = 12
    settings.networking.connect_timeout = 3
    request_mock = mocker.patch.object(fake_context.session, 'request', new_callable=AsyncMock)
    request_mock.return_value.text = AsyncMock(return_value='')

    await kready.call('GET', '/url', context=fake_context)

    timeout = request_mock.call_args[1]['timeout']
    assert timeout.total == 12
    assert timeout.sock_connect == 3


async def test_streams_have_no_total_timeout(mocker, fake_context, settings):
    settings.networking.request_timeout = 12
    settings.networking.connect_timeout = 3
    request_mock = mocker.patch.object(fake_context.session, 'request', new_callable=AsyncMock)
    request_mock.return_value.text = AsyncMock(return_value='')

    await kready.stream('GET', '/url', context=fake_context)

    timeout = request_mock.call_args[1]['timeout']
    assert timeout.total is None
    assert timeout.sock_connect == 3
