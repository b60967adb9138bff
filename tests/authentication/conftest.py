import base64
import os.path

import pytest

from kready._cogs.configs.configuration import ClientSettings


@pytest.fixture()
def ca_pem():
    """ A self-signed certificate authority, valid for a century. """
    with open(os.path.join(os.path.dirname(__file__), 'fake-ca.pem'), encoding='ascii') as f:
        return f.read()


@pytest.fixture()
def ca_b64(ca_pem):
    return base64.b64encode(ca_pem.encode('ascii')).decode('ascii')


@pytest.fixture()
def login_settings(tmpdir):
    """ Settings that never look into the real home dir or the real service account. """
    settings = ClientSettings()
    settings.credentials.kubeconfig_path = str(tmpdir.join('home', '.kube', 'config'))
    settings.credentials.serviceaccount_dir = str(tmpdir.join('serviceaccount'))
    return settings
