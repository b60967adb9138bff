"""
All configuration flags, options, settings to fine-tune the client.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults). The settings object
is created once by the caller and passed to the credential resolver,
the API context, and the resource controllers -- there are no globals.
"""
import dataclasses
from typing import Optional


@dataclasses.dataclass
class CredentialsSettings:
    """
    Where to look for the credentials, in the order of preference.
    """

    kubeconfig_envvar: str = 'KUBECONFIG'
    """
    An environment variable with the explicit kubeconfig path(s).
    Several paths can be separated by ``os.pathsep``; they are merged.
    If set and not empty, it is used even if the files are absent (and fails).
    """

    kubeconfig_path: str = '~/.kube/config'
    """
    A default kubeconfig path, used only if it exists.
    """

    serviceaccount_dir: str = '/var/run/secrets/kubernetes.io/serviceaccount'
    """
    A directory where the orchestrator mounts the in-cluster identity:
    the ``namespace``, ``ca.crt``, and ``token`` files.
    As per https://kubernetes.io/docs/tasks/run-application/access-api-from-pod/
    """

    incluster_server: str = 'https://kubernetes.default.svc:443'
    """
    The API server to use with the in-cluster identity.
    """


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = 5 * 60  # == aiohttp.client.DEFAULT_TIMEOUT
    """
    A timeout for the API requests, including the reading of the body.
    It does not apply to the streamed responses after they are returned.
    """

    connect_timeout: Optional[float] = None
    """
    A timeout for establishing the connection (TCP & TLS) to the API server.
    """


@dataclasses.dataclass
class PollingSettings:
    """
    How the readiness of the created objects is awaited.

    The API is only polled, never watched, for the readiness.
    All timeouts are in seconds; ``None`` means waiting for as long as needed.
    """

    creation_interval: float = 0.5
    """
    How often to poll the newly created object for its URL.
    """

    readiness_interval: float = 1.0
    """
    How often to poll the object for its ``Ready`` condition.
    """

    creation_timeout: Optional[float] = None
    """
    The default timeout for the URL to appear after the object is created.
    Overridden by the explicit ``timeout=`` of the individual calls.
    """

    readiness_timeout: Optional[float] = None
    """
    The default timeout for the object to become ready.
    Overridden by the explicit ``timeout=`` of the individual calls.
    """

    error_tolerance: int = 5
    """
    How many consecutive API or transport errors are tolerated while waiting
    for the URL of a newly created object before the last error is escalated.
    The readiness waiting does not tolerate the errors and escalates them.
    """


@dataclasses.dataclass
class ExposureSettings:

    upgrade_to_https: bool = True
    """
    Should the ``http://`` URLs reported by the objects be returned as ``https://``?

    The routing layer usually reports a plain-HTTP URL even when the public
    endpoint terminates TLS (and redirects or rejects the plain HTTP).
    """


@dataclasses.dataclass
class ClientSettings:
    credentials: CredentialsSettings = dataclasses.field(default_factory=CredentialsSettings)
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    polling: PollingSettings = dataclasses.field(default_factory=PollingSettings)
    exposure: ExposureSettings = dataclasses.field(default_factory=ExposureSettings)
