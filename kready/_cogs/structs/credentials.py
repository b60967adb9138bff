"""
Authentication-related structures.

A minimally sufficient data structure is introduced to bring all the credentials
together in a structured and type-annotated way. It covers the information
passed to the HTTP protocol and TCP/SSL connection only, nothing more:

* The API server's URL (scheme, host, port).
* The SSL certificate authority, as the only trusted anchor if present.
* HTTP ``Authorization: Bearer token``.
* The default namespace for the cases when this is implied.

The credentials are resolved once at startup and are never mutated afterwards.
A reload produces a new value, which replaces the old one as a whole.

.. seealso::
    :func:`resolve` and :class:`APIContext`.
"""
import base64
import dataclasses
import ssl
from typing import Optional, Union


class ConfigError(Exception):
    """ Raised when the credentials cannot be resolved or are malformed. """


@dataclasses.dataclass(frozen=True)
class ConnectionInfo:
    """
    A single endpoint with specific credentials and a trust store to use.
    """
    server: str  # e.g. "https://localhost:443"
    token: str
    default_namespace: Optional[str] = None  # can be absent in kubeconfigs.
    ca_path: Optional[str] = None  # for information only; the data are read already.
    ca_data: Optional[str] = None  # always a PEM text if set.
    trust_store: Optional[ssl.SSLContext] = dataclasses.field(default=None, compare=False, repr=False)
    source: Optional[str] = None  # a kubeconfig path or a service-account dir.

    def __post_init__(self) -> None:
        if not self.server:
            raise ConfigError(f"The API server is not defined in {self.source or 'the credentials'}.")
        if not self.token:
            raise ConfigError(f"The bearer token is not defined in {self.source or 'the credentials'}.")


def decode_to_pem(data: Union[str, bytes]) -> str:
    """
    Accept the certificate data either as a PEM text or as a base64-encoded PEM.
    """
    try:
        if isinstance(data, str) and data.lstrip().startswith('-----BEGIN '):
            return data
        elif isinstance(data, bytes) and data.lstrip().startswith(b'-----BEGIN '):
            return data.decode('ascii')
        else:
            return base64.b64decode(data, validate=False).decode('ascii')
    except ValueError as e:  # incl. binascii.Error & UnicodeDecodeError
        raise ConfigError(f"The certificate data is neither PEM nor base64-encoded PEM: {e}") from e


def make_trust_store(pem: str) -> ssl.SSLContext:
    """
    Build an SSL context that trusts only the specified certificate authority.

    When ``cadata`` is passed, the system-wide default certificates are not loaded,
    so the server certificate is verified strictly against this CA only.
    """
    try:
        return ssl.create_default_context(purpose=ssl.Purpose.SERVER_AUTH, cadata=pem)
    except (ssl.SSLError, ValueError) as e:
        raise ConfigError(f"The certificate authority cannot be loaded: {e}") from e
