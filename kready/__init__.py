"""
The main kready module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the package's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from kready._cogs.configs.configuration import (
    ClientSettings,
    CredentialsSettings,
    NetworkingSettings,
    PollingSettings,
    ExposureSettings,
)
from kready._cogs.helpers.typedefs import (
    Logger,
)
from kready._cogs.helpers.versions import (
    version as __version__,
)
from kready._cogs.structs.bodies import (
    RawBody,
    RawEvent,
    RawEventType,
    build_manifest,
)
from kready._cogs.structs.credentials import (
    ConfigError,
    ConnectionInfo,
)
from kready._cogs.structs.references import (
    KNATIVE_SERVICES,
    Resource,
    ObjectReference,
)
from kready._cogs.structs.statuses import (
    Condition,
    ResourceStatus,
)
from kready._cogs.clients.auth import (
    APIContext,
)
from kready._cogs.clients.api import (
    call,
    stream,
    iter_jsonlines,
)
from kready._cogs.clients.errors import (
    TransportError,
    ParseError,
    APIError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIConflictError,
    APIServerError,
)
from kready._core.actions.loggers import (
    LogFormat,
    configure,
)
from kready._core.engines.readiness import (
    PollingTimeoutError,
    PollingStoppedError,
)
from kready._core.intents.logins import (
    resolve,
    has_kubeconfig,
    has_service_account,
    login_with_kubeconfig,
    login_with_service_account,
)
from kready._kits.controllers import (
    ResourceController,
)

__all__ = [
    'ClientSettings',
    'CredentialsSettings',
    'NetworkingSettings',
    'PollingSettings',
    'ExposureSettings',
    'Logger',
    'RawBody',
    'RawEvent',
    'RawEventType',
    'build_manifest',
    'ConfigError',
    'ConnectionInfo',
    'KNATIVE_SERVICES',
    'Resource',
    'ObjectReference',
    'Condition',
    'ResourceStatus',
    'APIContext',
    'call',
    'stream',
    'iter_jsonlines',
    'TransportError',
    'ParseError',
    'APIError',
    'APIUnauthorizedError',
    'APIForbiddenError',
    'APINotFoundError',
    'APIConflictError',
    'APIServerError',
    'LogFormat',
    'configure',
    'PollingTimeoutError',
    'PollingStoppedError',
    'resolve',
    'has_kubeconfig',
    'has_service_account',
    'login_with_kubeconfig',
    'login_with_service_account',
    'ResourceController',
]
