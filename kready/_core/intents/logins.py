"""
Rudimentary credentials resolution: from a kubeconfig or a service account.

Exactly one source is used, the first one found in this order:

* The kubeconfig file(s) named explicitly in ``$KUBECONFIG`` (must exist).
* The user's default kubeconfig file ``~/.kube/config`` (only if it exists).
* The in-cluster service account directory (only if it exists).

Authentication capabilities are limited to keep the code short & simple:
only the bearer tokens are supported, either static or the OIDC ID tokens
as already obtained by other tools (no refreshing of the ID tokens is done).

.. seealso::
    :mod:`credentials` and :class:`APIContext`.
"""
import logging
import os
from typing import Any, Dict, List, Mapping, Optional

import yaml

from kready._cogs.configs import configuration
from kready._cogs.helpers import typedefs
from kready._cogs.structs import credentials

default_logger = logging.getLogger(__name__)


def get_kubeconfig_paths(
        settings: configuration.ClientSettings,
) -> Optional[List[str]]:
    kubeconfig = os.environ.get(settings.credentials.kubeconfig_envvar)
    if kubeconfig:
        paths = [path.strip() for path in kubeconfig.split(os.pathsep)]
        return [os.path.expanduser(path) for path in paths if path]
    default_path = os.path.expanduser(settings.credentials.kubeconfig_path)
    if os.path.exists(default_path):
        return [default_path]
    return None


def has_kubeconfig(settings: Optional[configuration.ClientSettings] = None) -> bool:
    settings = settings if settings is not None else configuration.ClientSettings()
    return bool(get_kubeconfig_paths(settings))


def has_service_account(settings: Optional[configuration.ClientSettings] = None) -> bool:
    settings = settings if settings is not None else configuration.ClientSettings()
    return os.path.isdir(settings.credentials.serviceaccount_dir)


def resolve(
        *,
        settings: Optional[configuration.ClientSettings] = None,
        logger: Optional[typedefs.Logger] = None,
) -> credentials.ConnectionInfo:
    """
    Resolve the credentials from the first available source, or fail.
    """
    settings = settings if settings is not None else configuration.ClientSettings()
    logger = logger if logger is not None else default_logger

    paths = get_kubeconfig_paths(settings)
    if paths:
        info = login_with_kubeconfig(paths)
        logger.debug(f"Logged in with the kubeconfig: {info.source}")
        return info

    if has_service_account(settings):
        info = login_with_service_account(settings.credentials.serviceaccount_dir,
                                          server=settings.credentials.incluster_server)
        logger.debug(f"Logged in with the service account: {info.source}")
        return info

    raise credentials.ConfigError(f"${settings.credentials.kubeconfig_envvar} isn't set "
                                  f"and no service account dir.")


def login_with_service_account(
        path: str,
        *,
        server: str,
) -> credentials.ConnectionInfo:
    """
    A minimalistic login handler that can get raw data from a service account.

    All three files are required: the namespace, the CA certificate, the token.
    """
    namespace = _read_file(os.path.join(path, 'namespace')).strip()
    ca_data = _read_file(os.path.join(path, 'ca.crt'))
    token = _read_file(os.path.join(path, 'token')).strip()
    return credentials.ConnectionInfo(
        server=server,
        token=token,
        default_namespace=namespace or None,
        ca_path=os.path.join(path, 'ca.crt'),
        ca_data=ca_data,
        trust_store=credentials.make_trust_store(ca_data),
        source=path,
    )


def login_with_kubeconfig(
        paths: List[str],
) -> credentials.ConnectionInfo:
    """
    A minimalistic login handler that can get raw data from kubeconfig file(s).

    The files are merged as prescribed: the first value wins -- both for
    the current context and for the named contexts, clusters, and users.
    If a file is absent or non-deserialisable, then fail.
    """
    # As per https://kubernetes.io/docs/concepts/configuration/organize-cluster-access-kubeconfig/
    source = os.pathsep.join(paths)
    current_context: Optional[str] = None
    contexts: Dict[str, Mapping[str, Any]] = {}
    clusters: Dict[str, Mapping[str, Any]] = {}
    users: Dict[str, Mapping[str, Any]] = {}
    origins: Dict[str, str] = {}  # cluster name -> the file it is defined in.
    for path in paths:
        try:
            config = yaml.safe_load(_read_file(path)) or {}
        except yaml.YAMLError as e:
            raise credentials.ConfigError(f"Error parsing {path!r}: {e}") from e
        if not isinstance(config, dict):
            raise credentials.ConfigError(f"Error parsing {path!r}: not a mapping.")

        if current_context is None:
            current_context = config.get('current-context') or None
        for item in _get_named_items(config, 'contexts', path):
            contexts.setdefault(item['name'], _get_mapping(item, 'context', path, item['name']))
        for item in _get_named_items(config, 'clusters', path):
            if item['name'] not in clusters:
                clusters[item['name']] = _get_mapping(item, 'cluster', path, item['name'])
                origins[item['name']] = path
        for item in _get_named_items(config, 'users', path):
            users.setdefault(item['name'], _get_mapping(item, 'user', path, item['name']))

    # Once fully parsed, use the current context only.
    if current_context is None:
        raise credentials.ConfigError(f"Current context is not set in kubeconfig ({source}).")
    if current_context not in contexts:
        raise credentials.ConfigError(f"Can't find current context ({current_context!r}) "
                                      f"in kubeconfig ({source}).")
    context = contexts[current_context]
    cluster_name = context.get('cluster')
    user_name = context.get('user')
    if cluster_name not in clusters:
        raise credentials.ConfigError(f"Can't find cluster {cluster_name!r} of context "
                                      f"{current_context!r} in kubeconfig ({source}).")
    if user_name not in users:
        raise credentials.ConfigError(f"Can't find user {user_name!r} of context "
                                      f"{current_context!r} in kubeconfig ({source}).")
    cluster = clusters[cluster_name]
    user = users[user_name]

    # The path wins if both are set; relative paths are relative to the kubeconfig file.
    ca_path: Optional[str] = cluster.get('certificate-authority') or None
    ca_data: Optional[str] = None
    if ca_path:
        ca_path = os.path.join(os.path.dirname(origins[cluster_name]), os.path.expanduser(ca_path))
        ca_data = _read_file(ca_path)
    elif cluster.get('certificate-authority-data'):
        ca_data = credentials.decode_to_pem(cluster['certificate-authority-data'])

    # The OIDC ID token wins; the static token is used only if the ID token is absent.
    provider = _get_mapping(user, 'auth-provider', source, user_name)
    provider_token = _get_mapping(provider, 'config', source, user_name).get('id-token')
    token = provider_token or user.get('token')

    return credentials.ConnectionInfo(
        server=cluster.get('server') or '',
        token=token or '',
        default_namespace=context.get('namespace') or None,
        ca_path=ca_path,
        ca_data=ca_data,
        trust_store=credentials.make_trust_store(ca_data) if ca_data else None,
        source=source,
    )


def _get_named_items(config: Mapping[str, Any], key: str, path: str) -> List[Mapping[str, Any]]:
    items = config.get(key) or []
    if not isinstance(items, list) or not all(isinstance(item, dict) and 'name' in item
                                              for item in items):
        raise credentials.ConfigError(f"Error parsing {path!r}: malformed {key!r}.")
    return items


def _get_mapping(parent: Mapping[str, Any], key: str, path: str, name: str) -> Mapping[str, Any]:
    value = parent.get(key) or {}
    if not isinstance(value, dict):
        raise credentials.ConfigError(f"Error parsing {path!r}: malformed {key!r} of {name!r}.")
    return value


def _read_file(path: str) -> str:
    try:
        with open(path, encoding='utf-8') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise credentials.ConfigError(f"Error reading {path!r}: {e}") from e
