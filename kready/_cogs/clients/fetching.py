from typing import List, Optional, Tuple

from kready._cogs.clients import api, auth, errors
from kready._cogs.helpers import typedefs
from kready._cogs.structs import bodies, references, statuses


async def read_obj(
        *,
        context: auth.APIContext,
        ref: references.ObjectReference,
        logger: Optional[typedefs.Logger] = None,
) -> bodies.RawBody:
    """
    Read one object as is: the absence of the object is an error here.
    """
    status, text = await api.call('GET', ref.url, context=context, logger=logger)
    errors.check_status(status, text, url=ref.url)
    return statuses.parse_body(text)  # type: ignore


async def list_objs(
        *,
        context: auth.APIContext,
        resource: references.Resource,
        namespace: str,
        logger: Optional[typedefs.Logger] = None,
) -> Tuple[List[bodies.RawBody], Optional[str]]:
    """
    List the objects of a resource in a namespace, with the list's resource version.

    The list's items usually come without the ``kind`` & ``apiVersion`` fields,
    so they are taken from the list itself (``ServiceList`` -> ``Service``).
    """
    url = resource.get_url(namespace=namespace)
    status, text = await api.call('GET', url, context=context, logger=logger)
    errors.check_status(status, text, url=url)
    rsp: bodies.RawList = statuses.parse_body(text)  # type: ignore

    items: List[bodies.RawBody] = []
    resource_version = rsp.get('metadata', {}).get('resourceVersion', None)
    for item in rsp.get('items') or []:
        if 'kind' in rsp:
            item.setdefault('kind', rsp['kind'][:-4] if rsp['kind'][-4:] == 'List' else rsp['kind'])
        if 'apiVersion' in rsp:
            item.setdefault('apiVersion', rsp['apiVersion'])
        items.append(item)

    return items, resource_version
