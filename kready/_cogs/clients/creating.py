from typing import Optional

from kready._cogs.clients import api, auth, errors
from kready._cogs.helpers import typedefs
from kready._cogs.structs import bodies, references, statuses


async def create_obj(
        *,
        context: auth.APIContext,
        resource: references.Resource,
        namespace: str,
        body: bodies.RawBody,
        logger: Optional[typedefs.Logger] = None,
) -> bodies.RawBody:
    """
    Create an object in the resource collection, return it as created by the API.

    If the API responds with no object or with something else, the object
    is created nevertheless, so the sent body is returned instead.
    """
    url = resource.get_url(namespace=namespace)
    status, text = await api.call('POST', url, body, context=context, logger=logger)
    errors.check_status(status, text, url=url)
    try:
        created_body = statuses.parse_body(text) if text else body
    except errors.ParseError as e:
        if logger is not None:
            logger.debug(f"Ignoring the unparseable creation response: {e}")
        created_body = body
    return created_body  # type: ignore
