from typing import Optional

from kready._cogs.clients import api, auth, errors
from kready._cogs.helpers import typedefs
from kready._cogs.structs import references


async def delete_obj(
        *,
        context: auth.APIContext,
        ref: references.ObjectReference,
        logger: Optional[typedefs.Logger] = None,
) -> None:
    """
    Delete an object. An already deleted object is reported as `APINotFoundError`.

    The deletion is not awaited: the object can still exist for some time
    while its finalizers are being processed.
    """
    status, text = await api.call('DELETE', ref.url, context=context, logger=logger)
    errors.check_status(status, text, url=ref.url)
