from typing import Any, Mapping, Optional

from kready._cogs.clients import api, auth, errors
from kready._cogs.helpers import typedefs
from kready._cogs.structs import bodies, references, statuses


async def patch_obj(
        *,
        context: auth.APIContext,
        ref: references.ObjectReference,
        patch: Mapping[str, Any],
        logger: Optional[typedefs.Logger] = None,
) -> bodies.RawBody:
    """
    Apply a JSON merge-patch (RFC 7386) to an object, return the patched object.

    The ``null`` values in the patch remove the fields, the nested objects
    are merged, and the lists are replaced as a whole.
    """
    status, text = await api.call('PATCH', ref.url, patch, context=context, logger=logger)
    errors.check_status(status, text, url=ref.url)
    return statuses.parse_body(text)  # type: ignore
