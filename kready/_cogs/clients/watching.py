"""
Watching the resource collection as a stream of events.

The readiness of the objects is never awaited via watching (only via polling),
but the watch-stream is exposed for the callers who want to observe
the collection's changes: e.g. to print the progress of the deployments.

The stream is finite: it ends when the server closes it (usually in 5-30 mins),
or with an error if the resource version is too old (HTTP 410 Gone).
Re-watching from the last seen resource version is the caller's decision.
"""
import json
from typing import AsyncIterator, Dict, Optional

from kready._cogs.clients import api, auth, errors
from kready._cogs.helpers import typedefs
from kready._cogs.structs import bodies, references


async def watch_objs(
        *,
        context: auth.APIContext,
        resource: references.Resource,
        namespace: str,
        resource_version: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
        logger: Optional[typedefs.Logger] = None,
) -> AsyncIterator[bodies.RawEvent]:
    params: Dict[str, str] = {'watch': 'true'}
    if resource_version is not None:
        params['resourceVersion'] = resource_version
    if timeout_seconds is not None:
        params['timeoutSeconds'] = str(timeout_seconds)
    url = resource.get_url(namespace=namespace, params=params)

    response = await api.stream('GET', url, context=context, logger=logger)
    async with response:
        if response.status // 100 != 2:
            errors.check_status(response.status, await response.text(), url=url)

        async for line in api.iter_jsonlines(response.content):
            raw_event = _parse_event(line)

            # The errors are delivered in-stream as the Status objects, not as HTTP statuses.
            if raw_event['type'] == 'ERROR':
                raw_status = raw_event['object']
                code = raw_status.get('code', 500)  # type: ignore
                errors.check_status(code, json.dumps(raw_status), url=url)
                raise errors.APIError(code, json.dumps(raw_status), url=url)  # e.g. a 2xx "error".

            yield raw_event


def _parse_event(line: bytes) -> bodies.RawEvent:
    try:
        raw_event = json.loads(line.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise errors.ParseError(f"The watch-event is not a valid JSON: {e}") from e
    if not isinstance(raw_event, dict) or 'type' not in raw_event or 'object' not in raw_event:
        raise errors.ParseError(f"The watch-event is malformed: {line[:100]!r}")
    return raw_event  # type: ignore
