"""
The parsed status of the workload objects: conditions, URLs, generations.

The status is fetched fresh on every poll and is never cached between polls,
so these structures are immutable snapshots of one single API response.

Two kinds of "bad" statuses are distinguished:

* An absent ``status`` or absent ``conditions`` is normal for the freshly
  created objects, which are not yet processed by their controllers.
  Such a status is parsed as empty, i.e. "not ready" and with no URL.
* A present but malformed ``status`` (not an object, conditions not a list,
  conditions not the objects, a non-JSON body) is a `ParseError`,
  and the pollers escalate it instead of waiting forever for the readiness.
"""
import collections.abc
import dataclasses
import datetime
import json
from typing import Any, Mapping, Optional, Tuple

import iso8601

from kready._cogs.clients import errors

READY = 'Ready'


@dataclasses.dataclass(frozen=True)
class Condition:
    type: str
    status: str  # "True", "False", "Unknown"
    last_transition_time: Optional[datetime.datetime] = None
    reason: Optional[str] = None
    message: Optional[str] = None

    @property
    def true(self) -> bool:
        return self.status == 'True'


@dataclasses.dataclass(frozen=True)
class ResourceStatus:
    conditions: Tuple[Condition, ...] = ()
    url: Optional[str] = None
    address_url: Optional[str] = None
    observed_generation: Optional[int] = None

    def get_condition(self, type: str) -> Optional[Condition]:
        for condition in self.conditions:
            if condition.type == type:
                return condition
        return None

    @property
    def ready(self) -> bool:
        condition = self.get_condition(READY)
        return condition is not None and condition.true

    @property
    def public_url(self) -> Optional[str]:
        return self.url or self.address_url


def parse_body(text: str) -> Mapping[str, Any]:
    try:
        body = json.loads(text)
    except json.JSONDecodeError as e:
        raise errors.ParseError(f"The object is not a valid JSON: {e}") from e
    if not isinstance(body, collections.abc.Mapping):
        raise errors.ParseError(f"The object is not a JSON object: {text[:100]!r}")
    return body


def parse_status(body: Mapping[str, Any]) -> ResourceStatus:
    raw_status = body.get('status')
    if raw_status is None:
        return ResourceStatus()
    if not isinstance(raw_status, collections.abc.Mapping):
        raise errors.ParseError(f"The status is not an object: {raw_status!r}")

    raw_conditions = raw_status.get('conditions')
    if raw_conditions is None:
        raw_conditions = []
    if not isinstance(raw_conditions, list):
        raise errors.ParseError(f"The status conditions are not a list: {raw_conditions!r}")

    raw_address = raw_status.get('address') or {}
    if not isinstance(raw_address, collections.abc.Mapping):
        raise errors.ParseError(f"The status address is not an object: {raw_address!r}")

    return ResourceStatus(
        conditions=tuple(_parse_condition(raw_condition) for raw_condition in raw_conditions),
        url=_parse_url(raw_status.get('url')),
        address_url=_parse_url(raw_address.get('url')),
        observed_generation=raw_status.get('observedGeneration'),
    )


def _parse_condition(raw: Any) -> Condition:
    if not isinstance(raw, collections.abc.Mapping):
        raise errors.ParseError(f"The status condition is not an object: {raw!r}")
    if not isinstance(raw.get('type'), str) or not isinstance(raw.get('status'), str):
        raise errors.ParseError(f"The status condition has no type or status: {raw!r}")

    timestamp = raw.get('lastTransitionTime')
    try:
        last_transition_time = iso8601.parse_date(timestamp) if timestamp else None
    except iso8601.ParseError as e:
        raise errors.ParseError(f"The condition's transition time is malformed: {e}") from e

    return Condition(
        type=raw['type'],
        status=raw['status'],
        last_transition_time=last_transition_time,
        reason=raw.get('reason'),
        message=raw.get('message'),
    )


def _parse_url(raw: Any) -> Optional[str]:
    if raw is None or raw == '':
        return None
    if not isinstance(raw, str):
        raise errors.ParseError(f"The URL is not a string: {raw!r}")
    return raw


def upgrade_to_https(url: str) -> str:
    return 'https://' + url[len('http://'):] if url.startswith('http://') else url
