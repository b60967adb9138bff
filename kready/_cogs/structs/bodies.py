"""
All the structures coming from/to the control-plane API.

For strict type-checking, they are detailed to the per-field level
(e.g. `TypedDict` instead of just ``Mapping[Any, Any]``) -- as used by
the package. The objects can have arbitrary fields at runtime,
which are not declared in the type definitions at type-checking time.

Everything marked "raw" is a plain unwrapped unprocessed data as JSON-decoded
from the API, as retrieved in the fetching, listing, or watching API calls.
"""
from typing import Any, List, Mapping

from typing_extensions import Literal, TypedDict

from kready._cogs.structs import references

Labels = Mapping[str, str]
Annotations = Mapping[str, str]

RawEventType = Literal['ADDED', 'MODIFIED', 'DELETED', 'BOOKMARK', 'ERROR']


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    labels: Labels
    annotations: Annotations
    resourceVersion: str
    generation: int
    deletionTimestamp: str
    creationTimestamp: str


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]


class RawEvent(TypedDict, total=True):
    type: RawEventType
    object: RawBody


class RawListMeta(TypedDict, total=False):
    resourceVersion: str
    remainingItemCount: int
    # "continue" is a keyword, so it cannot be declared in the class syntax.


class RawList(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawListMeta
    items: List[RawBody]


def build_manifest(
        resource: references.Resource,
        name: str,
        image: str,
) -> RawBody:
    """
    The minimal manifest of a workload with a single container of an image.

    Everything else (scaling, resources, env vars) is left to the API's defaults.
    """
    if not resource.kind:
        raise ValueError(f"The kind of {resource!r} is required to build its manifests.")
    return {
        'apiVersion': resource.api_version,
        'kind': resource.kind,
        'metadata': {'name': name},
        'spec': {
            'template': {
                'spec': {
                    'containers': [{'image': image}],
                },
            },
        },
    }
