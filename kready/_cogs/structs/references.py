import dataclasses
import urllib.parse
from typing import List, Mapping, Optional


@dataclasses.dataclass(frozen=True)
class Resource:
    """
    A reference to a very specific custom or built-in resource collection.

    It is used to form the API URLs. Generally, the API only needs
    an API group, an API version, and a plural name of the resource.
    The kind is used in the manifests of the newly created objects.
    """

    group: str
    """
    The resource's API group; e.g. ``"serving.knative.dev"``, ``"apps"``.
    For Core v1 API resources, an empty string: ``""``.
    """

    version: str
    """
    The resource's API version; e.g. ``"v1"``, ``"v1beta1"``, etc.
    """

    plural: str
    """
    The resource's plural name; e.g. ``"services"``, ``"pods"``.
    It is used as an API endpoint, together with API group & version.
    """

    kind: Optional[str] = None
    """
    The resource's kind (as in YAML files); e.g. ``"Service"``, ``"Pod"``.
    """

    def __repr__(self) -> str:
        return f'{self.plural}.{self.version}.{self.group}'.strip('.')

    @property
    def api_version(self) -> str:
        # Strip the heading slash for the core v1 resources: "v1", not "/v1".
        return f'{self.group}/{self.version}'.strip('/')

    def get_url(
            self,
            *,
            namespace: Optional[str] = None,
            name: Optional[str] = None,
            params: Optional[Mapping[str, str]] = None,
    ) -> str:
        """
        Build a URL path to be used with the API, relative to the server.

        If the namespace is not set, a cluster-wide URL is returned.
        If the name is not set, the URL for the collection is returned.
        Otherwise (if set), the URL for the individual object is returned.

        Params go to the query parameters (``?param1=value1&param2=value2...``).
        """
        if namespace is None and name is not None:
            raise ValueError("Specific namespaces are required for specific objects.")

        parts: List[Optional[str]] = [
            '/api' if self.group == '' else '/apis',
            self.group,
            self.version,
            'namespaces' if namespace is not None else None,
            urllib.parse.quote(namespace, safe='') if namespace is not None else None,
            self.plural,
            urllib.parse.quote(name, safe='') if name is not None else None,
        ]

        query = urllib.parse.urlencode(params, encoding='utf-8') if params else ''
        path = '/'.join([part for part in parts if part])
        return path + ('?' if query else '') + query


@dataclasses.dataclass(frozen=True)
class ObjectReference:
    """
    A reference to one specific object: constructed per call, never stored.
    """
    resource: Resource
    namespace: str
    name: str

    def __str__(self) -> str:
        return f'{self.namespace}/{self.name}'

    @property
    def url(self) -> str:
        return self.resource.get_url(namespace=self.namespace, name=self.name)


KNATIVE_SERVICES = Resource('serving.knative.dev', 'v1', 'services', kind='Service')
