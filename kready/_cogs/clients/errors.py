"""
Control-plane API errors.

The underlying client library (now, ``aiohttp``) can be replaced in the future.
We cannot rely on embedding its exceptions all over the code of the package.
Hence, we have our own hierarchy of exceptions for the API errors.

Low-level errors, such as the network connectivity issues, SSL/HTTPS issues,
client-side timeouts, etc, are re-raised as `TransportError`: they are related
not to the domain of the API, but rather to the networking and encryption.
They carry no HTTP status and no body, since there was no response at all.

The original errors of the client library are chained as the causes of our own
specialised errors -- for better explainability of errors in the stack traces.

The low-level calls never raise `APIError` for non-2xx statuses: the statuses
and bodies are returned as is, and interpreted by the higher-level operations
via `check_status` -- since only they know which statuses are acceptable.

Unlike the underlying client library's errors, the API errors contain more
information about the reasons -- as provided by the API in its response bodies,
not guessed only by HTTP statuses alone.
"""
import collections.abc
import json
from typing import Collection, Optional

from typing_extensions import Literal, TypedDict


class RawStatusCause(TypedDict, total=False):
    field: str
    reason: str
    message: str


class RawStatusDetails(TypedDict, total=False):
    name: str
    uid: str
    retryAfterSeconds: int
    kind: str
    group: str
    causes: Collection[RawStatusCause]


# https://kubernetes.io/docs/reference/generated/kubernetes-api/v1.19/#status-v1-meta
class RawStatus(TypedDict, total=False):
    apiVersion: str
    kind: Literal["Status"]
    code: int
    status: Literal["Success", "Failure"]
    reason: str
    message: str
    details: RawStatusDetails


class TransportError(Exception):
    """ Raised when the API cannot be reached or talked to (DNS, TCP, TLS). """


class ParseError(Exception):
    """ Raised when the API responds with a payload of an unexpected structure. """


class APIError(Exception):
    """
    Raised when the API responds with a non-2xx status.

    Both the status and the raw body are preserved for the end users.
    If the body is a K8s ``Status`` object, its fields are exposed too.
    """

    def __init__(
            self,
            status: int,
            body: str,
            *,
            url: Optional[str] = None,
    ) -> None:
        payload = _parse_status_payload(body)
        message = payload.get('message') if payload else None
        super().__init__(f"{status}: {message or body}" + (f" ({url})" if url else ""))
        self._status = status
        self._body = body
        self._url = url
        self._payload = payload

    @property
    def status(self) -> int:
        return self._status

    @property
    def body(self) -> str:
        return self._body

    @property
    def url(self) -> Optional[str]:
        return self._url

    @property
    def payload(self) -> Optional[RawStatus]:
        return self._payload

    @property
    def code(self) -> Optional[int]:
        return self._payload.get('code') if self._payload else None

    @property
    def message(self) -> Optional[str]:
        return self._payload.get('message') if self._payload else None

    @property
    def reason(self) -> Optional[str]:
        return self._payload.get('reason') if self._payload else None

    @property
    def details(self) -> Optional[RawStatusDetails]:
        return self._payload.get('details') if self._payload else None


class APIUnauthorizedError(APIError):
    pass


class APIForbiddenError(APIError):
    pass


class APINotFoundError(APIError):
    pass


class APIConflictError(APIError):
    pass


class APIServerError(APIError):
    pass


def _parse_status_payload(body: str) -> Optional[RawStatus]:
    try:
        payload = json.loads(body) if body else None
    except json.JSONDecodeError:
        payload = None

    # Better be safe: who knows which sensitive information can be dumped unless kind==Status.
    if not isinstance(payload, collections.abc.Mapping) or payload.get('kind') != 'Status':
        return None
    return payload  # type: ignore


def check_status(
        status: int,
        body: str,
        *,
        url: Optional[str] = None,
) -> None:
    """
    Raise a specialised API error for all non-2xx statuses, including 1xx & 3xx.
    """
    if status // 100 != 2:
        cls = (
            APIUnauthorizedError if status == 401 else
            APIForbiddenError if status == 403 else
            APINotFoundError if status == 404 else
            APIConflictError if status == 409 else
            APIServerError if 500 <= status <= 599 else
            APIError
        )
        raise cls(status, body, url=url)
