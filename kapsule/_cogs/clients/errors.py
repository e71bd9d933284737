"""
Errors of the Kapsule API, as seen by the rest of the library.

The engines catch only these classes, never those of aiohttp: the HTTP client
stays an implementation detail of `kapsule._cogs.clients`. The aiohttp error
is kept as the `__cause__` of ours, so the tracebacks still show it.

Connection, TLS and timeout errors are not wrapped: they are retried
in `api.request()` and then escalated as aiohttp raised them.

A few HTTP statuses get their own classes, since the callers handle them
differently. Most notably, `APINotFoundError` ends the waiting for a deleted
resource successfully. Other statuses are distinguishable only by `.status`.
"""
import collections.abc
import json
from typing import Optional

import aiohttp
from typing_extensions import TypedDict


# As in the Scaleway API responses, e.g. for 404:
# {"message": "resource is not found", "resource": "k8s_cluster", "resource_id": "…", "type": "not_found"}
class RawError(TypedDict, total=False):
    message: str
    type: str
    resource: str
    resource_id: str


class APIError(Exception):

    def __init__(
            self,
            payload: Optional[RawError],
            *,
            status: int,
    ) -> None:
        message = payload.get('message') if payload else None
        super().__init__(message, payload)
        self._status = status
        self._payload = payload

    @property
    def status(self) -> int:
        return self._status

    @property
    def type(self) -> Optional[str]:
        return self._payload.get('type') if self._payload else None

    @property
    def message(self) -> Optional[str]:
        return self._payload.get('message') if self._payload else None

    @property
    def resource(self) -> Optional[str]:
        return self._payload.get('resource') if self._payload else None

    @property
    def resource_id(self) -> Optional[str]:
        return self._payload.get('resource_id') if self._payload else None


class APIClientError(APIError):
    pass


class APIServerError(APIError):
    pass


class APIUnauthorizedError(APIClientError):
    pass


class APIForbiddenError(APIClientError):
    pass


class APINotFoundError(APIClientError):
    pass


class APIConflictError(APIClientError):
    pass


async def check_response(
        response: aiohttp.ClientResponse,
) -> None:
    """
    Check for specialised API errors, and raise with extended information.
    """
    if response.status >= 400:

        # Read the response's body before it is closed by raise_for_status().
        payload: Optional[RawError]
        try:
            payload = await response.json()
        except (json.JSONDecodeError, aiohttp.ContentTypeError, aiohttp.ClientConnectionError):
            payload = None

        # The errors are always JSON objects; anything else is not an error description.
        if not isinstance(payload, collections.abc.Mapping):
            payload = None

        cls = (
            APIUnauthorizedError if response.status == 401 else
            APIForbiddenError if response.status == 403 else
            APINotFoundError if response.status == 404 else
            APIConflictError if response.status == 409 else
            APIClientError if 400 <= response.status < 500 else
            APIServerError if 500 <= response.status < 600 else
            APIError
        )

        # Raise the library-specific error while keeping the original error in scope.
        # This call also closes the response's body, so it cannot be read afterwards.
        try:
            response.raise_for_status()
        except aiohttp.ClientResponseError as e:
            raise cls(payload, status=response.status) from e
