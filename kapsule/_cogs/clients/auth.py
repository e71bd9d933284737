import functools
from contextvars import ContextVar
from typing import Any, Callable, Optional, TypeVar, cast

import aiohttp

from kapsule._cogs.configs import configuration
from kapsule._cogs.helpers import versions

# Per-application storage of the API context. Set by `connected()` or by the callers directly.
# Used by the client wrappers to retrieve the session without passing it through all the layers.
context_var: ContextVar['APIContext'] = ContextVar('context_var')

# A typevar to show that we return a function with the same signature as given.
_F = TypeVar('_F', bound=Callable[..., Any])


class LoginError(Exception):
    """ Raised when the credentials are not configured at all. """


def authenticated(fn: _F) -> _F:
    """
    A decorator to inject an authenticated session into a requesting routine.

    If a context is explicitly passed, it is used as is. Otherwise, the one
    from the context variable is used; it must be set by :func:`connected`.
    """
    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        if kwargs.get('context') is None:
            try:
                kwargs['context'] = context_var.get()
            except LookupError:
                raise LoginError("No API context is set up. Use `kapsule.connected()`.") from None
        return await fn(*args, **kwargs)

    return cast(_F, wrapper)


class APIContext:
    """
    A container for an aiohttp session and the contextual information of the API.

    The container is constructed once per application (e.g. per CLI command)
    and re-used by all the requests until closed. It does not survive
    the event loop it was created in: aiohttp sessions are loop-bound.
    """

    # The main contained object used by the API methods.
    session: aiohttp.ClientSession

    # Contextual information for URL building.
    server: str
    default_region: str

    def __init__(
            self,
            settings: configuration.KapsuleSettings,
            *,
            session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        super().__init__()

        secret_key = settings.credentials.secret_key
        if session is None and not secret_key:
            raise LoginError("The secret key is not configured (e.g. via SCW_SECRET_KEY).")

        self.session = session if session is not None else aiohttp.ClientSession(
            headers={'X-Auth-Token': secret_key or ''},
        )

        # It is a good practice to self-identify a bit, even with a user-provided session.
        if self.session.headers.get('User-Agent') is None:
            self.session.headers['User-Agent'] = f'kapsule/{versions.version or "unknown"}'

        self.server = settings.networking.api_url
        self.default_region = settings.credentials.default_region

    async def close(self) -> None:
        await self.session.close()


class connected:
    """
    Set up an API context for the block of code, and close it on exit.

    Usage::

        async with kapsule.connected(settings):
            await kapsule.wait_for_cluster(cluster_id, region='fr-par', settings=settings)
    """

    def __init__(self, settings: configuration.KapsuleSettings) -> None:
        super().__init__()
        self._settings = settings
        self._context: Optional[APIContext] = None
        self._token: Any = None

    async def __aenter__(self) -> APIContext:
        self._context = APIContext(self._settings)
        self._token = context_var.set(self._context)
        return self._context

    async def __aexit__(self, *exc_info: Any) -> None:
        context_var.reset(self._token)
        if self._context is not None:
            await self._context.close()
