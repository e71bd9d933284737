import asyncio
import collections.abc
import itertools
from typing import Any, AsyncIterator, Mapping, Optional

import aiohttp

from kapsule._cogs.clients import auth, errors
from kapsule._cogs.configs import configuration
from kapsule._cogs.helpers import typedefs


@auth.authenticated
async def request(
        method: str,
        url: str,  # relative to the server/api root.
        *,
        settings: configuration.KapsuleSettings,
        params: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        context: Optional[auth.APIContext] = None,  # injected by the decorator
        logger: typedefs.Logger,
) -> aiohttp.ClientResponse:
    if context is None:  # for type-checking!
        raise RuntimeError("API instance is not injected by the decorator.")

    if '://' not in url:
        url = context.server.rstrip('/') + '/' + url.lstrip('/')

    if timeout is None:
        timeout = aiohttp.ClientTimeout(
            total=settings.networking.request_timeout,
            sock_connect=settings.networking.connect_timeout,
        )

    backoffs = settings.networking.error_backoffs
    backoffs = backoffs if isinstance(backoffs, collections.abc.Iterable) else [backoffs]
    count = len(backoffs) + 1 if isinstance(backoffs, collections.abc.Sized) else None
    backoff: Optional[float]
    for retry, backoff in enumerate(itertools.chain(backoffs, [None]), start=1):
        idx = f"#{retry}/{count}" if count is not None else f"#{retry}"
        what = f"{method.upper()} {url}"
        try:
            if retry > 1:
                logger.debug(f"Request attempt {idx}: {what}")

            response = await context.session.request(
                method=method,
                url=url,
                params=params,
                timeout=timeout,
            )
            await errors.check_response(response)  # but do not parse it!

        except (aiohttp.ClientConnectionError, errors.APIServerError, asyncio.TimeoutError) as e:
            if backoff is None:  # i.e. the last or the only attempt.
                logger.error(f"Request attempt {idx} failed; escalating: {what} -> {e!r}")
                raise
            else:
                logger.error(f"Request attempt {idx} failed; will retry: {what} -> {e!r}")
                await asyncio.sleep(backoff)  # non-awakable! but still cancellable.
        else:
            if retry > 1:
                logger.debug(f"Request attempt {idx} succeeded: {what}")
            return response

    raise RuntimeError("Broken retryable routine.")  # impossible, but needed for type-checking.


async def get(
        url: str,  # relative to the server/api root.
        *,
        settings: configuration.KapsuleSettings,
        params: Optional[Mapping[str, str]] = None,
        logger: typedefs.Logger,
) -> Any:
    response = await request(
        method='get',
        url=url,
        params=params,
        settings=settings,
        logger=logger,
    )
    async with response:
        return await response.json()


async def iter_pages(
        url: str,  # relative to the server/api root.
        *,
        key: str,
        settings: configuration.KapsuleSettings,
        params: Optional[Mapping[str, str]] = None,
        logger: typedefs.Logger,
) -> AsyncIterator[Any]:
    """
    Iterate over all items of a paginated list, page by page.

    The Scaleway lists are paginated with ``page`` (1-based) & ``page_size``,
    and report the ``total_count`` of items across all pages. The iteration
    stops when all the announced items are seen, or when a page is empty
    (in case the items were deleted while being listed).

    The non-paginated lists (without ``total_count``) end after the 1st page.
    """
    seen = 0
    for page in itertools.count(start=1):
        rsp = await get(
            url=url,
            params=dict(params or {}, page=str(page), page_size=str(settings.networking.page_size)),
            settings=settings,
            logger=logger,
        )
        items = rsp.get(key) or []
        for item in items:
            yield item
        seen += len(items)

        total_count = rsp.get('total_count')
        if not items or total_count is None or seen >= total_count:
            break
