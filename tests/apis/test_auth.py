import aiohttp
import pytest

from kapsule._cogs.clients.auth import APIContext, LoginError, authenticated, connected, \
                                       context_var


@authenticated
async def fn(*, context=None):
    return context


async def test_context_requires_a_secret_key(settings):
    with pytest.raises(LoginError):
        APIContext(settings)


async def test_context_with_a_secret_key(api_settings, hostname):
    context = APIContext(api_settings)
    try:
        assert context.server == f'http://{hostname}'
        assert context.default_region == 'fr-par'
        assert context.session.headers['X-Auth-Token'] == 'fake-secret-key'
        assert context.session.headers['User-Agent'].startswith('kapsule/')
    finally:
        await context.close()


async def test_context_with_a_custom_session(settings):
    async with aiohttp.ClientSession(headers={'User-Agent': 'mine'}) as session:
        context = APIContext(settings, session=session)
        assert context.session is session
        assert context.session.headers['User-Agent'] == 'mine'


async def test_injection_from_the_context_var(api_settings):
    async with connected(api_settings) as context:
        assert context_var.get() is context
        assert await fn() is context
    assert context.session.closed
    with pytest.raises(LookupError):
        context_var.get()


async def test_explicit_context_wins(api_settings):
    async with connected(api_settings):
        explicit = object()
        assert await fn(context=explicit) is explicit


async def test_injection_without_a_context(api_settings):
    with pytest.raises(LoginError):
        await fn()
