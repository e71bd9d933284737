"""
Resolution of the Kubernetes versions as the users declare them.

The users declare the minor versions (``x.y``), while the API needs the full
ones (``x.y.z``). The API's catalog contains one patch version per minor
version (the latest one); so the resolution is a lookup in the catalog.
"""
from kapsule._cogs.clients import fetching
from kapsule._cogs.configs import configuration
from kapsule._cogs.helpers import typedefs
from kapsule._cogs.structs import regions


class VersionError(ValueError):
    pass


class MalformedVersionError(VersionError):
    """ The user-declared version is not of the ``x.y`` form. """


class MalformedUpstreamVersionError(VersionError):
    """ The API's version is not of the ``x.y.z`` form (should never happen). """


class VersionNotFoundError(VersionError, LookupError):
    """ The catalog has no versions for the requested minor version. """


async def resolve_version(
        minor: str,
        *,
        region: regions.Region,
        settings: configuration.KapsuleSettings,
        logger: typedefs.Logger,
) -> str:
    """
    Resolve a minor version (``x.y``) to the full version (``x.y.z``).

    The first version in the catalog's order with the same major & minor parts
    is returned. Malformed inputs fail before any network activity is done.
    """
    minor_parts = minor.split('.')
    if len(minor_parts) != 2 or not all(minor_parts):
        raise MalformedVersionError(f"The minor version should be like x.y, not {minor!r}.")

    versions = await fetching.list_versions(region=region, settings=settings, logger=logger)
    for version in versions:
        name = version.get('name', '')
        parts = name.split('.')
        if len(parts) != 3:
            raise MalformedUpstreamVersionError(f"The upstream version {name!r} is not like x.y.z.")
        if parts[:2] == minor_parts:
            logger.debug(f"Resolved the version {minor} to {name} in {region}.")
            return name

    raise VersionNotFoundError(f"No available upstream version found for {minor} in {region}.")


def get_minor_version(version: str) -> str:
    """ Cut the full version (``x.y.z``) to the minor version (``x.y``). """
    parts = version.split('.')
    if len(parts) != 3:
        raise MalformedUpstreamVersionError(f"The version {version!r} is not a full x.y.z version.")
    return '.'.join(parts[:2])
