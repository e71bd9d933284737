"""
Regional identifiers of the Kapsule resources.

The configuration layer stores the resources' IDs as ``{region}/{uuid}``,
e.g. ``fr-par/11111111-2222-3333-4444-555555555555``, since the API calls
need both. Bare UUIDs are also accepted where a default region is known.
"""
from typing import NamedTuple, NewType, Optional

# A region name, e.g. "fr-par", "nl-ams", "pl-waw". Not validated: the API decides.
Region = NewType('Region', str)


class MalformedIDError(ValueError):
    pass


class RegionalID(NamedTuple):
    region: Region
    id: str

    def __str__(self) -> str:
        return f'{self.region}/{self.id}'


def parse_regional_id(
        value: str,
        *,
        default_region: Optional[str] = None,
) -> RegionalID:
    """
    Split a regional ID into a region and a resource ID.

    A bare ID (without a region) is accepted only if the default region
    is provided. All other forms (more parts, empty parts) are malformed.
    """
    parts = value.split('/')
    if len(parts) == 1 and parts[0] and default_region:
        return RegionalID(Region(default_region), parts[0])
    if len(parts) == 2 and all(parts):
        return RegionalID(Region(parts[0]), parts[1])
    raise MalformedIDError(f"Cannot parse the regional ID {value!r}: expected region/id.")
