"""Location resolver: find structures of a given type at a site.

The hierarchy endpoint is not reliably populated for every site, so
resolution runs a chain of strategies and stops at the first one that
finds anything:

1. Known-structure lookup: sites with a confirmed structure identifier are
   looked up directly. The hit counts only if it still belongs to the site.
2. Catalog filter: fetch the site location catalog once and keep entries at
   the site whose type tag, name or description points at the structure type.
   The type tag alone is not enough because it is unevenly populated.
3. Pattern guesses: try identifiers built from the site code and type token,
   plus identifiers seen at several sites. Best effort only.

An empty result means "not found", not "does not exist".
"""

import logging
from collections.abc import Iterable, Mapping, Sequence

from neon_access.config import settings
from neon_access.errors import NeonApiError
from neon_access.models import Location
from neon_access.services.query_planner import NeonQueryPlanner

logger = logging.getLogger(__name__)

DEFAULT_SYNONYMS: dict[str, tuple[str, ...]] = {
    # Eddy-covariance towers are often described only as flux towers
    "TOWER": ("flux",),
}


class LocationResolver:
    """Resolve structures at sites through a prioritized fallback chain.

    Example:
        ```python
        resolver = LocationResolver.create(planner)
        towers = await resolver.find_structures_at_site("SRER")
        ```
    """

    def __init__(
        self,
        planner: NeonQueryPlanner,
        known_structures: Mapping[str, str] | None = None,
        recurring_structures: Sequence[str] | None = None,
        synonyms: Mapping[str, Sequence[str]] | None = None,
        cross_site_cap: int | None = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            planner: Query planner used for every lookup (required).
            known_structures: Site code to confirmed structure identifier.
                Defaults to settings.
            recurring_structures: Identifiers worth trying at any site.
                Defaults to settings.
            synonyms: Extra description tokens per structure type.
            cross_site_cap: How many sites a cross-site search covers.
                Defaults to settings.
        """
        self._planner = planner
        self._known = dict(
            settings.known_structures if known_structures is None else known_structures
        )
        self._recurring = tuple(
            settings.recurring_structures if recurring_structures is None else recurring_structures
        )
        if synonyms is None:
            synonyms = DEFAULT_SYNONYMS
        self._synonyms = {k.upper(): tuple(v) for k, v in synonyms.items()}
        self._cross_site_cap = settings.cross_site_cap if cross_site_cap is None else cross_site_cap

    @classmethod
    def create(
        cls,
        planner: NeonQueryPlanner,
        known_structures: Mapping[str, str] | None = None,
    ) -> "LocationResolver":
        """Factory method to create LocationResolver with configured tables.

        Args:
            planner: Query planner (required).
            known_structures: Override for the known-structure table.

        Returns:
            Configured LocationResolver
        """
        return cls(planner=planner, known_structures=known_structures)

    async def find_structures_at_site(
        self, site_code: str, structure_type: str = "TOWER"
    ) -> list[Location]:
        """Find structures of ``structure_type`` at one site.

        Returns an empty list when nothing is found or when the location
        catalog cannot be fetched.
        """
        token = structure_type.upper()

        known = await self._known_lookup(site_code)
        if known:
            return known

        try:
            catalog = await self._planner.list_site_locations()
        except NeonApiError as e:
            logger.warning("Error finding %s at %s: %s", token, site_code, e.message)
            return []

        matches = self._filter_catalog(catalog, site_code, token)
        if matches:
            return matches

        return await self._guess_identifiers(site_code, token)

    async def search_by_type(
        self, structure_type: str = "TOWER", site_code: str | None = None
    ) -> list[Location]:
        """Find structures of a type at one site, or across sites.

        Without a site, only the catalog filter runs, and only for the first
        ``cross_site_cap`` distinct sites in catalog order. This keeps the
        search to a single remote call at the price of completeness.
        """
        if site_code:
            return await self.find_structures_at_site(site_code, structure_type)

        token = structure_type.upper()
        try:
            catalog = await self._planner.list_site_locations()
        except NeonApiError as e:
            logger.warning("Error searching locations by type %s: %s", token, e.message)
            return []

        site_codes: list[str] = []
        for location in catalog:
            if location.site_code and location.site_code not in site_codes:
                site_codes.append(location.site_code)

        matches: list[Location] = []
        for code in site_codes[: self._cross_site_cap]:
            matches.extend(self._filter_catalog(catalog, code, token))
        return _dedupe(matches)

    async def find_towers(
        self, site_code: str | None = None, tower_type: str | None = None
    ) -> list[Location]:
        """Find towers, optionally narrowed to a kind such as "flux"."""
        towers = await self.search_by_type("TOWER", site_code)
        if tower_type:
            needle = tower_type.lower()
            towers = [
                t
                for t in towers
                if needle in t.location_description.lower() or needle in t.location_name.lower()
            ]
        return towers

    async def _known_lookup(self, site_code: str) -> list[Location]:
        identifier = self._known.get(site_code)
        if not identifier:
            return []

        location = await self._lookup(identifier, site_code)
        return [location] if location else []

    def _filter_catalog(
        self, catalog: Iterable[Location], site_code: str, token: str
    ) -> list[Location]:
        description_tokens = (token.lower(), *self._synonyms.get(token, ()))

        matches = [
            loc
            for loc in catalog
            if loc.site_code == site_code
            and (
                loc.location_type.upper() == token
                or token in loc.location_name.upper()
                or any(t in loc.location_description.lower() for t in description_tokens)
            )
        ]
        return _dedupe(matches)

    async def _guess_identifiers(self, site_code: str, token: str) -> list[Location]:
        candidates = [
            f"{token}{site_code}",
            f"{site_code}_{token}",
            f"{site_code}.{token}",
            *self._recurring,
        ]

        found: list[Location] = []
        for identifier in dict.fromkeys(candidates):
            location = await self._lookup(identifier, site_code)
            if location:
                found.append(location)
        return _dedupe(found)

    async def _lookup(self, identifier: str, site_code: str) -> Location | None:
        """Direct lookup that only accepts a location belonging to the site."""
        try:
            location = await self._planner.get_location(identifier)
        except NeonApiError as e:
            logger.debug("Lookup of %s for %s failed: %s", identifier, site_code, e.message)
            return None

        if location.site_code != site_code:
            logger.debug(
                "Ignoring %s: belongs to %s, not %s",
                identifier,
                location.site_code,
                site_code,
            )
            return None
        return location


def _dedupe(locations: Iterable[Location]) -> list[Location]:
    seen: set[str] = set()
    unique = []
    for location in locations:
        if location.location_name not in seen:
            seen.add(location.location_name)
            unique.append(location)
    return unique
