"""Query planner: one typed operation per NEON API resource.

Every operation follows the same path:

1. Fingerprint the operation and its parameters.
2. Serve a valid cache entry if the operation is cacheable.
3. Otherwise build a RequestDescriptor (GET with query parameters, or POST
   with a JSON body for multi-site data queries) and dispatch it through
   the request executor.
4. Cache the payload on success using the per-operation TTL. Errors from
   the executor propagate untouched.
"""

import logging
from collections import Counter
from typing import Any

from pydantic import TypeAdapter, ValidationError

from neon_access.config import Settings, settings
from neon_access.dto import DataQueryParams, LocationSearchRequest, SampleQuery, TaxonomyQuery
from neon_access.entities import HttpMethod, RequestDescriptor
from neon_access.errors import NeonApiError, TransientError
from neon_access.models import (
    ChildLocation,
    DataAvailabilitySummary,
    DataQueryResult,
    DownloadInfo,
    Location,
    LocationHierarchy,
    LocationMatch,
    Product,
    Release,
    Sample,
    Site,
    SiteAvailabilitySummary,
    SiteProductAvailability,
    TaxonomyPage,
)
from neon_access.protocols import CacheStore, RequestExecutor
from neon_access.utils import build_cache_key, haversine_km

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v0"

# Sample views change as samples move; download URLs are signed and expire.
UNCACHED_OPERATIONS = frozenset({"track_sample", "get_download_info"})

_products = TypeAdapter(list[Product])
_sites = TypeAdapter(list[Site])
_locations = TypeAdapter(list[Location])
_samples = TypeAdapter(list[Sample])
_releases = TypeAdapter(list[Release])
_product = TypeAdapter(Product)
_site = TypeAdapter(Site)
_location = TypeAdapter(Location)
_release = TypeAdapter(Release)
_data_result = TypeAdapter(DataQueryResult)
_taxonomy_page = TypeAdapter(TaxonomyPage)


class NeonQueryPlanner:
    """Cache-aware access to the NEON data portal API.

    Depends on PROTOCOLS, not concrete implementations:
    - RequestExecutor: performs calls and classifies failures
    - CacheStore: holds successful payloads until their TTL runs out

    Example:
        ```python
        from neon_access.repositories import HttpRequestExecutor, InMemoryCacheRepository
        from neon_access.services import NeonQueryPlanner

        planner = NeonQueryPlanner.create(
            executor=HttpRequestExecutor.create(),
            cache=InMemoryCacheRepository.create(),
        )
        site = await planner.get_site("SRER")
        ```
    """

    def __init__(
        self,
        executor: RequestExecutor,
        cache: CacheStore,
        config: Settings | None = None,
    ) -> None:
        """Initialize the planner.

        Args:
            executor: Request executor for remote calls (required).
            cache: Response cache (required).
            config: TTLs and caps. Defaults to the global settings.
        """
        self._executor = executor
        self._cache = cache
        self._config = settings if config is None else config

    @classmethod
    def create(
        cls,
        executor: RequestExecutor,
        cache: CacheStore,
        config: Settings | None = None,
    ) -> "NeonQueryPlanner":
        """Factory method to create NeonQueryPlanner.

        Args:
            executor: Request executor (required).
            cache: Response cache (required).
            config: Settings override. If None, uses global settings.

        Returns:
            Configured NeonQueryPlanner
        """
        return cls(executor=executor, cache=cache, config=config)

    @property
    def config(self) -> Settings:
        return self._config

    # ------------------------------------------------------------------
    # Planning and dispatch
    # ------------------------------------------------------------------

    def plan(
        self,
        operation: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        *,
        key_params: dict[str, Any] | None = None,
        method: HttpMethod = "GET",
        body: dict[str, Any] | None = None,
        unwrap: bool = True,
    ) -> RequestDescriptor:
        """Build the request descriptor for one call.

        Args:
            operation: Logical operation name, used for cache policy and key
            endpoint: Path relative to the base URL
            params: Query-string parameters
            key_params: Logical parameters to fingerprint. Defaults to ``params``.
            method: HTTP method
            body: JSON body for POST
            unwrap: Strip the ``{"data": ...}`` envelope

        Returns:
            The planned RequestDescriptor
        """
        params = {k: v for k, v in (params or {}).items() if v is not None}
        cacheable = operation not in UNCACHED_OPERATIONS
        default_ttl = self._config.data_query_ttl if operation == "query_data" else None
        ttl = self._config.ttl_for(operation, default_ttl) if cacheable else None
        fingerprint = {"endpoint": endpoint, **(key_params if key_params is not None else params)}

        return RequestDescriptor(
            operation=operation,
            endpoint=endpoint,
            method=method,
            params=params,
            body=body,
            cacheable=cacheable,
            ttl=ttl,
            cache_key=build_cache_key(operation, fingerprint),
            unwrap=unwrap,
        )

    async def fetch(
        self,
        descriptor: RequestDescriptor,
        expected: type = object,
        adapter: TypeAdapter | None = None,
    ) -> Any:
        """Serve a descriptor from cache or dispatch it.

        A fresh payload is decoded before it is cached, so a response that
        fails validation is never stored.

        Args:
            descriptor: The planned request
            expected: Payload type (``dict`` or ``list``) worth caching
            adapter: Decoder for the payload. If None, the raw payload is returned.

        Returns:
            The decoded result, or the raw payload when no adapter is given
        """
        if descriptor.cacheable:
            cached = self._cache.get(descriptor.cache_key, expected)
            if cached is not None:
                logger.debug("Serving %s from cache", descriptor.operation)
                return cached if adapter is None else _decode(descriptor.operation, adapter, cached)

        payload = await self._executor.execute(descriptor)
        result = payload if adapter is None else _decode(descriptor.operation, adapter, payload)

        if descriptor.cacheable and isinstance(payload, expected):
            self._cache.set(descriptor.cache_key, payload, descriptor.ttl)
        return result

    async def _get(
        self,
        operation: str,
        endpoint: str,
        adapter: TypeAdapter,
        params: dict[str, Any] | None = None,
        expected: type = object,
        **plan_options: Any,
    ) -> Any:
        descriptor = self.plan(operation, endpoint, params, **plan_options)
        return await self.fetch(descriptor, expected, adapter)

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def list_products(self, release: str | None = None) -> list[Product]:
        return await self._get(
            "list_products", f"{API_PREFIX}/products", _products, {"release": release}, list
        )

    async def get_product(self, product_code: str, release: str | None = None) -> Product:
        return await self._get(
            "get_product",
            f"{API_PREFIX}/products/{product_code}",
            _product,
            {"release": release},
            dict,
        )

    async def search_products(
        self,
        term: str | None = None,
        theme: str | None = None,
        science_team: str | None = None,
        release: str | None = None,
    ) -> list[Product]:
        """Filter the product catalog by text, theme and science team.

        All filters are case-insensitive substring matches; ``term`` looks
        at the name, description and keywords.
        """
        products = await self.list_products(release)

        if term:
            needle = term.lower()
            products = [
                p
                for p in products
                if needle in p.product_name.lower()
                or needle in p.product_description.lower()
                or any(needle in k.lower() for k in p.keywords)
            ]
        if theme:
            needle = theme.lower()
            products = [p for p in products if any(needle in t.lower() for t in p.themes)]
        if science_team:
            needle = science_team.lower()
            products = [p for p in products if needle in p.product_science_team.lower()]
        return products

    # ------------------------------------------------------------------
    # Sites
    # ------------------------------------------------------------------

    async def list_sites(self, release: str | None = None) -> list[Site]:
        return await self._get(
            "list_sites", f"{API_PREFIX}/sites", _sites, {"release": release}, list
        )

    async def get_site(self, site_code: str) -> Site:
        return await self._get(
            "get_site", f"{API_PREFIX}/sites/{site_code}", _site, expected=dict
        )

    async def filter_sites(
        self,
        domain_code: str | None = None,
        state_code: str | None = None,
        site_type: str | None = None,
        release: str | None = None,
    ) -> list[Site]:
        sites = await self.list_sites(release)
        if domain_code:
            sites = [s for s in sites if s.domain_code == domain_code]
        if state_code:
            sites = [s for s in sites if s.state_code == state_code]
        if site_type:
            sites = [s for s in sites if site_type.lower() in s.site_type.lower()]
        return sites

    async def search_sites(self, term: str) -> list[Site]:
        needle = term.lower()
        return [
            s
            for s in await self.list_sites()
            if needle in s.site_name.lower()
            or needle in s.site_description.lower()
            or needle in s.site_code.lower()
        ]

    async def get_site_products(self, site_code: str) -> list[SiteProductAvailability]:
        site = await self.get_site(site_code)
        return site.data_products

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    def plan_data_query(self, params: DataQueryParams) -> RequestDescriptor:
        """Choose the transport for a data availability query.

        More than one site goes out as a POST body, since long site lists
        do not fit in a query string. Zero or one site goes out as GET, a
        one-element ``site_codes`` list being sent as ``siteCode``.
        """
        endpoint = f"{API_PREFIX}/data/query"
        logical = params.to_params()
        sites = params.requested_sites

        if len(sites) > 1:
            body = {k: v for k, v in logical.items() if k != "siteCode"}
            body["siteCodes"] = sites
            return self.plan(
                "query_data", endpoint, key_params=logical, method="POST", body=body
            )

        query = {k: v for k, v in logical.items() if k not in ("siteCode", "siteCodes")}
        if sites:
            query["siteCode"] = sites[0]
        return self.plan("query_data", endpoint, query, key_params=logical)

    async def query_data(self, params: DataQueryParams) -> DataQueryResult:
        descriptor = self.plan_data_query(params)
        return await self.fetch(descriptor, dict, _data_result)

    async def summarize_data_availability(
        self, product_code: str, release: str | None = None
    ) -> DataAvailabilitySummary:
        """Summarize which months of a product are available at which sites."""
        product = await self.get_product(product_code, release)

        all_months = [m for site in product.site_codes for m in site.available_months]
        site_summaries = [
            SiteAvailabilitySummary(
                site_code=site.site_code,
                month_count=len(site.available_months),
                first_month=min(site.available_months, default=None),
                last_month=max(site.available_months, default=None),
            )
            for site in product.site_codes
        ]
        site_summaries.sort(key=lambda s: s.month_count, reverse=True)
        total_sites = len(product.site_codes)

        return DataAvailabilitySummary(
            product_code=product.product_code,
            product_name=product.product_name,
            science_team=product.product_science_team,
            total_sites=total_sites,
            total_months=len(all_months),
            earliest_month=min(all_months, default=None),
            latest_month=max(all_months, default=None),
            average_months_per_site=len(all_months) / total_sites if total_sites else 0.0,
            sites=site_summaries,
            months_by_year=dict(sorted(Counter(m[:4] for m in all_months).items())),
        )

    async def get_download_info(
        self,
        product_code: str,
        site_code: str,
        year_month: str,
        filename: str,
    ) -> DownloadInfo:
        """Resolve a data file to its signed URL, size and checksum.

        Uses a HEAD probe so the file itself is never transferred. Never
        cached, because the remote service signs URLs with an expiry.
        """
        descriptor = self.plan(
            "get_download_info",
            f"{API_PREFIX}/data/{product_code}/{site_code}/{year_month}/{filename}",
            method="HEAD",
        )
        info = await self._executor.probe(descriptor)
        return DownloadInfo.model_validate(info)

    # ------------------------------------------------------------------
    # Locations
    # ------------------------------------------------------------------

    async def list_site_locations(self, location_type: str | None = None) -> list[Location]:
        """The site-level location catalog, optionally filtered by type."""
        locations = await self._get(
            "list_site_locations", f"{API_PREFIX}/locations/sites", _locations, expected=list
        )
        if location_type:
            needle = location_type.lower()
            locations = [loc for loc in locations if needle in loc.location_type.lower()]
        return locations

    async def get_location(
        self,
        location_name: str,
        hierarchy: bool = False,
        history: bool = False,
        location_type: str | None = None,
    ) -> Location:
        params = {
            "hierarchy": True if hierarchy else None,
            "history": True if history else None,
            "locationType": location_type,
        }
        return await self._get(
            "get_location",
            f"{API_PREFIX}/locations/{location_name}",
            _location,
            params,
            dict,
        )

    async def get_location_hierarchy(
        self,
        location_name: str,
        location_type: str | None = None,
        max_depth: int = 1,
        max_children: int | None = None,
    ) -> LocationHierarchy:
        """Walk a location's descendants breadth-first.

        Children are fetched one at a time. ``max_depth`` is clamped to the
        configured depth cap, and ``max_children`` bounds the number of
        descendant fetches across the whole walk; descendants beyond it are
        counted in ``omitted_children``. A failed child fetch is recorded on
        that child and the walk continues.
        """
        depth_cap = max(1, min(max_depth, self._config.hierarchy_max_depth))
        if max_children is None:
            max_children = self._config.hierarchy_child_cap
        budget = max(0, max_children)

        root = await self.get_location(location_name, hierarchy=True, location_type=location_type)

        children: list[ChildLocation] = []
        omitted = 0
        total = 0
        frontier = [(name, root.location_name, 1) for name in root.location_children]

        while frontier:
            name, parent, depth = frontier.pop(0)
            total += 1
            if len(children) >= budget:
                omitted += 1
                continue

            expand = depth < depth_cap
            try:
                child = await self.get_location(name, hierarchy=expand)
            except NeonApiError as e:
                logger.debug("Could not fetch child location %s: %s", name, e.message)
                children.append(
                    ChildLocation(location_name=name, parent=parent, depth=depth, error=e.message)
                )
                continue

            children.append(
                ChildLocation(location_name=name, parent=parent, depth=depth, location=child)
            )
            if expand:
                frontier.extend(
                    (grandchild, name, depth + 1) for grandchild in child.location_children
                )

        return LocationHierarchy(
            location=root,
            children=children,
            total_children=total,
            omitted_children=omitted,
        )

    async def search_locations(self, request: LocationSearchRequest) -> list[LocationMatch]:
        """Filter the location catalog by site, type, text and proximity.

        When both coordinates are given, only locations within ``radius``
        kilometres are kept, nearest first.
        """
        locations = await self.list_site_locations(request.location_type)

        if request.site_code:
            locations = [loc for loc in locations if loc.site_code == request.site_code]
        if request.search_term:
            needle = request.search_term.lower()
            locations = [
                loc
                for loc in locations
                if needle in loc.location_name.lower()
                or needle in loc.location_description.lower()
            ]

        if request.latitude is None or request.longitude is None:
            return [LocationMatch(location=loc) for loc in locations]

        matches = []
        for loc in locations:
            if not loc.has_coordinates:
                continue
            distance = haversine_km(
                request.latitude,
                request.longitude,
                loc.location_decimal_latitude,
                loc.location_decimal_longitude,
            )
            if distance <= request.radius:
                matches.append(LocationMatch(location=loc, distance_km=distance))
        matches.sort(key=lambda m: m.distance_km)
        return matches

    # ------------------------------------------------------------------
    # Taxonomy, samples, releases
    # ------------------------------------------------------------------

    async def search_taxonomy(self, query: TaxonomyQuery) -> TaxonomyPage:
        # The taxonomy endpoint returns count/total next to data, so keep the envelope
        return await self._get(
            "search_taxonomy",
            f"{API_PREFIX}/taxonomy",
            _taxonomy_page,
            query.to_params(),
            dict,
            unwrap=False,
        )

    async def track_sample(self, query: SampleQuery) -> list[Sample]:
        descriptor = self.plan("track_sample", f"{API_PREFIX}/samples/view", query.to_params())
        payload = await self.fetch(descriptor)
        if isinstance(payload, dict):
            payload = payload.get("sampleViews", [payload])
        return _decode("track_sample", _samples, payload)

    async def list_releases(self) -> list[Release]:
        return await self._get("list_releases", f"{API_PREFIX}/releases", _releases, expected=list)

    async def get_release(self, release_tag: str) -> Release:
        return await self._get(
            "get_release",
            f"{API_PREFIX}/releases/{release_tag}",
            _release,
            expected=dict,
        )

    # ------------------------------------------------------------------
    # Cache administration
    # ------------------------------------------------------------------

    def cache_stats(self) -> dict:
        return self._cache.get_stats()

    def clear_cache(self) -> int:
        return self._cache.clear()


def _decode(operation: str, adapter: TypeAdapter, payload: Any) -> Any:
    try:
        return adapter.validate_python(payload)
    except ValidationError as e:
        raise TransientError(
            f"Unexpected response shape for {operation}",
            details={"errors": e.errors(include_url=False)},
        ) from e
