"""HTTP handlers for NEON API operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes and error mapping; the
structured results are returned as-is for the caller to render.
"""

from collections.abc import Awaitable
from typing import TypeVar

from fastapi import HTTPException, status

from neon_access.config import settings
from neon_access.dto import (
    CacheClearResponse,
    CacheStatsResponse,
    DataQueryParams,
    DownloadRequest,
    HealthCheckResponse,
    LocationSearchRequest,
    SampleQuery,
    TaxonomyQuery,
    TowerSearchRequest,
)
from neon_access.errors import ClientError, NeonApiError
from neon_access.models import (
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
    SiteProductAvailability,
    TaxonomyPage,
)
from neon_access.services import CacheSweeper, LocationResolver, NeonQueryPlanner

T = TypeVar("T")


class NeonHandler:
    """HTTP handlers for NEON API operations.

    This handler delegates to NeonQueryPlanner and LocationResolver
    and handles HTTP-specific concerns like:
    - Building parameter objects from request data
    - Mapping the error taxonomy to status codes

    Example:
        ```python
        handler = NeonHandler(planner=planner, resolver=resolver, sweeper=sweeper)

        @app.get("/sites/{site_code}", response_model=Site)
        async def get_site(site_code: str):
            return await handler.get_site(site_code)
        ```
    """

    def __init__(
        self,
        planner: NeonQueryPlanner,
        resolver: LocationResolver,
        sweeper: CacheSweeper | None = None,
    ) -> None:
        """Initialize the handler.

        Args:
            planner: Query planner for remote operations (required).
            resolver: Location resolver for structure lookups (required).
            sweeper: Cache sweeper, reported by the health check.
        """
        self._planner = planner
        self._resolver = resolver
        self._sweeper = sweeper

    async def _call(self, call: Awaitable[T]) -> T:
        try:
            return await call
        except ClientError as e:
            code = (
                status.HTTP_404_NOT_FOUND if e.status == 404 else status.HTTP_400_BAD_REQUEST
            )
            raise HTTPException(status_code=code, detail=e.message) from e
        except NeonApiError as e:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message) from e

    async def list_products(self, release: str | None = None) -> list[Product]:
        return await self._call(self._planner.list_products(release))

    async def get_product(self, product_code: str, release: str | None = None) -> Product:
        return await self._call(self._planner.get_product(product_code, release))

    async def search_products(
        self,
        term: str | None = None,
        theme: str | None = None,
        science_team: str | None = None,
        release: str | None = None,
    ) -> list[Product]:
        return await self._call(
            self._planner.search_products(term, theme, science_team, release)
        )

    async def list_sites(
        self,
        release: str | None = None,
        domain_code: str | None = None,
        state_code: str | None = None,
        site_type: str | None = None,
    ) -> list[Site]:
        return await self._call(
            self._planner.filter_sites(domain_code, state_code, site_type, release)
        )

    async def search_sites(self, term: str) -> list[Site]:
        return await self._call(self._planner.search_sites(term))

    async def get_site(self, site_code: str) -> Site:
        return await self._call(self._planner.get_site(site_code))

    async def get_site_products(self, site_code: str) -> list[SiteProductAvailability]:
        return await self._call(self._planner.get_site_products(site_code))

    async def query_data(self, request: DataQueryParams) -> DataQueryResult:
        if not request.requested_sites:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="Either siteCode or siteCodes must be provided",
            )
        if request.start_date_month > request.end_date_month:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="startDateMonth must not be after endDateMonth",
            )
        return await self._call(self._planner.query_data(request))

    async def summarize_data(
        self, product_code: str, release: str | None = None
    ) -> DataAvailabilitySummary:
        return await self._call(self._planner.summarize_data_availability(product_code, release))

    async def get_download_info(self, request: DownloadRequest) -> DownloadInfo:
        return await self._call(
            self._planner.get_download_info(
                request.product_code, request.site_code, request.year_month, request.filename
            )
        )

    async def list_site_locations(self, location_type: str | None = None) -> list[Location]:
        return await self._call(self._planner.list_site_locations(location_type))

    async def get_location(
        self,
        location_name: str,
        hierarchy: bool = False,
        history: bool = False,
        location_type: str | None = None,
    ) -> Location:
        return await self._call(
            self._planner.get_location(location_name, hierarchy, history, location_type)
        )

    async def get_location_hierarchy(
        self,
        location_name: str,
        location_type: str | None = None,
        max_depth: int = 1,
        max_children: int | None = None,
    ) -> LocationHierarchy:
        return await self._call(
            self._planner.get_location_hierarchy(
                location_name, location_type, max_depth, max_children
            )
        )

    async def search_locations(self, request: LocationSearchRequest) -> list[LocationMatch]:
        return await self._call(self._planner.search_locations(request))

    async def find_towers(self, request: TowerSearchRequest) -> list[Location]:
        # The resolver never raises; an empty list means nothing was found
        return await self._resolver.find_towers(request.site_code, request.tower_type)

    async def search_taxonomy(self, request: TaxonomyQuery) -> TaxonomyPage:
        return await self._call(self._planner.search_taxonomy(request))

    async def track_sample(self, request: SampleQuery) -> list[Sample]:
        has_tag_and_class = request.sample_tag and request.sample_class
        has_identifier = request.barcode or request.sample_uuid or request.archive_guid
        if not (has_tag_and_class or has_identifier):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=(
                    "Provide sampleTag and sampleClass, or one of: "
                    "barcode, sampleUuid, archiveGuid"
                ),
            )
        return await self._call(self._planner.track_sample(request))

    async def list_releases(self) -> list[Release]:
        return await self._call(self._planner.list_releases())

    async def get_release(self, release_tag: str) -> Release:
        return await self._call(self._planner.get_release(release_tag))

    async def get_stats(self) -> CacheStatsResponse:
        stats = self._planner.cache_stats()
        return CacheStatsResponse(
            total_entries=stats.get("total_entries", 0),
            hits=stats.get("hits", 0),
            misses=stats.get("misses", 0),
            hit_rate=stats.get("hit_rate", 0.0),
            default_ttl=stats.get("default_ttl", settings.cache_ttl),
        )

    async def clear_cache(self) -> CacheClearResponse:
        count = self._planner.clear_cache()
        return CacheClearResponse(
            success=True,
            deleted_count=count,
            message="Cache cleared successfully",
        )

    async def health_check(self) -> HealthCheckResponse:
        stats = self._planner.cache_stats()
        return HealthCheckResponse(
            status="healthy",
            base_url=self._planner.config.base_url,
            cache_entries=stats.get("total_entries", 0),
            sweeper_running=bool(self._sweeper and self._sweeper.running),
        )
