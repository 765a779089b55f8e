from typing import Any

import httpx
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

from neon_access.api.dependencies import HandlerDep, lifespan
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


def create_app(transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        transport: Optional httpx transport for the remote API client.
            Tests pass an ``httpx.MockTransport`` here.

    Returns:
        The configured FastAPI app
    """
    app = FastAPI(
        title="NEON Access API",
        description="Cached, retrying access to the NEON ecological data portal",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.transport = transport

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "NEON Access API",
            "version": "0.1.0",
            "base_url": settings.base_url,
            "endpoints": {
                "products": "/products",
                "sites": "/sites",
                "data": "/data/query",
                "locations": "/locations",
                "towers": "/towers/search",
                "taxonomy": "/taxonomy/search",
                "samples": "/samples/track",
                "releases": "/releases",
                "cache": "/cache/stats",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        return await handler.health_check()

    # Products

    @app.get("/products", response_model=list[Product])
    async def list_products(handler: HandlerDep, release: str | None = None) -> list[Product]:
        return await handler.list_products(release)

    @app.get("/products/search", response_model=list[Product])
    async def search_products(
        handler: HandlerDep,
        term: str | None = None,
        theme: str | None = None,
        science_team: str | None = None,
        release: str | None = None,
    ) -> list[Product]:
        return await handler.search_products(term, theme, science_team, release)

    @app.get("/products/{product_code}", response_model=Product)
    async def get_product(
        product_code: str, handler: HandlerDep, release: str | None = None
    ) -> Product:
        return await handler.get_product(product_code, release)

    @app.get("/products/{product_code}/availability", response_model=DataAvailabilitySummary)
    async def summarize_data(
        product_code: str, handler: HandlerDep, release: str | None = None
    ) -> DataAvailabilitySummary:
        return await handler.summarize_data(product_code, release)

    # Sites

    @app.get("/sites", response_model=list[Site])
    async def list_sites(
        handler: HandlerDep,
        release: str | None = None,
        domain_code: str | None = None,
        state_code: str | None = None,
        site_type: str | None = None,
    ) -> list[Site]:
        return await handler.list_sites(release, domain_code, state_code, site_type)

    @app.get("/sites/search", response_model=list[Site])
    async def search_sites(handler: HandlerDep, term: str = Query(..., min_length=1)) -> list[Site]:
        return await handler.search_sites(term)

    @app.get("/sites/{site_code}", response_model=Site)
    async def get_site(site_code: str, handler: HandlerDep) -> Site:
        return await handler.get_site(site_code)

    @app.get("/sites/{site_code}/products", response_model=list[SiteProductAvailability])
    async def get_site_products(
        site_code: str, handler: HandlerDep
    ) -> list[SiteProductAvailability]:
        return await handler.get_site_products(site_code)

    # Data

    @app.post("/data/query", response_model=DataQueryResult)
    async def query_data(request: DataQueryParams, handler: HandlerDep) -> DataQueryResult:
        return await handler.query_data(request)

    @app.post("/data/download-info", response_model=DownloadInfo)
    async def get_download_info(request: DownloadRequest, handler: HandlerDep) -> DownloadInfo:
        return await handler.get_download_info(request)

    # Locations

    @app.get("/locations", response_model=list[Location])
    async def list_site_locations(
        handler: HandlerDep, location_type: str | None = None
    ) -> list[Location]:
        return await handler.list_site_locations(location_type)

    @app.post("/locations/search", response_model=list[LocationMatch])
    async def search_locations(
        request: LocationSearchRequest, handler: HandlerDep
    ) -> list[LocationMatch]:
        return await handler.search_locations(request)

    @app.get("/locations/{location_name}", response_model=Location)
    async def get_location(
        location_name: str,
        handler: HandlerDep,
        hierarchy: bool = False,
        history: bool = False,
        location_type: str | None = None,
    ) -> Location:
        return await handler.get_location(location_name, hierarchy, history, location_type)

    @app.get("/locations/{location_name}/hierarchy", response_model=LocationHierarchy)
    async def get_location_hierarchy(
        location_name: str,
        handler: HandlerDep,
        location_type: str | None = None,
        max_depth: int = Query(1, ge=1, le=5),
        max_children: int | None = Query(None, ge=1),
    ) -> LocationHierarchy:
        return await handler.get_location_hierarchy(
            location_name, location_type, max_depth, max_children
        )

    @app.post("/towers/search", response_model=list[Location])
    async def find_towers(request: TowerSearchRequest, handler: HandlerDep) -> list[Location]:
        return await handler.find_towers(request)

    # Taxonomy, samples, releases

    @app.post("/taxonomy/search", response_model=TaxonomyPage)
    async def search_taxonomy(request: TaxonomyQuery, handler: HandlerDep) -> TaxonomyPage:
        return await handler.search_taxonomy(request)

    @app.post("/samples/track", response_model=list[Sample])
    async def track_sample(request: SampleQuery, handler: HandlerDep) -> list[Sample]:
        return await handler.track_sample(request)

    @app.get("/releases", response_model=list[Release])
    async def list_releases(handler: HandlerDep) -> list[Release]:
        return await handler.list_releases()

    @app.get("/releases/{release_tag}", response_model=Release)
    async def get_release(release_tag: str, handler: HandlerDep) -> Release:
        return await handler.get_release(release_tag)

    # Cache administration

    @app.get("/cache/stats", response_model=CacheStatsResponse)
    async def get_stats(handler: HandlerDep) -> CacheStatsResponse:
        return await handler.get_stats()

    @app.delete("/cache", response_model=CacheClearResponse)
    async def clear_cache(handler: HandlerDep) -> CacheClearResponse:
        return await handler.clear_cache()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "neon_access.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
