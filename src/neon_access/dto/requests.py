"""Request parameter objects.

Collaborators (the HTTP surface, scripts, tool front ends) build these and
hand them to the query planner or location resolver. Field names are
snake_case; the camelCase aliases match the remote API's parameter names,
which is what ``to_params()`` emits.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PRODUCT_CODE_PATTERN = r"^DP\d\.\d{5}\.\d{3}$"
SITE_CODE_PATTERN = r"^[A-Z]{4}$"
YEAR_MONTH_PATTERN = r"^\d{4}-\d{2}$"


class NeonRequest(BaseModel):
    """Base for parameter objects sent to the remote API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_params(self) -> dict[str, Any]:
        """Remote parameter names and values, with unset values left out."""
        return self.model_dump(by_alias=True, exclude_none=True)


class DataQueryParams(NeonRequest):
    """Data availability query.

    Either ``site_code`` or ``site_codes`` should be given; a list with more
    than one site is sent as a POST body.
    """

    product_code: str = Field(..., description="NEON product code", pattern=PRODUCT_CODE_PATTERN)
    site_code: str | None = Field(None, description="Single site code")
    site_codes: list[str] | None = Field(None, description="Multiple site codes")
    start_date_month: str = Field(
        ..., description="Start month (YYYY-MM)", pattern=YEAR_MONTH_PATTERN
    )
    end_date_month: str = Field(..., description="End month (YYYY-MM)", pattern=YEAR_MONTH_PATTERN)
    package: Literal["basic", "expanded"] | None = None
    release: str | None = None
    include_provisional: bool | None = None

    @property
    def requested_sites(self) -> list[str]:
        if self.site_codes:
            return list(self.site_codes)
        return [self.site_code] if self.site_code else []


class TaxonomyQuery(NeonRequest):
    taxon_type_code: str | None = None
    scientific_name: str | None = None
    kingdom: str | None = None
    phylum: str | None = None
    class_: str | None = Field(None, alias="class")
    order: str | None = None
    family: str | None = None
    genus: str | None = None
    limit: int = Field(100, ge=1, le=1000)
    offset: int = Field(0, ge=0)
    verbose: bool | None = None


class SampleQuery(NeonRequest):
    """Sample lookup by (tag and class) or by one unique identifier."""

    sample_tag: str | None = None
    sample_class: str | None = None
    barcode: str | None = None
    sample_uuid: str | None = None
    archive_guid: str | None = None
    degree: int | None = Field(None, ge=0, le=5)


class DownloadRequest(NeonRequest):
    product_code: str = Field(..., pattern=PRODUCT_CODE_PATTERN)
    site_code: str = Field(..., pattern=SITE_CODE_PATTERN)
    year_month: str = Field(..., pattern=YEAR_MONTH_PATTERN)
    filename: str = Field(..., min_length=1)


class LocationSearchRequest(NeonRequest):
    """Filters applied to the site-level location catalog."""

    search_term: str | None = None
    location_type: str | None = None
    site_code: str | None = None
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    radius: float = Field(50.0, gt=0, description="Search radius in kilometres")


class TowerSearchRequest(NeonRequest):
    site_code: str | None = Field(None, pattern=SITE_CODE_PATTERN)
    tower_type: str | None = Field(None, description='e.g. "flux", "meteorological"')
