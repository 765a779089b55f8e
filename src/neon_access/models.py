"""Domain resources decoded from NEON API responses.

The upstream API speaks camelCase; fields here are snake_case with
camelCase aliases. Models are immutable and keep unknown fields, since the
core only interprets the handful of fields that filtering and resolution
need (site membership, type tag, names, coordinates).
"""

from typing import Any, get_origin

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class NeonModel(BaseModel):
    """Base for all decoded resources."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )

    @field_validator("*", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        # Upstream sends null for unpopulated text and list fields
        if value is not None:
            return value
        field = cls.model_fields[info.field_name]
        if field.is_required():
            return value
        if field.annotation is str:
            return ""
        if get_origin(field.annotation) is list:
            return []
        return value


class ProductSiteAvailability(NeonModel):
    site_code: str
    available_months: list[str] = Field(default_factory=list)


class Product(NeonModel):
    product_code: str
    product_name: str = ""
    product_description: str = ""
    product_science_team: str = ""
    product_has_expanded: bool = False
    keywords: list[str] = Field(default_factory=list)
    themes: list[str] = Field(default_factory=list)
    site_codes: list[ProductSiteAvailability] = Field(default_factory=list)


class SiteProductAvailability(NeonModel):
    data_product_code: str
    data_product_title: str = ""
    available_months: list[str] = Field(default_factory=list)


class Site(NeonModel):
    site_code: str
    site_name: str = ""
    site_description: str = ""
    site_type: str = ""
    site_latitude: float | None = None
    site_longitude: float | None = None
    domain_code: str = ""
    domain_name: str = ""
    state_code: str = ""
    state_name: str = ""
    data_products: list[SiteProductAvailability] = Field(default_factory=list)


class DataFile(NeonModel):
    name: str
    size: int = 0
    md5: str | None = None
    crc32c: str | None = None
    url: str = ""


class DataPackage(NeonModel):
    package: str
    files: list[DataFile] = Field(default_factory=list)


class DataReleaseFiles(NeonModel):
    release: str
    packages: list[DataPackage] = Field(default_factory=list)


class MonthAvailability(NeonModel):
    month: str
    available_data_urls: list[DataReleaseFiles] = Field(default_factory=list)


class SiteDataAvailability(NeonModel):
    site_code: str
    available_months: list[MonthAvailability] = Field(default_factory=list)


class DataQueryResult(NeonModel):
    site_codes: list[SiteDataAvailability] = Field(default_factory=list)


class LocationHistory(NeonModel):
    current: bool = False
    location_start_date: str | None = None
    location_end_date: str | None = None
    location_decimal_latitude: float | None = None
    location_decimal_longitude: float | None = None
    location_elevation: float | None = None


class Location(NeonModel):
    location_name: str
    location_type: str = ""
    location_description: str = ""
    site_code: str = ""
    location_decimal_latitude: float | None = None
    location_decimal_longitude: float | None = None
    location_elevation: float | None = None
    location_utm_easting: float | None = None
    location_utm_northing: float | None = None
    location_utm_zone: str | int | None = None
    location_properties: Any = None
    location_parent: str | None = None
    location_parent_url: str | None = None
    location_children: list[str] = Field(default_factory=list)
    location_children_urls: list[str] = Field(default_factory=list)
    location_history: list[LocationHistory] = Field(default_factory=list)

    @property
    def has_coordinates(self) -> bool:
        return (
            self.location_decimal_latitude is not None
            and self.location_decimal_longitude is not None
        )


class TaxonomyEntry(NeonModel):
    taxon_id: str = Field("", alias="taxonID")
    scientific_name: str = ""
    taxon_rank: str = ""
    taxon_type_code: str = ""
    kingdom: str | None = None
    phylum: str | None = None
    class_: str | None = Field(None, alias="class")
    order: str | None = None
    family: str | None = None
    genus: str | None = None
    vernacular_name: str | None = None


class TaxonomyPage(NeonModel):
    count: int = 0
    total: int = 0
    data: list[TaxonomyEntry] = Field(default_factory=list)


class SampleEvent(NeonModel):
    event_date: str | None = None
    event_type: str | None = None
    event_location: str | None = None
    event_description: str | None = None


class Sample(NeonModel):
    sample_uuid: str = ""
    sample_tag: str = ""
    sample_class: str = ""
    barcode: str | None = None
    archive_guid: str | None = None
    parent_sample_uuid: str | None = None
    child_sample_uuids: list[str] = Field(default_factory=list)
    events: list[SampleEvent] = Field(default_factory=list)


class Release(NeonModel):
    release_tag: str
    release_uuid: str = ""
    release_generation_date: str | None = None
    release_description: str = ""
    release_doi: str = Field("", alias="releaseDOI")
    associated_products: list[Any] = Field(default_factory=list)
    associated_sites: list[Any] = Field(default_factory=list)


class DownloadInfo(NeonModel):
    url: str
    size: int = 0
    checksum: str = ""


# Results assembled by the core rather than decoded from one response


class ChildLocation(NeonModel):
    location_name: str
    parent: str
    depth: int = 1
    location: Location | None = None
    error: str | None = None


class LocationHierarchy(NeonModel):
    location: Location
    children: list[ChildLocation] = Field(default_factory=list)
    total_children: int = 0
    omitted_children: int = 0


class LocationMatch(NeonModel):
    location: Location
    distance_km: float | None = None


class SiteAvailabilitySummary(NeonModel):
    site_code: str
    month_count: int
    first_month: str | None = None
    last_month: str | None = None


class DataAvailabilitySummary(NeonModel):
    product_code: str
    product_name: str = ""
    science_team: str = ""
    total_sites: int = 0
    total_months: int = 0
    earliest_month: str | None = None
    latest_month: str | None = None
    average_months_per_site: float = 0.0
    sites: list[SiteAvailabilitySummary] = Field(default_factory=list)
    months_by_year: dict[str, int] = Field(default_factory=dict)
