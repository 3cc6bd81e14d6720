"""
Pydantic record schemas for decoded marker and review data.

Every record is frozen: decoders build a fresh instance per call and
consumers derive modified copies with ``model_copy``.
"""

import logging
from enum import Enum
from functools import total_ordering
from typing import Generic, Optional, Tuple, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .lookups import MarkerType, TileUpdateType, UnitType

logger = logging.getLogger(__name__)

T = TypeVar("T")

NO_PROGRAM_TIER = -1


class Record(BaseModel):
    """
    Base class for immutable decoded records.
    """

    model_config = ConfigDict(frozen=True)


class MarkerRecord(Record):
    id: int = Field(default=0, ge=0, description="Marker identifier (uint64)")
    last_updated: int = Field(default=0, description="Last modified, epoch seconds")
    marker_type: MarkerType = MarkerType.UNKNOWN
    latitude: int = Field(default=0, description="Latitude in semicircles")
    longitude: int = Field(default=0, description="Longitude in semicircles")
    geohash: int = 0
    search_filter: int = 0
    name: str = ""
    is_deleted: bool = False


class MarkerMeta(Record):
    section_title: int = 0
    section_note_json: str = ""


class AddressSection(Record):
    section_title: int = 0
    string_fields_json: str = ""
    attribute_fields_json: str = ""


class AmenitiesSection(Record):
    section_title: int = 0
    yes_no_json: str = ""
    section_note_json: str = ""


class BusinessSection(Record):
    section_title: int = 0
    attribute_fields_json: str = ""
    attribute_multi_value_fields_json: str = ""
    business_promotions_json: str = ""
    call_to_action_json: str = ""


class BusinessProgramSection(Record):
    program_tier: int = NO_PROGRAM_TIER
    competitor_ad_json: str = ""


class ContactSection(Record):
    section_title: int = 0
    attribute_fields_json: str = ""
    phone: str = ""
    vhf_channel: str = ""


class DockageSection(Record):
    section_title: int = 0
    yes_no_multi_value_json: str = ""
    attribute_price_json: str = ""
    attribute_fields_json: str = ""
    section_note_json: str = ""
    yes_no_json: str = ""
    distance_unit: UnitType = UnitType.UNKNOWN


class FuelSection(Record):
    section_title: int = 0
    yes_no_price_json: str = ""
    yes_no_json: str = ""
    attribute_fields_json: str = ""
    section_note_json: str = ""
    distance_unit: UnitType = UnitType.UNKNOWN
    currency: str = ""
    diesel_price: float = 0.0
    gas_price: float = 0.0
    volume_unit: UnitType = UnitType.UNKNOWN


class MooringsSection(Record):
    section_title: int = 0
    yes_no_price_json: str = ""
    attribute_fields_json: str = ""
    section_note_json: str = ""
    yes_no_json: str = ""


class NavigationSection(Record):
    section_title: int = 0
    attribute_fields_json: str = ""
    section_note_json: str = ""
    distance_unit: UnitType = UnitType.UNKNOWN


class RetailSection(Record):
    section_title: int = 0
    yes_no_json: str = ""
    section_note_json: str = ""


class ServicesSection(Record):
    section_title: int = 0
    yes_no_json: str = ""
    section_note_json: str = ""


class BusinessPhoto(Record):
    ordinal: int
    download_url: str


class Competitor(Record):
    ordinal: int
    competitor_id: int = Field(ge=0)


class MarkerRecordCollection(Record):
    """
    A marker with its metadata and every section the service sent.

    Optional sections are None when their key was absent from the source.
    """

    marker: MarkerRecord = Field(default_factory=MarkerRecord)
    meta: MarkerMeta = Field(default_factory=MarkerMeta)
    address: Optional[AddressSection] = None
    amenities: Optional[AmenitiesSection] = None
    business: Optional[BusinessSection] = None
    business_program: Optional[BusinessProgramSection] = None
    contact: Optional[ContactSection] = None
    dockage: Optional[DockageSection] = None
    fuel: Optional[FuelSection] = None
    moorings: Optional[MooringsSection] = None
    navigation: Optional[NavigationSection] = None
    retail: Optional[RetailSection] = None
    services: Optional[ServicesSection] = None
    business_photos: Tuple[BusinessPhoto, ...] = ()
    competitors: Tuple[Competitor, ...] = ()

    def with_last_updated(self, last_updated: int) -> "MarkerRecordCollection":
        marker = self.marker.model_copy(update={"last_updated": last_updated})
        return self.model_copy(update={"marker": marker})


class ReviewRecord(Record):
    id: int = Field(default=0, ge=0)
    marker_id: int = Field(default=0, ge=0)
    rating: int = 0
    title: str = ""
    text: str = ""
    response: str = ""
    visit_date: str = ""
    captain: str = ""
    votes: int = 0
    last_updated: int = 0
    is_deleted: bool = False


class ReviewPhoto(Record):
    ordinal: int
    download_url: str


class ReviewRecordCollection(Record):
    review: ReviewRecord = Field(default_factory=ReviewRecord)
    photos: Tuple[ReviewPhoto, ...] = ()

    def with_last_updated(self, last_updated: int) -> "ReviewRecordCollection":
        review = self.review.model_copy(update={"last_updated": last_updated})
        return self.model_copy(update={"review": review})


@total_ordering
class TileCoordinate(Record):
    """
    Grid cell address, ordered by (x, y).
    """

    x: int
    y: int

    def __lt__(self, other: "TileCoordinate") -> bool:
        if not isinstance(other, TileCoordinate):
            return NotImplemented
        return (self.x, self.y) < (other.x, other.y)

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"


class TileUpdateOperation(Record):
    marker_update_type: TileUpdateType = TileUpdateType.NONE
    review_update_type: TileUpdateType = TileUpdateType.NONE


class ExportFileDescriptor(Record):
    tile: TileCoordinate
    md5: str
    size: int = Field(ge=0)
    url: str


class DecodeResult(BaseModel, Generic[T]):
    """
    Outcome of a decode call.

    A failed result may still carry the partially decoded value so callers
    can inspect what was read before the failure.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    ok: bool
    value: Optional[T] = None
    reason: str = ""

    @property
    def failed(self) -> bool:
        return not self.ok

    @classmethod
    def success(cls, value: T) -> "DecodeResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: str, value: Optional[T] = None) -> "DecodeResult[T]":
        logger.debug(f"Decode failed: {reason}")
        return cls(ok=False, value=value, reason=reason)


class WebViewResultType(str, Enum):
    MARKER_UPDATE = "marker_update"
    REVIEW_UPDATE = "review_update"
    ERROR = "error"
    UNKNOWN = "unknown"


class WebViewResult(Record):
    result_type: WebViewResultType
    marker: Optional[MarkerRecordCollection] = None
    review: Optional[ReviewRecordCollection] = None
