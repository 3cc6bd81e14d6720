"""
Marker response parser.

Decodes marker (point of interest) objects returned by the create, move,
sync and webview endpoints into MarkerRecordCollection instances.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type, Union

from .fields import (
    ListPolicy,
    as_flexible_uint64,
    decode_array,
    degrees_to_semicircles,
    get_datetime_epoch,
    get_double,
    get_flexible_uint64,
    get_json_string,
    get_sint32,
    get_string,
    load_document,
)
from .lookups import (
    MARKER_TYPES,
    UNIT_TYPES,
    LookupStatus,
    MarkerType,
    UnitType,
    lookup_field,
)
from .schemas import (
    AddressSection,
    AmenitiesSection,
    BusinessPhoto,
    BusinessProgramSection,
    BusinessSection,
    Competitor,
    ContactSection,
    DecodeResult,
    DockageSection,
    FuelSection,
    MarkerMeta,
    MarkerRecord,
    MarkerRecordCollection,
    MooringsSection,
    NavigationSection,
    Record,
    RetailSection,
    ServicesSection,
)

logger = logging.getLogger(__name__)

DELETED_STATUS = "Deleted"

# Field handles of the contact attribute fields carrying phone and VHF values
PHONE_NUMBER_LABEL = 24
VHF_CHANNEL_LABEL = 25

RawJson = Union[bytes, bytearray, str]


class StatusReadPolicy(Enum):
    """
    How a failure to read the status field affects decoding.

    BLOCKING stops decoding immediately. NON_ABORTING keeps reading the
    remaining header fields but the decode still fails.
    """

    BLOCKING = "blocking"
    NON_ABORTING = "non_aborting"


def read_deleted_status(node: Any, name: str = "status") -> Optional[bool]:
    """
    Read a status field and compare it to the deleted marker, case-sensitively.

    Returns:
        True if deleted, False if not, None if the status could not be read
    """
    status = get_string(node, name)
    if status is None:
        return None
    return status == DELETED_STATUS


def get_unit_type(node: Any, name: str) -> Optional[UnitType]:
    """
    Get a unit field; unrecognized units fall back to UnitType.UNKNOWN.
    """
    lookup = lookup_field(UNIT_TYPES, node, name)
    if lookup.status is LookupStatus.UNKNOWN:
        logger.warning(f"Unrecognized unit '{lookup.text}' in field '{name}'")
        return UnitType.UNKNOWN
    return lookup.value


def extract_contact_channels(attribute_fields_json: str) -> Tuple[str, str]:
    """
    Pull the phone number and VHF channel out of contact attribute fields.

    Args:
        attribute_fields_json: Serialized attribute field array

    Returns:
        Tuple of (phone, vhf_channel); empty strings when not found
    """
    phone = ""
    vhf_channel = ""

    if not attribute_fields_json:
        return phone, vhf_channel

    fields = load_document(attribute_fields_json)
    if not isinstance(fields, list):
        return phone, vhf_channel

    for field in fields:
        handle = get_sint32(field, "fieldTextHandle")
        if handle is None:
            continue

        value = get_string(field, "value")
        if value is None:
            continue

        if handle == PHONE_NUMBER_LABEL:
            phone = value
        elif handle == VHF_CHANNEL_LABEL:
            vhf_channel = value

    return phone, vhf_channel


# Section attribute -> (JSON key, accessor)
FieldSpec = Mapping[str, Tuple[str, Callable[[Any, str], Any]]]

_TITLE = ("titleTextHandle", get_sint32)
_SECTION_NOTE = ("sectionNote", get_json_string)
_ATTRIBUTE_FIELDS = ("attributeFields", get_json_string)
_YES_NO = ("yesNoUnknownNearbyFields", get_json_string)
_DISTANCE_UNIT = ("distanceUnit", get_unit_type)

SECTION_FIELDS: Dict[str, FieldSpec] = {
    "address": {
        "section_title": _TITLE,
        "string_fields_json": ("stringFields", get_json_string),
        "attribute_fields_json": _ATTRIBUTE_FIELDS,
    },
    "amenities": {
        "section_title": _TITLE,
        "yes_no_json": _YES_NO,
        "section_note_json": _SECTION_NOTE,
    },
    "business": {
        "section_title": _TITLE,
        "attribute_fields_json": _ATTRIBUTE_FIELDS,
        "attribute_multi_value_fields_json": (
            "attributeMultiValueFields",
            get_json_string,
        ),
        "business_promotions_json": ("businessPromotionListField", get_json_string),
        "call_to_action_json": ("callToActionField", get_json_string),
    },
    "business_program": {
        "program_tier": ("programTier", get_sint32),
        "competitor_ad_json": ("competitorAd", get_json_string),
    },
    "contact": {
        "section_title": _TITLE,
        "attribute_fields_json": _ATTRIBUTE_FIELDS,
    },
    "dockage": {
        "section_title": _TITLE,
        "yes_no_multi_value_json": ("yesNoMultiValueFields", get_json_string),
        "attribute_price_json": ("attributePriceFields", get_json_string),
        "attribute_fields_json": _ATTRIBUTE_FIELDS,
        "section_note_json": _SECTION_NOTE,
        "yes_no_json": _YES_NO,
        "distance_unit": _DISTANCE_UNIT,
    },
    "fuel": {
        "section_title": _TITLE,
        "yes_no_price_json": ("yesNoPriceFields", get_json_string),
        "yes_no_json": _YES_NO,
        "attribute_fields_json": _ATTRIBUTE_FIELDS,
        "section_note_json": _SECTION_NOTE,
        "distance_unit": _DISTANCE_UNIT,
        "currency": ("currency", get_string),
        "diesel_price": ("dieselPrice", get_double),
        "gas_price": ("gasPrice", get_double),
        "volume_unit": ("volumeUnits", get_unit_type),
    },
    "moorings": {
        "section_title": _TITLE,
        "yes_no_price_json": ("yesNoPriceFields", get_json_string),
        "attribute_fields_json": _ATTRIBUTE_FIELDS,
        "section_note_json": _SECTION_NOTE,
        "yes_no_json": _YES_NO,
    },
    "navigation": {
        "section_title": _TITLE,
        "attribute_fields_json": _ATTRIBUTE_FIELDS,
        "section_note_json": _SECTION_NOTE,
        "distance_unit": _DISTANCE_UNIT,
    },
    "retail": {
        "section_title": _TITLE,
        "yes_no_json": _YES_NO,
        "section_note_json": _SECTION_NOTE,
    },
    "services": {
        "section_title": _TITLE,
        "yes_no_json": _YES_NO,
        "section_note_json": _SECTION_NOTE,
    },
}

# Collection attribute -> (JSON key, section model)
SECTION_NODES: Dict[str, Tuple[str, Type[Record]]] = {
    "address": ("address", AddressSection),
    "amenities": ("amenity", AmenitiesSection),
    "business": ("business", BusinessSection),
    "business_program": ("businessProgram", BusinessProgramSection),
    "contact": ("contact", ContactSection),
    "dockage": ("dockage", DockageSection),
    "fuel": ("fuel", FuelSection),
    "moorings": ("mooring", MooringsSection),
    "navigation": ("navigation", NavigationSection),
    "retail": ("retail", RetailSection),
    "services": ("services", ServicesSection),
}


def parse_section(node: Any, section: str) -> Record:
    """
    Decode one optional marker section.

    Section fields are individually optional: a field that is missing or
    malformed keeps its default and the section is still returned.
    """
    _, model = SECTION_NODES[section]
    values = {}

    for attribute, (key, accessor) in SECTION_FIELDS[section].items():
        value = accessor(node, key)
        if value is not None:
            values[attribute] = value

    if section == "contact":
        phone, vhf_channel = extract_contact_channels(
            values.get("attribute_fields_json", "")
        )
        values["phone"] = phone
        values["vhf_channel"] = vhf_channel

    return model(**values)


def _parse_business_photo(node: Any) -> Optional[BusinessPhoto]:
    ordinal = get_sint32(node, "ordinal")
    download_url = get_string(node, "downloadUrl")
    if ordinal is None or download_url is None:
        return None
    return BusinessPhoto(ordinal=ordinal, download_url=download_url)


def _parse_competitor(node: Any) -> Optional[Competitor]:
    ordinal = get_sint32(node, "ordinal")
    competitor_id = get_flexible_uint64(node, "competitorPoiIdStr")
    if ordinal is None or competitor_id is None:
        return None
    return Competitor(ordinal=ordinal, competitor_id=competitor_id)


def get_map_location(node: Any, name: str = "mapLocation") -> Optional[Tuple[int, int]]:
    """
    Get a latitude/longitude object as a semicircle (lat, lon) pair.
    """
    location = node.get(name) if isinstance(node, dict) else None
    if not isinstance(location, dict):
        return None

    latitude = get_double(location, "latitude")
    longitude = get_double(location, "longitude")
    if latitude is None or longitude is None:
        return None

    return degrees_to_semicircles(latitude), degrees_to_semicircles(longitude)


def _collection(
    marker: Dict[str, Any], meta: Optional[Dict[str, Any]] = None, **sections: Any
) -> MarkerRecordCollection:
    return MarkerRecordCollection(
        marker=MarkerRecord(**marker), meta=MarkerMeta(**(meta or {})), **sections
    )


def _failure(
    reason: str, marker: Dict[str, Any], meta: Optional[Dict[str, Any]] = None
) -> DecodeResult[MarkerRecordCollection]:
    return DecodeResult.failure(reason, _collection(marker, meta))


def parse_marker(node: Any) -> DecodeResult[MarkerRecordCollection]:
    """
    Decode a single marker object.

    Header fields are read in order and decoding stops at the first failure.
    A deleted marker stops after the header and carries no sections.
    """
    marker: Dict[str, Any] = {}

    if not isinstance(node, dict):
        return _failure("marker is not a JSON object", marker)

    marker_id = get_flexible_uint64(node, "idStr")
    if marker_id is None:
        return _failure("missing or invalid idStr", marker)
    marker["id"] = marker_id

    last_updated = get_datetime_epoch(node, "dateLastModified")
    if last_updated is None:
        return _failure(f"marker {marker_id}: invalid dateLastModified", marker)
    marker["last_updated"] = last_updated

    marker_type = lookup_field(MARKER_TYPES, node, "poiType")
    if marker_type.status is LookupStatus.UNKNOWN:
        logger.warning(f"Marker {marker_id}: unrecognized poiType '{marker_type.text}'")
        marker["marker_type"] = MarkerType.UNKNOWN
        return _failure(f"marker {marker_id}: unrecognized poiType", marker)
    if not marker_type.known:
        return _failure(f"marker {marker_id}: missing poiType", marker)
    marker["marker_type"] = marker_type.value

    # Markers read status under StatusReadPolicy.BLOCKING
    is_deleted = read_deleted_status(node)
    if is_deleted is None:
        return _failure(f"marker {marker_id}: missing status", marker)
    marker["is_deleted"] = is_deleted

    if is_deleted:
        logger.debug(f"Marker {marker_id} is deleted")
        return DecodeResult.success(_collection(marker))

    position = get_map_location(node)
    if position is None:
        return _failure(f"marker {marker_id}: invalid mapLocation", marker)
    marker["latitude"], marker["longitude"] = position

    geohash = get_flexible_uint64(node, "geohashStr")
    if geohash is None:
        return _failure(f"marker {marker_id}: invalid geohashStr", marker)
    marker["geohash"] = geohash

    point_of_interest = node.get("pointOfInterest")
    if not isinstance(point_of_interest, dict):
        return _failure(f"marker {marker_id}: missing pointOfInterest", marker)

    meta: Dict[str, Any] = {}
    section_title = get_sint32(point_of_interest, "titleTextHandle")
    if section_title is None:
        return _failure(f"marker {marker_id}: invalid titleTextHandle", marker)
    meta["section_title"] = section_title

    name = get_string(point_of_interest, "name")
    if name is None:
        return _failure(f"marker {marker_id}: missing name", marker, meta)
    marker["name"] = name

    section_note = get_json_string(point_of_interest, "sectionNote")
    if section_note is not None:
        meta["section_note_json"] = section_note

    marker["search_filter"] = get_flexible_uint64(node, "searchFilterStr") or 0

    sections = {
        attribute: parse_section(node[key], attribute)
        for attribute, (key, _) in SECTION_NODES.items()
        if key in node
    }

    if "businessPhotos" in node:
        sections["business_photos"] = tuple(
            decode_array(
                node["businessPhotos"],
                _parse_business_photo,
                ListPolicy.SKIP_INVALID,
                "business photo",
            )
        )

    if "competitors" in node:
        sections["competitors"] = tuple(
            decode_array(
                node["competitors"],
                _parse_competitor,
                ListPolicy.SKIP_INVALID,
                "competitor",
            )
        )

    return DecodeResult.success(_collection(marker, meta, **sections))


def _parse_single_marker(raw: RawJson) -> DecodeResult[MarkerRecordCollection]:
    document = load_document(raw)
    if not isinstance(document, dict):
        return DecodeResult.failure("response is not a JSON object")
    return parse_marker(document)


def parse_create_marker_response(raw: RawJson) -> DecodeResult[MarkerRecordCollection]:
    """
    Parse the response to a create-marker request.
    """
    return _parse_single_marker(raw)


def parse_move_marker_response(raw: RawJson) -> DecodeResult[MarkerRecordCollection]:
    """
    Parse the response to a move-marker request.
    """
    return _parse_single_marker(raw)


def parse_marker_sync_response(
    raw: RawJson,
) -> DecodeResult[Tuple[MarkerRecordCollection, ...]]:
    """
    Parse a marker sync response.

    The response is a JSON array of marker objects. One undecodable element
    fails the whole batch and no markers are returned.
    """
    document = load_document(raw)
    if not isinstance(document, list):
        return DecodeResult.failure("marker sync response is not a JSON array", ())

    markers = []
    for index, item in enumerate(document):
        result = parse_marker(item)
        if result.failed:
            logger.warning(
                f"Rejecting marker sync batch, element {index} failed: {result.reason}"
            )
            return DecodeResult.failure(f"element {index}: {result.reason}", ())
        markers.append(result.value)

    logger.info(f"Parsed {len(markers)} markers from sync response")
    return DecodeResult.success(tuple(markers))


def parse_marker_webview_response(
    document: Any,
) -> DecodeResult[MarkerRecordCollection]:
    """
    Parse a marker webview envelope.

    ``SUCCESS`` carries a full marker in ``data``; ``DELETE`` carries only
    the marker identifier as ``data`` itself.
    """
    result_type = get_string(document, "resultType")
    if result_type is None:
        return DecodeResult.failure("missing resultType")
    result_type = result_type.upper()

    has_data = isinstance(document, dict) and "data" in document

    if result_type == "SUCCESS":
        if not has_data:
            return DecodeResult.failure("webview SUCCESS without data")
        return parse_marker(document["data"])

    if result_type == "DELETE":
        marker_id = as_flexible_uint64(document["data"]) if has_data else None
        if marker_id is None:
            return DecodeResult.failure("webview DELETE without a marker id")
        return DecodeResult.success(_collection({"id": marker_id, "is_deleted": True}))

    if result_type == "ERROR":
        return DecodeResult.failure("webview reported an error")

    logger.warning(f"Unknown marker webview resultType '{result_type}'")
    return DecodeResult.failure(f"unknown resultType '{result_type}'")
