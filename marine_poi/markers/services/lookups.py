"""
Wire enumerations and their lookup tables.

Lookups report whether the text was recognized and leave the failure policy
to the caller: some fields reject an unrecognized value, others fall back.
"""

from enum import Enum, IntEnum
from typing import Any, Mapping, NamedTuple, Optional

from .fields import get_string


class MarkerType(IntEnum):
    """Marker types, stored as search-filter bits."""

    UNKNOWN = 1 << 0
    ANCHORAGE = 1 << 1
    HAZARD = 1 << 2
    MARINA = 1 << 3
    BOAT_RAMP = 1 << 6
    BUSINESS = 1 << 7
    INLET = 1 << 8
    BRIDGE = 1 << 9
    LOCK = 1 << 10
    DAM = 1 << 11
    FERRY = 1 << 12


class UnitType(IntEnum):
    UNKNOWN = 0
    FEET = 1
    METER = 2
    GALLON = 3
    LITER = 4


class TileUpdateType(IntEnum):
    NONE = 0
    DOWNLOAD = 1
    SYNC = 2
    DELETE = 3


MARKER_TYPES: Mapping[str, MarkerType] = {
    "Unknown": MarkerType.UNKNOWN,
    "Anchorage": MarkerType.ANCHORAGE,
    "Hazard": MarkerType.HAZARD,
    "Marina": MarkerType.MARINA,
    "BoatRamp": MarkerType.BOAT_RAMP,
    "Business": MarkerType.BUSINESS,
    "Inlet": MarkerType.INLET,
    "Bridge": MarkerType.BRIDGE,
    "Lock": MarkerType.LOCK,
    "Dam": MarkerType.DAM,
    "Ferry": MarkerType.FERRY,
    "Airport": MarkerType.UNKNOWN,  # deprecated
}

UNIT_TYPES: Mapping[str, UnitType] = {
    "Unknown": UnitType.UNKNOWN,
    "Feet": UnitType.FEET,
    "Meter": UnitType.METER,
    "Gallon": UnitType.GALLON,
    "Liter": UnitType.LITER,
}

TILE_UPDATE_TYPES: Mapping[str, TileUpdateType] = {
    "None": TileUpdateType.NONE,
    "Export": TileUpdateType.DOWNLOAD,
    "Sync": TileUpdateType.SYNC,
    "Delete": TileUpdateType.DELETE,
}


class LookupStatus(Enum):
    KNOWN = "known"
    UNKNOWN = "unknown"
    MALFORMED = "malformed"


class Lookup(NamedTuple):
    status: LookupStatus
    value: Optional[Any] = None
    text: Optional[str] = None

    @property
    def known(self) -> bool:
        return self.status is LookupStatus.KNOWN


def lookup_text(table: Mapping[str, Any], text: Optional[str]) -> Lookup:
    """
    Map wire text through ``table``.

    Returns:
        KNOWN with the mapped value, UNKNOWN with the unrecognized text, or
        MALFORMED when there was no text to look up
    """
    if text is None:
        return Lookup(LookupStatus.MALFORMED)

    if text in table:
        return Lookup(LookupStatus.KNOWN, table[text], text)

    return Lookup(LookupStatus.UNKNOWN, None, text)


def lookup_field(table: Mapping[str, Any], node: Any, name: str) -> Lookup:
    """
    Look up the string field ``name`` of ``node`` in ``table``.
    """
    return lookup_text(table, get_string(node, name))
