"""
Services package for marine marker data.

This package contains the decoders that turn marker, review and tile
responses into validated records. Persistence lives in ``repository`` and
the update orchestration in ``update_service``.
"""

from .fields import ListPolicy, decode_array, load_document
from .lookups import Lookup, LookupStatus, MarkerType, TileUpdateType, UnitType
from .marker_parser import (
    StatusReadPolicy,
    parse_create_marker_response,
    parse_marker,
    parse_marker_sync_response,
    parse_move_marker_response,
)
from .response_parser import (
    parse_export_response,
    parse_sync_status_response,
    parse_tiles_by_bounding_boxes_response,
)
from .review_parser import (
    parse_review,
    parse_review_sync_response,
    parse_vote_for_review_response,
)
from .schemas import (
    DecodeResult,
    MarkerRecordCollection,
    ReviewRecordCollection,
    TileCoordinate,
    WebViewResult,
    WebViewResultType,
)
from .webview import parse_webview_response

__all__ = [
    "ListPolicy",
    "decode_array",
    "load_document",
    "Lookup",
    "LookupStatus",
    "MarkerType",
    "TileUpdateType",
    "UnitType",
    "StatusReadPolicy",
    "parse_create_marker_response",
    "parse_marker",
    "parse_marker_sync_response",
    "parse_move_marker_response",
    "parse_export_response",
    "parse_sync_status_response",
    "parse_tiles_by_bounding_boxes_response",
    "parse_review",
    "parse_review_sync_response",
    "parse_vote_for_review_response",
    "DecodeResult",
    "MarkerRecordCollection",
    "ReviewRecordCollection",
    "TileCoordinate",
    "WebViewResult",
    "WebViewResultType",
    "parse_webview_response",
]
