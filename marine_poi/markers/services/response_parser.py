"""
Parsers for list-shaped tile responses.

Covers the bulk export manifest, per-tile sync status and the tile list
returned for bounding-box queries. Every parser is all-or-nothing: one bad
element fails the whole response.
"""

import logging
from typing import Any, Dict, FrozenSet, Optional, Tuple

from ..conf import get_export_compression
from .fields import (
    get_flexible_uint64,
    get_sint32,
    get_string,
    load_document,
)
from .lookups import TILE_UPDATE_TYPES, lookup_field
from .marker_parser import RawJson
from .schemas import (
    DecodeResult,
    ExportFileDescriptor,
    TileCoordinate,
    TileUpdateOperation,
)

logger = logging.getLogger(__name__)


def get_tile(node: Any) -> Optional[TileCoordinate]:
    """
    Get the ``tileX``/``tileY`` pair of a response element.
    """
    tile_x = get_sint32(node, "tileX")
    tile_y = get_sint32(node, "tileY")
    if tile_x is None or tile_y is None:
        return None
    return TileCoordinate(x=tile_x, y=tile_y)


def _load_array(raw: RawJson, label: str) -> Optional[list]:
    document = load_document(raw)
    if not isinstance(document, list):
        logger.warning(f"{label} response is not a JSON array")
        return None
    return document


def parse_export_response(
    raw: RawJson, compression: Optional[str] = None
) -> DecodeResult[Tuple[ExportFileDescriptor, ...]]:
    """
    Parse the export manifest listing one compressed file per tile.

    Args:
        raw: Response body
        compression: Key of the compressed file object, defaults to the
            MARKERS_EXPORT_COMPRESSION setting

    Returns:
        DecodeResult with the export file descriptors
    """
    compression = compression or get_export_compression()

    document = _load_array(raw, "Export")
    if document is None:
        return DecodeResult.failure("export response is not a JSON array", ())

    export_files = []
    for index, item in enumerate(document):
        tile = get_tile(item)
        compressed = item.get(compression) if isinstance(item, dict) else None

        md5 = get_string(compressed, "md5Hash")
        size = get_flexible_uint64(compressed, "fileSize")
        url = get_string(compressed, "url")

        if tile is None or md5 is None or size is None or url is None:
            logger.warning(f"Invalid export file at index {index}, rejecting manifest")
            return DecodeResult.failure(f"invalid export file at index {index}", ())

        export_files.append(ExportFileDescriptor(tile=tile, md5=md5, size=size, url=url))

    logger.info(f"Parsed {len(export_files)} export files")
    return DecodeResult.success(tuple(export_files))


def parse_sync_status_response(
    raw: RawJson,
) -> DecodeResult[Dict[TileCoordinate, TileUpdateOperation]]:
    """
    Parse per-tile sync status into marker and review update operations.

    Both update types of an element are mapped, and each unrecognized value
    is reported, before the element is judged. A later entry for the same
    tile replaces an earlier one.
    """
    document = _load_array(raw, "Sync status")
    if document is None:
        return DecodeResult.failure("sync status response is not a JSON array", {})

    operations: Dict[TileCoordinate, TileUpdateOperation] = {}
    for index, item in enumerate(document):
        tile = get_tile(item)
        marker_update = lookup_field(TILE_UPDATE_TYPES, item, "poiUpdateType")
        review_update = lookup_field(TILE_UPDATE_TYPES, item, "reviewUpdateType")

        if tile is None or marker_update.text is None or review_update.text is None:
            logger.warning(f"Invalid sync status element at index {index}")
            return DecodeResult.failure(f"invalid sync status at index {index}", {})

        problems = []
        if not marker_update.known:
            logger.warning(
                f"Tile {tile}: unknown marker updateType '{marker_update.text}'"
            )
            problems.append(f"marker updateType '{marker_update.text}'")
        if not review_update.known:
            logger.warning(
                f"Tile {tile}: unknown review updateType '{review_update.text}'"
            )
            problems.append(f"review updateType '{review_update.text}'")

        if problems:
            return DecodeResult.failure(
                f"tile {tile}: unknown {' and '.join(problems)}", {}
            )

        operations[tile] = TileUpdateOperation(
            marker_update_type=marker_update.value,
            review_update_type=review_update.value,
        )

    return DecodeResult.success(operations)


def parse_tiles_by_bounding_boxes_response(
    raw: RawJson,
) -> DecodeResult[FrozenSet[TileCoordinate]]:
    """
    Parse the set of tiles covering the requested bounding boxes.
    """
    document = _load_array(raw, "Tile list")
    if document is None:
        return DecodeResult.failure("tile list response is not a JSON array", frozenset())

    tiles = set()
    for index, item in enumerate(document):
        tile = get_tile(item)
        if tile is None:
            logger.warning(f"Invalid tile at index {index}, rejecting tile list")
            return DecodeResult.failure(f"invalid tile at index {index}", frozenset())
        tiles.add(tile)

    return DecodeResult.success(frozenset(tiles))
