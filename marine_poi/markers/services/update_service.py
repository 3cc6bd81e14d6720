"""
Update orchestration.

Decodes service responses and forwards the resulting records to a
repository. Records applied from single-record responses get their
last-updated time reset to zero so the next full tile sync still
refreshes them.
"""

import logging
from typing import Optional, Protocol, Sequence, Tuple

from .marker_parser import (
    RawJson,
    parse_create_marker_response,
    parse_marker_sync_response,
    parse_move_marker_response,
)
from .repository import DatabaseRepository
from .review_parser import parse_review_sync_response, parse_vote_for_review_response
from .schemas import (
    MarkerRecordCollection,
    ReviewRecordCollection,
    TileCoordinate,
    WebViewResultType,
)
from .webview import parse_webview_response

logger = logging.getLogger(__name__)

RESET_LAST_UPDATED = 0


class Repository(Protocol):
    def apply_marker_updates(
        self,
        markers: Sequence[MarkerRecordCollection],
        tile: Optional[TileCoordinate] = None,
    ) -> bool: ...

    def apply_review_updates(
        self,
        reviews: Sequence[ReviewRecordCollection],
        tile: Optional[TileCoordinate] = None,
    ) -> bool: ...


class UpdateService:
    """
    Applies decoded marker and review responses to a repository.

    Args:
        repository: Persistence target, defaults to the database repository
    """

    def __init__(self, repository: Optional[Repository] = None):
        self.repository = repository if repository is not None else DatabaseRepository()

    def _apply_marker(self, marker: MarkerRecordCollection) -> bool:
        marker = marker.with_last_updated(RESET_LAST_UPDATED)
        return self.repository.apply_marker_updates([marker], tile=None)

    def _apply_review(self, review: ReviewRecordCollection) -> bool:
        review = review.with_last_updated(RESET_LAST_UPDATED)
        return self.repository.apply_review_updates([review], tile=None)

    def process_create_marker_response(self, raw: RawJson) -> Tuple[bool, Optional[int]]:
        """
        Apply a created marker.

        Returns:
            Tuple of (success, marker id or None)
        """
        result = parse_create_marker_response(raw)
        if result.failed:
            logger.warning(f"Create marker response rejected: {result.reason}")
            return False, None

        marker_id = result.value.marker.id
        if not self._apply_marker(result.value):
            return False, None

        logger.info(f"Created marker {marker_id}")
        return True, marker_id

    def process_move_marker_response(self, raw: RawJson) -> bool:
        """
        Apply a moved marker.
        """
        result = parse_move_marker_response(raw)
        if result.failed:
            logger.warning(f"Move marker response rejected: {result.reason}")
            return False
        return self._apply_marker(result.value)

    def process_sync_markers_response(
        self, raw: RawJson, tile: TileCoordinate
    ) -> Tuple[bool, int]:
        """
        Apply a marker sync batch for ``tile``.

        Returns:
            Tuple of (success, number of markers decoded)
        """
        result = parse_marker_sync_response(raw)
        if result.failed:
            logger.warning(f"Marker sync for tile {tile} rejected: {result.reason}")
            return False, 0

        markers = result.value
        if not markers:
            logger.info(f"Marker sync for tile {tile} is empty")
            return True, 0

        success = self.repository.apply_marker_updates(list(markers), tile=tile)
        return success, len(markers) if success else 0

    def process_sync_reviews_response(
        self, raw: RawJson, tile: TileCoordinate
    ) -> Tuple[bool, int]:
        """
        Apply a review sync batch for ``tile``.

        Returns:
            Tuple of (success, number of reviews decoded)
        """
        result = parse_review_sync_response(raw)
        if result.failed:
            logger.warning(f"Review sync for tile {tile} rejected: {result.reason}")
            return False, 0

        reviews = result.value
        if not reviews:
            logger.info(f"Review sync for tile {tile} is empty")
            return True, 0

        success = self.repository.apply_review_updates(list(reviews), tile=tile)
        return success, len(reviews) if success else 0

    def process_vote_for_review_response(self, raw: RawJson) -> bool:
        """
        Apply the review returned after voting for it.
        """
        result = parse_vote_for_review_response(raw)
        if result.failed:
            logger.warning(f"Vote response rejected: {result.reason}")
            return False
        return self._apply_review(result.value)

    def process_webview_response(self, raw: RawJson) -> bool:
        """
        Apply the marker or review carried by a webview response.
        """
        result = parse_webview_response(raw)

        if result.result_type is WebViewResultType.MARKER_UPDATE:
            return self._apply_marker(result.marker)

        if result.result_type is WebViewResultType.REVIEW_UPDATE:
            return self._apply_review(result.review)

        logger.warning(f"Webview response not applied: {result.result_type.value}")
        return False
