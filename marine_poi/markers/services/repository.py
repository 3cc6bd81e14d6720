"""
Persistence of decoded marker and review records.

The repository writes record collections through the Django ORM. Each call
applies its whole batch in one transaction; a database error rolls the
batch back and is reported as a False return value.
"""

import logging
from typing import Iterable, Optional, Sequence

from django.db import DatabaseError, transaction

from .. import models
from ..models import to_db_id
from .schemas import (
    MarkerRecordCollection,
    ReviewRecordCollection,
    TileCoordinate,
)

logger = logging.getLogger(__name__)

# Optional MarkerRecordCollection sections stored as MarkerSection rows,
# except business_program which is also removed when absent
SECTION_ATTRIBUTES = (
    "address",
    "amenities",
    "business",
    "business_program",
    "contact",
    "dockage",
    "fuel",
    "moorings",
    "navigation",
    "retail",
    "services",
)


class DatabaseRepository:
    """
    Applies marker and review updates to the database.
    """

    def apply_marker_updates(
        self,
        markers: Sequence[MarkerRecordCollection],
        tile: Optional[TileCoordinate] = None,
    ) -> bool:
        """
        Upsert or delete markers.

        Args:
            markers: Decoded marker collections
            tile: Tile the batch was synced for, if any. Its marker update
                time is raised to the newest marker in the batch

        Returns:
            True when the batch was written
        """
        if not markers:
            logger.warning("No markers to apply")
            return False

        try:
            with transaction.atomic():
                for collection in markers:
                    if collection.marker.is_deleted:
                        self._delete_marker(collection.marker.id)
                    else:
                        self._upsert_marker(collection)

                if tile is not None:
                    newest = max(c.marker.last_updated for c in markers)
                    self._raise_tile_timestamp(tile, "marker_last_update", newest)

        except DatabaseError as e:
            logger.error(f"Error applying {len(markers)} marker updates: {e}")
            return False

        logger.info(f"Applied {len(markers)} marker updates")
        return True

    def apply_review_updates(
        self,
        reviews: Sequence[ReviewRecordCollection],
        tile: Optional[TileCoordinate] = None,
    ) -> bool:
        """
        Upsert or delete reviews.

        Args:
            reviews: Decoded review collections
            tile: Tile the batch was synced for, if any

        Returns:
            True when the batch was written
        """
        if not reviews:
            logger.warning("No reviews to apply")
            return False

        try:
            with transaction.atomic():
                for collection in reviews:
                    if collection.review.is_deleted:
                        self._delete_reviews([collection.review.id])
                    else:
                        self._upsert_review(collection)

                if tile is not None:
                    newest = max(c.review.last_updated for c in reviews)
                    self._raise_tile_timestamp(tile, "review_last_update", newest)

        except DatabaseError as e:
            logger.error(f"Error applying {len(reviews)} review updates: {e}")
            return False

        logger.info(f"Applied {len(reviews)} review updates")
        return True

    def _delete_marker(self, marker_id: int) -> None:
        db_id = to_db_id(marker_id)
        review_ids = models.Review.objects.filter(marker_id=db_id).values_list(
            "review_id", flat=True
        )
        self._delete_review_rows(list(review_ids))

        deleted, _ = models.Marker.objects.filter(marker_id=db_id).delete()
        logger.debug(f"Deleted marker {marker_id} ({deleted} rows)")

    def _upsert_marker(self, collection: MarkerRecordCollection) -> None:
        record = collection.marker
        marker, created = models.Marker.objects.update_or_create(
            marker_id=to_db_id(record.id),
            defaults={
                "marker_type": int(record.marker_type),
                "last_updated": record.last_updated,
                "name": record.name,
                "latitude": record.latitude,
                "longitude": record.longitude,
                "geohash": to_db_id(record.geohash),
                "search_filter": to_db_id(record.search_filter),
            },
        )

        models.MarkerMeta.objects.update_or_create(
            marker=marker,
            defaults={
                "section_title": collection.meta.section_title,
                "section_note_json": collection.meta.section_note_json,
            },
        )

        for attribute in SECTION_ATTRIBUTES:
            section = getattr(collection, attribute)
            if section is not None:
                models.MarkerSection.objects.update_or_create(
                    marker=marker,
                    section=attribute,
                    defaults={
                        "section_title": getattr(section, "section_title", 0),
                        "payload": section.model_dump(mode="json"),
                    },
                )
            elif attribute == "business_program":
                models.MarkerSection.objects.filter(
                    marker=marker, section=attribute
                ).delete()

        marker.business_photos.all().delete()
        models.BusinessPhoto.objects.bulk_create(
            models.BusinessPhoto(
                marker=marker, ordinal=photo.ordinal, download_url=photo.download_url
            )
            for photo in collection.business_photos
        )

        marker.competitors.all().delete()
        models.Competitor.objects.bulk_create(
            models.Competitor(
                marker=marker,
                ordinal=competitor.ordinal,
                competitor_id=to_db_id(competitor.competitor_id),
            )
            for competitor in collection.competitors
        )

        action = "Created" if created else "Updated"
        logger.debug(f"{action} marker {record.id}: {record.name}")

    def _delete_reviews(self, review_ids: Iterable[int]) -> None:
        self._delete_review_rows([to_db_id(review_id) for review_id in review_ids])

    def _delete_review_rows(self, db_ids: Sequence[int]) -> None:
        if not db_ids:
            return
        models.ReviewPhoto.objects.filter(review_id__in=db_ids).delete()
        deleted, _ = models.Review.objects.filter(review_id__in=db_ids).delete()
        logger.debug(f"Deleted {deleted} review rows")

    def _upsert_review(self, collection: ReviewRecordCollection) -> None:
        record = collection.review
        review, created = models.Review.objects.update_or_create(
            review_id=to_db_id(record.id),
            defaults={
                "marker_id": to_db_id(record.marker_id),
                "rating": record.rating,
                "title": record.title,
                "text": record.text,
                "response": record.response,
                "visit_date": record.visit_date,
                "captain": record.captain,
                "votes": record.votes,
                "last_updated": record.last_updated,
            },
        )

        review.photos.all().delete()
        models.ReviewPhoto.objects.bulk_create(
            models.ReviewPhoto(
                review=review, ordinal=photo.ordinal, download_url=photo.download_url
            )
            for photo in collection.photos
        )

        action = "Created" if created else "Updated"
        logger.debug(f"{action} review {record.id}")

    def _raise_tile_timestamp(
        self, tile: TileCoordinate, field: str, newest: int
    ) -> None:
        tile_update, _ = models.TileLastUpdate.objects.select_for_update().get_or_create(
            tile_x=tile.x, tile_y=tile.y
        )
        if newest > getattr(tile_update, field):
            setattr(tile_update, field, newest)
            tile_update.save(update_fields=[field])
            logger.debug(f"Tile {tile}: {field} raised to {newest}")
