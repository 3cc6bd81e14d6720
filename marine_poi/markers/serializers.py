"""
DRF serializers for the markers app.
"""

from rest_framework import serializers

from .models import Marker, MarkerSection, Review, ReviewPhoto, from_db_id
from .services.lookups import MARKER_TYPES, MarkerType

# Internal type -> wire name; "Airport" is an alias of Unknown
MARKER_TYPE_NAMES = {
    value: name for name, value in reversed(list(MARKER_TYPES.items()))
}


class MarkerSectionSerializer(serializers.ModelSerializer):
    class Meta:
        model = MarkerSection
        fields = ["section", "section_title", "payload"]
        read_only_fields = fields


class MarkerSerializer(serializers.ModelSerializer):
    """
    Read-only serializer for Marker with its meta, sections and lists.

    Identifiers are rendered as unsigned decimal strings, the way the
    service sends them.
    """

    id = serializers.SerializerMethodField()
    type = serializers.SerializerMethodField()
    geohash = serializers.SerializerMethodField()
    search_filter = serializers.SerializerMethodField()
    sections = MarkerSectionSerializer(many=True, read_only=True)

    class Meta:
        model = Marker
        fields = [
            "id",
            "type",
            "name",
            "last_updated",
            "latitude",
            "longitude",
            "geohash",
            "search_filter",
            "sections",
        ]
        read_only_fields = fields

    def get_id(self, instance: Marker) -> str:
        return str(instance.service_id)

    def get_type(self, instance: Marker) -> str:
        return MARKER_TYPE_NAMES.get(MarkerType(instance.marker_type), "Unknown")

    def get_geohash(self, instance: Marker) -> str:
        return str(instance.geohash_value)

    def get_search_filter(self, instance: Marker) -> str:
        return str(instance.search_filter_value)

    def to_representation(self, instance: Marker) -> dict:
        data = super().to_representation(instance)

        data["coordinates"] = {
            "latitude": instance.latitude_degrees,
            "longitude": instance.longitude_degrees,
        }

        meta = getattr(instance, "meta", None)
        data["meta"] = (
            {
                "section_title": meta.section_title,
                "section_note_json": meta.section_note_json,
            }
            if meta is not None
            else None
        )

        data["business_photos"] = [
            {"ordinal": photo.ordinal, "download_url": photo.download_url}
            for photo in instance.business_photos.all()
        ]
        data["competitors"] = [
            {
                "ordinal": competitor.ordinal,
                "competitor_id": str(from_db_id(competitor.competitor_id)),
            }
            for competitor in instance.competitors.all()
        ]

        return data


class ReviewPhotoSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReviewPhoto
        fields = ["ordinal", "download_url"]
        read_only_fields = fields


class ReviewSerializer(serializers.ModelSerializer):
    """
    Read-only serializer for Review with its photos.
    """

    id = serializers.SerializerMethodField()
    marker_id = serializers.SerializerMethodField()
    photos = ReviewPhotoSerializer(many=True, read_only=True)

    class Meta:
        model = Review
        fields = [
            "id",
            "marker_id",
            "rating",
            "title",
            "text",
            "response",
            "visit_date",
            "captain",
            "votes",
            "last_updated",
            "photos",
        ]
        read_only_fields = fields

    def get_id(self, instance: Review) -> str:
        return str(from_db_id(instance.review_id))

    def get_marker_id(self, instance: Review) -> str:
        return str(from_db_id(instance.marker_id))
