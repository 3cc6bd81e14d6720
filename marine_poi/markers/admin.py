"""
Admin configuration for the markers app.
"""

import logging

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from .models import (
    BusinessPhoto,
    Competitor,
    Marker,
    MarkerMeta,
    MarkerSection,
    Review,
    ReviewPhoto,
    TileLastUpdate,
    from_db_id,
)

logger = logging.getLogger(__name__)


class MarkerMetaInline(admin.StackedInline):
    model = MarkerMeta
    can_delete = False
    extra = 0


class MarkerSectionInline(admin.TabularInline):
    model = MarkerSection
    extra = 0
    fields = ("section", "section_title", "payload")


class BusinessPhotoInline(admin.TabularInline):
    model = BusinessPhoto
    extra = 0


class CompetitorInline(admin.TabularInline):
    model = Competitor
    extra = 0


@admin.register(Marker)
class MarkerAdmin(admin.ModelAdmin):
    """
    Admin interface for Marker.

    Search functionality:
    - Marker ID: Use the exact stored ID (e.g., "123")
    - Name: Use partial text search (e.g., "harbor")

    Filters available:
    - Type: Filter by marker type
    """

    list_display = (
        "marker_id",
        "name",
        "marker_type",
        "last_updated",
        "section_count_display",
    )
    search_fields = ("=marker_id", "name")
    list_filter = ("marker_type",)
    ordering = ("name",)
    list_per_page = 50
    list_display_links = ("marker_id", "name")

    search_help_text = (
        "Search by: Marker ID (exact match) or name (partial match). "
        "Examples: '123' for ID, 'harbor' for name."
    )

    fieldsets = (
        ("Basic Information", {"fields": ("marker_id", "name", "marker_type")}),
        ("Location", {"fields": ("latitude", "longitude", "geohash", "geohash_display")}),
        (
            "Sync",
            {
                "fields": ("last_updated", "search_filter", "search_filter_display"),
                "description": "Last updated is 0 for markers applied from single "
                "responses until the next tile sync",
            },
        ),
    )

    readonly_fields = ("geohash_display", "search_filter_display")

    inlines = [MarkerMetaInline, MarkerSectionInline, BusinessPhotoInline, CompetitorInline]

    actions = ["reset_last_updated"]

    def reset_last_updated(self, request: HttpRequest, queryset: QuerySet[Marker]) -> None:
        """
        Admin action forcing the next tile sync to refresh the selected markers.
        """
        updated_count = queryset.exclude(last_updated=0).update(last_updated=0)
        logger.info(f"Reset last_updated on {updated_count} markers via admin")
        self.message_user(request, f"Reset last updated time on {updated_count} marker(s).")

    reset_last_updated.short_description = "Reset last updated time"

    def section_count_display(self, obj: Marker) -> str:
        count = obj.sections.count()
        return "No sections" if count == 0 else f"{count} sections"

    section_count_display.short_description = "Sections"

    def geohash_display(self, obj: Marker) -> str:
        return "-" if obj.geohash is None else str(obj.geohash_value)

    geohash_display.short_description = "Geohash (unsigned)"

    def search_filter_display(self, obj: Marker) -> str:
        return "-" if obj.search_filter is None else str(obj.search_filter_value)

    search_filter_display.short_description = "Search filter (unsigned)"


class ReviewPhotoInline(admin.TabularInline):
    model = ReviewPhoto
    extra = 0


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("review_id", "title", "marker_display", "rating", "votes", "captain")
    search_fields = ("=review_id", "=marker_id", "title", "captain")
    list_filter = ("rating",)
    list_per_page = 50
    inlines = [ReviewPhotoInline]

    def marker_display(self, obj: Review) -> str:
        marker = Marker.objects.filter(marker_id=obj.marker_id).first()
        service_id = from_db_id(obj.marker_id)
        return f"{marker.name} ({service_id})" if marker else str(service_id)

    marker_display.short_description = "Marker"


@admin.register(TileLastUpdate)
class TileLastUpdateAdmin(admin.ModelAdmin):
    list_display = ("tile_x", "tile_y", "marker_last_update", "review_last_update")
    search_fields = ("=tile_x", "=tile_y")
    ordering = ("tile_x", "tile_y")
