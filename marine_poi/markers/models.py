"""
Models for the markers app.

Unsigned 64-bit service identifiers are stored as two's-complement signed
64-bit integers; see ``to_db_id`` and ``from_db_id``.
"""

from django.db import models

from .services.lookups import MarkerType

_UINT64_SPAN = 2**64
_SINT64_MAX = 2**63 - 1


def to_db_id(value: int) -> int:
    """Map an unsigned 64-bit value onto the signed 64-bit column range."""
    return value - _UINT64_SPAN if value > _SINT64_MAX else value


def from_db_id(value: int) -> int:
    """Inverse of ``to_db_id``."""
    return value + _UINT64_SPAN if value < 0 else value


class Marker(models.Model):
    """
    A marine point of interest (marina, anchorage, hazard, ...).
    """

    TYPE_CHOICES = [(member.value, member.name.replace("_", " ").title()) for member in MarkerType]

    marker_id = models.BigIntegerField(primary_key=True)
    marker_type = models.IntegerField(choices=TYPE_CHOICES, db_index=True)
    last_updated = models.BigIntegerField(default=0)
    name = models.CharField(max_length=255)
    latitude = models.IntegerField(help_text="Latitude in semicircles")
    longitude = models.IntegerField(help_text="Longitude in semicircles")
    geohash = models.BigIntegerField(db_index=True)
    search_filter = models.BigIntegerField(default=0)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return f"{self.name} ({self.service_id})"

    @property
    def service_id(self) -> int:
        return from_db_id(self.marker_id)

    @property
    def geohash_value(self) -> int:
        return from_db_id(self.geohash)

    @property
    def search_filter_value(self) -> int:
        return from_db_id(self.search_filter)

    @property
    def latitude_degrees(self) -> float:
        return self.latitude * 180.0 / 2**31

    @property
    def longitude_degrees(self) -> float:
        return self.longitude * 180.0 / 2**31


class MarkerMeta(models.Model):
    marker = models.OneToOneField(Marker, on_delete=models.CASCADE, related_name="meta")
    section_title = models.IntegerField(default=0)
    section_note_json = models.TextField(blank=True, default="")


class MarkerSection(models.Model):
    """
    One optional marker section, stored as its decoded record fields.
    """

    SECTION_CHOICES = [
        ("address", "Address"),
        ("amenities", "Amenities"),
        ("business", "Business"),
        ("business_program", "Business program"),
        ("contact", "Contact"),
        ("dockage", "Dockage"),
        ("fuel", "Fuel"),
        ("moorings", "Moorings"),
        ("navigation", "Navigation"),
        ("retail", "Retail"),
        ("services", "Services"),
    ]

    marker = models.ForeignKey(Marker, on_delete=models.CASCADE, related_name="sections")
    section = models.CharField(max_length=32, choices=SECTION_CHOICES)
    section_title = models.IntegerField(default=0)
    payload = models.JSONField(default=dict)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["marker", "section"], name="unique_marker_section"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.get_section_display()} for marker {self.marker_id}"


class BusinessPhoto(models.Model):
    marker = models.ForeignKey(
        Marker, on_delete=models.CASCADE, related_name="business_photos"
    )
    ordinal = models.IntegerField()
    download_url = models.URLField(max_length=1024)

    class Meta:
        ordering = ["ordinal"]


class Competitor(models.Model):
    marker = models.ForeignKey(Marker, on_delete=models.CASCADE, related_name="competitors")
    competitor_id = models.BigIntegerField()
    ordinal = models.IntegerField()

    class Meta:
        ordering = ["ordinal"]


class Review(models.Model):
    """
    A captain's review of a marker.
    """

    review_id = models.BigIntegerField(primary_key=True)
    marker_id = models.BigIntegerField(db_index=True)
    rating = models.IntegerField()
    title = models.CharField(max_length=255, blank=True, default="")
    text = models.TextField(blank=True, default="")
    response = models.TextField(blank=True, default="")
    visit_date = models.CharField(max_length=64, blank=True, default="")
    captain = models.CharField(max_length=255, blank=True, default="")
    votes = models.IntegerField(default=0)
    last_updated = models.BigIntegerField(default=0)

    class Meta:
        ordering = ["-last_updated"]

    def __str__(self) -> str:
        return f"{self.title} ({from_db_id(self.review_id)})"


class ReviewPhoto(models.Model):
    review = models.ForeignKey(Review, on_delete=models.CASCADE, related_name="photos")
    ordinal = models.IntegerField()
    download_url = models.URLField(max_length=1024)

    class Meta:
        ordering = ["ordinal"]


class TileLastUpdate(models.Model):
    """
    Newest marker and review timestamps applied for a tile.
    """

    tile_x = models.IntegerField()
    tile_y = models.IntegerField()
    marker_last_update = models.BigIntegerField(default=0)
    review_last_update = models.BigIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["tile_x", "tile_y"], name="unique_tile"),
        ]
        ordering = ["tile_x", "tile_y"]

    def __str__(self) -> str:
        return f"Tile ({self.tile_x}, {self.tile_y})"
