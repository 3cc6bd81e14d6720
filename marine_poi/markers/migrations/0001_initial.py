import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Marker",
            fields=[
                ("marker_id", models.BigIntegerField(primary_key=True, serialize=False)),
                (
                    "marker_type",
                    models.IntegerField(
                        choices=[
                            (1, "Unknown"),
                            (2, "Anchorage"),
                            (4, "Hazard"),
                            (8, "Marina"),
                            (64, "Boat Ramp"),
                            (128, "Business"),
                            (256, "Inlet"),
                            (512, "Bridge"),
                            (1024, "Lock"),
                            (2048, "Dam"),
                            (4096, "Ferry"),
                        ],
                        db_index=True,
                    ),
                ),
                ("last_updated", models.BigIntegerField(default=0)),
                ("name", models.CharField(max_length=255)),
                ("latitude", models.IntegerField(help_text="Latitude in semicircles")),
                ("longitude", models.IntegerField(help_text="Longitude in semicircles")),
                ("geohash", models.BigIntegerField(db_index=True)),
                ("search_filter", models.BigIntegerField(default=0)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Review",
            fields=[
                ("review_id", models.BigIntegerField(primary_key=True, serialize=False)),
                ("marker_id", models.BigIntegerField(db_index=True)),
                ("rating", models.IntegerField()),
                ("title", models.CharField(blank=True, default="", max_length=255)),
                ("text", models.TextField(blank=True, default="")),
                ("response", models.TextField(blank=True, default="")),
                ("visit_date", models.CharField(blank=True, default="", max_length=64)),
                ("captain", models.CharField(blank=True, default="", max_length=255)),
                ("votes", models.IntegerField(default=0)),
                ("last_updated", models.BigIntegerField(default=0)),
            ],
            options={
                "ordering": ["-last_updated"],
            },
        ),
        migrations.CreateModel(
            name="TileLastUpdate",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("tile_x", models.IntegerField()),
                ("tile_y", models.IntegerField()),
                ("marker_last_update", models.BigIntegerField(default=0)),
                ("review_last_update", models.BigIntegerField(default=0)),
            ],
            options={
                "ordering": ["tile_x", "tile_y"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("tile_x", "tile_y"), name="unique_tile"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="MarkerMeta",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("section_title", models.IntegerField(default=0)),
                ("section_note_json", models.TextField(blank=True, default="")),
                (
                    "marker",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="meta",
                        to="markers.marker",
                    ),
                ),
            ],
        ),
        migrations.CreateModel(
            name="MarkerSection",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "section",
                    models.CharField(
                        choices=[
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
                        ],
                        max_length=32,
                    ),
                ),
                ("section_title", models.IntegerField(default=0)),
                ("payload", models.JSONField(default=dict)),
                (
                    "marker",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sections",
                        to="markers.marker",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        fields=("marker", "section"), name="unique_marker_section"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="BusinessPhoto",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("ordinal", models.IntegerField()),
                ("download_url", models.URLField(max_length=1024)),
                (
                    "marker",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="business_photos",
                        to="markers.marker",
                    ),
                ),
            ],
            options={
                "ordering": ["ordinal"],
            },
        ),
        migrations.CreateModel(
            name="Competitor",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("competitor_id", models.BigIntegerField()),
                ("ordinal", models.IntegerField()),
                (
                    "marker",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="competitors",
                        to="markers.marker",
                    ),
                ),
            ],
            options={
                "ordering": ["ordinal"],
            },
        ),
        migrations.CreateModel(
            name="ReviewPhoto",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("ordinal", models.IntegerField()),
                ("download_url", models.URLField(max_length=1024)),
                (
                    "review",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="photos",
                        to="markers.review",
                    ),
                ),
            ],
            options={
                "ordering": ["ordinal"],
            },
        ),
    ]
