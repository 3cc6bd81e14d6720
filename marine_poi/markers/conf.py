"""
App settings for the markers app, with defaults.
"""

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

EXPORT_COMPRESSION_CHOICES = ("gzip", "zip")


def get_export_compression() -> str:
    """
    Return the export manifest compression key (``MARKERS_EXPORT_COMPRESSION``).
    """
    compression = getattr(settings, "MARKERS_EXPORT_COMPRESSION", "gzip")
    if compression not in EXPORT_COMPRESSION_CHOICES:
        raise ImproperlyConfigured(
            f"MARKERS_EXPORT_COMPRESSION must be one of "
            f"{', '.join(EXPORT_COMPRESSION_CHOICES)}, got '{compression}'"
        )
    return compression
