"""
Settings module for marine_poi project.

Imports the local development settings by default. Tests select
``marine_poi.settings.test`` through DJANGO_SETTINGS_MODULE.
"""

from .local import *  # noqa: F401, F403
