"""
Django app configuration for Keel core.

Holds mode configuration, flag readers and run observability. No models.
"""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "keel.core"
    verbose_name = "Keel Core"
