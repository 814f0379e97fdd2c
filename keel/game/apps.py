"""Django app configuration for the daily game module."""

from django.apps import AppConfig


class GameConfig(AppConfig):
    """Configuration for the game app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "keel.game"
    label = "game"
    verbose_name = "Daily Game"
