"""
URL configuration for the Keel backend.

Only read endpoints are exposed; generation runs from management commands.
"""

from django.urls import include, path

urlpatterns = [
    path("", include("keel.game.urls")),
]
