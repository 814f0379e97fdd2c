"""
URL routes for the game app.

URLs are unversioned. "today" is matched before the date route.
"""

from django.urls import path

from . import api_views

app_name = "game"

urlpatterns = [
    path("health/", api_views.healthcheck, name="healthcheck"),
    path(
        "api/game/<str:mode>/today/",
        api_views.get_today_game,
        name="today_game",
    ),
    path(
        "api/game/<str:mode>/<str:game_date>/",
        api_views.get_game_by_date,
        name="game_by_date",
    ),
]
