"""
Daily Game Models.

Models:
- UsedShip: Usage ledger entry, one per featured vessel (never repeats)
- GameRecord: Finished puzzle, one per (game_date, mode)
"""

from __future__ import annotations

import uuid

from django.db import models

from keel.core.enums import GameMode


class UsedShip(models.Model):
    """
    A vessel that has already been featured.

    Append-only in practice; rows are removed only by an explicit
    administrative reset (reset_used_ships).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    wikidata_id = models.CharField(max_length=32, unique=True)  # e.g. "Q12345"
    name = models.CharField(max_length=255)
    used_date = models.DateField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "game_used_ship"
        ordering = ["used_date", "created_at"]

    def __str__(self) -> str:
        return f"{self.name} ({self.wikidata_id})"


class GameRecord(models.Model):
    """
    One daily puzzle for one mode.

    The clue set is stored flattened, one column per clue field.
    Re-generating for the same (game_date, mode) updates this row in place.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    game_date = models.DateField()
    mode = models.CharField(max_length=32, choices=GameMode.choices, default=GameMode.MAIN)

    # Subject identity
    ship_id = models.CharField(max_length=32)
    ship_name = models.CharField(max_length=255)
    ship_aliases = models.JSONField(default=list, blank=True)

    # data:image/png;base64,... line art
    silhouette = models.TextField()

    # Specs clue
    clues_specs_class = models.CharField(max_length=255, null=True, blank=True)
    clues_specs_displacement = models.CharField(max_length=64, null=True, blank=True)
    clues_specs_length = models.CharField(max_length=64, null=True, blank=True)
    clues_specs_commissioned = models.CharField(max_length=16, null=True, blank=True)

    # Context clue
    clues_context_nation = models.CharField(max_length=255, default="Unknown")
    clues_context_conflicts = models.JSONField(default=list, blank=True)
    clues_context_status = models.CharField(max_length=255, null=True, blank=True)

    # Trivia and photo
    clues_trivia = models.TextField(null=True, blank=True)
    clues_photo = models.URLField(max_length=2000)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "game_record"
        constraints = [
            models.UniqueConstraint(
                fields=["game_date", "mode"],
                name="uniq_game_record_date_mode",
            )
        ]
        indexes = [
            models.Index(fields=["mode", "-game_date"], name="idx_game_record_mode_date"),
        ]

    def __str__(self) -> str:
        return f"{self.game_date} [{self.mode}] {self.ship_name}"
