"""
Keel domain enums.

All enums are defined as Django TextChoices for database storage as lowercase strings.
"""

from django.db import models


class GameMode(models.TextChoices):
    """Daily puzzle modes. One GameRecord per (date, mode)."""
    MAIN = "main", "Daily Keel"
    WW2 = "ww2", "WW2"
    COLDWAR = "coldwar", "Cold War"
    CARRIER = "carrier", "Aircraft Carrier"
    SUBMARINE = "submarine", "Submarine"
    COASTGUARD = "coastguard", "Coast Guard"


class TriggerSource(models.TextChoices):
    """What initiated a generation run."""
    CRON = "cron", "Cron"
    MANUAL = "manual", "Manual"
    TEST = "test", "Test"
