import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="UsedShip",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("wikidata_id", models.CharField(max_length=32, unique=True)),
                ("name", models.CharField(max_length=255)),
                ("used_date", models.DateField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "game_used_ship",
                "ordering": ["used_date", "created_at"],
            },
        ),
        migrations.CreateModel(
            name="GameRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("game_date", models.DateField()),
                (
                    "mode",
                    models.CharField(
                        choices=[
                            ("main", "Daily Keel"),
                            ("ww2", "WW2"),
                            ("coldwar", "Cold War"),
                            ("carrier", "Aircraft Carrier"),
                            ("submarine", "Submarine"),
                            ("coastguard", "Coast Guard"),
                        ],
                        default="main",
                        max_length=32,
                    ),
                ),
                ("ship_id", models.CharField(max_length=32)),
                ("ship_name", models.CharField(max_length=255)),
                ("ship_aliases", models.JSONField(blank=True, default=list)),
                ("silhouette", models.TextField()),
                ("clues_specs_class", models.CharField(blank=True, max_length=255, null=True)),
                ("clues_specs_displacement", models.CharField(blank=True, max_length=64, null=True)),
                ("clues_specs_length", models.CharField(blank=True, max_length=64, null=True)),
                ("clues_specs_commissioned", models.CharField(blank=True, max_length=16, null=True)),
                ("clues_context_nation", models.CharField(default="Unknown", max_length=255)),
                ("clues_context_conflicts", models.JSONField(blank=True, default=list)),
                ("clues_context_status", models.CharField(blank=True, max_length=255, null=True)),
                ("clues_trivia", models.TextField(blank=True, null=True)),
                ("clues_photo", models.URLField(max_length=2000)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "game_record",
                "constraints": [
                    models.UniqueConstraint(fields=("game_date", "mode"), name="uniq_game_record_date_mode"),
                ],
                "indexes": [
                    models.Index(fields=["mode", "-game_date"], name="idx_game_record_mode_date"),
                ],
            },
        ),
    ]
