"""
Game mode configuration.

Each mode narrows the eligible set of vessels: a whitelist of Wikidata
"instance of" types, an optional commissioning-year range, and whether the
subject must carry a conflict (narrative clues) or physical dimensions
(size/type-only tiers).
"""

from __future__ import annotations

from dataclasses import dataclass

from keel.core.enums import GameMode


class UnknownModeError(KeyError):
    """Raised when a mode id is not in the registry."""

    def __init__(self, mode_id: str):
        self.mode_id = mode_id
        super().__init__(f"Unknown game mode: {mode_id!r}")

    def __str__(self) -> str:
        # KeyError would repr() the message
        return self.args[0]


@dataclass(frozen=True)
class ModeConfig:
    """
    Eligibility filters for one game mode.

    Attributes:
        id: Mode id (GameMode value)
        name: Display name
        description: Short human description
        year_min: Earliest commissioning year, inclusive (None = unbounded)
        year_max: Latest commissioning year, inclusive (None = unbounded)
        ship_types: Wikidata Q-ids accepted for P31 (instance of)
        require_conflict: Subject must have at least one P607 (conflict)
        require_dimensions: Subject must have length or displacement
    """

    id: str
    name: str
    description: str
    year_min: int | None
    year_max: int | None
    ship_types: tuple[str, ...]
    require_conflict: bool = False
    require_dimensions: bool = False


# destroyer, battleship, aircraft carrier, cruiser, frigate, corvette, submarine
WARSHIP_TYPES: tuple[str, ...] = (
    "Q174736",
    "Q182531",
    "Q17205",
    "Q104843",
    "Q161705",
    "Q170013",
    "Q2811",
)

# Q2607934 = amphibious assault ship
MODERN_WARSHIP_TYPES: tuple[str, ...] = WARSHIP_TYPES + ("Q2607934",)

# attack submarine, submarine, ballistic missile submarine,
# coastal submarine, nuclear attack submarine, nuclear submarine
SUBMARINE_TYPES: tuple[str, ...] = (
    "Q4818021",
    "Q2811",
    "Q683570",
    "Q17005311",
    "Q757587",
    "Q757554",
)

# patrol vessel, offshore patrol vessel, small patrol boat, cutter
PATROL_TYPES: tuple[str, ...] = (
    "Q331795",
    "Q11479409",
    "Q10316200",
    "Q683363",
)


GAME_MODES: dict[str, ModeConfig] = {
    GameMode.MAIN: ModeConfig(
        id=GameMode.MAIN,
        name="Daily Keel",
        description="Modern warships (1980+)",
        year_min=1980,
        year_max=None,
        ship_types=MODERN_WARSHIP_TYPES,
        require_conflict=True,
    ),
    GameMode.WW2: ModeConfig(
        id=GameMode.WW2,
        name="WW2",
        description="World War 2 ships (1939-1945)",
        year_min=1939,
        year_max=1945,
        ship_types=WARSHIP_TYPES,
        require_dimensions=True,
    ),
    GameMode.COLDWAR: ModeConfig(
        id=GameMode.COLDWAR,
        name="Cold War",
        description="Cold War era ships (1947-1991)",
        year_min=1947,
        year_max=1991,
        ship_types=WARSHIP_TYPES,
        require_dimensions=True,
    ),
    GameMode.CARRIER: ModeConfig(
        id=GameMode.CARRIER,
        name="Aircraft Carrier",
        description="Aircraft carriers only",
        year_min=None,
        year_max=None,
        ship_types=("Q17205",),
        require_dimensions=True,
    ),
    GameMode.SUBMARINE: ModeConfig(
        id=GameMode.SUBMARINE,
        name="Submarine",
        description="Submarines only",
        year_min=None,
        year_max=None,
        ship_types=SUBMARINE_TYPES,
        require_dimensions=True,
    ),
    GameMode.COASTGUARD: ModeConfig(
        id=GameMode.COASTGUARD,
        name="Coast Guard",
        description="Patrol vessels and cutters",
        year_min=None,
        year_max=None,
        ship_types=PATROL_TYPES,
        require_dimensions=True,
    ),
}

ALL_MODE_IDS: list[str] = [str(mode) for mode in GameMode]


def get_mode(mode_id: str) -> ModeConfig:
    """
    Look up a mode by id.

    Raises:
        UnknownModeError: If mode_id is not registered
    """
    try:
        return GAME_MODES[mode_id]
    except KeyError:
        raise UnknownModeError(mode_id) from None
