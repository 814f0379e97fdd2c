"""
Keel Game DTOs.

Pydantic v2 models for the clue set and the persisted daily record. They
define the client-facing JSON shape; field names follow the client's
contract (`class` for the specs class clue).
"""

import datetime

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN_NATION = "Unknown"


# =============================================================================
# CLUE GROUPS
# =============================================================================


class SpecsClueDTO(BaseModel):
    """Physical specs. Each field independently nullable."""

    model_config = ConfigDict(populate_by_name=True)

    class_name: str | None = Field(default=None, alias="class")
    displacement: str | None = None
    length: str | None = None
    commissioned: str | None = None


class ContextClueDTO(BaseModel):
    """Nation (never empty), conflicts (possibly empty), status (nullable)."""

    nation: str = Field(default=UNKNOWN_NATION, min_length=1)
    conflicts: list[str] = Field(default_factory=list)
    status: str | None = None


class ClueSetDTO(BaseModel):
    specs: SpecsClueDTO
    context: ContextClueDTO
    trivia: str | None = None
    photo: str


# =============================================================================
# DAILY RECORD
# =============================================================================


class ShipIdentityDTO(BaseModel):
    """Answer identity. Aliases keep insertion order for answer matching."""

    id: str
    name: str
    aliases: list[str] = Field(default_factory=list)


class GameRecordDTO(BaseModel):
    """
    One daily puzzle.

    `silhouette` is a data:image/png;base64 URI; `clues.photo` points at the
    unstylized original.
    """

    date: datetime.date
    mode: str
    ship: ShipIdentityDTO
    silhouette: str
    clues: ClueSetDTO
