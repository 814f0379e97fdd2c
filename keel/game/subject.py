"""
SubjectRecord: the denormalized vessel produced by the result parser.

Constructed fresh each generation run and discarded once assembled into a
GameRecord. Only `id`, `name` and `image_url` are guaranteed; every other
field is None when the source graph has no value for it, never a made-up
default like "Unknown" or 0.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class SubjectRecord:
    id: str
    name: str
    image_url: str
    class_name: str | None = None
    nation: str | None = None
    length: str | None = None
    displacement: str | None = None
    commissioned: str | None = None
    decommissioned: str | None = None
    status: str | None = None
    conflicts: list[str] = field(default_factory=list)
    wikipedia_title: str | None = None
