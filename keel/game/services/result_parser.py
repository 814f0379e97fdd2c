"""
Result parser: SPARQL row-group -> SubjectRecord.

The detail query returns several rows for one vessel when a multi-valued
predicate (conflicts) expands the result. The first row is authoritative
for every single-valued field; conflict labels are collected across all
rows.

Pure functions, no I/O.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, Mapping
from urllib.parse import quote, unquote

from keel.game.subject import SubjectRecord

COMMONS_FILE_PATH_URL = "https://commons.wikimedia.org/wiki/Special:FilePath/"

# encodeURIComponent's unreserved set plus "/"; quote() always keeps A-Za-z0-9_.-~
_COMMONS_SAFE_CHARS = "!*'()/"

RECENT_STATUS = "Active or recently active"
RECENT_CONFLICT_KEYWORDS = ("iraq", "afghan", "gulf", "syria")
RECENT_YEAR_THRESHOLD = 2000

_ENTITY_ID_RE = re.compile(r"Q\d+$")
_FILE_PREFIX_RE = re.compile(r"^(File:|Image:)", re.IGNORECASE)
_YEAR_PREFIX_RE = re.compile(r"^\+?(\d{4})")
_BARE_YEAR_RE = re.compile(r"(?<!\d)(\d{4})(?!\d)")
_ARTICLE_RE = re.compile(r"/wiki/(.+)$")
_STRAY_PERCENT_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")

Row = Mapping[str, Mapping[str, Any]]


def _value(row: Row, key: str) -> str | None:
    """Binding value, or None when unbound or empty."""
    binding = row.get(key)
    if not binding:
        return None
    value = binding.get("value")
    if value is None or value == "":
        return None
    return str(value)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def extract_entity_id(uri: str) -> str:
    """Trailing Q-id of an entity IRI (the IRI itself if there is none)."""
    match = _ENTITY_ID_RE.search(uri)
    return match.group(0) if match else uri


def extract_year(literal: str | None) -> str | None:
    """Leading four-digit year of an xsd:dateTime literal."""
    if not literal:
        return None
    match = _YEAR_PREFIX_RE.match(literal)
    return match.group(1) if match else None


def commons_file_to_url(filename: str) -> str:
    """
    Build the canonical Special:FilePath URL for a Commons filename.

    The filename may arrive percent-encoded or raw, so it is decoded first
    and re-encoded once. A name with any malformed escape (a "%" not followed
    by two hex digits, or escapes that are not UTF-8) is treated as raw and
    left undecoded. Spaces become underscores; underscores and slashes stay
    literal.
    """
    clean = _FILE_PREFIX_RE.sub("", filename)
    if not _STRAY_PERCENT_RE.search(clean):
        try:
            clean = unquote(clean, errors="strict")
        except UnicodeDecodeError:
            pass  # not valid percent-encoding, keep as given
    clean = clean.replace(" ", "_")
    return COMMONS_FILE_PATH_URL + quote(clean, safe=_COMMONS_SAFE_CHARS)


def image_uri_to_url(image_uri: str) -> str:
    return commons_file_to_url(image_uri.rstrip("/").split("/")[-1])


def extract_article_title(article_url: str | None) -> str | None:
    """Article URL -> human title ("/wiki/USS_Cole_(DDG-67)" -> "USS Cole (DDG-67)")."""
    if not article_url:
        return None
    match = _ARTICLE_RE.search(article_url)
    if not match:
        return None
    return unquote(match.group(1).replace("_", " ")).strip() or None


def format_length(raw: str | None) -> str | None:
    if raw is None:
        return None
    try:
        return f"{_round_half_up(float(raw))}m"
    except ValueError:
        return None


def format_displacement(raw: str | None) -> str | None:
    if raw is None:
        return None
    try:
        return f"{_round_half_up(float(raw)):,} tons"
    except ValueError:
        return None


def resolve_nation(row: Row) -> str | None:
    """Direct nation -> operator's nation -> operator name -> None."""
    return (
        _value(row, "countryLabel")
        or _value(row, "operatorCountryLabel")
        or _value(row, "operatorLabel")
    )


def is_recent_conflict(label: str) -> bool:
    """True for a recent-era conflict name or a bare year >= 2000."""
    lower = label.lower()
    if any(keyword in lower for keyword in RECENT_CONFLICT_KEYWORDS):
        return True
    return any(int(year) >= RECENT_YEAR_THRESHOLD for year in _BARE_YEAR_RE.findall(label))


def resolve_status(row: Row, decommissioned: str | None, conflicts: Iterable[str]) -> str | None:
    """Explicit status -> "Decommissioned {year}" -> recency heuristic -> None."""
    explicit = _value(row, "statusLabel")
    if explicit:
        return explicit
    if decommissioned:
        return f"Decommissioned {decommissioned}"
    if any(is_recent_conflict(label) for label in conflicts):
        return RECENT_STATUS
    return None


def collect_conflicts(rows: Iterable[Row]) -> list[str]:
    """Deduplicated conflict labels across all rows, first-seen order."""
    seen: dict[str, None] = {}
    for row in rows:
        label = _value(row, "conflictLabel")
        if label:
            seen.setdefault(label, None)
    return list(seen)


def parse(rows: list[Row]) -> SubjectRecord:
    """
    Normalize a detail-query row-group into one SubjectRecord.

    Raises:
        ValueError: If rows is empty or the first row has no ?ship binding
    """
    if not rows:
        raise ValueError("Cannot parse an empty row-group")

    first = rows[0]
    ship_uri = _value(first, "ship")
    if not ship_uri:
        raise ValueError("Row-group has no ?ship binding")

    entity_id = extract_entity_id(ship_uri)
    conflicts = collect_conflicts(rows)
    decommissioned = extract_year(_value(first, "decommissioned"))
    image_uri = _value(first, "image")

    return SubjectRecord(
        id=entity_id,
        name=_value(first, "shipLabel") or entity_id,
        image_url=image_uri_to_url(image_uri) if image_uri else "",
        class_name=_value(first, "classLabel"),
        nation=resolve_nation(first),
        length=format_length(_value(first, "length")),
        displacement=format_displacement(_value(first, "displacement")),
        commissioned=extract_year(_value(first, "commissioned")),
        decommissioned=decommissioned,
        status=resolve_status(first, decommissioned, conflicts),
        conflicts=conflicts,
        wikipedia_title=extract_article_title(_value(first, "article")),
    )
