"""
SPARQL query construction for vessel selection.

Pure functions, no I/O. Three queries are built from one ModeConfig:

1. build_eligibility_query(mode, exclude_ids) -> COUNT of eligible vessels
2. build_detail_query(mode, exclude_ids, offset) -> every row for the vessel
   at `offset` in the label-sorted eligible set
3. build_name_list_query(mode, limit, offset) -> one page of (id, label)

The count and detail queries embed the same eligibility block, generated by
a single function. The detail query is addressed by a numeric offset into
the counted set, so the two must never diverge.

Wikidata properties used:
- P31 instance of, P18 image, P729 service entry (commissioned)
- P607 conflict, P289 vessel class, P17 country, P137 operator
- P2043 length, P2386 displacement, P730 service retirement, P1308 status
"""

from __future__ import annotations

import re
from typing import Iterable

from keel.core.modes import ModeConfig

ENTITY_ID_RE = re.compile(r"^Q[0-9]+$")


def validate_entity_ids(ids: Iterable[str]) -> list[str]:
    """
    Validate and sort Wikidata entity ids.

    Returns:
        Sorted, de-duplicated list of ids

    Raises:
        ValueError: If any id is not of the form Q<digits>
    """
    cleaned = set()
    for entity_id in ids:
        if not isinstance(entity_id, str) or not ENTITY_ID_RE.match(entity_id):
            raise ValueError(f"Invalid Wikidata entity id: {entity_id!r}")
        cleaned.add(entity_id)
    return sorted(cleaned, key=lambda q: (len(q), q))


def build_exclusion_filter(exclude_ids: Iterable[str]) -> str:
    """
    Build the NOT IN filter for already-used vessels.

    An empty exclusion set yields an empty string: the clause is omitted
    rather than emitted as a filter over an empty list.
    """
    ids = validate_entity_ids(exclude_ids)
    if not ids:
        return ""
    values = ", ".join(f"wd:{entity_id}" for entity_id in ids)
    return f"FILTER(?ship NOT IN ({values}))"


def _year_filters(mode: ModeConfig) -> list[str]:
    filters = []
    if mode.year_min is not None:
        filters.append(f"FILTER(YEAR(?commissioned) >= {int(mode.year_min)})")
    if mode.year_max is not None:
        filters.append(f"FILTER(YEAR(?commissioned) <= {int(mode.year_max)})")
    return filters


def _eligibility_block(mode: ModeConfig, exclude_ids: Iterable[str]) -> str:
    """
    WHERE-clause body shared by the count and detail queries.

    Binds ?ship and ?label; every other variable is local to the filter.
    """
    if not mode.ship_types:
        raise ValueError(f"Mode {mode.id!r} has no ship types")
    type_values = " ".join(f"wd:{t}" for t in validate_entity_ids(mode.ship_types))

    lines = [
        f"VALUES ?type {{ {type_values} }}",
        "?ship wdt:P31 ?type .",
        "?ship wdt:P18 ?image .",
        "?ship wdt:P729 ?commissioned .",
    ]

    if mode.require_conflict:
        lines.append("?ship wdt:P607 ?requiredConflict .")

    if mode.require_dimensions:
        lines.extend([
            "OPTIONAL { ?ship wdt:P2043 ?eligibleLength . }",
            "OPTIONAL { ?ship wdt:P2386 ?eligibleDisplacement . }",
            "FILTER(BOUND(?eligibleLength) || BOUND(?eligibleDisplacement))",
        ])

    lines.extend(_year_filters(mode))

    lines.extend([
        "?ship rdfs:label ?label .",
        'FILTER(LANG(?label) = "en")',
        'FILTER(!REGEX(?label, "^Q[0-9]+$"))',
    ])

    exclusion = build_exclusion_filter(exclude_ids)
    if exclusion:
        lines.append(exclusion)

    return "\n".join(lines)


def _indent(block: str, spaces: int) -> str:
    pad = " " * spaces
    return "\n".join(pad + line for line in block.splitlines())


def build_eligibility_query(mode: ModeConfig, exclude_ids: Iterable[str]) -> str:
    """Count distinct eligible vessels for a mode, minus exclusions."""
    return f"""
SELECT (COUNT(DISTINCT ?ship) AS ?count)
WHERE {{
{_indent(_eligibility_block(mode, exclude_ids), 2)}
}}
""".strip()


def build_detail_query(mode: ModeConfig, exclude_ids: Iterable[str], offset: int) -> str:
    """
    Fetch the row-group for the vessel at `offset` in the eligible set.

    The inner sub-select orders eligible vessels by (label, IRI) and picks
    exactly one; the outer query expands optional predicates for it. A
    vessel with several conflicts therefore comes back as several rows.
    """
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise ValueError(f"Offset must be a non-negative integer, got {offset!r}")

    return f"""
SELECT DISTINCT
  ?ship ?shipLabel
  ?image
  ?class ?classLabel
  ?country ?countryLabel
  ?operator ?operatorLabel
  ?operatorCountry ?operatorCountryLabel
  ?length ?displacement
  ?commissioned
  ?conflict ?conflictLabel
  ?decommissioned
  ?status ?statusLabel
  ?article
WHERE {{
  {{
    SELECT DISTINCT ?ship ?label
    WHERE {{
{_indent(_eligibility_block(mode, exclude_ids), 6)}
    }}
    ORDER BY ?label ?ship
    LIMIT 1
    OFFSET {offset}
  }}

  ?ship wdt:P18 ?image .
  ?ship wdt:P729 ?commissioned .

  OPTIONAL {{ ?ship wdt:P289 ?class . }}
  OPTIONAL {{ ?ship wdt:P17 ?country . }}
  OPTIONAL {{
    ?ship wdt:P137 ?operator .
    OPTIONAL {{ ?operator wdt:P17 ?operatorCountry . }}
  }}
  OPTIONAL {{ ?ship wdt:P2043 ?length . }}
  OPTIONAL {{ ?ship wdt:P2386 ?displacement . }}
  OPTIONAL {{ ?ship wdt:P607 ?conflict . }}
  OPTIONAL {{ ?ship wdt:P730 ?decommissioned . }}
  OPTIONAL {{ ?ship wdt:P1308 ?status . }}

  OPTIONAL {{
    ?article schema:about ?ship ;
             schema:isPartOf <https://en.wikipedia.org/> .
  }}

  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "en" . }}
}}
""".strip()


def build_name_list_query(mode: ModeConfig, limit: int, offset: int) -> str:
    """One page of (vessel, English label) pairs for the autocomplete list."""
    if limit <= 0:
        raise ValueError(f"Limit must be positive, got {limit!r}")
    if offset < 0:
        raise ValueError(f"Offset must be non-negative, got {offset!r}")

    return f"""
SELECT DISTINCT ?ship ?label
WHERE {{
{_indent(_eligibility_block(mode, ()), 2)}
}}
ORDER BY ?label ?ship
LIMIT {int(limit)}
OFFSET {int(offset)}
""".strip()
