"""
Tests for the result parser: SPARQL row-group -> SubjectRecord.

Pure functions, no DB.
"""

import pytest

from keel.game.services.result_parser import (
    RECENT_STATUS,
    commons_file_to_url,
    extract_article_title,
    extract_entity_id,
    format_displacement,
    format_length,
    is_recent_conflict,
    parse,
)
from tests.fixtures.sparql import literal, ship_row


# =============================================================================
# CONCRETE SCENARIO
# =============================================================================


class TestRowGroupAggregation:
    """Multiple rows for one subject collapse into one record."""

    def test_conflicts_aggregated_scalars_from_first_row(self):
        rows = [
            ship_row(
                "X1",
                "Ship X1",
                classLabel="Alpha class",
                countryLabel="Atlantis",
                length="120.4",
                conflictLabel="Event A",
            ),
            ship_row(
                "X1",
                "Ship X1 (second row)",
                classLabel="Beta class",
                countryLabel="Lemuria",
                length="99",
                conflictLabel="Event B",
            ),
        ]
        # X1 is not a Q-id, so the IRI tail is used verbatim
        rows[0]["ship"] = {"type": "uri", "value": "X1"}
        rows[1]["ship"] = {"type": "uri", "value": "X1"}

        subject = parse(rows)

        assert subject.id == "X1"
        assert set(subject.conflicts) == {"Event A", "Event B"}
        assert subject.name == "Ship X1"
        assert subject.class_name == "Alpha class"
        assert subject.nation == "Atlantis"
        assert subject.length == "120m"

    def test_duplicate_conflicts_deduplicated(self):
        rows = [
            ship_row(conflictLabel="Gulf War", countryLabel="United States"),
            ship_row(conflictLabel="Gulf War", countryLabel="United States"),
            ship_row(conflictLabel="Iraq War", countryLabel="United States"),
        ]
        assert sorted(parse(rows).conflicts) == ["Gulf War", "Iraq War"]

    def test_empty_row_group_raises(self):
        with pytest.raises(ValueError):
            parse([])


# =============================================================================
# FIELD FALLBACKS
# =============================================================================


class TestNationFallback:
    """nation: direct -> operator's nation -> operator name -> None."""

    def test_direct_nation_wins(self):
        row = ship_row(countryLabel="Japan", operatorCountryLabel="France", operatorLabel="French Navy")
        assert parse([row]).nation == "Japan"

    def test_operator_nation_before_operator_name(self):
        row = ship_row(operatorCountryLabel="France", operatorLabel="French Navy")
        assert parse([row]).nation == "France"

    def test_operator_name_as_hint(self):
        row = ship_row(operatorLabel="Royal Navy")
        assert parse([row]).nation == "Royal Navy"

    def test_nothing_is_none(self):
        assert parse([ship_row()]).nation is None


class TestStatusResolution:
    """status: explicit -> decommissioned year -> recency heuristic -> None."""

    def test_explicit_status(self):
        row = ship_row(statusLabel="museum ship", decommissioned="1995-01-01T00:00:00Z")
        assert parse([row]).status == "museum ship"

    def test_decommissioned_year(self):
        row = ship_row(decommissioned="2015-09-30T00:00:00Z", conflictLabel="Iraq War")
        subject = parse([row])
        assert subject.decommissioned == "2015"
        assert subject.status == "Decommissioned 2015"

    def test_recent_conflict_keyword(self):
        assert parse([ship_row(conflictLabel="War in Afghanistan (2001–2021)")]).status == RECENT_STATUS

    def test_recent_year_in_label(self):
        assert parse([ship_row(conflictLabel="2011 military intervention in Libya")]).status == RECENT_STATUS

    def test_old_conflicts_leave_status_unknown(self):
        rows = [ship_row(conflictLabel="Falklands War"), ship_row(conflictLabel="Korean War 1950")]
        assert parse(rows).status is None

    @pytest.mark.parametrize("label,expected", [
        ("Syrian civil war", True),
        ("Persian Gulf", True),
        ("Operation Ocean Shield 2009", True),
        ("Vietnam War", False),
        ("Hull 20001", False),
        ("1999 NATO bombing", False),
    ])
    def test_is_recent_conflict(self, label, expected):
        assert is_recent_conflict(label) is expected


# =============================================================================
# FORMATTING
# =============================================================================


class TestNumericFormatting:
    """Length and displacement rendering."""

    def test_length_rounded_half_up(self):
        assert format_length("153.5") == "154m"
        assert format_length("153.49") == "153m"

    def test_displacement_thousands(self):
        assert format_displacement("8315.2") == "8,315 tons"
        assert format_displacement("101600") == "101,600 tons"
        assert format_displacement("950") == "950 tons"

    def test_absent_fields_stay_none(self):
        subject = parse([ship_row()])
        assert subject.length is None
        assert subject.displacement is None
        assert subject.class_name is None
        assert subject.wikipedia_title is None

    def test_unparseable_number_is_none(self):
        assert format_length("about 150") is None

    def test_commissioned_year(self):
        assert parse([ship_row(commissioned="1999-03-27T00:00:00Z")]).commissioned == "1999"


class TestIdentifiers:
    """Entity id, image URL and article title extraction."""

    def test_entity_id_from_iri(self):
        assert extract_entity_id("http://www.wikidata.org/entity/Q1046890") == "Q1046890"

    def test_commons_url_from_raw_name(self):
        assert commons_file_to_url("USS Cole (DDG-67).jpg") == (
            "https://commons.wikimedia.org/wiki/Special:FilePath/USS_Cole_(DDG-67).jpg"
        )

    def test_commons_url_from_encoded_name(self):
        assert commons_file_to_url("USS%20Cole%20(DDG-67).jpg") == (
            "https://commons.wikimedia.org/wiki/Special:FilePath/USS_Cole_(DDG-67).jpg"
        )

    def test_commons_url_strips_file_prefix(self):
        assert commons_file_to_url("File:HMS Daring.jpg") == commons_file_to_url("HMS Daring.jpg")

    def test_commons_url_same_for_raw_and_encoded_unicode(self):
        raw = commons_file_to_url("Bâtiment & navire.jpg")
        encoded = commons_file_to_url("B%C3%A2timent%20%26%20navire.jpg")
        assert raw == encoded
        assert raw.endswith("/B%C3%A2timent_%26_navire.jpg")

    def test_commons_url_with_stray_percent_left_undecoded(self):
        assert commons_file_to_url("A%20B%") == (
            "https://commons.wikimedia.org/wiki/Special:FilePath/A%2520B%25"
        )
        assert commons_file_to_url("100% steel.jpg").endswith("/100%25_steel.jpg")

    def test_image_url_from_row(self):
        assert parse([ship_row()]).image_url == (
            "https://commons.wikimedia.org/wiki/Special:FilePath/USS_Example.jpg"
        )

    def test_article_title(self):
        assert extract_article_title("https://en.wikipedia.org/wiki/USS_Cole_(DDG-67)") == "USS Cole (DDG-67)"
        assert extract_article_title("https://en.wikipedia.org/wiki/Tr%C3%A9gor") == "Trégor"
        assert extract_article_title(None) is None

    def test_blank_article_title_is_none(self):
        assert extract_article_title("https://en.wikipedia.org/wiki/_") is None
        assert parse([ship_row(article="https://en.wikipedia.org/wiki/%20_")]).wikipedia_title is None

    def test_article_from_row(self):
        row = ship_row(article="https://en.wikipedia.org/wiki/HMS_Daring_(D32)")
        assert parse([row]).wikipedia_title == "HMS Daring (D32)"

    def test_missing_label_falls_back_to_id(self):
        row = ship_row("Q77")
        row["shipLabel"] = literal("")
        assert parse([row]).name == "Q77"
