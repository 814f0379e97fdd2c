"""
Clue Synthesizer.

Builds the four clue groups for a selected subject:
- specs: class, displacement, length, commissioned year
- context: nation (never empty), conflicts, status
- trivia: one redacted sentence from the Wikipedia summary, or None
- photo: URL of the unstylized photograph

Summary fetch failures never fail the run; they log and yield no trivia.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from keel.game.dto import UNKNOWN_NATION, ClueSetDTO, ContextClueDTO, SpecsClueDTO
from keel.game.subject import SubjectRecord
from keel.integrations.wikipedia.client import SummaryFetchError, WikipediaSummary

logger = logging.getLogger(__name__)

MIN_TRIVIA_LENGTH = 20
MIN_REDACTED_TOKEN_LENGTH = 3

TRIVIA_KEYWORDS = (
    "famous",
    "notable",
    "first",
    "last",
    "only",
    "largest",
    "fastest",
    "sunk",
    "battle",
    "war",
    "attack",
    "served",
    "participated",
    "known for",
    "renamed",
    "converted",
    "museum",
    "memorial",
    "preserved",
    "film",
    "movie",
)

_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")
_TOKEN_SPLIT_RE = re.compile(r"[\s\-]+")
_ORPHAN_HYPHEN_RE = re.compile(r"(?<!\w)-+(?!\w)")
_SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([.,;:!?])")
_WHITESPACE_RE = re.compile(r"\s+")


class SummaryClient(Protocol):
    def fetch_summary(self, title: str) -> WikipediaSummary | None:
        ...


# =============================================================================
# TRIVIA
# =============================================================================


def split_sentences(text: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_RE.findall(text) if s.strip()]


def extract_trivia(summary: WikipediaSummary | None) -> str | None:
    """
    Pick the most distinctive sentence of a summary.

    The first sentence is skipped (it is nearly always "X is a Y-class
    destroyer of the Z navy"). The first later sentence with a noteworthiness
    keyword wins; otherwise the second sentence; otherwise the description.
    """
    if summary is None or not summary.extract:
        return None

    sentences = split_sentences(summary.extract)

    for sentence in sentences[1:]:
        lower = sentence.lower()
        if any(keyword in lower for keyword in TRIVIA_KEYWORDS):
            return sentence

    if len(sentences) > 1:
        return sentences[1]

    if summary.description:
        return summary.description.strip() or None

    return None


def _class_tokens(class_name: str) -> list[str]:
    tokens = []
    for raw in _TOKEN_SPLIT_RE.split(class_name):
        token = raw.strip("()[]{},.;:'\"")
        if len(token) >= MIN_REDACTED_TOKEN_LENGTH and token.lower() not in (t.lower() for t in tokens):
            tokens.append(token)
    # Longest first so "Nimitz" is not eaten by a shorter overlapping token
    return sorted(tokens, key=len, reverse=True)


def _remove_whole_word(text: str, phrase: str) -> str:
    pattern = re.compile(rf"(?<!\w){re.escape(phrase)}(?!\w)", re.IGNORECASE)
    return pattern.sub(" ", text)


def redact_trivia(text: str | None, class_name: str | None) -> str | None:
    """
    Remove the class name and its words from a trivia sentence.

    Removes the full phrase, then every word of length >= 3, whole-word and
    case-insensitive. Returns None when the remainder is shorter than
    MIN_TRIVIA_LENGTH.
    """
    if not text:
        return None

    redacted = text
    if class_name and class_name.strip():
        redacted = _remove_whole_word(redacted, class_name.strip())
        for token in _class_tokens(class_name):
            redacted = _remove_whole_word(redacted, token)
        redacted = _ORPHAN_HYPHEN_RE.sub(" ", redacted)
        redacted = _SPACE_BEFORE_PUNCT_RE.sub(r"\1", redacted)

    redacted = _WHITESPACE_RE.sub(" ", redacted).strip()

    if len(redacted) < MIN_TRIVIA_LENGTH:
        return None
    return redacted


# =============================================================================
# SYNTHESIS
# =============================================================================


def build_specs_clue(subject: SubjectRecord) -> SpecsClueDTO:
    return SpecsClueDTO(
        class_name=subject.class_name,
        displacement=subject.displacement,
        length=subject.length,
        commissioned=subject.commissioned,
    )


def build_context_clue(subject: SubjectRecord) -> ContextClueDTO:
    return ContextClueDTO(
        nation=subject.nation or UNKNOWN_NATION,
        conflicts=list(subject.conflicts),
        status=subject.status,
    )


def build_aliases(subject: SubjectRecord) -> list[str]:
    """Alternative accepted answers, insertion order, no duplicates."""
    aliases: list[str] = []
    if subject.class_name and subject.class_name != subject.name:
        aliases.append(subject.class_name)
    return aliases


class ClueSynthesizer:
    """Derives a ClueSetDTO from a SubjectRecord plus an optional summary fetch."""

    def __init__(self, summary_client: SummaryClient | None = None):
        self.summary_client = summary_client

    def fetch_trivia(self, subject: SubjectRecord) -> str | None:
        if not (subject.wikipedia_title or "").strip() or self.summary_client is None:
            return None

        try:
            summary = self.summary_client.fetch_summary(subject.wikipedia_title)
        except SummaryFetchError as e:
            logger.warning(
                "Summary fetch failed, continuing without trivia",
                extra={"subject_id": subject.id, "title": subject.wikipedia_title, "error": str(e)},
            )
            return None

        trivia = redact_trivia(extract_trivia(summary), subject.class_name)
        logger.info(
            "Trivia extracted" if trivia else "No usable trivia",
            extra={"subject_id": subject.id, "title": subject.wikipedia_title},
        )
        return trivia

    def synthesize(self, subject: SubjectRecord) -> ClueSetDTO:
        return ClueSetDTO(
            specs=build_specs_clue(subject),
            context=build_context_clue(subject),
            trivia=self.fetch_trivia(subject),
            photo=subject.image_url,
        )
