"""
Entity Extractor Component

Finds genre, activity, time-of-day and artist mentions in a single
utterance. Vocabulary terms are matched as substrings of the lowercased
text; artist candidates are Title-Case word runs following a preference
verb, so they are matched against the original casing.
"""

import re
from typing import List

import structlog

from ...models.conversation_models import ExtractedEntities

logger = structlog.get_logger(__name__)

GENRE_VOCABULARY: List[str] = [
    "rock", "pop", "hip hop", "rap", "classical", "jazz", "blues", "country",
    "electronic", "dance", "edm", "r&b", "soul", "folk", "indie", "metal",
    "punk", "alternative", "reggae", "ambient", "techno", "house", "disco",
    "funk", "latin", "trap", "lo-fi", "instrumental", "soundtrack",
]

ACTIVITY_VOCABULARY: List[str] = [
    "workout", "exercise", "running", "jogging", "walking", "studying", "reading",
    "working", "relaxing", "sleeping", "meditating", "cooking", "cleaning",
    "driving", "commuting", "party", "dancing", "focus", "concentration",
]

TIME_OF_DAY_VOCABULARY: List[str] = [
    "morning", "afternoon", "evening", "night", "late night", "dawn", "dusk",
    "sunrise", "sunset", "midnight", "noon", "today", "tonight", "daytime",
]

ARTIST_PATTERN = re.compile(r"\b(?:like|love|enjoy|fan of|listen to) ([A-Z][a-z]+(?: [A-Z][a-z]+)*)")


class EntityExtractor:
    """Vocabulary and pattern based entity extraction for one utterance."""

    def __init__(self):
        self.logger = logger.bind(component="EntityExtractor")

    def extract_entities(self, utterance: str) -> ExtractedEntities:
        """
        Extract entities from one utterance.

        Args:
            utterance: Raw user utterance, original casing preserved

        Returns:
            Deduplicated entity lists in first-seen order
        """
        text_lower = utterance.lower()

        entities = ExtractedEntities(
            genres=self._find_terms(text_lower, GENRE_VOCABULARY),
            activities=self._find_terms(text_lower, ACTIVITY_VOCABULARY),
            time_of_day=self._find_terms(text_lower, TIME_OF_DAY_VOCABULARY),
            artists=self.extract_artists(utterance),
        )

        self.logger.debug(
            "Entities extracted",
            genres=entities.genres,
            activities=entities.activities,
            time_of_day=entities.time_of_day,
            artists=entities.artists,
        )

        return entities

    def extract_artists(self, utterance: str) -> List[str]:
        """Title-Case names following like/love/enjoy/fan of/listen to."""
        artists = [match.group(1) for match in ARTIST_PATTERN.finditer(utterance)]
        return list(dict.fromkeys(artists))

    def _find_terms(self, text_lower: str, vocabulary: List[str]) -> List[str]:
        """Vocabulary terms present in the text, ordered by first occurrence."""
        found = [term for term in vocabulary if term in text_lower]
        return sorted(found, key=text_lower.find)
