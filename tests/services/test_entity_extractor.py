"""
Tests for EntityExtractor.

Validates vocabulary matching for genres, activities and time of day, and
Title-Case artist extraction after preference verbs.
"""

import pytest

from moodmusic.services.components.entity_extractor import EntityExtractor


@pytest.fixture
def extractor():
    """Create an EntityExtractor instance."""
    return EntityExtractor()


class TestVocabularyEntities:
    """Test genre, activity and time-of-day extraction."""

    def test_genres_and_activity(self, extractor):
        entities = extractor.extract_entities("I love jazz and rock while running")

        assert entities.genres == ["jazz", "rock"]
        assert entities.activities == ["running"]
        assert entities.artists == []

    def test_results_follow_mention_order(self, extractor):
        entities = extractor.extract_entities("some blues, then classical")
        assert entities.genres == ["blues", "classical"]

    def test_terms_are_deduplicated(self, extractor):
        entities = extractor.extract_entities("rock and more rock")
        assert entities.genres == ["rock"]

    def test_time_of_day(self, extractor):
        entities = extractor.extract_entities("something for this morning")
        assert entities.time_of_day == ["morning"]

    def test_case_insensitive_vocabulary(self, extractor):
        entities = extractor.extract_entities("JAZZ for STUDYING")

        assert entities.genres == ["jazz"]
        assert entities.activities == ["studying"]

    def test_nothing_found(self, extractor):
        entities = extractor.extract_entities("hmm")

        assert entities.genres == []
        assert entities.activities == []
        assert entities.time_of_day == []
        assert entities.artists == []


class TestArtistExtraction:
    """Test artist name extraction."""

    def test_title_case_run_after_verb(self, extractor):
        assert extractor.extract_artists("I really like Taylor Swift and Arctic Monkeys") == ["Taylor Swift"]

    def test_multiple_verbs(self, extractor):
        artists = extractor.extract_artists("I love Adele and I listen to Bon Iver")
        assert artists == ["Adele", "Bon Iver"]

    def test_lowercase_names_are_not_artists(self, extractor):
        assert extractor.extract_artists("i love adele") == []

    def test_artists_are_deduplicated(self, extractor):
        assert extractor.extract_artists("I like Adele, I really love Adele") == ["Adele"]
