"""
Mood Scorer Component

Turns the user side of a transcript into per-mood scores, a dominant mood,
an optional secondary mood and a confidence value.

Every call recomputes the judgment from scratch over the whole transcript.
The scoring passes run in a fixed order (keywords, compound emotions,
contextual idioms, negations, escalation) because later passes read the
scores produced by earlier ones.
"""

import re
from typing import Any, Dict, List, Optional, Sequence, Union

import structlog

from ...models.conversation_models import (
    Mood,
    MoodAnalysisResult,
    SecondaryMood,
    Speaker,
    TranscriptEntry,
)
from . import mood_lexicon as lexicon

logger = structlog.get_logger(__name__)

TranscriptLike = Sequence[Union[TranscriptEntry, Dict[str, Any]]]


class MoodScorer:
    """
    Deterministic lexical mood scorer.

    Combines:
    - Keyword matching with optional intensity modifiers
    - Compound emotion phrases
    - Contextual idioms
    - Negation handling with cross-mood rebalancing
    - Escalation over consecutive user turns
    """

    def __init__(self):
        """Initialize mood scorer and precompile lexicon patterns."""
        self.logger = logger.bind(component="MoodScorer")

        modifiers = "|".join(re.escape(m) for m in lexicon.INTENSITY_MODIFIERS)
        self.keyword_patterns: Dict[Mood, List[re.Pattern]] = {
            mood: [
                re.compile(
                    rf"(?:\b(?P<modifier>{modifiers})\s+)?\b{re.escape(keyword)}\b",
                    re.IGNORECASE,
                )
                for keyword in keywords
            ]
            for mood, keywords in lexicon.MOOD_KEYWORDS.items()
        }

        negations = "|".join(lexicon.NEGATION_TOKENS)
        gap = lexicon.NEGATION_WINDOW_TOKENS - 1
        self.negation_patterns: Dict[Mood, re.Pattern] = {
            mood: re.compile(
                rf"\b(?:{negations})\b\s+(?:\S+\s+){{0,{gap}}}?"
                rf"(?:{'|'.join(re.escape(k) for k in keywords)})\b",
                re.IGNORECASE,
            )
            for mood, keywords in lexicon.MOOD_KEYWORDS.items()
        }

        self.denial_pattern = re.compile(lexicon.EXPLICIT_DENIAL_PATTERN, re.IGNORECASE)

    def analyze_mood(self, transcript: TranscriptLike) -> MoodAnalysisResult:
        """
        Analyze the user side of a transcript.

        Args:
            transcript: Ordered transcript entries; agent turns are ignored

        Returns:
            Fresh mood analysis over the entire transcript
        """
        user_messages = self._user_messages(transcript)
        text = " ".join(user_messages)

        scores: Dict[Mood, float] = {mood: 0.0 for mood in Mood}

        self._analyze_keywords(text, scores)
        self._analyze_compound_emotions(text, scores)
        self._analyze_contextual_phrases(text, scores)
        self._analyze_negations(text, scores)
        if len(user_messages) > 1:
            self._analyze_intensity_over_time(user_messages, scores)

        # Only strictly positive scores can dominate; ties keep canonical order.
        dominant_mood = Mood.NEUTRAL
        highest_score = 0.0
        for mood, score in scores.items():
            if score > highest_score:
                dominant_mood = mood
                highest_score = score

        total_abs_score = sum(abs(score) for score in scores.values())
        confidence = highest_score / total_abs_score if total_abs_score > 0 else 0.0
        confidence = min(confidence, 1.0)

        secondary_mood = self._get_secondary_mood(scores, dominant_mood, highest_score)

        reported_mood = dominant_mood
        if highest_score <= lexicon.MIN_DOMINANT_SCORE or confidence < lexicon.MIN_CONFIDENCE:
            reported_mood = Mood.NEUTRAL

        self.logger.debug(
            "Mood analyzed",
            user_messages=len(user_messages),
            dominant_mood=reported_mood.value,
            raw_dominant=dominant_mood.value,
            confidence=round(confidence, 3),
        )

        return MoodAnalysisResult(
            dominant_mood=reported_mood,
            confidence=confidence,
            scores=scores,
            secondary_mood=secondary_mood,
        )

    def _user_messages(self, transcript: TranscriptLike) -> List[str]:
        """Lowercased user utterances in transcript order, apostrophes folded to ASCII."""
        messages = []
        for entry in transcript:
            if isinstance(entry, dict):
                entry = TranscriptEntry.model_validate(entry)
            if entry.speaker == Speaker.USER:
                messages.append(entry.text.translate(lexicon.APOSTROPHES).lower())
        return messages

    def _analyze_keywords(self, text: str, scores: Dict[Mood, float]) -> None:
        """Score direct keyword hits, scaled by a preceding intensity modifier."""
        for mood, patterns in self.keyword_patterns.items():
            for pattern in patterns:
                for match in pattern.finditer(text):
                    score = 1.0
                    modifier = match.group("modifier")
                    if modifier:
                        score *= lexicon.INTENSITY_MODIFIERS[modifier.lower()]
                    scores[mood] += score

    def _analyze_compound_emotions(self, text: str, scores: Dict[Mood, float]) -> None:
        for phrase, blend in lexicon.COMPOUND_EMOTIONS.items():
            if phrase in text:
                for mood, weight in blend:
                    scores[mood] += weight * lexicon.COMPOUND_EMOTION_BOOST

    def _analyze_contextual_phrases(self, text: str, scores: Dict[Mood, float]) -> None:
        for phrase, deltas in lexicon.CONTEXTUAL_PHRASES.items():
            if phrase in text:
                for mood, delta in deltas.items():
                    scores[mood] += delta

    def _analyze_negations(self, text: str, scores: Dict[Mood, float]) -> None:
        """
        Penalize negated moods and shift weight to their counterparts.

        Args:
            text: Joined lowercase user text
            scores: Mood scores to update in place
        """
        for mood, pattern in self.negation_patterns.items():
            for _ in pattern.finditer(text):
                scores[mood] -= lexicon.NEGATION_PENALTY
                if mood in lexicon.NEGATION_REBALANCE:
                    target, boost = lexicon.NEGATION_REBALANCE[mood]
                    scores[target] += boost

        for match in self.denial_pattern.finditer(text):
            denied = Mood(match.group(1).lower())
            scores[denied] -= lexicon.EXPLICIT_DENIAL_PENALTY

    def _analyze_intensity_over_time(self, messages: List[str], scores: Dict[Mood, float]) -> None:
        """Boost the two leading moods once if the latest turn escalates."""
        recent_message = messages[-1]

        for word in lexicon.ESCALATION_WORDS:
            if word in recent_message:
                top_two = sorted(scores.items(), key=lambda item: item[1], reverse=True)[:2]
                for mood, score in top_two:
                    if score > 0:
                        scores[mood] *= lexicon.ESCALATION_FACTOR
                self.logger.debug("Escalation applied", trigger=word)
                break

    def _get_secondary_mood(
        self,
        scores: Dict[Mood, float],
        primary_mood: Mood,
        primary_score: float
    ) -> Optional[SecondaryMood]:
        """Runner-up mood if it reaches 70% of the primary score."""
        secondary_mood = None
        secondary_score = 0.0

        for mood, score in scores.items():
            if mood != primary_mood and score > secondary_score:
                secondary_mood = mood
                secondary_score = score

        if secondary_mood is not None and secondary_score >= primary_score * lexicon.SECONDARY_MOOD_RATIO:
            return SecondaryMood(mood=secondary_mood, score=secondary_score)

        return None
