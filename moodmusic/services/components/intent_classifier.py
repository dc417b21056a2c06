"""
Intent Classifier Component

Pattern-based intent detection for a single user utterance. Intents are not
mutually exclusive: every intent gets its own confidence, and the previous
agent utterance can boost the intents it was prompting for.
"""

import re
from typing import Dict, List, Optional, Tuple

import structlog

from ...models.conversation_models import Intent, IntentAnalysis
from .entity_extractor import ACTIVITY_VOCABULARY, GENRE_VOCABULARY

logger = structlog.get_logger(__name__)

MOOD_WORDS = (
    "happy|sad|angry|content|excited|bored|anxious|calm|stressed|relaxed|depressed|"
    "overwhelmed|tired|energetic|good|bad|okay|fine|great|terrible|awful|wonderful|"
    "amazing|down|up|low"
)

CONTEXT_BOOST = 0.3


class IntentClassifier:
    """
    Rule-based intent classifier.

    Each intent fires from one fixed pattern with one fixed base confidence.
    Table order doubles as the tie-break order for the primary intent.
    """

    def __init__(self):
        """Initialize intent patterns and prompt cues."""
        self.logger = logger.bind(component="IntentClassifier")

        # (intent, base confidence, patterns)
        self.intent_patterns: List[Tuple[Intent, float, List[re.Pattern]]] = [
            (Intent.GREETING, 0.9, [
                re.compile(r"^(?:hi|hello|hey|greetings|howdy|what'?s? up|yo|sup)\b", re.IGNORECASE),
            ]),
            (Intent.MOOD_SHARING, 0.85, [
                re.compile(
                    r"\b(?:i(?:'?m| am)|feeling|feel|i've been|having|had) "
                    r"(?:been |a |very |really |extremely |quite |somewhat )?"
                    r"(?:feeling |felt )?"
                    rf"(?:{MOOD_WORDS})\b",
                    re.IGNORECASE,
                ),
            ]),
            (Intent.ASKING_FOR_RECOMMENDATION, 0.8, [
                re.compile(
                    r"\b(?:recommend|suggestion|suggest|what|give me|play|find|looking for) "
                    r"(?:some |a |good |great |)(?:music|songs?|tracks?|artists?|bands?)\b",
                    re.IGNORECASE,
                ),
                re.compile(
                    r"\bwhat (?:songs?|music|artists?) (?:should|would|could|can) (?:i|you) "
                    r"(?:recommend|suggest|play|listen to)\b",
                    re.IGNORECASE,
                ),
            ]),
            (Intent.REJECTING, 0.8, [
                re.compile(
                    r"\b(?:no|nope|not|don'?t|dislike|hate|bad|wrong|different|something else)\b",
                    re.IGNORECASE,
                ),
            ]),
            (Intent.AFFIRMING, 0.8, [
                re.compile(
                    r"\b(?:yes|yeah|yep|sure|definitely|absolutely|correct|right|ok|okay|"
                    r"sounds? good|perfect|great|that'?s? (?:good|great|fine|perfect))\b",
                    re.IGNORECASE,
                ),
            ]),
            (Intent.QUESTIONING, 0.85, [
                re.compile(r"\b(?:what|why|how|when|where|which|who|can you|could you|would you)\b.*\?", re.IGNORECASE),
                re.compile(r"\?\s*$"),
            ]),
            (Intent.GRATITUDE, 0.9, [
                re.compile(r"\b(?:thanks|thank you|thx|ty|appreciate\w*|grateful)\b", re.IGNORECASE),
            ]),
            (Intent.CONFUSED, 0.7, [
                re.compile(
                    r"\b(?:don'?t understand|confused|what do you mean|what'?s? (?:that|this)|what are you|huh)\b",
                    re.IGNORECASE,
                ),
                re.compile(r"^\s*what\s*\??\s*$", re.IGNORECASE),
            ]),
        ]

        self.vocabulary_intents: List[Tuple[Intent, float, List[str]]] = [
            (Intent.SPECIFYING_GENRE, 0.75, GENRE_VOCABULARY),
            (Intent.SPECIFYING_ACTIVITY, 0.7, ACTIVITY_VOCABULARY),
        ]

        # Phrases in the previous agent turn that prompt for a given intent
        self.prompt_cues: Dict[Intent, List[str]] = {
            Intent.MOOD_SHARING: ["How are you feeling", "how you're feeling"],
            Intent.SPECIFYING_GENRE: ["kind of music", "genres"],
            Intent.SPECIFYING_ACTIVITY: ["activity", "doing"],
        }

    def detect_intents(self, utterance: str, last_agent_utterance: Optional[str] = None) -> IntentAnalysis:
        """
        Score every intent for one utterance.

        Args:
            utterance: User utterance (normalized to lowercase here)
            last_agent_utterance: Previous agent utterance, if any

        Returns:
            Independent intent confidences and the primary intent
        """
        text = utterance.lower()
        scores: Dict[Intent, float] = {intent: 0.0 for intent in Intent}

        for intent, confidence, patterns in self.intent_patterns:
            if any(pattern.search(text) for pattern in patterns):
                scores[intent] = confidence

        for intent, confidence, vocabulary in self.vocabulary_intents:
            if any(term in text for term in vocabulary):
                scores[intent] = confidence

        if last_agent_utterance:
            for intent, cues in self.prompt_cues.items():
                if any(cue in last_agent_utterance for cue in cues):
                    scores[intent] += CONTEXT_BOOST

        primary_intent = None
        primary_confidence = 0.0
        for intent, score in scores.items():
            if score > primary_confidence:
                primary_intent = intent
                primary_confidence = score

        self.logger.debug(
            "Intents detected",
            primary_intent=primary_intent.value if primary_intent else None,
            primary_confidence=primary_confidence,
            active_intents=[i.value for i, s in scores.items() if s > 0],
        )

        return IntentAnalysis(
            scores=scores,
            primary_intent=primary_intent,
            primary_confidence=primary_confidence,
        )
