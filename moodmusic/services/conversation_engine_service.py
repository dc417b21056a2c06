"""
Conversation Engine Service for the MoodMusic Engine

Per-turn facade over the analysis components, the context manager, the
dialogue policy and the response generator. One engine owns one
conversation's DialogueContext and transcript.
"""

import random
from typing import Any, Dict, List, Optional, Sequence, Union

import structlog

from ..models.conversation_models import (
    DialogueContext,
    EngineResponse,
    Mood,
    MoodAnalysisResult,
    Speaker,
    TranscriptEntry,
    TurnAnalysis,
)
from .components import EntityExtractor, IntentClassifier, MoodScorer
from .components.mood_lexicon import APOSTROPHES
from .conversation_context_service import ConversationContextManager
from .dialogue_policy import DialoguePolicy
from .response_generator import ResponseGenerator

logger = structlog.get_logger(__name__)

HistoryLike = Sequence[Union[TranscriptEntry, Dict[str, Any]]]

CONTINUOUS_MOOD_THRESHOLD = 0.4
GENRE_HINT_LIMIT = 5
DEFAULT_HINT_LIMIT = 3


class ConversationEngine:
    """
    Conversation engine for mood-driven music dialogue.

    Each call to ``process_input`` runs the full turn pipeline:
    1. Intent, entity and single-utterance mood analysis
    2. Context update (topic, moods, preferences, stage)
    3. Next-move selection
    4. Response rendering
    """

    def __init__(
        self,
        context: Optional[DialogueContext] = None,
        rng: Optional[random.Random] = None,
        mood_scorer: Optional[MoodScorer] = None,
        intent_classifier: Optional[IntentClassifier] = None,
        entity_extractor: Optional[EntityExtractor] = None,
        policy: Optional[DialoguePolicy] = None,
    ):
        """
        Initialize the engine.

        Args:
            context: Existing dialogue context to continue, or None for a new one
            rng: Randomness source for template selection
            mood_scorer: Mood scorer override
            intent_classifier: Intent classifier override
            entity_extractor: Entity extractor override
            policy: Dialogue policy override
        """
        self.context = context if context is not None else DialogueContext()
        self.transcript: List[TranscriptEntry] = list(self.context.conversation_history)

        self.mood_scorer = mood_scorer or MoodScorer()
        self.intent_classifier = intent_classifier or IntentClassifier()
        self.entity_extractor = entity_extractor or EntityExtractor()
        self.policy = policy or DialoguePolicy()
        self.context_manager = ConversationContextManager(self.policy)
        self.response_generator = ResponseGenerator(rng)

        self.logger = logger.bind(component="ConversationEngine")

    def process_input(self, user_input: str, conversation_history: HistoryLike) -> EngineResponse:
        """
        Process one user utterance and produce the agent's reply.

        Args:
            user_input: The new user utterance
            conversation_history: Transcript preceding this utterance

        Returns:
            EngineResponse with reply text, chosen topic, analysis and a
            context snapshot
        """
        user_input = user_input or ""
        history = self._normalize(conversation_history)
        self.context.conversation_history = history

        analysis = self._analyze_input(user_input, history)
        self.context_manager.update_context(self.context, analysis)

        topic = self.policy.next_move(self.context)
        text = self.response_generator.generate_response(topic, self.context)

        self.logger.debug(
            "Turn processed",
            primary_intent=analysis.intents.primary_intent.value if analysis.intents.primary_intent else None,
            mood=analysis.mood_analysis.dominant_mood.value,
            topic=topic.value,
            stage=self.context.conversation_stage.value,
        )

        return EngineResponse(
            text=text,
            topic=topic,
            analysis=analysis,
            context=self.context.snapshot(),
        )

    def respond(self, user_input: str) -> EngineResponse:
        """
        Process an utterance against the engine's own transcript.

        Both the user turn and the reply are appended to the transcript.
        """
        response = self.process_input(user_input, self.transcript)
        self.transcript.append(TranscriptEntry(speaker=Speaker.USER, text=user_input or ""))
        self.transcript.append(TranscriptEntry(speaker=Speaker.AGENT, text=response.text))
        return response

    def analyze_transcript(self, transcript: Optional[HistoryLike] = None) -> MoodAnalysisResult:
        """Score mood over a whole transcript, defaulting to the engine's own."""
        if transcript is None:
            transcript = self.transcript
        return self.mood_scorer.analyze_mood(transcript)

    def generate_conclusion(self, mood: Union[Mood, str]) -> str:
        """Render the closing message for the given mood."""
        return self.response_generator.generate_conclusion(Mood(mood), self.context)

    def current_mood(
        self,
        transcript: Optional[HistoryLike] = None,
        threshold: float = CONTINUOUS_MOOD_THRESHOLD
    ) -> Optional[Mood]:
        """
        Mood to display while the conversation is still running.

        Returns None until the transcript has more than one entry and the
        analysis is confident enough.
        """
        if transcript is None:
            transcript = self.transcript
        if len(transcript) <= 1:
            return None

        result = self.mood_scorer.analyze_mood(transcript)
        if result.confidence > threshold:
            return result.dominant_mood
        return None

    def recommendation_hint(self, mood: Union[Mood, str]) -> Dict[str, Any]:
        """
        Arguments for the recommendation collaborator.

        The first mentioned genre narrows the search and raises the limit.
        """
        genre = self.context.mentioned_genres[0] if self.context.mentioned_genres else None
        return {
            "mood": Mood(mood),
            "limit": GENRE_HINT_LIMIT if genre else DEFAULT_HINT_LIMIT,
            "genre": genre,
        }

    def reset(self) -> None:
        """Start a new conversation with a fresh context and empty transcript."""
        self.context = DialogueContext()
        self.transcript = []
        self.logger.info("Conversation reset")

    def _analyze_input(self, user_input: str, history: List[TranscriptEntry]) -> TurnAnalysis:
        lowered = user_input.translate(APOSTROPHES).lower()
        last_agent_utterance = self._last_agent_utterance(history)

        intents = self.intent_classifier.detect_intents(lowered, last_agent_utterance)
        entities = self.entity_extractor.extract_entities(user_input)
        mood_analysis = self.mood_scorer.analyze_mood(
            [TranscriptEntry(speaker=Speaker.USER, text=lowered)]
        )

        return TurnAnalysis(
            intents=intents,
            entities=entities,
            mood_analysis=mood_analysis,
            original_input=user_input,
        )

    def _last_agent_utterance(self, history: List[TranscriptEntry]) -> Optional[str]:
        for entry in reversed(history):
            if entry.speaker == Speaker.AGENT:
                return entry.text
        return None

    def _normalize(self, history: Optional[HistoryLike]) -> List[TranscriptEntry]:
        if not history:
            return []
        return [
            entry if isinstance(entry, TranscriptEntry) else TranscriptEntry.model_validate(entry)
            for entry in history
        ]
