"""
Conversation Models for the MoodMusic Engine

Pydantic models and enums shared by the mood scorer, intent classifier,
entity extractor, dialogue policy and response generator.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class Mood(str, Enum):
    """Canonical moods. Declaration order is the tie-break order."""
    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    ANXIOUS = "anxious"
    ENERGETIC = "energetic"
    CALM = "calm"
    TIRED = "tired"
    BORED = "bored"
    NEUTRAL = "neutral"


class Speaker(str, Enum):
    """Transcript speakers, using the wire values of the host transcript."""
    USER = "You"
    AGENT = "AI"


class Intent(str, Enum):
    """User intents. Declaration order is the tie-break order."""
    GREETING = "greeting"
    MOOD_SHARING = "moodSharing"
    ASKING_FOR_RECOMMENDATION = "askingForRecommendation"
    SPECIFYING_GENRE = "specifyingGenre"
    SPECIFYING_ACTIVITY = "specifyingActivity"
    REJECTING = "rejecting"
    AFFIRMING = "affirming"
    QUESTIONING = "questioning"
    GRATITUDE = "gratitude"
    CONFUSED = "confused"


class Topic(str, Enum):
    """Conversational moves the dialogue policy can select."""
    GREETING = "greeting"
    MOOD_EXPLORATION = "moodExploration"
    GENRE_QUESTION = "genreQuestion"
    ACTIVITY_QUESTION = "activityQuestion"
    CLARIFICATION = "clarification"
    RECOMMENDATION = "recommendation"
    FOLLOW_UP = "followUp"


class ConversationStage(str, Enum):
    """Coarse, monotonic progress marker. Declaration order is progress order."""
    INITIAL = "initial"
    MOOD_DETECTED = "moodDetected"
    PREFERENCES_GATHERED = "preferencesGathered"
    READY_FOR_RECOMMENDATIONS = "readyForRecommendations"

    @property
    def rank(self) -> int:
        return list(ConversationStage).index(self)


class TranscriptEntry(BaseModel):
    """One line of the conversation transcript."""

    speaker: Speaker = Field(..., description="Who said it: 'You' or 'AI'")
    text: str = Field(..., description="Utterance text")


class SecondaryMood(BaseModel):
    """Runner-up mood reported when it is close to the dominant one."""

    mood: Mood
    score: float


class MoodAnalysisResult(BaseModel):
    """Mood judgment recomputed over the whole transcript."""

    dominant_mood: Mood = Field(default=Mood.NEUTRAL, description="Reported mood after the neutral override")
    confidence: float = Field(default=0.0, ge=0.0, le=1.0, description="Dominant score over total absolute signal")
    scores: Dict[Mood, float] = Field(default_factory=dict, description="Signed score per mood")
    secondary_mood: Optional[SecondaryMood] = Field(default=None, description="Close runner-up, if any")

    @property
    def mood(self) -> Mood:
        """Alias matching the host's naming."""
        return self.dominant_mood


class IntentAnalysis(BaseModel):
    """Independent confidences for every intent plus the arg-max."""

    scores: Dict[Intent, float] = Field(default_factory=dict, description="Unclamped confidence per intent")
    primary_intent: Optional[Intent] = Field(default=None, description="Highest scoring intent, None if all zero")
    primary_confidence: float = Field(default=0.0, description="Score of the primary intent")


class ExtractedEntities(BaseModel):
    """Entities found in one utterance, deduplicated in first-seen order."""

    genres: List[str] = Field(default_factory=list)
    activities: List[str] = Field(default_factory=list)
    time_of_day: List[str] = Field(default_factory=list)
    artists: List[str] = Field(default_factory=list)


class TurnAnalysis(BaseModel):
    """Everything learned from a single user utterance."""

    intents: IntentAnalysis
    entities: ExtractedEntities
    mood_analysis: MoodAnalysisResult
    original_input: str


class UserPreferences(BaseModel):
    """Preferences collected over the session."""

    activity: Optional[str] = None


class DialogueContext(BaseModel):
    """
    Mutable per-session dialogue state.

    One instance is owned by exactly one conversation. It is created at
    session start, mutated every turn and replaced when a new conversation
    begins.
    """

    current_topic: Topic = Topic.GREETING
    detected_moods: List[Mood] = Field(default_factory=list, description="Most recent first, unique")
    mentioned_genres: List[str] = Field(default_factory=list, description="Insertion order, unique")
    mentioned_artists: List[str] = Field(default_factory=list, description="Insertion order, unique")
    conversation_stage: ConversationStage = ConversationStage.INITIAL
    user_preferences: UserPreferences = Field(default_factory=UserPreferences)
    conversation_history: List[TranscriptEntry] = Field(default_factory=list)
    question_asked: bool = False
    follow_up_topics: List[Topic] = Field(default_factory=list, description="FIFO queue of pending topics")

    @property
    def turn_count(self) -> int:
        return len(self.conversation_history)

    @property
    def is_fresh(self) -> bool:
        """No turns taken yet: empty history and nothing gathered."""
        return (
            not self.conversation_history
            and not self.detected_moods
            and not self.has_preferences
            and self.conversation_stage == ConversationStage.INITIAL
        )

    @property
    def has_preferences(self) -> bool:
        return bool(self.mentioned_genres or self.mentioned_artists)

    def snapshot(self) -> "DialogueContext":
        """Deep copy handed to collaborators so they cannot mutate session state."""
        return self.model_copy(deep=True)


class EngineResponse(BaseModel):
    """Result of processing one user turn."""

    text: str
    topic: Topic
    analysis: TurnAnalysis
    context: DialogueContext
