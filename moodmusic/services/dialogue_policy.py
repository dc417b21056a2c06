"""
Dialogue Policy for the MoodMusic Engine

Stage transitions and next-move selection over a DialogueContext.

Stages only move forward. Next-move rules are checked top to bottom and the
first match wins.
"""

from typing import Optional

import structlog

from ..models.conversation_models import (
    ConversationStage,
    DialogueContext,
    Intent,
    Topic,
)

logger = structlog.get_logger(__name__)

# Primary intent -> topic, applied when the intent is confident enough
INTENT_TOPICS = {
    Intent.GREETING: Topic.GREETING,
    Intent.MOOD_SHARING: Topic.MOOD_EXPLORATION,
    Intent.ASKING_FOR_RECOMMENDATION: Topic.RECOMMENDATION,
    Intent.SPECIFYING_GENRE: Topic.RECOMMENDATION,
    Intent.SPECIFYING_ACTIVITY: Topic.ACTIVITY_QUESTION,
    Intent.CONFUSED: Topic.CLARIFICATION,
}

TOPIC_CONFIDENCE_THRESHOLD = 0.6
CLARIFICATION_TURN_THRESHOLD = 2


class DialoguePolicy:
    """
    Deterministic conversation state machine.

    Stages: initial -> moodDetected -> preferencesGathered ->
    readyForRecommendations.
    """

    def __init__(self):
        self.logger = logger.bind(component="DialoguePolicy")

    def update_topic(
        self,
        context: DialogueContext,
        primary_intent: Optional[Intent],
        confidence: float
    ) -> None:
        """Map a confident primary intent onto the current topic."""
        if primary_intent is None or confidence <= TOPIC_CONFIDENCE_THRESHOLD:
            return

        if primary_intent == Intent.GRATITUDE:
            context.follow_up_topics.append(Topic.FOLLOW_UP)
        elif primary_intent in INTENT_TOPICS:
            context.current_topic = INTENT_TOPICS[primary_intent]

    def advance_stage(self, context: DialogueContext, primary_intent: Optional[Intent]) -> None:
        """
        Move the conversation stage forward if this turn earned it.

        Args:
            context: Session context, updated in place
            primary_intent: This turn's primary intent
        """
        previous = context.conversation_stage

        if context.detected_moods and context.conversation_stage == ConversationStage.INITIAL:
            self._promote(context, ConversationStage.MOOD_DETECTED)

        if context.detected_moods and context.has_preferences:
            self._promote(context, ConversationStage.PREFERENCES_GATHERED)

        if (primary_intent == Intent.AFFIRMING
                and context.conversation_stage == ConversationStage.PREFERENCES_GATHERED):
            self._promote(context, ConversationStage.READY_FOR_RECOMMENDATIONS)

        if context.conversation_stage != previous:
            self.logger.debug(
                "Stage advanced",
                from_stage=previous.value,
                to_stage=context.conversation_stage.value
            )

    def next_move(self, context: DialogueContext) -> Topic:
        """
        Select the next conversational topic.

        The follow-up rule consumes the head of the follow-up queue.

        Args:
            context: Session context

        Returns:
            Topic to respond with
        """
        if context.is_fresh:
            return Topic.GREETING

        if (context.detected_moods
                and context.conversation_stage == ConversationStage.MOOD_DETECTED
                and not context.question_asked):
            return Topic.MOOD_EXPLORATION

        if (context.detected_moods
                and not context.has_preferences
                and not context.question_asked):
            return Topic.GENRE_QUESTION

        if ((context.detected_moods and context.has_preferences)
                or context.conversation_stage == ConversationStage.READY_FOR_RECOMMENDATIONS):
            return Topic.RECOMMENDATION

        if (context.current_topic == Topic.CLARIFICATION
                or (context.conversation_stage == ConversationStage.INITIAL
                    and context.turn_count > CLARIFICATION_TURN_THRESHOLD)):
            return Topic.CLARIFICATION

        if context.follow_up_topics:
            return context.follow_up_topics.pop(0)

        return context.current_topic

    def _promote(self, context: DialogueContext, stage: ConversationStage) -> None:
        if stage.rank > context.conversation_stage.rank:
            context.conversation_stage = stage
