"""
Response Generator for the MoodMusic Engine

Renders a dialogue topic into text: random template choice, placeholder
substitution, an optional conversational enhancer, and end-of-conversation
conclusions. All randomness comes from an injected ``random.Random`` so tests
and replays can be made deterministic.
"""

import random
from typing import Dict, List, Optional

import structlog

from ..models.conversation_models import DialogueContext, Mood, Topic

logger = structlog.get_logger(__name__)

DIALOG_FLOW: Dict[Topic, List[str]] = {
    Topic.GREETING: [
        "Hi there! I'm here to recommend music that matches your mood. How are you feeling today?",
        "Hello! I'd love to find the perfect music for your current mood. How are you feeling?",
        "Welcome! Tell me how you're feeling, and I'll suggest some music that might resonate with you.",
    ],
    Topic.MOOD_EXPLORATION: [
        "Can you tell me more about why you're feeling {mood}?",
        "How long have you been feeling {mood}?",
        "What kind of day have you had that's making you feel {mood}?",
        "On a scale from 1-10, how strongly are you feeling {mood}?",
    ],
    Topic.GENRE_QUESTION: [
        "What kind of music do you usually enjoy when you're feeling {mood}?",
        "Do you have any favorite genres or artists you listen to when you're feeling {mood}?",
        "Are there specific types of music that help when you're feeling this way?",
    ],
    Topic.ACTIVITY_QUESTION: [
        "Are you doing anything specific right now that you need music for?",
        "Will you be listening to this music during a particular activity?",
        "Is this for background music or something you'll be actively listening to?",
    ],
    Topic.CLARIFICATION: [
        "I'm not quite sure I understood. Could you tell me more about how you're feeling?",
        "I'd like to get a better sense of your mood. Could you describe it differently?",
        "To find the perfect music, I need to understand your current mood better. Can you elaborate?",
    ],
    Topic.RECOMMENDATION: [
        "Based on what you've told me, I think I have some great {genre} recommendations that match your {mood} mood.",
        "I think I've found some music that will be perfect for your {mood} state of mind.",
        "Given how you're feeling, I've selected some {genre} tracks that might resonate with you right now.",
    ],
    Topic.FOLLOW_UP: [
        "How do these recommendations sound to you?",
        "Do any of these suggestions match what you were looking for?",
        "Would you like me to find something different instead?",
    ],
}

# Substituted for {mood} when no mood has been detected yet
MOOD_FALLBACKS: Dict[Topic, str] = {
    Topic.MOOD_EXPLORATION: "this way",
    Topic.GENRE_QUESTION: "like this",
    Topic.RECOMMENDATION: "current",
}
DEFAULT_MOOD_FALLBACK = "this way"
GENRE_FALLBACK = "music"
ACTIVITY_FALLBACK = "listening"

ACKNOWLEDGMENTS = ["I see. ", "Got it. ", "I understand. ", "Interesting. "]
ENTHUSIASM = [
    "I'm really enjoying our conversation! ",
    "This is helping me understand your music needs better. ",
]


class ResponseGenerator:
    """
    Template-based response renderer.

    Args:
        rng: Source of randomness; defaults to a fresh unseeded Random
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.logger = logger.bind(component="ResponseGenerator")

    def generate_response(self, topic: Topic, context: DialogueContext) -> str:
        """
        Render a response for the selected topic.

        Args:
            topic: Topic chosen by the dialogue policy
            context: Session context used for placeholder values

        Returns:
            Response text
        """
        templates = DIALOG_FLOW.get(topic, DIALOG_FLOW[Topic.GREETING])
        template = self.rng.choice(templates)

        response = self._fill_placeholders(template, topic, context)
        response = self._add_conversational_elements(response, context)

        self.logger.debug("Response generated", topic=getattr(topic, "value", topic), length=len(response))
        return response

    def generate_conclusion(self, dominant_mood: Mood, context: DialogueContext) -> str:
        """
        Render the closing message that accompanies recommendations.

        Genre- and artist-aware templates join the pool when those
        preferences are known; one template is drawn from the whole pool.
        """
        mood = dominant_mood.value if isinstance(dominant_mood, Mood) else str(dominant_mood)
        conclusions = [
            f"Based on our conversation, I think you're feeling {mood}. Here are some songs that might match your mood!",
            f"I've analyzed our chat and it seems like you're in a {mood} mood. Let me recommend some music that complements this feeling.",
            f"From what we've discussed, your mood seems {mood}. I've selected some tracks that should resonate with how you're feeling.",
            f"I've gathered that you're feeling {mood} right now. Here's a selection of music that might be perfect for your current state of mind.",
        ]

        genres = context.mentioned_genres
        if genres:
            conclusions.extend([
                f"Since you mentioned liking {' and '.join(genres)}, I've focused on finding {mood} songs in those genres.",
                f"I've found some {mood} {genres[0]} music that I think you'll enjoy based on our conversation.",
            ])

        artists = context.mentioned_artists
        if artists:
            conclusions.extend([
                f"I've included some tracks similar to {artists[0]} that match your {mood} mood.",
                f"Based on your interest in {' and '.join(artists)}, I think these {mood} songs will be perfect for you.",
            ])

        return self.rng.choice(conclusions)

    def _fill_placeholders(self, template: str, topic: Topic, context: DialogueContext) -> str:
        if "{mood}" in template:
            if context.detected_moods:
                mood = context.detected_moods[0].value
            else:
                mood = MOOD_FALLBACKS.get(topic, DEFAULT_MOOD_FALLBACK)
            template = template.replace("{mood}", mood)

        if "{genre}" in template:
            genre = context.mentioned_genres[0] if context.mentioned_genres else GENRE_FALLBACK
            template = template.replace("{genre}", genre)

        if "{activity}" in template:
            activity = context.user_preferences.activity or ACTIVITY_FALLBACK
            template = template.replace("{activity}", activity)

        return template

    def _add_conversational_elements(self, response: str, context: DialogueContext) -> str:
        """Prepend one enhancer drawn from every pool whose gate opened."""
        enhancers: List[str] = []
        turn_count = context.turn_count

        if turn_count > 3 and self.rng.random() > 0.7:
            enhancers.extend(ACKNOWLEDGMENTS)

        if turn_count > 5 and self.rng.random() > 0.8:
            enhancers.extend(ENTHUSIASM)

        if context.detected_moods and self.rng.random() > 0.7:
            enhancers.append(f"It sounds like you're feeling {context.detected_moods[0].value}. ")

        if len(context.mentioned_genres) > 1 and self.rng.random() > 0.7:
            enhancers.append(
                f"You seem to enjoy a variety of music like {' and '.join(context.mentioned_genres[:2])}. "
            )

        if enhancers:
            return self.rng.choice(enhancers) + response

        return response
