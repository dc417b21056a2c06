"""
MoodMusic - Conversational Mood Inference Engine

A deterministic, rule-based engine that infers a listener's mood from a
conversation transcript and drives a small dialogue policy that gathers
genre, artist and activity preferences before handing off to a music
catalog for recommendations.
"""

__version__ = "0.1.0"
__author__ = "MoodMusic Team"
