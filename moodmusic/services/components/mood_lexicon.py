"""
Mood Lexicon

Fixed lookup tables consumed by the MoodScorer: mood keywords, intensity
modifiers, compound emotions, contextual idioms, negation tokens and the
escalation vocabulary. Keys of the mood tables follow canonical mood order.
"""

from typing import Dict, List, Tuple

from ...models.conversation_models import Mood

MOOD_KEYWORDS: Dict[Mood, List[str]] = {
    Mood.HAPPY: [
        "happy", "great", "excited", "joy", "wonderful", "amazing", "cheerful",
        "delighted", "pleased", "content", "good", "ecstatic", "thrilled",
        "overjoyed", "blissful", "glad", "jubilant", "elated", "upbeat", "fantastic",
        "terrific", "excellent", "joyful", "cheery", "jolly", "lively", "positive",
        "uplifted", "blessed", "loving", "merry", "optimistic", "pleasant", "sunny",
        "thriving", "beaming", "celebratory", "gleeful", "gratified", "radiant",
    ],
    Mood.SAD: [
        "sad", "down", "depressed", "unhappy", "blue", "melancholy", "gloomy",
        "miserable", "heartbroken", "disappointed", "upset", "sorrow", "grief",
        "dejected", "hopeless", "despondent", "somber", "tearful", "dismal", "lousy",
        "terrible", "horrible", "awful", "dreadful", "weary", "woeful", "broken",
        "crushed", "defeated", "forlorn", "hurt", "mournful", "painful",
        "anguished", "desolate", "devastated", "distressed", "downcast", "low",
        "sullen", "troubled", "alone", "abandoned", "lost", "lonely", "neglected",
    ],
    Mood.ANGRY: [
        "angry", "mad", "furious", "irritated", "annoyed", "frustrated", "enraged",
        "hostile", "irate", "outraged", "agitated", "bitter", "exasperated", "fuming",
        "indignant", "infuriated", "irked", "offended", "resentful", "vexed", "cross",
        "displeased", "heated", "inflamed", "provoked", "riled", "antagonized",
        "livid", "seething", "upset", "disgusted", "fed up", "ticked off",
    ],
    Mood.ANXIOUS: [
        "anxious", "nervous", "worried", "stressed", "uneasy", "apprehensive",
        "concerned", "distressed", "frightened", "jittery", "panicky", "tense",
        "afraid", "alarmed", "troubled", "restless", "agitated", "frantic", "on edge",
        "overwhelmed", "perturbed", "rattled", "strained", "threatened", "unsettled",
        "disturbed", "uncomfortable", "wary", "pressured", "flustered", "jumpy",
    ],
    Mood.ENERGETIC: [
        "energetic", "pumped", "motivated", "energized", "active", "dynamic",
        "lively", "vibrant", "vigorous", "enthusiastic", "peppy", "spirited",
        "hyper", "wired", "invigorated", "zesty", "animated", "vital", "stimulated",
        "charged", "electric", "fired up", "full of energy", "inspired", "passionate",
        "powerful", "strong", "driven", "determined", "eager", "ready", "alive",
    ],
    Mood.CALM: [
        "calm", "peaceful", "relaxed", "chill", "tranquil", "serene", "composed",
        "quiet", "still", "soothing", "mellow", "zen", "balanced", "centered",
        "placid", "untroubled", "gentle", "easy-going", "harmonious", "at ease",
        "comfortable", "content", "cool", "collected", "level-headed", "mindful",
        "restful", "settled", "steady", "undisturbed", "unruffled", "unwound",
        "grounded", "meditative", "poised", "secure", "stable", "carefree",
    ],
    Mood.TIRED: [
        "tired", "exhausted", "sleepy", "fatigued", "weary", "drained", "spent",
        "beat", "burned out", "worn out", "drowsy", "lethargic", "sluggish", "weak",
        "depleted", "enervated", "run-down", "sapped", "tuckered out", "dead tired",
        "dog-tired", "knackered", "bushed", "done in", "pooped", "wiped out",
    ],
    Mood.BORED: [
        "bored", "uninterested", "indifferent", "apathetic", "disinterested",
        "unconcerned", "detached", "disconnected", "dispassionate", "listless",
        "uninspired", "weary", "jaded", "unenthusiastic", "unexcited", "ho-hum",
        "mundane", "tedious", "monotonous", "dull", "lifeless", "unengaged",
        "unmotivated", "unstimulated", "checked out", "spaced out",
    ],
    Mood.NEUTRAL: [
        "okay", "alright", "fine", "normal", "so-so", "average", "moderate",
        "ordinary", "balanced", "regular", "neutral", "indifferent", "unchanged",
        "stable", "acceptable", "decent", "fair", "reasonable", "satisfactory",
        "tolerable", "mediocre", "middling", "usual", "common", "standard", "typical",
    ],
}

INTENSITY_MODIFIERS: Dict[str, float] = {
    "very": 2.0,
    "extremely": 2.5,
    "really": 1.8,
    "so": 1.8,
    "incredibly": 2.5,
    "absolutely": 2.5,
    "totally": 2.0,
    "quite": 1.5,
    "fairly": 1.3,
    "rather": 1.4,
    "pretty": 1.5,
    "somewhat": 0.7,
    "a bit": 0.6,
    "a little": 0.5,
    "slightly": 0.5,
    "mildly": 0.6,
    "kinda": 0.7,
    "sort of": 0.6,
    "hardly": -0.7,
    "barely": -0.8,
    "not very": -0.5,
    "not particularly": -0.6,
    "not": -1.0,
    "don't feel": -1.0,
    "not at all": -1.5,
    "couldn't be more": 2.7,
    "beyond": 2.6,
    "super": 2.2,
    "ridiculously": 2.3,
    "unbelievably": 2.4,
    "just": 0.8,
}

# phrase -> ((mood, weight), ...); weights sum to 1
COMPOUND_EMOTIONS: Dict[str, Tuple[Tuple[Mood, float], ...]] = {
    "bittersweet": ((Mood.HAPPY, 0.5), (Mood.SAD, 0.5)),
    "nervous excitement": ((Mood.ANXIOUS, 0.6), (Mood.ENERGETIC, 0.4)),
    "anxious but hopeful": ((Mood.ANXIOUS, 0.6), (Mood.HAPPY, 0.4)),
    "calm but sad": ((Mood.CALM, 0.6), (Mood.SAD, 0.4)),
    "angry and frustrated": ((Mood.ANGRY, 0.7), (Mood.ENERGETIC, 0.3)),
    "tired but happy": ((Mood.TIRED, 0.5), (Mood.HAPPY, 0.5)),
    "relaxed and content": ((Mood.CALM, 0.6), (Mood.HAPPY, 0.4)),
    "emotionally drained": ((Mood.TIRED, 0.6), (Mood.SAD, 0.4)),
    "anxious and tired": ((Mood.ANXIOUS, 0.6), (Mood.TIRED, 0.4)),
    "motivated but stressed": ((Mood.ENERGETIC, 0.5), (Mood.ANXIOUS, 0.5)),
}

COMPOUND_EMOTION_BOOST = 1.5

CONTEXTUAL_PHRASES: Dict[str, Dict[Mood, float]] = {
    "having a great day": {Mood.HAPPY: 1.5},
    "having a bad day": {Mood.SAD: 1.5},
    "things are going well": {Mood.HAPPY: 1.2},
    "nothing's going right": {Mood.SAD: 1.2},
    "everything's falling apart": {Mood.SAD: 1.8, Mood.ANXIOUS: 0.7},
    "on top of the world": {Mood.HAPPY: 2.0},
    "under a lot of pressure": {Mood.ANXIOUS: 1.5},
    "at my wits' end": {Mood.ANGRY: 1.8, Mood.TIRED: 0.8},
    "couldn't be better": {Mood.HAPPY: 2.0},
    "never been worse": {Mood.SAD: 2.0},
    "stressed out": {Mood.ANXIOUS: 1.8},
    "need to calm down": {Mood.ANXIOUS: 1.2, Mood.ENERGETIC: 0.8},
    "need to relax": {Mood.ANXIOUS: 1.0, Mood.ENERGETIC: 0.6},
    "lost my mind": {Mood.ANXIOUS: 1.3, Mood.ANGRY: 1.0},
    "over the moon": {Mood.HAPPY: 2.0},
    "down in the dumps": {Mood.SAD: 1.5},
    "walking on air": {Mood.HAPPY: 1.8},
    "heart is heavy": {Mood.SAD: 1.5},
    "weight off my shoulders": {Mood.CALM: 1.2, Mood.HAPPY: 0.8},
    "weight on my shoulders": {Mood.ANXIOUS: 1.2, Mood.SAD: 0.7},
    "at peace": {Mood.CALM: 1.5},
    "climbing the walls": {Mood.ENERGETIC: 1.4, Mood.ANXIOUS: 1.0},
    "burning out": {Mood.TIRED: 1.5, Mood.SAD: 0.6},
    "falling apart": {Mood.SAD: 1.4, Mood.ANXIOUS: 1.0},
    "on cloud nine": {Mood.HAPPY: 1.8},
    "bouncing off the walls": {Mood.ENERGETIC: 1.8},
    "dead inside": {Mood.SAD: 1.8, Mood.BORED: 0.7},
    "full of life": {Mood.ENERGETIC: 1.5, Mood.HAPPY: 1.0},
}

NEGATION_TOKENS: List[str] = [
    "not", "don'?t", "isn'?t", "aren'?t", "wasn'?t", "haven'?t", "hasn'?t",
    "won'?t", "can'?t", "couldn'?t", "shouldn'?t", "wouldn'?t",
]

# Keyword must appear within this many tokens after the negation token.
NEGATION_WINDOW_TOKENS = 10
NEGATION_PENALTY = 1.5

# Negating mood X nudges mood Y up.
NEGATION_REBALANCE: Dict[Mood, Tuple[Mood, float]] = {
    Mood.HAPPY: (Mood.SAD, 0.7),
    Mood.SAD: (Mood.NEUTRAL, 0.7),
    Mood.ENERGETIC: (Mood.TIRED, 0.7),
    Mood.CALM: (Mood.ANXIOUS, 0.7),
    Mood.ANXIOUS: (Mood.CALM, 0.7),
}

EXPLICIT_DENIAL_PATTERN = (
    r"\b(?:don'?t|do not|doesn'?t|does not) (?:feel|feeling)\b [a-z\s]{0,15}"
    r"\b(happy|sad|angry|anxious|calm|energetic|tired|bored)\b"
)
EXPLICIT_DENIAL_PENALTY = 2.0

ESCALATION_WORDS: List[str] = [
    "really", "extremely", "incredibly", "very", "so", "much more",
    "getting worse", "even more", "becoming", "increasingly",
]
ESCALATION_FACTOR = 1.2

# Reported mood falls back to neutral at or below these thresholds.
MIN_DOMINANT_SCORE = 0.5
MIN_CONFIDENCE = 0.3
SECONDARY_MOOD_RATIO = 0.7

# Curly quotes from speech-to-text are folded to ASCII before matching.
APOSTROPHES = str.maketrans({"\u2019": "'", "\u2018": "'"})
