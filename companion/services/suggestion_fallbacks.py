"""Static suggestion sets keyed by a keyword-detected topic."""

import re

# Checked in order; the first topic with a matching pattern wins.
TOPIC_PATTERNS: dict[str, re.Pattern[str]] = {
    "anxiety": re.compile(
        r"\b(anxi(?:ous|ety)|panic\w*|worr(?:y|ied|ying|ies)|nervous|on edge|racing thoughts?)\b",
        re.IGNORECASE,
    ),
    "depression": re.compile(
        r"\b(depress\w*|sad(?:ness)?|hopeless\w*|empty|down|unmotivated|worthless)\b",
        re.IGNORECASE,
    ),
    "sleep": re.compile(
        r"\b(sleep\w*|insomnia|tired|exhausted|nightmares?|can'?t rest|awake)\b",
        re.IGNORECASE,
    ),
    "stress": re.compile(
        r"\b(stress\w*|overwhelm\w*|pressure|burn(?:ed|t)? ?out|too much)\b",
        re.IGNORECASE,
    ),
    "relationships": re.compile(
        r"\b(relationships?|partner|boyfriend|girlfriend|husband|wife|friends?|family|"
        r"lonely|loneliness|break ?up|divorce)\b",
        re.IGNORECASE,
    ),
    "mindfulness": re.compile(
        r"\b(mindful\w*|meditat\w*|breath\w*|grounding|present moment|relax\w*|calm)\b",
        re.IGNORECASE,
    ),
    "work": re.compile(
        r"\b(work|job|boss|career|cowork\w*|colleagues?|deadlines?|office|school|exams?)\b",
        re.IGNORECASE,
    ),
}

DEFAULT_TOPIC = "general"

FALLBACK_SUGGESTIONS: dict[str, list[str]] = {
    "anxiety": [
        "How can I calm down when I feel panic?",
        "Can you teach me a breathing exercise?",
        "Why does my anxiety get worse at night?",
        "I keep worrying about things I can't control.",
        "What are some grounding techniques I can try?",
    ],
    "depression": [
        "I've been feeling really low lately.",
        "How can I find motivation on hard days?",
        "I don't enjoy things like I used to.",
        "What small steps can help me feel better?",
        "How do I know if I should talk to a therapist?",
    ],
    "sleep": [
        "I can't fall asleep at night.",
        "How can I build a better bedtime routine?",
        "My mind races when I try to sleep.",
        "Why do I wake up feeling exhausted?",
        "Can you suggest a relaxation exercise for bedtime?",
    ],
    "stress": [
        "I feel overwhelmed by everything right now.",
        "How can I manage stress better day to day?",
        "Can you help me break my problems into smaller steps?",
        "What are quick ways to decompress?",
        "I feel like I'm close to burning out.",
    ],
    "relationships": [
        "I'm having trouble communicating with someone close to me.",
        "How can I set healthier boundaries?",
        "I've been feeling lonely lately.",
        "How do I handle conflict without shutting down?",
        "Can we talk about a difficult relationship?",
    ],
    "mindfulness": [
        "Can you guide me through a short meditation?",
        "How do I stay present when my mind wanders?",
        "What is a simple mindfulness exercise for beginners?",
        "How can mindfulness help with my mood?",
        "Can you teach me a body scan?",
    ],
    "work": [
        "My job is really stressing me out.",
        "How can I balance work and rest better?",
        "I'm struggling with a difficult boss.",
        "How do I cope with tight deadlines?",
        "I feel stuck in my career.",
    ],
    DEFAULT_TOPIC: [
        "How are you feeling today?",
        "What's been on your mind lately?",
        "Can you help me with my anxiety?",
        "I've been feeling sad recently.",
        "Tell me about mindfulness techniques.",
    ],
}


def detect_topic(text: str) -> str:
    """Classify free text into a coarse topic by keyword matching."""
    for topic, pattern in TOPIC_PATTERNS.items():
        if pattern.search(text):
            return topic
    return DEFAULT_TOPIC


def fallback_suggestions(text: str) -> tuple[str, list[str]]:
    """Return the detected topic and a copy of its static suggestion list."""
    topic = detect_topic(text)
    return topic, list(FALLBACK_SUGGESTIONS[topic])
