from __future__ import annotations

import random
import re

from officenpc.models.analysis import MessageAnalysis
from officenpc.models.character import Character

CHAOTIC_ASIDES = (" ...wait, what?", " That reminds me of something completely different.", " Oh, random thought!")
EXTROVERT_EXPANSIONS = (" That's really interesting!", " I love talking about this!", " Thanks for sharing!")

FOLLOW_UP_REMARKS = {
    "Gossip": "You didn't hear it from me though!",
    "Chaotic": "...wait, what were we talking about?",
    "Ambitious": "Always thinking ahead!",
}

SIGN_OFFS = {
    "Professional": ("Well, I should get back to work.", "I need to focus on this project."),
    "Extroverted": ("This has been great!", "Thanks for the chat!"),
    "Introverted": ("I should get going.", "Talk to you later."),
}
DEFAULT_SIGN_OFFS = ("Anyway, I should run.", "Catch you later!")

_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")
_WHITESPACE = re.compile(r"\s+")


def _first_sentence(line: str) -> str:
    return _SENTENCE_BREAK.split(line.strip(), maxsplit=1)[0]


def _sentences(line: str) -> list[str]:
    return [part for part in _SENTENCE_BREAK.split(line.strip()) if part]


def apply_personality(line: str, character: Character, analysis: MessageAnalysis, rng: random.Random) -> str:
    """Reshape a candidate line trait by trait, in the character's tag order."""
    shaped = line
    for trait in character.personality_tags:
        if trait == "Professional":
            shaped = re.sub(r"\byeah\b", "yes", shaped, flags=re.IGNORECASE)
            shaped = re.sub(r"\bgonna\b", "going to", shaped, flags=re.IGNORECASE)
            if analysis.urgency == "high":
                shaped = "I understand the urgency. " + shaped
        elif trait == "Extroverted":
            if "!" not in shaped and rng.random() < 0.3:
                shaped = shaped.rstrip(".") + "!"
            if analysis.is_positive and rng.random() < 0.4:
                shaped = "That's great! " + shaped
        elif trait == "Introverted":
            if len(shaped) > 50 and rng.random() < 0.4:
                shaped = _first_sentence(shaped)
            shaped = shaped.replace("!", ".")
        elif trait == "Gossip":
            if "personal" in analysis.topics and rng.random() < 0.5:
                shaped += " Tell me more!"
        elif trait == "Empathetic":
            if analysis.is_negative and rng.random() < 0.6:
                shaped = "I can understand how you feel. " + shaped
        elif trait == "Ambitious":
            if "work" in analysis.topics and rng.random() < 0.4:
                shaped += " How can we move this forward?"
        elif trait == "Lazy":
            shaped = re.sub(r"\bexciting\b", "interesting", shaped, flags=re.IGNORECASE)
            shaped = re.sub(r"\blet's do it\b", "sounds good", shaped, flags=re.IGNORECASE)
        elif trait == "Chaotic":
            if rng.random() < 0.2:
                shaped += rng.choice(CHAOTIC_ASIDES)
    return shaped


def cleanup_response(line: str) -> str:
    cleaned = _WHITESPACE.sub(" ", line).strip()
    if not cleaned:
        return cleaned
    cleaned = cleaned[0].upper() + cleaned[1:]
    if cleaned[-1] not in ".!?":
        cleaned += "."
    return cleaned


def adjust_response_length(line: str, character: Character, analysis: MessageAnalysis, rng: random.Random) -> str:
    if character.has_trait("Introverted") and len(line) > 60:
        first = line.split(". ", 1)[0].rstrip(".!?")
        return first + "."
    if character.has_trait("Extroverted") and len(line) < 20 and rng.random() < 0.3:
        return line + rng.choice(EXTROVERT_EXPANSIONS)
    if character.has_trait("Professional") and analysis.urgency == "high" and len(line) > 80:
        return " ".join(_sentences(line)[:2])
    return line


def finalize_response(line: str, character: Character, analysis: MessageAnalysis, rng: random.Random) -> str:
    return cleanup_response(adjust_response_length(cleanup_response(line), character, analysis, rng))


def sign_off(character: Character, rng: random.Random) -> str:
    first = character.personality_tags[0] if character.personality_tags else ""
    return rng.choice(SIGN_OFFS.get(first, DEFAULT_SIGN_OFFS))


def follow_up_remark(character: Character, rng: random.Random, probability: float) -> str | None:
    for trait in character.personality_tags:
        remark = FOLLOW_UP_REMARKS.get(trait)
        if remark is not None and rng.random() < probability:
            return remark
    return None
