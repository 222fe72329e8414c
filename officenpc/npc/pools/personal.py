from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from officenpc.models.character import Character
from officenpc.npc.pools.base import TopicPool, TriggerAnalysis, TriggerSpec, classify_by_keywords

EMOTIONAL_TONES = {
    "positive": ("happy", "excited", "joy", "love", "grateful", "amazing", "wonderful"),
    "negative": ("sad", "angry", "frustrated", "worried", "anxious", "difficult", "hard time"),
    "vulnerable": ("scared", "confused", "lost", "overwhelmed", "struggling", "hurt"),
}
INTIMACY_LEVELS = {
    "surface": ("work", "weather", "general", "public"),
    "personal": ("family", "relationship", "feeling", "experience"),
    "intimate": ("secret", "private", "personal", "vulnerable", "deep"),
}
_SUPPORT_NEEDED = re.compile(r"(help|advice|don't know|what should|struggling)", re.IGNORECASE)

BOUNDARY_LINES = (
    "Maybe we can talk about that somewhere a bit more private?",
    "That sounds important. Let's catch up about it later, just the two of us.",
    "I'd love to hear more, but maybe not with everyone around.",
    "Let's save that one for a quieter moment.",
)


def is_topic_appropriate(intimacy: str, context: Mapping[str, Any]) -> bool:
    """Intimate sharing needs a private one-on-one setting; personal sharing a small, semi-private one."""
    group_size = context.get("group_size", "one_on_one")
    privacy = context.get("privacy", 10)
    if intimacy == "intimate":
        return group_size == "one_on_one" and privacy >= 8
    if intimacy == "personal":
        return group_size != "large_group" and privacy >= 5
    return True


class PersonalPool(TopicPool):
    name = "personal"
    priority = 5
    triggers = {
        "relationships": TriggerSpec(("relationship", "partner", "dating", "marriage", "family", "friend", "boyfriend", "girlfriend"), "relationships_response", "medium"),
        "achievements": TriggerSpec(("achievement", "promotion", "graduation", "accomplishment", "proud"), "achievements_response", "low"),
        "challenges": TriggerSpec(("struggle", "struggling", "difficult", "hard time", "challenge", "stress"), "challenges_response", "high"),
        "health": TriggerSpec(("health", "doctor", "medical", "wellness", "mental health", "sick"), "health_response", "high"),
        "future": TriggerSpec(("future", "plans", "goals", "dreams", "hope", "aspiration", "someday"), "future_response", "low"),
        "growth": TriggerSpec(("learning", "growing", "development", "improvement", "journey"), "growth_response", "low"),
        "transitions": TriggerSpec(("moving", "job change", "new chapter", "transition", "life change"), "transitions_response", "medium"),
        "emotions": TriggerSpec(("feeling", "emotion", "happy", "sad", "angry", "anxious", "lonely", "upset"), "emotions_response", "medium"),
    }
    openings = {
        "supportive": ("I hear you.", "That makes sense.", "I can understand that.", "Okay, I get it."),
        "celebratory": ("That's wonderful!", "How exciting!", "I'm so happy for you!", "What great news!"),
        "empathetic": ("I'm sorry you're dealing with that.", "That must be tough.", "I can imagine how that feels.", "Oh no."),
        "curious": ("Tell me more.", "How are you feeling about it?", "I'd love to hear about it.", "Really?"),
    }
    core_content = {
        "relationships_response": {
            "support": ("relationships take work", "communication is so important", "every relationship has its challenges"),
            "celebration": ("love is such a beautiful thing", "relationship goals right there", "happiness looks good on you"),
            "advice": ("trust your instincts", "healthy boundaries are important", "it's okay to take time"),
            "understanding": ("relationships are complex", "everyone moves at their own pace", "what matters is how you feel"),
        },
        "achievements_response": {
            "celebration": ("you should be so proud", "all that hard work paid off", "this is just the beginning"),
            "recognition": ("your dedication really shows", "you've earned this moment", "it's inspiring to see"),
            "encouragement": ("this opens up new opportunities", "I'm excited to see what's next", "you're capable of amazing things"),
        },
        "challenges_response": {
            "validation": ("what you're feeling is completely valid", "it's okay to not be okay", "you're not alone in this"),
            "support": ("I'm here if you need to talk", "you don't have to face this alone", "take things one day at a time"),
            "perspective": ("this won't last forever", "you've overcome challenges before", "better days are ahead"),
            "practical": ("focus on what you can control", "small steps still count", "it's okay to ask for help"),
        },
        "health_response": {
            "concern": ("your health is the most important thing", "taking care of yourself matters", "listen to your body"),
            "support": ("medical stuff can be scary", "you're being proactive", "healing takes time"),
            "wellness": ("mental health is just as important", "balance is key to wellness", "small changes add up"),
        },
        "future_response": {
            "optimism": ("the future is full of possibilities", "your dreams are valid", "it's exciting to have goals"),
            "planning": ("having a vision is important", "small steps lead to big changes", "priorities can shift and that's okay"),
            "wisdom": ("life rarely goes exactly as planned", "sometimes the journey surprises us", "trust the process"),
        },
        "growth_response": {
            "recognition": ("personal growth takes courage", "change isn't always easy", "self-awareness is powerful"),
            "encouragement": ("every step forward counts", "setbacks are part of growth", "progress isn't always linear"),
            "support": ("growth can feel uncomfortable", "it's okay to outgrow things", "change takes time"),
        },
        "transitions_response": {
            "acknowledgment": ("big life changes are significant", "new chapters are exciting and scary", "change brings opportunity"),
            "support": ("transition periods are challenging", "it's normal to feel uncertain", "adapting takes time"),
            "perspective": ("every ending is a new beginning", "life is a series of chapters", "embrace the unknown"),
        },
        "emotions_response": {
            "validation": ("all feelings are valid", "it's human to feel deeply", "don't judge your feelings"),
            "understanding": ("emotions can be complex", "feelings come and go in waves", "it's okay to feel multiple things"),
            "coping": ("talking helps process emotions", "a short walk can shift your energy", "breathe through the hard moments"),
        },
    }
    transitions = {
        "empathetic": ("I can relate to that.", "That resonates with me.", "I've been there too.", "Many people experience this."),
        "supportive": ("You're not alone.", "It's okay to feel this way.", "That makes perfect sense.", "Your feelings are valid."),
        "encouraging": ("You're stronger than you know.", "This shows your resilience.", "I believe in you."),
        "reflective": ("It makes you think.", "Life has a way of teaching us.", "Sometimes we need these experiences."),
    }
    closings = {
        "supportive": ("I'm here if you need anything.", "Sending you positive thoughts.", "You've got this.", "Take care of yourself."),
        "encouraging": ("Better days are coming!", "You're going to do great!", "Excited to see where this goes!"),
        "connecting": ("Thanks for sharing with me.", "I appreciate your openness.", "We should talk more often."),
        "wise": ("Life is a journey.", "Every experience shapes us.", "Trust the timing of your life."),
    }
    personality_defaults = (
        (("Empathetic", "Caring"), "emotions_response"),
        (("Wise", "Thoughtful"), "growth_response"),
        (("Optimistic",), "future_response"),
    )
    default_core = "life is full of meaningful experiences"
    fallback_lines = (
        "Thanks for sharing that with me.",
        "It sounds like you're going through a lot.",
        "I appreciate you opening up about this.",
        "Life can be really complex sometimes.",
        "You're not alone in feeling this way.",
    )

    def analyze(self, message: str, context: Mapping[str, Any]) -> TriggerAnalysis:
        analysis = super().analyze(message, context)
        analysis.flags["tone"] = classify_by_keywords(message, EMOTIONAL_TONES, "neutral")
        analysis.flags["intimacy"] = classify_by_keywords(message, INTIMACY_LEVELS, "casual")
        analysis.flags["support_needed"] = bool(_SUPPORT_NEEDED.search(message))
        return analysis

    def choose_response_type(self, analysis: TriggerAnalysis, character: Character, context: Mapping[str, Any]) -> str:
        if analysis.flags.get("support_needed"):
            return "challenges_response"
        if analysis.primary is not None:
            return analysis.primary.response_type
        tone = analysis.flags.get("tone")
        if tone in ("negative", "vulnerable"):
            return "challenges_response"
        if tone == "positive":
            return "achievements_response"
        for traits, response_type in self.personality_defaults:
            if character.has_trait(*traits):
                return response_type
        return self.topic_fallback(analysis, context)

    def topic_fallback(self, analysis: TriggerAnalysis, context: Mapping[str, Any]) -> str:
        return "relationships_response"

    def select_parts(
        self,
        response_type: str,
        analysis: TriggerAnalysis,
        character: Character,
        context: Mapping[str, Any],
    ) -> tuple[str, str, str, str]:
        tone = analysis.flags.get("tone")
        support_needed = analysis.flags.get("support_needed")
        if tone == "positive":
            opening = self.pick(self.openings["celebratory"])
        elif tone in ("negative", "vulnerable"):
            opening = self.pick(self.openings["empathetic"])
        elif character.has_trait("Supportive", "Empathetic"):
            opening = self.pick(self.openings["supportive"])
        else:
            opening = self.pick(self.openings["curious"])

        if support_needed:
            preferred: tuple[str, ...] = ("support",)
        elif tone == "positive":
            preferred = ("celebration",)
        elif tone == "negative":
            preferred = ("validation",)
        else:
            preferred = ()
        core = self.core_line(response_type, preferred)

        if support_needed:
            transition = self.pick(self.transitions["supportive"])
        elif character.has_trait("Empathetic"):
            transition = self.pick(self.transitions["empathetic"])
        elif tone == "positive":
            transition = self.pick(self.transitions["encouraging"])
        else:
            transition = self.pick(self.transitions["reflective"])

        if support_needed or tone == "negative":
            closing = self.pick(self.closings["supportive"])
        elif tone == "positive":
            closing = self.pick(self.closings["encouraging"])
        elif analysis.flags.get("intimacy") == "intimate":
            closing = self.pick(self.closings["connecting"])
        else:
            closing = self.pick(self.closings["wise"])
        return opening, core, transition, closing

    def apply_rules(
        self,
        line: str,
        analysis: TriggerAnalysis,
        character: Character,
        context: Mapping[str, Any],
    ) -> str:
        if not is_topic_appropriate(analysis.flags.get("intimacy", "casual"), context):
            return self.pick(BOUNDARY_LINES)
        return line
