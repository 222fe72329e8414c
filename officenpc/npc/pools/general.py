from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from officenpc.models.character import Character
from officenpc.npc.pools.base import TopicPool, TriggerAnalysis, TriggerSpec


class GeneralPool(TopicPool):
    """Small talk; the router's fallback when no specialised pool claims a message."""

    name = "general"
    priority = 99
    triggers = {
        "greeting": TriggerSpec(("hello", "hi", "hey", "morning", "afternoon", "how are you", "what's up"), "greeting_response", "low"),
        "weather": TriggerSpec(("weather", "rain", "sunny", "cold", "hot", "snow"), "weather_response", "low"),
        "weekend": TriggerSpec(("weekend", "holiday", "vacation", "friday", "monday"), "weekend_response", "low"),
        "farewell": TriggerSpec(("bye", "goodbye", "see you", "talk later", "gotta go", "take care"), "farewell_response", "low"),
    }
    openings = {
        "friendly": ("Oh,", "Ah,", "Well,", "Hey,"),
        "reserved": ("Hm,", "Right,", "Sure,", "Okay,"),
    }
    core_content = {
        "greeting_response": {
            "friendly": ("good to see you", "hope your day is going well", "it's been a busy one so far"),
            "reserved": ("morning to you too", "not bad, thanks", "can't complain"),
        },
        "weather_response": {
            "chat": ("the weather has been all over the place", "I could use some sunshine", "at least it's warm in here"),
        },
        "weekend_response": {
            "chat": ("the weekend can't come soon enough", "I need a proper break", "I have absolutely no plans and I love it"),
        },
        "farewell_response": {
            "friendly": ("it was nice chatting", "catch you later", "see you around the office"),
            "reserved": ("talk soon", "take care", "see you"),
        },
        "small_talk_response": {
            "friendly": ("that's a good point", "I was just thinking about that", "funny how these things go"),
            "reserved": ("that makes sense", "fair enough", "I see what you mean"),
        },
    }
    transitions = {
        "friendly": ("Anyway!", "You know how it is.", "Such is office life.", "Ha."),
        "reserved": ("Anyway.", "So.", "Right.", "Yeah."),
    }
    closings = {
        "friendly": ("Talk soon!", "Let me know how it goes!", "Catch you later!", "Have a good one!"),
        "reserved": ("See you.", "Take care.", "Later.", "Okay then."),
    }
    default_core = "that's interesting"
    fallback_lines = ("I see.", "That's interesting.", "Tell me more.", "I understand.", "Good point.")

    def topic_fallback(self, analysis: TriggerAnalysis, context: Mapping[str, Any]) -> str:
        return "small_talk_response"

    def select_parts(
        self,
        response_type: str,
        analysis: TriggerAnalysis,
        character: Character,
        context: Mapping[str, Any],
    ) -> tuple[str, str, str, str]:
        register = "reserved" if character.has_trait("Introverted", "Professional") else "friendly"
        opening = self.pick(self.openings[register])
        core = self.core_line(response_type, (register,))
        transition = self.pick(self.transitions[register])
        closing = self.pick(self.closings[register])
        return opening, core, transition, closing
