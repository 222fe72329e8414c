from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from officenpc.models.character import Character
from officenpc.npc.pools.base import TopicPool, TriggerAnalysis, TriggerSpec

BANTER_STARTERS = (
    "Okay, serious question: is the printer haunted or is it just me?",
    "Did someone steal my stapler again?",
    "Quick poll, is it too early for a snack?",
    "I've decided the coffee machine has feelings.",
)


class BanterPool(TopicPool):
    name = "banter"
    priority = 8
    triggers = {
        "joke": TriggerSpec(("joke", "funny", "hilarious", "laugh", "lol", "haha"), "joke_response", "medium"),
        "tease": TriggerSpec(("prank", "roast", "tease", "messing with", "gotcha"), "tease_response", "medium"),
        "absurd": TriggerSpec(("silly", "ridiculous", "absurd", "weird", "random", "bizarre"), "absurd_response", "low"),
        "pun": TriggerSpec(("pun", "dad joke", "wordplay", "knock knock"), "pun_response", "low"),
    }
    openings = {
        "playful": ("Ha!", "Oh come on,", "Okay, okay,", "Wait, seriously?"),
        "deadpan": ("Naturally,", "Well,", "Of course,", "Classic."),
        "chaotic": ("Plot twist:", "Hear me out:", "Hot take:", "Unpopular opinion:"),
    }
    core_content = {
        "joke_response": {
            "laugh": ("that's the funniest thing I've heard all week", "I nearly spilled my coffee", "you should do stand-up"),
            "one_up": ("I've got a better one for you later", "that reminds me of the fax machine incident", "the printer would be proud"),
        },
        "tease_response": {
            "tease": ("you're lucky I like you", "I'm telling everyone in the break room", "that's going in the team newsletter"),
            "revenge": ("I will remember this", "watch your stapler", "revenge will be swift and mildly inconvenient"),
        },
        "absurd_response": {
            "absurd": ("this office runs on chaos and coffee", "nothing surprises me after the great microwave fire", "the plants in here know too much"),
            "play_along": ("I'm choosing to believe it", "honestly that tracks", "and yet somehow it makes sense"),
        },
        "pun_response": {
            "pun": ("I'd tell you a joke about paper, but it's tearable", "that pun was un-be-leaf-able", "I'm reading a book on anti-gravity, it's impossible to put down"),
            "groan": ("that one hurt", "I'm filing a complaint with HR", "please never do that again"),
        },
    }
    transitions = {
        "agreement": ("Seriously though.", "No, really.", "I mean it.", "Honestly."),
        "escalation": ("It gets worse.", "And that's not even the best part.", "Brace yourself."),
    }
    closings = {
        "playful": ("You're ridiculous.", "Never change.", "Anyway, back to pretending to work.", "Good times."),
        "chaotic": ("Chaos reigns!", "I regret nothing.", "Don't tell the manager.", "Let's make it a tradition."),
    }
    personality_defaults = (
        (("Sarcastic",), "tease_response"),
        (("Chaotic",), "absurd_response"),
        (("Funny", "Playful"), "joke_response"),
    )
    default_core = "that's hilarious"
    fallback_lines = (
        "Ha, good one.",
        "You're a funny one, you know that?",
        "I'll pretend I understood that joke.",
        "That's going straight into my mental highlight reel.",
        "Okay, you got me.",
    )

    def topic_fallback(self, analysis: TriggerAnalysis, context: Mapping[str, Any]) -> str:
        return "joke_response"

    def select_parts(
        self,
        response_type: str,
        analysis: TriggerAnalysis,
        character: Character,
        context: Mapping[str, Any],
    ) -> tuple[str, str, str, str]:
        chaotic = character.has_trait("Chaotic")
        if chaotic:
            opening = self.pick(self.openings["chaotic"])
        elif character.has_trait("Sarcastic"):
            opening = self.pick(self.openings["deadpan"])
        else:
            opening = self.pick(self.openings["playful"])
        core = self.core_line(response_type, () if analysis.intensity != "low" else ("play_along", "groan"))
        transition = self.pick(self.transitions["escalation" if chaotic else "agreement"])
        closing = self.pick(self.closings["chaotic" if chaotic else "playful"])
        return opening, core, transition, closing

    def conversation_starter(self, character: Character, context: Mapping[str, Any]) -> str | None:
        return self.pick(BANTER_STARTERS)
