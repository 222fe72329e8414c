from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from officenpc.models.character import Character
from officenpc.npc.pools.base import TopicPool, TriggerAnalysis, TriggerSpec, classify_by_keywords

HOBBY_TYPES = {
    "creative": ("art", "paint", "drawing", "craft", "design", "pottery"),
    "active": ("garden", "woodwork", "hiking", "photography"),
    "intellectual": ("chess", "puzzle", "crossword", "research"),
    "social": ("guitar", "piano", "perform", "teach", "club"),
}
SKILL_LEVELS = {
    "intermediate": ("been doing", "getting better", "practicing", "improving"),
    "beginner": ("just started", "new to", "first time", "beginner", "picked up"),
    "advanced": ("expert", "years of", "master", "teach others"),
}


class HobbiesPool(TopicPool):
    name = "hobbies"
    priority = 7
    triggers = {
        "crafting": TriggerSpec(("craft", "diy", "handmade", "knitting", "woodwork", "sewing"), "crafting_response", "medium"),
        "collecting": TriggerSpec(("collect", "vintage", "antique", "flea market", "thrift"), "collecting_response", "medium"),
        "gardening": TriggerSpec(("garden", "plant", "flower", "seedling", "houseplant"), "gardening_response", "low"),
        "art": TriggerSpec(("art", "paint", "sketch", "canvas", "pottery", "watercolor", "drawing"), "art_response", "medium"),
        "instruments": TriggerSpec(("guitar", "piano", "violin", "drums", "ukulele", "instrument"), "music_response", "medium"),
        "photography": TriggerSpec(("photography", "photographer", "camera", "tripod", "lens"), "photography_response", "medium"),
        "pastime": TriggerSpec(("hobby", "hobbies", "pastime", "chess", "puzzle", "crossword"), "pastime_response", "low"),
    }
    openings = {
        "excited": ("I'm so excited about this,", "You won't believe it, but", "Okay, I have to tell you,", "Guess what?"),
        "sharing": ("I've been working on something and", "Want to hear what I made? Basically,", "Check this out:", "I've been experimenting, and"),
        "seeking": ("I'm still figuring it out, but", "Total beginner here, but", "Honestly, I could use tips, but", "Not gonna lie,"),
        "accomplished": ("I finally finished one, and", "So proud of this one:", "Managed it at last:", "Just wrapped one up, and"),
    }
    core_content = {
        "crafting_response": {
            "satisfaction": ("it's so rewarding to make something yourself", "I love working with my hands", "it's therapeutic and relaxing", "each piece is unique"),
            "process": ("I take my time with each step", "following the pattern carefully pays off", "I improvise as I go", "I keep learning new techniques"),
            "challenges": ("it's trickier than it looks", "I made a few mistakes along the way", "patience is key"),
        },
        "collecting_response": {
            "hunt": ("I've been searching for this one for years", "the thrill of the hunt is half the fun", "you never know what you'll find"),
            "discovery": ("I found an incredible piece last weekend", "it was a rare find at the market", "I couldn't believe my luck"),
            "community": ("the other collectors are so passionate", "I've learned so much from the experts", "we trade stories as much as pieces"),
        },
        "gardening_response": {
            "growth": ("watching things grow is magical", "new shoots are coming up", "the blooms are starting to open"),
            "care": ("the watering schedule is crucial", "good drainage makes all the difference", "pruning really helps"),
            "connection": ("it's so peaceful being outside", "it makes me feel closer to nature", "digging in the dirt is weirdly therapeutic"),
        },
        "art_response": {
            "process": ("I lost track of time creating", "it's built up layer by layer", "sometimes it just flows"),
            "technique": ("I'm working on my brushwork", "I've been experimenting with color", "I'm trying different mediums"),
            "emotion": ("art says what words can't", "it's my favorite way to unwind", "it's a great creative release"),
        },
        "music_response": {
            "practice": ("I've been practicing the same piece all week", "muscle memory is finally kicking in", "I'm getting the rhythm down"),
            "learning": ("online tutorials have been a lifesaver", "the theory is finally clicking", "I'm learning a lot by ear"),
            "performance": ("I played for some friends last weekend", "it was nerve-wracking but exciting", "sharing music is the best part"),
        },
        "photography_response": {
            "capture": ("I caught the perfect moment", "the lighting was just right", "the composition really works"),
            "technical": ("I've been experimenting with the settings", "a new lens makes a huge difference", "editing brings out so much detail"),
            "sharing": ("I'm excited to share the shots", "feedback helps me improve", "moments become memories"),
        },
        "pastime_response": {
            "routine": ("it's my favorite way to switch off after work", "I try to fit in a little every evening", "it keeps my weekends busy"),
            "challenge": ("the harder ones keep me coming back", "I like having something to figure out", "it's surprisingly competitive"),
        },
    }
    transitions = {
        "enthusiasm": ("I absolutely love it.", "Nothing beats it.", "It gets me excited every time.", "So worth it."),
        "learning": ("Still learning, though.", "Always discovering something new.", "Picking up new tricks.", "Growing my skills slowly."),
        "sharing": ("Want to try it?", "Happy to show you.", "We should do this together.", "I can teach you."),
        "reflection": ("It's funny how it sticks with you.", "What I love most is the quiet.", "People don't realize how absorbing it is."),
    }
    closings = {
        "encouraging": ("You should give it a try!", "Everyone needs a creative outlet!", "It's never too late to start!", "You might surprise yourself!"),
        "inviting": ("Want to see what I've made?", "Come by and check it out sometime!", "Let's plan a project together!"),
        "content": ("Such a rewarding hobby.", "Keeps me busy and happy.", "Best stress relief ever.", "Love having something that's just mine."),
        "philosophical": ("Life needs more than just work.", "Hobbies feed the soul.", "Everyone should have a passion.", "Creating things makes us human."),
    }
    personality_defaults = (
        (("Creative", "Artistic"), "art_response"),
        (("Organized",), "collecting_response"),
        (("Patient",), "gardening_response"),
        (("Social",), "music_response"),
    )
    default_core = "it's such a rewarding hobby"
    fallback_lines = (
        "That sounds like a really interesting hobby!",
        "I should pick up a new hobby myself.",
        "It's great that you have something you're passionate about!",
        "I admire people who are creative and hands-on.",
        "Hobbies are so important for a balanced life.",
    )

    def analyze(self, message: str, context: Mapping[str, Any]) -> TriggerAnalysis:
        analysis = super().analyze(message, context)
        analysis.subtype = classify_by_keywords(message, HOBBY_TYPES, "general")
        analysis.flags["skill_level"] = classify_by_keywords(message, SKILL_LEVELS, "intermediate")
        return analysis

    def topic_fallback(self, analysis: TriggerAnalysis, context: Mapping[str, Any]) -> str:
        return {
            "creative": "art_response",
            "active": "gardening_response",
            "social": "music_response",
        }.get(analysis.subtype, "pastime_response")

    def select_parts(
        self,
        response_type: str,
        analysis: TriggerAnalysis,
        character: Character,
        context: Mapping[str, Any],
    ) -> tuple[str, str, str, str]:
        skill = analysis.flags.get("skill_level", "intermediate")
        if character.has_trait("Enthusiastic") or skill == "advanced":
            opening = self.pick(self.openings["excited"])
        elif character.has_trait("Social"):
            opening = self.pick(self.openings["sharing"])
        elif skill == "beginner":
            opening = self.pick(self.openings["seeking"])
        else:
            opening = self.pick(self.openings["accomplished"])

        if skill == "beginner":
            core = self.core_line(response_type, ("challenges", "learning", "care"))
        elif character.has_trait("Perfectionist"):
            core = self.core_line(response_type, ("technique", "technical", "process"))
        else:
            core = self.core_line(response_type)

        if character.has_trait("Social"):
            transition = self.pick(self.transitions["sharing"])
        elif skill == "beginner":
            transition = self.pick(self.transitions["learning"])
        elif character.has_trait("Introverted"):
            transition = self.pick(self.transitions["reflection"])
        else:
            transition = self.pick(self.transitions["enthusiasm"])

        if character.has_trait("Social", "Encouraging"):
            closing = self.pick(self.closings["encouraging"])
        elif character.has_trait("Organized"):
            closing = self.pick(self.closings["inviting"])
        elif character.has_trait("Philosophical"):
            closing = self.pick(self.closings["philosophical"])
        else:
            closing = self.pick(self.closings["content"])
        return opening, core, transition, closing
