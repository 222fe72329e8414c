from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from officenpc.models.character import Character
from officenpc.npc.pools.base import TopicPool, TriggerAnalysis, TriggerSpec

_PROBLEM = re.compile(r"\b(not working|won't|can't get|keeps crashing|help me|stuck)", re.IGNORECASE)


class TechnologyPool(TopicPool):
    name = "technology"
    priority = 4
    triggers = {
        "devices": TriggerSpec(("phone", "laptop", "computer", "tablet", "smartwatch", "device", "gadget", "monitor"), "devices_response", "medium"),
        "software": TriggerSpec(("app", "application", "software", "platform", "update", "upgrade"), "software_response", "medium"),
        "programming": TriggerSpec(("code", "coding", "programming", "developer", "framework", "api", "python"), "programming_response", "low"),
        "social_media": TriggerSpec(("social media", "twitter", "instagram", "tiktok", "linkedin"), "social_media_response", "medium"),
        "gaming": TriggerSpec(("gaming", "video game", "console", "esports", "streamer"), "gaming_response", "medium"),
        "productivity": TriggerSpec(("productivity", "workflow", "automation", "efficiency", "spreadsheet"), "productivity_response", "medium"),
        "troubleshooting": TriggerSpec(("bug", "error", "crash", "broken", "glitch", "reboot", "frozen", "wifi"), "troubleshooting_response", "high"),
        "trends": TriggerSpec(("ai", "artificial intelligence", "blockchain", "crypto", "vr", "virtual reality", "robot"), "trends_response", "low"),
    }
    openings = {
        "enthusiastic": ("This is so cool,", "Honestly,", "Oh, I just read that", "Funny enough,"),
        "helpful": ("I can help with that.", "Here's what worked for me:", "Try this:", "Let me walk you through it:"),
        "curious": ("I've been wondering about that, and", "Good question, I think", "From what I hear,", "Interesting,"),
        "analytical": ("Looking at the specs,", "Based on the reviews,", "Comparing the options,", "From a technical standpoint,"),
    }
    core_content = {
        "devices_response": {
            "features": ("battery life is impressive", "camera quality is outstanding", "performance is smooth", "build quality feels premium"),
            "comparison": ("it's better than the previous version", "it competes well with other brands", "it's good value for the price"),
            "experience": ("I love the user interface", "the learning curve isn't too steep", "it integrates well with other devices"),
            "recommendation": ("it's definitely worth considering", "it depends on your use case", "you might want to wait for the next version"),
        },
        "software_response": {
            "functionality": ("it streamlines the workflow", "the intuitive design makes it easy", "the customization options are extensive"),
            "performance": ("it runs smoothly on my system", "there are occasional bugs but it's stable", "the updates have improved things"),
            "integration": ("it works well with other tools", "sync across devices is seamless", "plugins extend what it can do"),
            "learning": ("the documentation is helpful", "community support is strong", "keyboard shortcuts save time"),
        },
        "programming_response": {
            "language": ("the syntax is clean and readable", "community resources are excellent", "it's great for certain projects"),
            "tools": ("the development environment is crucial", "debugging tools have improved", "testing frameworks are mature"),
            "career": ("it's an in-demand skill", "it's a constantly evolving field", "problem-solving skills transfer"),
            "projects": ("start with small projects", "open source contributions help", "real-world experience is valuable"),
        },
        "social_media_response": {
            "usage": ("it's great for staying connected", "it's a decent professional networking tool", "you discover a lot of new content"),
            "concerns": ("privacy settings are important", "information overload can happen", "digital wellness matters"),
            "balance": ("moderation is key", "real connections still matter", "taking breaks is healthy"),
        },
        "gaming_response": {
            "entertainment": ("it's a great way to unwind", "storytelling has really evolved", "multiplayer experiences are fun"),
            "community": ("online friendships are real", "the competitive scene is exciting", "shared experiences bond people"),
            "technology": ("hardware requirements keep increasing", "cloud gaming is promising", "mobile gaming is accessible"),
        },
        "productivity_response": {
            "tools": ("finding the right system matters", "automation saves so much time", "simple solutions often work best"),
            "habits": ("consistency beats perfection", "small improvements compound", "regular reviews help adjust"),
            "results": ("measurable improvements motivate", "it frees time for important things", "the sense of control increases"),
        },
        "troubleshooting_response": {
            "approach": ("start with the basics", "a restart often fixes things", "check for recent changes", "search the error message online"),
            "resources": ("the documentation usually helps", "community forums are goldmines", "IT support exists for a reason"),
            "patience": ("technical issues are frustrating", "a step-by-step approach works", "back up important data first"),
        },
        "trends_response": {
            "innovation": ("the pace of change is rapid", "there are exciting possibilities ahead", "some of it is overhyped but some is transformative"),
            "impact": ("it will change how we work", "the societal implications are significant", "ethical considerations matter"),
            "future": ("it's hard to predict the specifics", "the general direction seems clear", "the human element remains important"),
        },
    }
    transitions = {
        "agreement": ("Absolutely!", "You're totally right!", "I completely agree!", "That's spot on!"),
        "experience": ("That's been my experience anyway.", "I've found that to be true.", "At least from what I've seen."),
        "suggestion": ("You might want to try a different setup.", "Maybe check the settings too.", "Another option is asking IT."),
        "technical": ("The architecture matters a lot here.", "Implementation-wise it's tricky.", "The technical side is interesting."),
    }
    closings = {
        "helpful": ("Hope that helps!", "Let me know if you need more info!", "Feel free to ask if you get stuck!", "Happy to troubleshoot further!"),
        "enthusiastic": ("Technology is so exciting!", "Can't wait to see what's next!", "Love how tech keeps evolving!"),
        "practical": ("Use what works for you.", "Technology should make life easier.", "Find the right tool for the job."),
        "cautious": ("Always good to research before buying.", "Privacy and security matter.", "Don't believe all the hype."),
    }
    personality_defaults = (
        (("Tech-savvy", "Analytical"), "software_response"),
        (("Creative",), "devices_response"),
        (("Helpful",), "troubleshooting_response"),
        (("Future-focused",), "trends_response"),
    )
    default_core = "technology keeps changing how we work"
    fallback_lines = (
        "Technology moves so fast these days!",
        "I'm not super technical, but that sounds interesting.",
        "You'd probably know more about that than me!",
        "I should really keep up with tech news more.",
        "Computers, am I right?",
    )

    def analyze(self, message: str, context: Mapping[str, Any]) -> TriggerAnalysis:
        analysis = super().analyze(message, context)
        problem = bool(_PROBLEM.search(message)) or any(t.category == "troubleshooting" for t in analysis.detected)
        analysis.flags["problem_solving"] = problem
        if problem:
            analysis.intensity = "high"
        return analysis

    def choose_response_type(self, analysis: TriggerAnalysis, character: Character, context: Mapping[str, Any]) -> str:
        if analysis.flags.get("problem_solving"):
            return "troubleshooting_response"
        return super().choose_response_type(analysis, character, context)

    def topic_fallback(self, analysis: TriggerAnalysis, context: Mapping[str, Any]) -> str:
        return "software_response"

    def select_parts(
        self,
        response_type: str,
        analysis: TriggerAnalysis,
        character: Character,
        context: Mapping[str, Any],
    ) -> tuple[str, str, str, str]:
        if analysis.flags.get("problem_solving"):
            opening = self.pick(self.openings["helpful"])
        elif character.has_trait("Analytical", "Tech-savvy"):
            opening = self.pick(self.openings["analytical"])
        elif character.has_trait("Enthusiastic", "Future-focused"):
            opening = self.pick(self.openings["enthusiastic"])
        else:
            opening = self.pick(self.openings["curious"])

        preferred = ("approach",) if analysis.flags.get("problem_solving") else ()
        core = self.core_line(response_type, preferred)

        if analysis.flags.get("problem_solving"):
            transition = self.pick(self.transitions["suggestion"])
        elif character.has_trait("Analytical", "Tech-savvy"):
            transition = self.pick(self.transitions["technical"])
        elif analysis.detected:
            transition = self.pick(self.transitions["experience"])
        else:
            transition = self.pick(self.transitions["agreement"])

        if analysis.flags.get("problem_solving") or character.has_trait("Helpful"):
            closing = self.pick(self.closings["helpful"])
        elif character.has_trait("Cautious", "Security-conscious"):
            closing = self.pick(self.closings["cautious"])
        elif response_type == "trends_response" or character.has_trait("Enthusiastic"):
            closing = self.pick(self.closings["enthusiastic"])
        else:
            closing = self.pick(self.closings["practical"])
        return opening, core, transition, closing
