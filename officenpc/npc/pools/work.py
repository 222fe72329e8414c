from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from officenpc.models.character import Character
from officenpc.npc.pools.base import TopicPool, TriggerAnalysis, TriggerSpec

_CLIENT = re.compile(r"\b(client|customer)", re.IGNORECASE)
_MEETING = re.compile(r"\b(meeting|conference)", re.IGNORECASE)

WORK_FALLBACKS_BY_TRAIT = {
    "Professional": ("I understand your position.", "That's a valid point.", "Let me consider that."),
    "Ambitious": ("Let's find a solution.", "How can we move forward?", "What's our next step?"),
    "Organized": ("Let me clarify that.", "We should document this.", "I'll follow up on that."),
    "Extroverted": ("Let's discuss this further.", "I'd like to hear more.", "Great point to consider."),
}

STARTER_TYPES = {
    "project_check": ("How's progress on", "Any updates on", "Where are we with"),
    "collaboration": ("I wanted to sync up on", "Could we discuss", "I'd like to coordinate on"),
    "support": ("Do you need any help with", "Can I assist with", "How can I support"),
    "update": ("Just wanted to update you on", "Quick status on", "FYI on"),
    "planning": ("We should plan for", "Let's strategize about", "I'm thinking about"),
}
STARTER_TOPICS = ("the project", "this initiative", "our deadlines", "the client work", "our collaboration")
MORNING_STARTERS = (
    "Good morning! Ready to tackle today's priorities?",
    "Morning! What's on your agenda today?",
    "Good morning! How are we looking for today?",
)
EVENING_STARTERS = (
    "Before we wrap up, can we go over the day?",
    "End of day check, how did everything go?",
    "Wrapping up, any final thoughts on the project?",
)


@dataclass
class WorkStrategy:
    formal: bool = False
    approach: str = "collaborative"
    include_action: bool = False


class WorkPool(TopicPool):
    name = "work"
    priority = 1
    triggers = {
        "deadline": TriggerSpec(("deadline", "due date", "timeline", "rush", "urgent", "asap"), "deadline_response", "high"),
        "project": TriggerSpec(("project", "initiative", "campaign", "task", "assignment"), "project_response", "medium"),
        "meeting": TriggerSpec(("meeting", "conference", "discussion", "presentation"), "meeting_response", "medium"),
        "collaboration": TriggerSpec(("collaborate", "teamwork", "assist", "coworker", "colleague"), "collaboration_response", "low"),
        "performance": TriggerSpec(("performance", "review", "feedback", "evaluation", "assessment"), "performance_response", "medium"),
        "client": TriggerSpec(("client", "customer", "stakeholder", "vendor"), "client_response", "high"),
        "stress": TriggerSpec(("overwhelmed", "burned out", "burnt out", "overloaded", "swamped"), "work_stress_response", "high"),
        "achievement": TriggerSpec(("completed", "finished", "accomplished", "shipped", "launched"), "achievement_response", "low"),
    }
    openings = {
        "formal": ("Regarding that", "Speaking of which", "In terms of the work", "With respect to that", "Concerning that"),
        "collaborative": ("I think", "Honestly", "If you ask me", "From my side", "The way I see it"),
        "supportive": ("I understand", "That makes sense", "I hear what you're saying", "Absolutely"),
        "urgent": ("Right away", "First things first", "The priority is clear", "Time is of the essence"),
    }
    core_content = {
        "deadline_response": {
            "acknowledgment": ("that deadline is tight", "time is definitely a factor", "we'll need to prioritize"),
            "problem_solving": ("let's break this down", "we could streamline the process", "maybe we can reallocate resources"),
            "support": ("I can help with that", "I'm free to pitch in", "let's tackle this together"),
            "escalation": ("we should loop in management", "this needs higher visibility", "we may need to reset expectations"),
        },
        "project_response": {
            "status": ("progress has been steady", "we're about halfway there", "the first milestone is nearly done"),
            "planning": ("we should map out the timeline", "let's identify the key milestones", "we need to sort out the dependencies"),
            "collaboration": ("we should coordinate with the other teams", "let's align on the scope", "we need more hands on this"),
            "quality": ("we need to ensure quality", "let's double-check the details", "attention to detail is crucial here"),
        },
        "meeting_response": {
            "scheduling": ("let's find a time that works for everyone", "I can send out a calendar invite", "we should book the meeting room"),
            "agenda": ("we should keep the agenda tight", "the key topics need to come first", "a clear agenda would help"),
            "preparation": ("I'll prepare some notes", "we should review beforehand", "let me gather the relevant info"),
            "follow_up": ("I'll send out action items", "we should document decisions", "let's schedule a follow-up"),
        },
        "collaboration_response": {
            "offering": ("I'd be happy to help", "I have some experience there", "I can contribute to that"),
            "coordinating": ("let's sync up on this", "we should align our approach", "we can divide this up"),
            "collaboration": ("we work best as a team", "two heads are better than one", "let's pair on it"),
            "appreciating": ("thanks for jumping in", "I appreciate the collaboration", "great teamwork on this"),
        },
        "performance_response": {
            "positive": ("you've been doing great work", "I've noticed real improvement", "your contributions are valuable"),
            "constructive": ("there's room for growth there", "we could focus on improving that", "that's an area to develop"),
            "goal_setting": ("let's set some objectives", "it helps to have clear career goals", "we should pick a focus area"),
            "support": ("I'm happy to support you", "I want to help you succeed", "there are resources that could help"),
        },
        "client_response": {
            "professional": ("I'll follow up with the client", "we should manage expectations", "let's ensure client satisfaction"),
            "problem_solving": ("we should address their concerns directly", "we can propose a solid solution", "let's think through their needs"),
            "relationship": ("maintaining that relationship is key", "we want to keep them happy", "they're an important client"),
            "communication": ("I'll draft a response", "we should schedule a call", "clear communication is essential"),
        },
        "work_stress_response": {
            "empathy": ("I can see you're under a lot of pressure", "that workload sounds overwhelming", "work has been intense lately"),
            "support": ("I can take something off your plate", "let's see how to lighten the load", "you don't have to handle this alone"),
            "problem_solving": ("maybe we can reprioritize", "let's talk to management about resources", "we could push back on some deadlines"),
            "wellness": ("make sure you're taking breaks", "your wellbeing is important", "don't burn yourself out"),
        },
        "achievement_response": {
            "recognition": ("excellent work on that", "you really knocked it out of the park", "that was impressive"),
            "impact": ("that made a real difference", "the results speak for themselves", "you should be proud of that"),
            "celebration": ("this calls for recognition", "we should celebrate this win", "let's share this success with the team"),
        },
    }
    transitions = {
        "urgent": ("We need this as soon as possible.", "This has immediate priority.", "It can't wait."),
        "steady": ("Let's handle it in a timely manner.", "We can pace this sensibly.", "No need to panic."),
        "relaxed": ("No rush on this.", "Whenever you have a chance.", "It can wait a bit."),
        "systematic": ("Let's look at the details.", "Getting granular helps here.", "Step by step."),
        "strategic": ("Think about the big picture.", "Strategically speaking, it matters.", "This sets us up well."),
    }
    closings = {
        "action_oriented": ("Let's move forward on this.", "I'll take the next steps.", "What's our next move?"),
        "collaborative": ("What are your thoughts?", "How does that sound?", "Are we aligned on this?"),
        "supportive": ("Let me know if you need anything.", "I'm here to help.", "We've got this."),
        "follow_up": ("I'll circle back with you.", "Let's touch base tomorrow.", "I'll keep you posted."),
        "conclusive": ("That should do it.", "I think we're all set.", "That covers everything."),
    }
    personality_defaults = (
        (("Ambitious",), "project_response"),
        (("Organized",), "meeting_response"),
        (("Professional",), "project_response"),
    )
    default_core = "that's worth discussing"
    fallback_lines = ("Understood.", "That makes sense.", "I see your point.", "Let's address that.")

    def analyze(self, message: str, context: Mapping[str, Any]) -> TriggerAnalysis:
        analysis = super().analyze(message, context)
        urgencies = {trigger.urgency for trigger in analysis.detected}
        if "high" in urgencies:
            analysis.intensity = "high"
        elif "medium" in urgencies:
            analysis.intensity = "medium"
        else:
            analysis.intensity = "low" if analysis.detected else "medium"
        analysis.flags["client"] = bool(_CLIENT.search(message))
        analysis.flags["meeting"] = bool(_MEETING.search(message))
        if analysis.primary is not None:
            analysis.subtype = analysis.primary.category
        return analysis

    def topic_fallback(self, analysis: TriggerAnalysis, context: Mapping[str, Any]) -> str:
        return "project_response"

    def strategy(self, character: Character, analysis: TriggerAnalysis) -> WorkStrategy:
        strategy = WorkStrategy()
        if character.has_trait("Professional"):
            strategy.formal = True
        if character.has_trait("Ambitious"):
            strategy.approach = "proactive"
            strategy.include_action = True
        if character.has_trait("Organized"):
            strategy.approach = "systematic"
            strategy.include_action = True
        if character.has_trait("Extroverted"):
            strategy.approach = "collaborative"
        if character.has_trait("Introverted"):
            strategy.approach = "focused"
        if analysis.flags.get("client"):
            strategy.formal = True
        if analysis.intensity == "high" and analysis.detected:
            strategy.approach = "action_oriented"
            strategy.include_action = True
        if analysis.flags.get("meeting"):
            strategy.approach = "structured"
        return strategy

    def select_parts(
        self,
        response_type: str,
        analysis: TriggerAnalysis,
        character: Character,
        context: Mapping[str, Any],
    ) -> tuple[str, str, str, str]:
        strategy = self.strategy(character, analysis)
        if analysis.intensity == "high" and analysis.detected:
            opening = self.pick(self.openings["urgent"])
        elif strategy.formal:
            opening = self.pick(self.openings["formal"])
        elif strategy.approach == "collaborative":
            opening = self.pick(self.openings["collaborative"])
        else:
            opening = self.pick(self.openings["supportive"])

        preferred = {
            "action_oriented": ("problem_solving",),
            "collaborative": ("collaboration",),
            "focused": ("support",),
        }.get(strategy.approach, ())
        core = self.core_line(response_type, preferred)

        if analysis.detected and analysis.intensity == "high":
            transition = self.pick(self.transitions["urgent"])
        elif strategy.approach == "systematic":
            transition = self.pick(self.transitions["systematic"])
        elif strategy.approach == "proactive":
            transition = self.pick(self.transitions["strategic"])
        elif analysis.intensity == "low":
            transition = self.pick(self.transitions["relaxed"])
        else:
            transition = self.pick(self.transitions["steady"])

        if strategy.include_action:
            closing = self.pick(self.closings["action_oriented"])
        elif strategy.approach == "collaborative":
            closing = self.pick(self.closings["collaborative"])
        elif response_type == "work_stress_response":
            closing = self.pick(self.closings["supportive"])
        elif strategy.approach == "structured":
            closing = self.pick(self.closings["conclusive"])
        else:
            closing = self.pick(self.closings["follow_up"])
        return opening, core, transition, closing

    def apply_rules(
        self,
        line: str,
        analysis: TriggerAnalysis,
        character: Character,
        context: Mapping[str, Any],
    ) -> str:
        if character.has_trait("Professional"):
            line = re.sub(r"\byeah\b", "yes", line, flags=re.IGNORECASE)
            line = re.sub(r"\bsure thing\b", "certainly", line, flags=re.IGNORECASE)
            line = re.sub(r"\bno problem\b", "of course", line, flags=re.IGNORECASE)
        if character.has_trait("Ambitious") and analysis.intensity == "high" and self.rng.random() < 0.3:
            line += " I can take point on this."
        if character.has_trait("Organized") and analysis.subtype == "project" and self.rng.random() < 0.4:
            line += " Let me outline the steps."
        if analysis.flags.get("client"):
            line = re.sub(r"\bwe should\b", "we will", line, flags=re.IGNORECASE)
            line = re.sub(r"\bmaybe\b", "we can", line, flags=re.IGNORECASE)
        return line

    def fallback_response(self, character: Character) -> str:
        for trait in character.personality_tags:
            if trait in WORK_FALLBACKS_BY_TRAIT:
                return self.rng.choice(WORK_FALLBACKS_BY_TRAIT[trait])
        return super().fallback_response(character)

    def conversation_starter(self, character: Character, context: Mapping[str, Any]) -> str | None:
        hour = context.get("hour")
        if hour is not None and hour < 10:
            return self.pick(MORNING_STARTERS)
        if hour is not None and hour >= 17:
            return self.pick(EVENING_STARTERS)
        selected = "project_check"
        if character.has_trait("Organized"):
            selected = "planning" if self.rng.random() < 0.5 else "project_check"
        elif character.has_trait("Ambitious"):
            selected = "collaboration" if self.rng.random() < 0.4 else "update"
        elif character.has_trait("Professional"):
            selected = "update" if self.rng.random() < 0.3 else "support"
        return f"{self.pick(STARTER_TYPES[selected])} {self.pick(STARTER_TOPICS)}?"
