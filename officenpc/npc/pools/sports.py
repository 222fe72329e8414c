from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from officenpc.models.character import Character
from officenpc.npc.pools.base import TopicPool, TriggerAnalysis, TriggerSpec, classify_by_keywords

SOCCER_PURIST_TRAITS = ("European", "International", "Cultured", "Traditional", "Purist", "Soccer Fan")
BASE_CORRECTION_PROBABILITY = 0.35

CORRECTION_PHRASES = (
    "You mean REAL football, right?",
    "Ah, you're talking about American rugby!",
    "Football is played with feet, not hands!",
    "The beautiful game, as it should be called!",
    "Proper football, not that American sport!",
    "Real football, the world's game!",
    "Football as the rest of the world knows it!",
)

SPORT_TYPES: dict[str, tuple[str, ...]] = {
    "american_football": ("nfl", "quarterback", "touchdown", "fumble", "american football", "super bowl"),
    "basketball": ("basketball", "nba", "dunk", "three-pointer", "rebound"),
    "baseball": ("baseball", "mlb", "home run", "strikeout", "pitcher"),
    "soccer": ("soccer", "football", "midfielder", "fifa", "world cup", "premier league"),
    "hockey": ("hockey", "nhl", "puck"),
    "tennis": ("tennis", "match point", "wimbledon"),
    "golf": ("golf", "birdie", "fairway"),
}

_FOOTBALL = re.compile(r"\bfootball\b", re.IGNORECASE)
_AMERICAN_CONTEXT = re.compile(r"\b(nfl|quarterback|touchdown|fumble|american football|super bowl|end zone)\b", re.IGNORECASE)


def is_soccer_purist(personality: Sequence[str]) -> bool:
    return any(trait in personality for trait in SOCCER_PURIST_TRAITS)


def football_correction_probability(personality: Sequence[str]) -> float:
    probability = BASE_CORRECTION_PROBABILITY
    if is_soccer_purist(personality):
        probability += 0.3
    if "Pedantic" in personality or "Argumentative" in personality:
        probability += 0.2
    if "Passionate" in personality or "Opinionated" in personality:
        probability += 0.15
    if "Polite" in personality or "Diplomatic" in personality:
        probability -= 0.2
    return min(1.0, max(0.0, probability))


class SportsPool(TopicPool):
    name = "sports"
    priority = 2
    triggers = {
        "team": TriggerSpec(("team", "roster", "lineup", "squad", "franchise"), "team_response", "medium"),
        "game": TriggerSpec(("game", "match", "championship", "playoff", "tournament", "final"), "game_response", "high"),
        "player": TriggerSpec(("player", "athlete", "rookie", "veteran", "coach"), "player_response", "medium"),
        "score": TriggerSpec(("score", "points", "goals", "stats", "record", "statistics"), "score_response", "medium"),
        "fitness": TriggerSpec(("workout", "training", "gym", "exercise", "fitness", "conditioning"), "fitness_response", "low"),
        "prediction": TriggerSpec(("prediction", "forecast", "odds", "betting", "fantasy", "draft"), "prediction_response", "medium"),
        "sport": TriggerSpec(("football", "soccer", "basketball", "baseball", "hockey", "tennis", "golf", "sport"), "game_response", "medium"),
    }
    openings = {
        "excited": ("Did you see that", "Can you believe", "Holy cow", "No way", "Incredible"),
        "analytical": ("Looking at the stats", "Based on performance", "Considering the matchup", "From what I saw"),
        "casual": ("So about that", "Speaking of sports", "Been watching", "Heard about that"),
        "competitive": ("We absolutely crushed it", "They got destroyed", "What a domination", "Total victory"),
        "football_purist": ("Now, actual football", "Speaking of proper football", "In real football"),
    }
    core_content = {
        "team_response": {
            "loyalty": ("that's my team right there", "been a fan since day one", "ride or die with them", "through thick and thin"),
            "analysis": ("their defense is solid this year", "the coaching staff made smart moves", "chemistry is really clicking"),
            "criticism": ("management needs to step up", "some questionable calls lately", "not living up to potential"),
            "optimism": ("next season is our year", "building something special", "the future looks bright"),
        },
        "game_response": {
            "excitement": ("what a game that was", "edge of my seat the whole time", "instant classic", "game for the ages"),
            "analysis": ("the key was that third quarter", "momentum shifted completely", "strategy paid off perfectly"),
            "disappointment": ("tough loss to swallow", "so close to victory", "heartbreaking ending", "missed opportunities"),
            "anticipation": ("can't wait for the next one", "playoffs are going to be intense", "this matchup is huge"),
        },
        "player_response": {
            "praise": ("absolute legend", "clutch performer", "carrying the team", "hall of fame material"),
            "concern": ("seems to be struggling", "not the same player", "disappointing season"),
            "potential": ("going to be special", "raw talent is there", "future superstar", "just needs experience"),
        },
        "score_response": {
            "analysis": ("the numbers don't lie", "that scoring run decided it", "defense won that one on paper"),
            "excitement": ("that final score was wild", "a record-breaking night", "nobody saw those numbers coming"),
            "disappointment": ("the scoreline flattered us", "those stats are hard to look at", "we left points on the board"),
        },
        "soccer_response": {
            "purist": ("the beautiful game as it should be called", "proper football with actual feet", "the world's game"),
            "passion": ("90 minutes of pure artistry", "the passion of the fans is unmatched", "poetry in motion on the pitch"),
            "global": ("the only truly global sport", "the World Cup is the real championship", "it brings the whole world together"),
        },
        "american_football_response": {
            "acceptance": ("American football has its merits", "it's a different kind of strategy game", "impressive athleticism required"),
            "comparison": ("quite different from real football", "more like rugby with pads", "strategic but less fluid"),
            "begrudging": ("I suppose it's entertaining", "not my cup of tea but I get it", "each to their own I guess"),
        },
        "fitness_response": {
            "motivation": ("time to hit the gym", "getting back in shape", "feeling motivated"),
            "routine": ("I've been focusing on cardio", "my trainer suggested intervals", "trying a new routine"),
            "struggle": ("hard to stay consistent", "motivation is lacking", "I need an accountability partner"),
        },
        "prediction_response": {
            "confident": ("calling it now", "mark my words", "guaranteed victory"),
            "uncertain": ("could go either way", "too close to call", "anyone's game"),
            "analytical": ("the numbers suggest an upset", "historical trends show a pattern", "advanced metrics favor the underdog"),
        },
    }
    transitions = {
        "agreement": ("Absolutely!", "You got that right!", "Couldn't agree more!", "Exactly what I was thinking!"),
        "excitement": ("This is huge!", "Game changer!", "What a development!", "Can't believe it!"),
        "analysis": ("Here's the thing though", "What's interesting is the depth", "The key factor is health"),
        "football_correction": ("Actually, that's American football", "You mean the sport with hands?", "Real football is played with feet"),
    }
    closings = {
        "enthusiastic": ("Go team!", "Can't wait!", "This is our year!", "What a time to be a fan!"),
        "analytical": ("We'll see how it plays out.", "Time will tell.", "Interesting to watch.", "Keep an eye on that."),
        "casual": ("Should be fun to watch.", "Always entertaining.", "Good times ahead.", "Enjoy the game."),
        "competitive": ("May the best team win.", "Bring on the competition.", "Game on!", "Let's settle this on the field."),
    }
    personality_defaults = (
        (("Competitive",), "prediction_response"),
        (("Analytical",), "score_response"),
        (("Enthusiastic", "Athletic"), "game_response"),
    )
    default_core = "that's really interesting"
    fallback_lines = (
        "I don't follow sports that closely, but sounds exciting!",
        "Not really my area, but I can appreciate the enthusiasm!",
        "Sports aren't really my thing, but good for you!",
        "I should probably pay more attention to sports.",
        "You seem to know way more about this than I do!",
    )

    def analyze(self, message: str, context: Mapping[str, Any]) -> TriggerAnalysis:
        analysis = super().analyze(message, context)
        analysis.subtype = classify_by_keywords(message, SPORT_TYPES, "general")
        analysis.flags["football_mention"] = bool(_FOOTBALL.search(message))
        analysis.flags["american_football_context"] = bool(_AMERICAN_CONTEXT.search(message))
        return analysis

    def choose_response_type(self, analysis: TriggerAnalysis, character: Character, context: Mapping[str, Any]) -> str:
        if analysis.flags.get("football_mention"):
            personality = character.personality_tags
            draw = self.rng.random()
            if is_soccer_purist(personality) and draw < football_correction_probability(personality):
                analysis.flags["correct_football"] = True
                return "soccer_response"
            if analysis.flags.get("american_football_context"):
                return "american_football_response"
            return "soccer_response"
        return super().choose_response_type(analysis, character, context)

    def topic_fallback(self, analysis: TriggerAnalysis, context: Mapping[str, Any]) -> str:
        if analysis.subtype == "soccer":
            return "soccer_response"
        if analysis.subtype == "american_football":
            return "american_football_response"
        return "game_response"

    def select_parts(
        self,
        response_type: str,
        analysis: TriggerAnalysis,
        character: Character,
        context: Mapping[str, Any],
    ) -> tuple[str, str, str, str]:
        purist = is_soccer_purist(character.personality_tags)
        if analysis.intensity == "high":
            opening = self.pick(self.openings["excited"])
        elif character.has_trait("Analytical"):
            opening = self.pick(self.openings["analytical"])
        elif character.has_trait("Competitive"):
            opening = self.pick(self.openings["competitive"])
        elif purist and analysis.subtype == "soccer":
            opening = self.pick(self.openings["football_purist"])
        else:
            opening = self.pick(self.openings["casual"])

        if analysis.flags.get("correct_football"):
            preferred: tuple[str, ...] = ("purist",)
        elif analysis.intensity == "high":
            preferred = ("excitement", "praise", "passion", "motivation", "confident", "optimism")
        elif analysis.intensity == "low":
            preferred = ("disappointment", "concern", "criticism", "struggle", "begrudging", "uncertain")
        else:
            preferred = ()
        core = self.core_line(response_type, preferred)

        if analysis.flags.get("football_mention") and purist and not analysis.flags.get("correct_football"):
            transition = self.pick(self.transitions["football_correction"])
        elif analysis.intensity == "high":
            transition = self.pick(self.transitions["excitement"])
        elif character.has_trait("Analytical"):
            transition = self.pick(self.transitions["analysis"])
        else:
            transition = self.pick(self.transitions["agreement"])

        if character.has_trait("Competitive"):
            closing = self.pick(self.closings["competitive"])
        elif character.has_trait("Analytical"):
            closing = self.pick(self.closings["analytical"])
        elif analysis.intensity == "high" or analysis.flags.get("correct_football"):
            closing = self.pick(self.closings["enthusiastic"])
        else:
            closing = self.pick(self.closings["casual"])
        return opening, core, transition, closing

    def apply_rules(
        self,
        line: str,
        analysis: TriggerAnalysis,
        character: Character,
        context: Mapping[str, Any],
    ) -> str:
        if analysis.flags.get("correct_football"):
            return f"{self.pick(CORRECTION_PHRASES)} {line}"
        return line
