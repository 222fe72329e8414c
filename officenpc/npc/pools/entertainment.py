from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from officenpc.models.character import Character
from officenpc.npc.pools.base import TopicPool, TriggerAnalysis, TriggerSpec, classify_by_keywords

GENRES = {
    "comedy": ("comedy", "sitcom", "hilarious", "stand-up", "comedian"),
    "drama": ("drama", "emotional", "tearjerker", "powerful", "moving"),
    "thriller": ("thriller", "suspense", "horror", "scary", "mystery"),
    "documentary": ("documentary", "true story", "docuseries", "nature show"),
    "fantasy": ("fantasy", "sci-fi", "science fiction", "superhero", "dragons"),
}
_SPOILER = re.compile(r"\b(spoiler|ending|finale|plot twist|don't tell me)", re.IGNORECASE)
_RECENCY = re.compile(r"\b(new|latest|just came out|premiere|release[ds]?)\b", re.IGNORECASE)
_BINGE_TRAITS = ("Introverted", "Homebody")

ENTERTAINMENT_STARTERS = (
    "Watched anything good lately?",
    "I need a new show to binge, any recommendations?",
    "Has anyone been listening to anything good this week?",
    "I finally finished that book everyone kept talking about.",
)


class EntertainmentPool(TopicPool):
    name = "entertainment"
    priority = 6
    triggers = {
        "movies": TriggerSpec(("movie", "film", "cinema", "trailer", "sequel", "box office"), "movies_response", "medium"),
        "television": TriggerSpec(("tv", "series", "episode", "binge", "netflix", "sitcom", "streaming"), "television_response", "medium"),
        "music": TriggerSpec(("music", "album", "song", "concert", "playlist", "singer"), "music_response", "medium"),
        "books": TriggerSpec(("book", "novel", "audiobook", "podcast"), "books_response", "low"),
        "live": TriggerSpec(("theater", "theatre", "comedian", "stand-up", "musical"), "live_response", "low"),
    }
    openings = {
        "excited": ("Oh, I loved that!", "Honestly,", "No way, I was just talking about that!", "Okay, so"),
        "critic": ("To be fair,", "Honestly, I think", "Hot take, but", "If I'm being picky,"),
        "curious": ("I haven't caught up yet, but", "I keep hearing", "Funny you mention it,", "You know,"),
        "careful": ("No spoilers, but", "Without giving anything away,", "Careful, I'm not done yet, but", "Let's just say"),
    }
    core_content = {
        "movies_response": {
            "reaction": ("the cinematography was stunning", "the soundtrack carried the whole thing", "it was way better than I expected", "the cast had amazing chemistry"),
            "critique": ("the second half dragged a little", "the plot had a few holes", "they could have cut twenty minutes", "the trailer gave too much away"),
            "recommendation": ("it's worth seeing on a big screen", "it's a perfect Friday night pick", "you'd probably love it"),
        },
        "television_response": {
            "hooked": ("I watched the whole season in two nights", "every episode ends on a cliffhanger", "I can't stop thinking about it"),
            "critique": ("the middle season was a bit slow", "the writing got stronger as it went", "the finale split everyone"),
            "recommendation": ("give it three episodes before you decide", "it's great background for a quiet evening", "it's the perfect comfort show"),
        },
        "music_response": {
            "listening": ("that album has been on repeat all week", "the lyrics really hit", "the production on it is so clean"),
            "live": ("seeing them live was unreal", "the crowd knew every word", "the acoustics were incredible"),
            "sharing": ("I'll add it to the office playlist", "I'll send you my favorite track", "music makes the afternoon go faster"),
        },
        "books_response": {
            "engagement": ("I couldn't put it down", "I stayed up way too late reading", "I got completely lost in that world"),
            "discussion": ("the ending was unexpected", "the character development was brilliant", "the themes really stuck with me"),
            "recommendation": ("you have to read it", "it's right up your alley", "the audiobook version is great for commutes"),
        },
        "live_response": {
            "experience": ("there's nothing like a live show", "the energy in the room was amazing", "the performers were so talented"),
            "plans": ("we should get a group together to go", "tickets go fast for those", "it's worth the splurge"),
        },
    }
    transitions = {
        "enthusiasm": ("I'm still thinking about it.", "Seriously, so good.", "It lived up to the hype.", "I'd watch it again."),
        "balanced": ("Still, I enjoyed it.", "Mixed feelings overall.", "It's worth a try though.", "Your mileage may vary."),
        "sharing": ("Want me to lend it to you?", "We should compare notes.", "Tell me what you think.", "I'm curious what you'd say."),
    }
    closings = {
        "inviting": ("Let's do a movie night sometime!", "We should start an office book club!", "Let me know when you've caught up!"),
        "content": ("Good entertainment makes the week better.", "Everyone needs a little escape.", "That's my weekend sorted."),
        "critic": ("Anyway, that's my review.", "Five stars from me, minus one for the ending.", "I'll be writing a strongly worded review."),
    }
    personality_defaults = (
        (("Creative", "Artistic"), "music_response"),
        (("Intellectual", "Bookish"), "books_response"),
        (("Introverted", "Homebody"), "television_response"),
        (("Social", "Extroverted"), "live_response"),
    )
    default_core = "there's so much good stuff out right now"
    fallback_lines = (
        "I always need more recommendations!",
        "I'm so behind on everything people are watching.",
        "You've got good taste, you know that?",
        "I should really get out to see more things.",
        "Add it to my list!",
    )

    def analyze(self, message: str, context: Mapping[str, Any]) -> TriggerAnalysis:
        analysis = super().analyze(message, context)
        analysis.subtype = classify_by_keywords(message, GENRES, "general")
        analysis.flags["spoiler_risk"] = bool(_SPOILER.search(message))
        analysis.flags["recent"] = bool(_RECENCY.search(message))
        return analysis

    def topic_fallback(self, analysis: TriggerAnalysis, context: Mapping[str, Any]) -> str:
        if analysis.subtype == "documentary":
            return "television_response"
        return "movies_response"

    def select_parts(
        self,
        response_type: str,
        analysis: TriggerAnalysis,
        character: Character,
        context: Mapping[str, Any],
    ) -> tuple[str, str, str, str]:
        critic = character.has_trait("Critical", "Sarcastic", "Pedantic")
        if analysis.flags.get("spoiler_risk"):
            opening = self.pick(self.openings["careful"])
        elif critic:
            opening = self.pick(self.openings["critic"])
        elif analysis.intensity == "high" or character.has_trait("Enthusiastic", "Extroverted"):
            opening = self.pick(self.openings["excited"])
        else:
            opening = self.pick(self.openings["curious"])

        if critic or analysis.intensity == "low":
            core = self.core_line(response_type, ("critique", "discussion"))
        elif character.has_trait(*_BINGE_TRAITS):
            core = self.core_line(response_type, ("hooked", "engagement", "listening"))
        elif analysis.flags.get("recent"):
            core = self.core_line(response_type, ("recommendation", "reaction"))
        else:
            core = self.core_line(response_type)

        if character.has_trait("Social", "Friendly"):
            transition = self.pick(self.transitions["sharing"])
        elif critic:
            transition = self.pick(self.transitions["balanced"])
        else:
            transition = self.pick(self.transitions["enthusiasm"])

        if critic:
            closing = self.pick(self.closings["critic"])
        elif character.has_trait("Social", "Extroverted"):
            closing = self.pick(self.closings["inviting"])
        else:
            closing = self.pick(self.closings["content"])
        return opening, core, transition, closing

    def conversation_starter(self, character: Character, context: Mapping[str, Any]) -> str | None:
        return self.pick(ENTERTAINMENT_STARTERS)
