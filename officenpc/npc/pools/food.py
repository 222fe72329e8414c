from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from officenpc.models.character import Character
from officenpc.npc.pools.base import TopicPool, TriggerAnalysis, TriggerSpec, classify_by_keywords

FOOD_CATEGORIES = {
    "comfort": ("comfort", "cozy", "hearty", "soul food", "homemade"),
    "healthy": ("healthy", "nutritious", "fresh", "organic", "diet", "wellness"),
    "exotic": ("exotic", "international", "ethnic", "authentic", "traditional", "cultural"),
    "quick": ("quick", "fast", "easy", "simple", "convenient", "takeout"),
    "gourmet": ("gourmet", "fine dining", "elegant", "sophisticated", "chef", "artisan"),
}
MEAL_TIMES = {
    "breakfast": ("breakfast", "morning", "coffee", "cereal", "eggs", "toast"),
    "lunch": ("lunch", "midday", "noon", "sandwich", "salad", "soup"),
    "dinner": ("dinner", "evening", "supper", "main course", "entree"),
    "snack": ("snack", "nibble", "munchies", "appetizer"),
}
_HUNGER = re.compile(r"\b(hungry|starving|craving|need food)", re.IGNORECASE)
_KITCHEN_LOCATIONS = ("kitchen", "cafeteria")


class FoodPool(TopicPool):
    name = "food"
    priority = 3
    triggers = {
        "cooking": TriggerSpec(("cook", "recipe", "kitchen", "bake", "grill", "chef"), "cooking_response", "medium"),
        "restaurant": TriggerSpec(("restaurant", "dine", "menu", "reservation", "takeout", "delivery"), "restaurant_response", "medium"),
        "taste": TriggerSpec(("taste", "flavor", "delicious", "yummy", "spicy", "salty"), "taste_response", "low"),
        "dietary": TriggerSpec(("diet", "vegetarian", "vegan", "gluten", "allergy", "nutrition"), "dietary_response", "medium"),
        "culture": TriggerSpec(("cuisine", "cultural", "ethnic", "authentic", "fusion"), "culture_response", "low"),
        "meal": TriggerSpec(("breakfast", "lunch", "dinner", "snack", "meal", "hungry", "appetite", "food"), "meal_response", "high"),
        "coffee": TriggerSpec(("coffee", "espresso", "latte", "caffeine", "tea"), "meal_response", "medium"),
    }
    openings = {
        "enthusiastic": ("Oh my goodness,", "Honestly,", "I'm obsessed,", "Oh, I just discovered that"),
        "sharing": ("Let me tell you,", "Here's my secret:", "Between us,", "I always say"),
        "curious": ("You know,", "I've been wondering, and", "I'm curious, but", "Funny you mention it,"),
        "practical": ("For quick meals,", "When I need something easy,", "Simple but effective:", "My go-to rule is"),
    }
    core_content = {
        "cooking_response": {
            "technique": ("the key is proper seasoning", "timing makes all the difference", "fresh ingredients are crucial", "low and slow cooking works wonders"),
            "sharing": ("this recipe has been in my family", "I learned this from a friend", "I found one online and modified it"),
            "process": ("prep everything beforehand", "mise en place is essential", "taste as you go"),
            "satisfaction": ("it's so rewarding to cook from scratch", "I love creating something delicious", "food brings people together"),
        },
        "restaurant_response": {
            "recommendation": ("there's a hidden gem in the neighborhood", "that place is consistently great", "it's worth the wait for a table"),
            "experience": ("the atmosphere is perfect", "the service was exceptional", "the portions were generous"),
            "value": ("it's great quality for the price", "it's worth every penny", "it's good bang for your buck"),
        },
        "taste_response": {
            "description": ("complex layers of flavor", "perfectly balanced seasoning", "rich and satisfying", "bright and fresh taste"),
            "reaction": ("it hits all the right notes", "it's exactly what I was craving", "comfort food at its finest"),
            "memory": ("it reminds me of childhood", "it's nostalgic and comforting", "it's like grandma used to make"),
        },
        "dietary_response": {
            "accommodation": ("there are plenty of options for everyone", "it's easy to modify for dietary needs", "the menu labels everything clearly"),
            "health": ("focus on whole foods", "balanced nutrition is important", "everything in moderation"),
            "alternatives": ("great substitutions are available", "plant-based options are delicious", "gluten-free doesn't mean flavor-free"),
        },
        "culture_response": {
            "appreciation": ("I love exploring different cuisines", "each culture has unique flavors", "food tells a story"),
            "learning": ("the history behind dishes fascinates me", "authentic preparation methods matter", "regional variations are interesting"),
            "fusion": ("creative combinations work well", "modern twists on classics are fun", "innovation while respecting tradition is the trick"),
        },
        "meal_response": {
            "planning": ("meal prep saves so much time", "planning ahead reduces stress", "variety keeps meals interesting"),
            "timing": ("breakfast sets the tone", "a light lunch keeps energy up", "a good coffee fixes most mornings"),
            "social": ("meals are better shared", "a team lunch is always fun", "food brings people together"),
            "satisfaction": ("good food nourishes the soul", "eating well affects mood", "taking time to enjoy meals matters"),
        },
    }
    transitions = {
        "agreement": ("Absolutely!", "You're so right!", "I totally agree!", "Couldn't have said it better!"),
        "suggestion": ("You should try it sometime.", "Have you considered cooking it yourself?", "There's always the break room fridge."),
        "curiosity": ("Tell me more about it!", "What's your favorite version?", "Where did you discover it?"),
        "sharing": ("I have to share this with you.", "You'll love this.", "Here's what I do."),
    }
    closings = {
        "inviting": ("We should cook together sometime!", "Let's try that restaurant together!", "I'll share the recipe with you!"),
        "encouraging": ("Hope you get to try it soon!", "Let me know how it turns out!", "Trust me, you'll love it!"),
        "satisfied": ("Food is one of life's great pleasures.", "Good food makes everything better.", "Life's too short for bad food."),
        "practical": ("Simple ingredients, amazing results.", "Easy weeknight dinner solution.", "Quick but satisfying."),
    }
    personality_defaults = (
        (("Foodie", "Creative"), "cooking_response"),
        (("Health-conscious",), "dietary_response"),
        (("Social",), "restaurant_response"),
        (("Practical",), "meal_response"),
    )
    default_core = "food is such an important part of life"
    fallback_lines = (
        "Food is always such an interesting topic!",
        "I should probably eat more adventurously.",
        "You seem to know a lot about good food!",
        "I'm always looking for new things to try.",
        "Food brings people together, doesn't it?",
    )

    def analyze(self, message: str, context: Mapping[str, Any]) -> TriggerAnalysis:
        analysis = super().analyze(message, context)
        analysis.subtype = classify_by_keywords(message, FOOD_CATEGORIES, "general")
        analysis.flags["meal_time"] = classify_by_keywords(message, MEAL_TIMES, "anytime")
        if _HUNGER.search(message):
            analysis.intensity = "high"
            analysis.flags["hungry"] = True
        return analysis

    def choose_response_type(self, analysis: TriggerAnalysis, character: Character, context: Mapping[str, Any]) -> str:
        if analysis.primary is not None:
            return analysis.primary.response_type
        for traits, response_type in self.personality_defaults:
            if character.has_trait(*traits):
                return response_type
        location = str(context.get("location", "")).lower()
        if any(name in location for name in _KITCHEN_LOCATIONS):
            return "cooking_response"
        return self.topic_fallback(analysis, context)

    def topic_fallback(self, analysis: TriggerAnalysis, context: Mapping[str, Any]) -> str:
        return {
            "healthy": "dietary_response",
            "exotic": "culture_response",
            "gourmet": "restaurant_response",
            "comfort": "taste_response",
        }.get(analysis.subtype, "meal_response")

    def select_parts(
        self,
        response_type: str,
        analysis: TriggerAnalysis,
        character: Character,
        context: Mapping[str, Any],
    ) -> tuple[str, str, str, str]:
        if analysis.flags.get("hungry"):
            opening = self.pick(self.openings["practical"])
        elif character.has_trait("Enthusiastic", "Foodie"):
            opening = self.pick(self.openings["enthusiastic"])
        elif character.has_trait("Social"):
            opening = self.pick(self.openings["sharing"])
        else:
            opening = self.pick(self.openings["curious"])

        core = self.core_line(response_type)

        if character.has_trait("Social"):
            transition = self.pick(self.transitions["sharing"])
        elif analysis.subtype == "exotic":
            transition = self.pick(self.transitions["curiosity"])
        elif analysis.flags.get("hungry"):
            transition = self.pick(self.transitions["suggestion"])
        else:
            transition = self.pick(self.transitions["agreement"])

        if character.has_trait("Social", "Hospitable"):
            closing = self.pick(self.closings["inviting"])
        elif character.has_trait("Encouraging"):
            closing = self.pick(self.closings["encouraging"])
        elif analysis.subtype == "quick":
            closing = self.pick(self.closings["practical"])
        else:
            closing = self.pick(self.closings["satisfied"])
        return opening, core, transition, closing
