from __future__ import annotations

import re

from officenpc.models.analysis import (
    ConversationElements,
    Formality,
    Level,
    MessageAnalysis,
    MessageType,
    QuestionAnalysis,
    QuestionType,
    Sentiment,
    SocialCues,
)


def _words(*words: str) -> re.Pattern[str]:
    return re.compile(r"\b(" + "|".join(re.escape(w) for w in words) + r")", re.IGNORECASE)


DIRECT_QUESTION = re.compile(r"^(what|how|when|where|why|who|which)\s", re.IGNORECASE)
INDIRECT_QUESTION = re.compile(r"(do you|can you|will you|would you|could you|should you)\s", re.IGNORECASE)
CONFIRMATION_QUESTION = re.compile(r"(right\?|isn't it\?|don't you think\?|you know\?)", re.IGNORECASE)

CONVERSATION_ENDERS = _words("bye", "goodbye", "see you", "talk later", "gotta go", "catch you later", "take care")
INTENSIFIERS = _words("really", "very", "super", "extremely", "totally", "absolutely", "completely")
SOFTENERS = _words("maybe", "perhaps", "possibly", "might", "could be", "sort of", "kind of")

GREETING = re.compile(r"^(hi|hello|hey|good morning|good afternoon|good evening|what's up|how's it going)", re.IGNORECASE)
EXCLAMATION_OPENER = re.compile(r"^(wow|amazing|incredible|unbelievable)", re.IGNORECASE)
COMPLAINT = _words("ugh", "argh", "damn", "hate", "terrible", "awful", "worst", "annoying")
INFORMATION_SHARING = re.compile(r"(did you hear|guess what|you know what|let me tell you)", re.IGNORECASE)
REQUEST = re.compile(r"(can you|could you|would you|please|help me)", re.IGNORECASE)

EMOTION_PATTERNS: dict[str, re.Pattern[str]] = {
    "excitement": _words("amazing", "awesome", "fantastic", "incredible", "wonderful", "excited", "thrilled"),
    "frustration": _words("frustrated", "annoyed", "irritated", "angry", "mad", "upset"),
    "sadness": _words("sad", "depressed", "down", "blue", "disappointed", "discouraged"),
    "stress": _words("stressed", "overwhelmed", "anxious", "worried", "frantic", "pressure"),
    "happiness": _words("happy", "glad", "pleased", "delighted", "cheerful", "joyful"),
}

TOPIC_PATTERNS: dict[str, re.Pattern[str]] = {
    "work": _words("work", "job", "project", "deadline", "meeting", "task", "office", "business", "client", "boss"),
    "food": _words("food", "eat", "hungry", "lunch", "dinner", "breakfast", "coffee", "drink", "meal", "restaurant"),
    "social": _words("friend", "relationship", "family", "party", "social", "people", "group", "together"),
    "entertainment": _words("movie", "music", "book", "game", "tv", "show", "entertainment", "fun", "hobby"),
    "technology": _words("computer", "phone", "app", "software", "tech", "digital", "online", "internet"),
    "sports": _words("sport", "game", "team", "player", "match", "score", "win", "lose", "competition"),
    "personal": _words("feeling", "emotion", "personal", "private", "secret", "life", "experience"),
}

POSITIVE_WORDS = _words("good", "great", "awesome", "amazing", "wonderful", "fantastic", "excellent", "love", "happy", "excited", "pleased")
NEGATIVE_WORDS = _words("bad", "terrible", "awful", "hate", "angry", "frustrated", "annoyed", "upset", "disappointed", "worried", "stressed")

URGENT_WORDS = ("urgent", "asap", "emergency", "quickly", "immediately", "rush", "deadline", "critical")
FORMAL_WORDS = ("please", "thank you", "regards", "sincerely", "professional", "business")
INFORMAL_WORDS = ("hey", "yeah", "gonna", "wanna", "kinda", "sorta", "cool", "awesome")

PERSONAL_REFERENCE = re.compile(r"\b(I|me|my|myself|mine)\b", re.IGNORECASE)
OTHER_REFERENCE = re.compile(r"\b(you|your|yours|yourself)\b", re.IGNORECASE)
EMOJI = re.compile("[\U0001F600-\U0001F64F\U0001F300-\U0001F5FF\U0001F680-\U0001F6FF\U0001F1E0-\U0001F1FF]")
ALL_CAPS_RUN = re.compile(r"[A-Z]{3,}")

SOCIAL_CUE_PATTERNS: dict[str, re.Pattern[str]] = {
    "offering_help": re.compile(r"(help|assist|support|offer|available)", re.IGNORECASE),
    "expressing_concern": re.compile(r"(worried|concerned|care about|hope you're)", re.IGNORECASE),
    "changing_subject": re.compile(r"(anyway|by the way|speaking of|on another note)", re.IGNORECASE),
    "including_others": re.compile(r"(we should|let's|everyone|all of us)", re.IGNORECASE),
    "excluding_others": re.compile(r"(just us|between you and me|privately|confidential)", re.IGNORECASE),
}
OPEN_ENDED = re.compile(r"(what do you think|how do you feel|what's your opinion)", re.IGNORECASE)
YES_NO_OPENER = re.compile(r"^(do|does|did|can|could|will|would|should)\b", re.IGNORECASE)


def _is_question(message: str) -> bool:
    return bool(
        DIRECT_QUESTION.search(message)
        or INDIRECT_QUESTION.search(message)
        or CONFIRMATION_QUESTION.search(message)
        or "?" in message
    )


def classify_message_type(message: str) -> MessageType:
    stripped = message.strip()
    if _is_question(stripped):
        return "question"
    if CONVERSATION_ENDERS.search(stripped):
        return "conversation_ender"
    if GREETING.search(stripped):
        return "greeting"
    if "!" in stripped or EXCLAMATION_OPENER.search(stripped):
        return "exclamation"
    if COMPLAINT.search(stripped):
        return "complaint"
    if INFORMATION_SHARING.search(stripped):
        return "information_sharing"
    if REQUEST.search(stripped):
        return "request"
    if len(message) < 15:
        return "short_statement"
    if len(message) > 100:
        return "long_statement"
    return "statement"


def analyze_sentiment(message: str) -> Sentiment:
    positive = len({m.lower() for m in POSITIVE_WORDS.findall(message)})
    negative = len({m.lower() for m in NEGATIVE_WORDS.findall(message)})
    intensified = bool(INTENSIFIERS.search(message))
    if positive > negative:
        return "very_positive" if positive > 1 or intensified else "positive"
    if negative > positive:
        return "very_negative" if negative > 1 or intensified else "negative"
    return "neutral"


def detect_emotions(message: str) -> list[str]:
    emotions = [name for name, pattern in EMOTION_PATTERNS.items() if pattern.search(message)]
    return emotions or ["neutral"]


def extract_topics(message: str) -> list[str]:
    topics = [name for name, pattern in TOPIC_PATTERNS.items() if pattern.search(message)]
    return topics or ["general"]


def analyze_conversation_elements(message: str) -> ConversationElements:
    return ConversationElements(
        has_question=bool(DIRECT_QUESTION.search(message) or INDIRECT_QUESTION.search(message) or "?" in message),
        is_conversation_ender=bool(CONVERSATION_ENDERS.search(message)),
        has_intensifier=bool(INTENSIFIERS.search(message)),
        has_softener=bool(SOFTENERS.search(message)),
        has_personal_reference=bool(PERSONAL_REFERENCE.search(message)),
        has_other_reference=bool(OTHER_REFERENCE.search(message)),
        word_count=len(message.split()),
        has_emoji=bool(EMOJI.search(message)),
    )


def assess_urgency(message: str) -> Level:
    lowered = message.lower()
    urgent_count = sum(1 for word in URGENT_WORDS if word in lowered)
    exclamations = message.count("!")
    if urgent_count > 1 or exclamations > 1 or ALL_CAPS_RUN.search(message):
        return "high"
    if urgent_count > 0 or exclamations > 0:
        return "medium"
    return "low"


def assess_formality(message: str) -> Formality:
    lowered = message.lower()
    formal = sum(1 for word in FORMAL_WORDS if word in lowered)
    informal = sum(1 for word in INFORMAL_WORDS if word in lowered)
    if formal > informal:
        return "formal"
    if informal > formal:
        return "informal"
    return "neutral"


def detect_social_cues(message: str) -> SocialCues:
    flags = {name: bool(pattern.search(message)) for name, pattern in SOCIAL_CUE_PATTERNS.items()}
    return SocialCues(
        seeking_agreement=bool(CONFIRMATION_QUESTION.search(message)),
        seeking_information=bool(DIRECT_QUESTION.search(message)),
        **flags,
    )


def classify_question_type(message: str) -> QuestionType:
    lowered = message.strip().lower()
    for word in ("what", "how", "when", "where", "why", "who"):
        if lowered.startswith(word):
            return word  # type: ignore[return-value]
    if YES_NO_OPENER.search(lowered):
        return "yes_no"
    if CONFIRMATION_QUESTION.search(message):
        return "confirmation"
    return "general"


def analyze_question(message: str) -> QuestionAnalysis:
    if "?" not in message and not DIRECT_QUESTION.search(message):
        return QuestionAnalysis(has_question=False)
    return QuestionAnalysis(
        has_question=True,
        question_type=classify_question_type(message),
        expects_detailed_answer=len(message) > 30,
        is_rhetorical=bool(CONFIRMATION_QUESTION.search(message)),
        is_open_ended=bool(OPEN_ENDED.search(message)),
    )


def _confidence(
    topics: list[str],
    sentiment: Sentiment,
    emotions: list[str],
    elements: ConversationElements,
    urgency: Level,
) -> float:
    confidence = 0.5
    if len(topics) > 1:
        confidence += 0.1
    if sentiment != "neutral":
        confidence += 0.1
    if emotions and emotions != ["neutral"]:
        confidence += 0.1
    if elements.has_question:
        confidence += 0.1
    if urgency != "low":
        confidence += 0.1
    return round(min(confidence, 1.0), 2)


def analyze_incoming_message(message: str | None) -> MessageAnalysis:
    """Classify an utterance. Pure and deterministic for a given input string."""
    text = message or ""
    sentiment = analyze_sentiment(text)
    emotions = detect_emotions(text)
    topics = extract_topics(text)
    elements = analyze_conversation_elements(text)
    urgency = assess_urgency(text)
    return MessageAnalysis(
        original_message=text,
        message_type=classify_message_type(text),
        sentiment=sentiment,
        emotional_state=emotions,
        topics=topics,
        urgency=urgency,
        formality=assess_formality(text),
        conversation_elements=elements,
        social_cues=detect_social_cues(text),
        question_analysis=analyze_question(text),
        confidence=_confidence(topics, sentiment, emotions, elements, urgency),
    )
