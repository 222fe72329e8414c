from officenpc.npc.analyzer import analyze_incoming_message
from officenpc.npc.context import dialogue_context, gather_context, legal_intents, snapshot_character
from officenpc.npc.conversation import ConversationStateManager, ConversationStore, conversation_id
from officenpc.npc.dialogue import ConversationalDialogueSystem
from officenpc.npc.memory import add_memory, score_importance
from officenpc.npc.needs import DEFAULT_NEED_EFFECTS, apply_need_deltas, restorative_intents
from officenpc.npc.personality import apply_personality, finalize_response
from officenpc.npc.router import DialogueRouter, LineSource, RoutingResult, default_pools

__all__ = [
    "DEFAULT_NEED_EFFECTS",
    "ConversationStateManager",
    "ConversationStore",
    "ConversationalDialogueSystem",
    "DialogueRouter",
    "LineSource",
    "RoutingResult",
    "add_memory",
    "analyze_incoming_message",
    "apply_need_deltas",
    "apply_personality",
    "conversation_id",
    "default_pools",
    "dialogue_context",
    "finalize_response",
    "gather_context",
    "legal_intents",
    "restorative_intents",
    "score_importance",
    "snapshot_character",
]
