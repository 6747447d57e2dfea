"""
Chat Module - Agent persona routing for the SEO/AEO chat

Provides:
- IntentClassifier: LLM intent classification with keyword fallback
- IntentToolRouter: Intent -> focused tool subset
- AgentRouter: Keyword-based agent routing
- Persona and onboarding system prompts
"""

from .intent_classifier import (
    IntentClassifier,
    build_agent_system_prompt,
    classify_user_intent,
    get_intent_classifier,
)
from .prompts import build_onboarding_system_prompt, get_agent_system_prompt
from .router.intent_tool_router import (
    INTENT_DESCRIPTIONS,
    INTENT_TOOL_MAP,
    IntentToolRouter,
    get_intent_tool_router,
    sanitize_classification,
    sanitize_intent,
)
from .router.rule_router import AgentRouter, get_agent_router
from .router.schema import (
    AGENT_METADATA,
    AgentMetadata,
    AgentRoutingResult,
    ClassificationResult,
    IntentClassification,
    IntentRoutingResult,
    VALID_INTENTS,
)

__all__ = [
    # Classifier
    "IntentClassifier",
    "build_agent_system_prompt",
    "classify_user_intent",
    "get_intent_classifier",

    # Prompts
    "build_onboarding_system_prompt",
    "get_agent_system_prompt",

    # Routing
    "INTENT_DESCRIPTIONS",
    "INTENT_TOOL_MAP",
    "IntentToolRouter",
    "get_intent_tool_router",
    "sanitize_classification",
    "sanitize_intent",
    "AgentRouter",
    "get_agent_router",

    # Schema
    "AGENT_METADATA",
    "AgentMetadata",
    "AgentRoutingResult",
    "ClassificationResult",
    "IntentClassification",
    "IntentRoutingResult",
    "VALID_INTENTS",
]
