"""
Intent Classifier

Decides which agent persona handles a chat query and which tools it gets.
LLM classification first, keyword routing as the fallback.
"""

from typing import Any, Dict, List, Optional

from ..shared.structured_logger import get_logger
from .prompts import build_onboarding_system_prompt, get_agent_system_prompt, get_intent_addendum
from .router.intent_tool_router import IntentToolRouter
from .router.rule_router import AgentRouter, get_agent_router
from .router.schema import ClassificationResult


def is_onboarding_context(context: Optional[Dict[str, Any]]) -> bool:
    """True when the caller is on the onboarding page or carries onboarding state"""
    context = context or {}
    return context.get("page") == "onboarding" or bool(context.get("onboarding"))


class IntentClassifier:
    """
    Hybrid agent classifier

    Architecture:
    1. Onboarding short-circuit: page/context flags or an onboarding keyword
       route to the onboarding agent without calling the LLM
    2. LLM intent router: recommends the agent and the focused tool subset
    3. Keyword fallback: AgentRouter picks the agent when the LLM call fails
    """

    def __init__(
        self,
        tool_router: Optional[IntentToolRouter] = None,
        agent_router: Optional[AgentRouter] = None
    ):
        """
        Args:
            tool_router: LLM intent router (default: new IntentToolRouter)
            agent_router: Keyword router (default: module singleton)
        """
        self.tool_router = tool_router or IntentToolRouter()
        self.agent_router = agent_router or get_agent_router()
        self.logger = get_logger("IntentClassifier")

    def classify(self, query: str, context: Optional[Dict[str, Any]] = None) -> ClassificationResult:
        """
        Classify a query into agent + tools

        Args:
            query: Raw user query
            context: Optional page context (``page``, ``onboarding``)

        Returns:
            ClassificationResult
        """
        context = context or {}

        if is_onboarding_context(context) or self.agent_router.route_query(query, context).agent == "onboarding":
            self.logger.info("Onboarding detected, skipping LLM classification")
            return ClassificationResult(
                agent="onboarding",
                confidence=1.0,
                reasoning="Onboarding context detected",
                tools=[],
                classification=None,
                all_intents=[]
            )

        try:
            intent_result = self.tool_router.classify_and_get_tools(query)
        except Exception as e:
            self.logger.error(
                "LLM classification failed, falling back to keyword routing",
                error=str(e),
                error_type=type(e).__name__
            )
            keyword_routing = self.agent_router.route_query(query, context)
            return ClassificationResult(
                agent=keyword_routing.agent,
                confidence=0.7,
                reasoning="Keyword-based routing fallback",
                tools=[],
                classification=None,
                all_intents=[]
            )

        classification = intent_result.classification

        self.logger.info(
            "LLM classification",
            primary=classification.primary_intent,
            secondary=classification.secondary_intents,
            recommended_agent=classification.recommended_agent,
            confidence=classification.confidence,
            tools_count=len(intent_result.tools)
        )

        return ClassificationResult(
            agent=classification.recommended_agent,
            confidence=classification.confidence,
            reasoning=classification.reasoning,
            tools=list(intent_result.tools),
            classification=classification,
            all_intents=list(intent_result.all_intents)
        )

    def build_system_prompt(
        self,
        agent: str,
        context: Optional[Dict[str, Any]],
        all_intents: List[str]
    ) -> str:
        return build_agent_system_prompt(agent, context, all_intents)


def build_agent_system_prompt(
    agent: str,
    context: Optional[Dict[str, Any]],
    all_intents: List[str]
) -> str:
    """
    System prompt for the selected agent plus the intent addendum

    With onboarding state in the context the step-specific onboarding prompt
    is returned instead (step defaults to 1).
    """
    context = context or {}
    onboarding = context.get("onboarding")

    if is_onboarding_context(context) and onboarding:
        onboarding = onboarding if isinstance(onboarding, dict) else {}
        current_step = onboarding.get("currentStep") or onboarding.get("current_step") or 1
        data = onboarding.get("data") or {}
        return build_onboarding_system_prompt(current_step, data)

    system_prompt = get_agent_system_prompt(agent)

    if all_intents:
        addendum = get_intent_addendum(all_intents)
        if addendum:
            system_prompt = system_prompt + "\n\n" + addendum

    return system_prompt


# Singleton instance
_intent_classifier_instance = None


def get_intent_classifier() -> IntentClassifier:
    """Get singleton IntentClassifier instance"""
    global _intent_classifier_instance
    if _intent_classifier_instance is None:
        _intent_classifier_instance = IntentClassifier()
    return _intent_classifier_instance


def classify_user_intent(query: str, context: Optional[Dict[str, Any]] = None) -> ClassificationResult:
    """Classify a query with the shared classifier"""
    return get_intent_classifier().classify(query, context)
