"""Hybrid intent classifier and system prompt assembly"""

from flowintent.agents.chat.intent_classifier import (
    IntentClassifier,
    build_agent_system_prompt,
    is_onboarding_context,
)
from flowintent.agents.chat.prompts import (
    GENERAL_SYSTEM_PROMPT,
    INTENT_PROMPT_ADDENDA,
    ONBOARDING_SYSTEM_PROMPT,
    SEO_SYSTEM_PROMPT,
    build_onboarding_system_prompt,
    format_collected_data,
    get_step_description,
)
from flowintent.agents.chat.router.intent_tool_router import INTENT_TOOL_MAP, IntentToolRouter
from flowintent.agents.chat.router.rule_router import AgentRouter
from flowintent.agents.shared.errors import RateLimitError

from tests.fakes import FakeLLM, classification_json


def make_classifier(llm):
    return IntentClassifier(tool_router=IntentToolRouter(llm=llm), agent_router=AgentRouter())


def test_is_onboarding_context():
    assert is_onboarding_context({"page": "onboarding"})
    assert is_onboarding_context({"onboarding": {"currentStep": 2}})
    assert not is_onboarding_context({"page": "dashboard"})
    assert not is_onboarding_context(None)


def test_onboarding_page_skips_llm():
    llm = FakeLLM(classification_json())

    result = make_classifier(llm).classify("analyze backlinks for example.com", {"page": "onboarding"})

    assert result.agent == "onboarding"
    assert result.confidence == 1.0
    assert result.reasoning == "Onboarding context detected"
    assert result.tools == []
    assert result.classification is None
    assert llm.calls == []


def test_onboarding_keyword_skips_llm():
    llm = FakeLLM(classification_json())

    result = make_classifier(llm).classify("help me with the setup")

    assert result.agent == "onboarding"
    assert result.confidence == 1.0
    assert llm.calls == []


def test_llm_classification_is_used_verbatim():
    llm = FakeLLM(classification_json(recommendedAgent="content", confidence=0.66, reasoning="Needs an article"))

    result = make_classifier(llm).classify("show backlinks for example.com")

    assert result.agent == "content"
    assert result.confidence == 0.66
    assert result.reasoning == "Needs an article"
    assert result.tools == INTENT_TOOL_MAP["backlinks"] + INTENT_TOOL_MAP["domain_metrics"]
    assert result.all_intents == ["backlinks", "domain_metrics"]
    assert result.classification.primary_intent == "backlinks"
    assert len(llm.calls) == 1


def test_provider_failure_falls_back_to_keywords():
    llm = FakeLLM(error=RateLimitError(provider="bedrock"))

    result = make_classifier(llm).classify("show backlinks for example.com")

    assert result.agent == "seo-aeo"
    assert result.confidence == 0.7
    assert result.reasoning == "Keyword-based routing fallback"
    assert result.tools == []
    assert result.classification is None
    assert result.all_intents == []


def test_unparseable_output_falls_back_to_keywords():
    result = make_classifier(FakeLLM("not json at all")).classify("hello there")

    assert result.agent == "general"
    assert result.confidence == 0.7
    assert result.reasoning == "Keyword-based routing fallback"


def test_system_prompt_with_intent_addendum():
    prompt = build_agent_system_prompt("seo-aeo", {}, ["backlinks", "domain_metrics"])

    assert prompt == SEO_SYSTEM_PROMPT + "\n\n" + INTENT_PROMPT_ADDENDA["backlinks"]


def test_system_prompt_without_intents():
    assert build_agent_system_prompt("general", None, []) == GENERAL_SYSTEM_PROMPT
    assert build_agent_system_prompt("unknown-agent", None, []) == GENERAL_SYSTEM_PROMPT


def test_onboarding_system_prompt_uses_current_step():
    context = {
        "page": "onboarding",
        "onboarding": {"currentStep": 3, "data": {"websiteUrl": "https://example.com"}},
    }

    prompt = build_agent_system_prompt("onboarding", context, [])

    assert "Current onboarding step: 3 of 6" in prompt
    assert get_step_description(3) in prompt
    assert "- Website: https://example.com" in prompt


def test_onboarding_system_prompt_defaults_to_step_one():
    prompt = build_agent_system_prompt("onboarding", {"onboarding": {"data": {}}}, [])

    assert prompt == build_onboarding_system_prompt(1, {})


def test_onboarding_page_without_state_uses_persona_prompt():
    assert build_agent_system_prompt("onboarding", {"page": "onboarding"}, []) == ONBOARDING_SYSTEM_PROMPT


def test_format_collected_data():
    assert format_collected_data(None) == "Nothing collected yet"

    summary = format_collected_data({
        "industry": "SaaS",
        "goals": ["Generate Leads", "Local SEO"],
        "location": {"country": "US", "city": "Austin"},
        "competitors": ["a.com", "b.com"],
    })

    assert "- Industry: SaaS" in summary
    assert "- Goals: Generate Leads, Local SEO" in summary
    assert "- Location: US, Austin" in summary
    assert "- Competitors: 2 selected" in summary


def test_unknown_step_description():
    assert get_step_description(9) == "Unknown step"
