"""
Tool Loader

Selects the subset of registered tools handed to the chat model, either by
agent persona or by the tool names produced by intent classification. A small
core set is always included when registered.
"""

from typing import Any, Dict, Iterable, List, Mapping, Sequence

from ..chat.router.intent_tool_router import INTENT_TOOL_MAP
from ..shared.structured_logger import get_logger

logger = get_logger("ToolLoader")


# Always included when registered
CORE_TOOL_NAMES = (
    "perplexity_search",
    "client_ui",
    "suggest_keywords",
)

# Minimal working set for gateways with a tool-count limit
ESSENTIAL_TOOL_NAMES = (
    "search_web",
    "read_url",
    "on_page_lighthouse",
    "keywords_data_google_ads_search_volume",
    "serp_organic_live_advanced",
    "firecrawl_scrape",
    "generate_researched_content",
    "client_ui",
    "perplexity_search",
)

TOOL_CATEGORIES: Dict[str, List[str]] = {
    **{category: list(tools) for category, tools in INTENT_TOOL_MAP.items()},
    "content_generation": [
        "generate_researched_content",
        "expand_query",
        "parallel_search_web",
        "sort_by_relevance",
    ],
    "onboarding": [
        "client_ui",
        "onboarding_progress",
    ],
}

AGENT_TOOL_CATEGORIES: Dict[str, List[str]] = {
    "seo-aeo": [
        "keyword_research",
        "serp_analysis",
        "competitor_analysis",
        "domain_metrics",
        "backlinks",
        "content_optimization",
        "youtube_seo",
        "trends",
        "technical_seo",
        "web_scraping",
        "ai_platforms",
    ],
    "content": [
        "content_generation",
        "content_optimization",
        "research",
        "web_scraping",
    ],
    "general": [
        "general",
        "research",
    ],
    "onboarding": [
        "onboarding",
    ],
}


def _select(requested: Iterable[str], all_tools: Mapping[str, Any]) -> Dict[str, Any]:
    """Core tools first, then requested tools, keeping only registered names"""
    selected: Dict[str, Any] = {}
    missing: List[str] = []

    for name in CORE_TOOL_NAMES:
        if name in all_tools:
            selected[name] = all_tools[name]

    for name in requested:
        if name in selected:
            continue
        if name in all_tools:
            selected[name] = all_tools[name]
        elif name not in missing:
            missing.append(name)

    if missing:
        logger.info("Requested tools not registered", missing_count=len(missing), missing=missing)

    return selected


def get_category_tool_names(categories: Iterable[str]) -> List[str]:
    """Tool names of the given categories, first-seen order, no duplicates"""
    names: List[str] = []
    for category in categories:
        for name in TOOL_CATEGORIES.get(category, []):
            if name not in names:
                names.append(name)
    return names


def load_tools_for_agent(agent: str, all_tools: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Tools for an agent persona

    Args:
        agent: Agent id ("seo-aeo", "content", "general", "onboarding")
        all_tools: Registered tools by name

    Returns:
        Subset of all_tools; unknown agents get only the core tools
    """
    categories = AGENT_TOOL_CATEGORIES.get(agent)
    if categories is None:
        logger.warning("Unknown agent, loading core tools only", agent=agent)
        categories = []

    tools = _select(get_category_tool_names(categories), all_tools)

    logger.info("Loaded tools for agent", agent=agent, count=len(tools))
    return tools


def load_tools_for_intents(intent_tools: Sequence[str], all_tools: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Tools named by intent classification, plus the core tools

    Args:
        intent_tools: Tool names from the intent router
        all_tools: Registered tools by name

    Returns:
        Subset of all_tools
    """
    tools = _select(intent_tools, all_tools)

    logger.info("Loaded tools for intents", requested=len(intent_tools), count=len(tools))
    return tools


def load_essential_tools(
    all_tools: Mapping[str, Any],
    essential_names: Sequence[str] = ESSENTIAL_TOOL_NAMES
) -> Dict[str, Any]:
    """Only the essential tools that are registered"""
    tools = {name: all_tools[name] for name in essential_names if name in all_tools}

    logger.info("Loaded essential tools", loaded=len(tools), requested=len(essential_names))
    return tools
