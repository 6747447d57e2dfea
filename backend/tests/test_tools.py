"""Tool registry validation, tool loader and tool assembly"""

from typing import List

import pytest
from pydantic import BaseModel, RootModel

from flowintent.agents.shared.errors import ToolInputError
from flowintent.agents.tools.registry import (
    Tool,
    ToolRegistry,
    validate_tool_schema,
    validate_tools_collection,
)
from flowintent.agents.tools.tool_assembler import assemble_tools
from flowintent.agents.tools.tool_loader import (
    CORE_TOOL_NAMES,
    TOOL_CATEGORIES,
    get_category_tool_names,
    load_essential_tools,
    load_tools_for_agent,
    load_tools_for_intents,
)


class QueryInput(BaseModel):
    query: str


class EmptyInput(BaseModel):
    pass


class NamesInput(RootModel[List[str]]):
    pass


def make_tool(name, description="Does something useful", input_schema=QueryInput, execute=None):
    return Tool(
        name=name,
        description=description,
        input_schema=input_schema,
        execute=execute or (lambda **kwargs: {"tool": name, **kwargs})
    )


REGISTERED = [
    "perplexity_search",
    "client_ui",
    "suggest_keywords",
    "n8n_backlinks",
    "firecrawl_scrape",
    "generate_researched_content",
    "onboarding_progress",
    "serp_organic_live_advanced",
    "read_url",
]


@pytest.fixture
def all_tools():
    return {name: make_tool(name) for name in REGISTERED}


# ============================================================================
# Validation
# ============================================================================

def test_valid_tool():
    result = validate_tool_schema(make_tool("search"))

    assert result.is_valid
    assert result.errors == []
    assert result.warnings == []


def test_empty_description_is_invalid():
    result = validate_tool_schema(make_tool("search", description="  "))

    assert not result.is_valid
    assert any("description" in e for e in result.errors)


def test_missing_schema_is_invalid():
    assert not validate_tool_schema(make_tool("search", input_schema=None)).is_valid
    assert not validate_tool_schema(make_tool("search", input_schema={"type": "object"})).is_valid


def test_non_object_root_is_invalid():
    result = validate_tool_schema(make_tool("search", input_schema=NamesInput))

    assert not result.is_valid
    assert any("'object'" in e for e in result.errors)


def test_empty_properties_warns_or_fails_in_strict_mode():
    lenient = validate_tool_schema(make_tool("search", input_schema=EmptyInput))
    strict = validate_tool_schema(make_tool("search", input_schema=EmptyInput), strict_mode=True)

    assert lenient.is_valid
    assert lenient.warnings
    assert not strict.is_valid


def test_non_callable_execute_is_invalid():
    tool = make_tool("search")
    tool.execute = "not callable"

    assert not validate_tool_schema(tool).is_valid


def test_validate_tools_collection_splits_valid_and_invalid():
    tools = {
        "good": make_tool("good"),
        "bad": make_tool("bad", description=""),
    }

    validation = validate_tools_collection(tools)

    assert list(validation.valid_tools) == ["good"]
    assert validation.invalid_tools == ["bad"]
    assert not validation.results["bad"].is_valid


# ============================================================================
# Tool / registry
# ============================================================================

def test_tool_run_validates_arguments():
    tool = make_tool("search")

    assert tool.run({"query": "seo"}) == {"tool": "search", "query": "seo"}

    with pytest.raises(ToolInputError) as exc_info:
        tool.run({})

    assert exc_info.value.details["tool"] == "search"


def test_tool_describe_includes_json_schema():
    description = make_tool("search").describe()

    assert description["name"] == "search"
    assert description["input_schema"]["properties"]["query"]["type"] == "string"


def test_registry_replaces_existing_name():
    registry = ToolRegistry([make_tool("search")])
    replacement = make_tool("search", description="Second version")
    registry.register(replacement)

    assert len(registry) == 1
    assert registry.get("search") is replacement
    assert "search" in registry
    assert list(registry) == ["search"]


# ============================================================================
# Loader
# ============================================================================

def test_seo_agent_tools(all_tools):
    tools = load_tools_for_agent("seo-aeo", all_tools)

    assert list(tools)[:3] == list(CORE_TOOL_NAMES)
    assert "n8n_backlinks" in tools
    assert "serp_organic_live_advanced" in tools
    assert "firecrawl_scrape" in tools
    assert "generate_researched_content" not in tools
    assert "onboarding_progress" not in tools


def test_content_agent_tools(all_tools):
    tools = load_tools_for_agent("content", all_tools)

    assert "generate_researched_content" in tools
    assert "firecrawl_scrape" in tools
    assert "read_url" in tools
    assert "n8n_backlinks" not in tools


def test_onboarding_agent_tools(all_tools):
    tools = load_tools_for_agent("onboarding", all_tools)

    assert set(tools) == set(CORE_TOOL_NAMES) | {"onboarding_progress"}


def test_unknown_agent_gets_core_tools_only(all_tools):
    assert set(load_tools_for_agent("pirate", all_tools)) == set(CORE_TOOL_NAMES)


@pytest.mark.parametrize("agent", ["seo-aeo", "content", "general", "onboarding", "pirate"])
def test_agent_tools_subset_of_registry_and_include_core(agent):
    all_tools = {name: make_tool(name) for name in ["client_ui", "serp_locations", "read_url"]}

    tools = load_tools_for_agent(agent, all_tools)

    assert set(tools) <= set(all_tools)
    assert "client_ui" in tools


def test_intent_tools_keep_only_registered(all_tools):
    tools = load_tools_for_intents(["firecrawl_scrape", "missing_tool", "firecrawl_scrape"], all_tools)

    assert list(tools) == list(CORE_TOOL_NAMES) + ["firecrawl_scrape"]
    assert tools["firecrawl_scrape"] is all_tools["firecrawl_scrape"]


def test_empty_registry_yields_nothing():
    assert load_tools_for_intents(["firecrawl_scrape"], {}) == {}
    assert load_tools_for_agent("seo-aeo", {}) == {}


def test_category_tool_names_are_deduplicated():
    names = get_category_tool_names(["research", "keyword_research", "missing"])

    assert len(names) == len(set(names))
    assert set(names) == set(TOOL_CATEGORIES["research"]) | set(TOOL_CATEGORIES["keyword_research"])


def test_load_essential_tools(all_tools):
    tools = load_essential_tools(all_tools)

    assert set(tools) == {"read_url", "firecrawl_scrape", "generate_researched_content",
                          "client_ui", "perplexity_search", "serp_organic_live_advanced"}


# ============================================================================
# Assembler
# ============================================================================

def test_seo_agent_gets_builtin_tools(tool_registry):
    tools = assemble_tools("seo-aeo", tool_registry)

    assert set(tools) == {"suggest_keywords", "n8n_backlinks"}


def test_general_agent_skips_backlinks(tool_registry):
    tools = assemble_tools("general", tool_registry)

    assert set(tools) == {"suggest_keywords"}


def test_backlinks_intent_adds_backlinks_tool(tool_registry):
    tools = assemble_tools("general", tool_registry, intent_tools=["n8n_backlinks"])

    assert "n8n_backlinks" in tools


def test_intent_tools_replace_agent_loading(tool_registry):
    tool_registry.register(make_tool("generate_researched_content"))
    tool_registry.register(make_tool("firecrawl_scrape"))

    tools = assemble_tools("content", tool_registry, intent_tools=["firecrawl_scrape"])

    assert "firecrawl_scrape" in tools
    assert "generate_researched_content" not in tools


def test_invalid_tools_are_dropped(tool_registry):
    tool_registry.register(make_tool("perplexity_search", description=""))

    tools = assemble_tools("general", tool_registry)

    assert "perplexity_search" not in tools
    assert "suggest_keywords" in tools
