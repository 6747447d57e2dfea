"""
Tool Assembler

Builds the final tool set for one chat turn from the agent persona and the
tool names selected by intent classification.
"""

from typing import Dict, Optional, Sequence

from ..shared.structured_logger import get_logger
from .registry import Tool, ToolRegistry, validate_tools_collection
from .seo_tools import BacklinksClient, build_backlinks_tool, build_suggest_keywords_tool
from .tool_loader import load_tools_for_agent, load_tools_for_intents

logger = get_logger("ToolAssembler")


def build_default_registry(backlinks_client: Optional[BacklinksClient] = None) -> ToolRegistry:
    """Registry holding the built-in tools"""
    registry = ToolRegistry()
    registry.register(build_suggest_keywords_tool())
    registry.register(build_backlinks_tool(backlinks_client))
    return registry


def _builtin(registry: ToolRegistry, name: str) -> Optional[Tool]:
    tool = registry.get(name)
    if tool is None:
        logger.warning("Built-in tool not registered", tool=name)
    return tool


def assemble_tools(
    agent: str,
    registry: ToolRegistry,
    intent_tools: Optional[Sequence[str]] = None
) -> Dict[str, Tool]:
    """
    Assemble the validated tool set for an agent

    Args:
        agent: Agent id
        registry: All registered tools
        intent_tools: Tool names from intent classification; when non-empty
            they replace agent-based loading

    Returns:
        Tool name -> Tool, invalid tools removed
    """
    intent_tools = list(intent_tools or [])
    all_tools = registry.as_dict()

    logger.info("Assembling tools", agent=agent, intent_tool_count=len(intent_tools))

    tools: Dict[str, Tool] = {}

    suggest = _builtin(registry, "suggest_keywords")
    if suggest is not None:
        tools[suggest.name] = suggest

    if agent == "seo-aeo" or "n8n_backlinks" in intent_tools:
        backlinks = _builtin(registry, "n8n_backlinks")
        if backlinks is not None:
            tools[backlinks.name] = backlinks

    if intent_tools:
        tools.update(load_tools_for_intents(intent_tools, all_tools))
    else:
        tools.update(load_tools_for_agent(agent, all_tools))

    validation = validate_tools_collection(tools)
    if validation.invalid_tools:
        logger.warning("Dropped invalid tools", agent=agent, invalid_tools=validation.invalid_tools)

    logger.info(
        "Final validated tools",
        agent=agent,
        count=len(validation.valid_tools),
        tools=list(validation.valid_tools.keys())
    )

    return validation.valid_tools
