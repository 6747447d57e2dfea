"""
Tools Module - Tool registry, loader and built-in SEO tools
"""

from .registry import (
    Tool,
    ToolRegistry,
    ToolValidationResult,
    validate_tool_schema,
    validate_tools_collection,
)
from .seo_tools import (
    BacklinksClient,
    normalize_backlinks_response,
    normalize_target_domain,
    suggest_keywords,
)
from .tool_assembler import assemble_tools, build_default_registry
from .tool_loader import (
    AGENT_TOOL_CATEGORIES,
    CORE_TOOL_NAMES,
    ESSENTIAL_TOOL_NAMES,
    TOOL_CATEGORIES,
    load_essential_tools,
    load_tools_for_agent,
    load_tools_for_intents,
)

__all__ = [
    # Registry
    "Tool",
    "ToolRegistry",
    "ToolValidationResult",
    "validate_tool_schema",
    "validate_tools_collection",

    # Built-ins
    "BacklinksClient",
    "normalize_backlinks_response",
    "normalize_target_domain",
    "suggest_keywords",

    # Assembly
    "assemble_tools",
    "build_default_registry",

    # Loader
    "AGENT_TOOL_CATEGORIES",
    "CORE_TOOL_NAMES",
    "ESSENTIAL_TOOL_NAMES",
    "TOOL_CATEGORIES",
    "load_essential_tools",
    "load_tools_for_agent",
    "load_tools_for_intents",
]
