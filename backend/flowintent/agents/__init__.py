"""
FlowIntent Agents
Chat routing, tool selection and the shared Bedrock/config/logging layer
"""

from .shared import (
    BedrockLLM,
    BedrockModel,
    AgentConfig,
    get_config,
)

__all__ = [
    'BedrockLLM',
    'BedrockModel',
    'AgentConfig',
    'get_config',
]
