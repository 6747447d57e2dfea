"""
FlowIntent Agents - Shared Modules
Bedrock adapter, configuration, structured logging, errors and retry helpers
"""

from .bedrock_adapter import BedrockLLM, BedrockModel, extract_json_text
from .config import AgentConfig, get_config, reload_config
from .errors import (
    AppError,
    ProviderError,
    RateLimitError,
    IntentClassificationError,
    ToolInputError,
    ABTestNotFoundError,
    ABVariantNotFoundError,
    ABTestStateError,
    InvalidTransitionError,
    is_retryable,
)
from .retry import with_retry
from .structured_logger import get_logger, LogContext, LogTimer

__all__ = [
    'BedrockLLM',
    'BedrockModel',
    'extract_json_text',
    'AgentConfig',
    'get_config',
    'reload_config',
    'AppError',
    'ProviderError',
    'RateLimitError',
    'IntentClassificationError',
    'ToolInputError',
    'ABTestNotFoundError',
    'ABVariantNotFoundError',
    'ABTestStateError',
    'InvalidTransitionError',
    'is_retryable',
    'with_retry',
    'get_logger',
    'LogContext',
    'LogTimer',
]
