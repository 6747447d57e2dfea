"""
Agent configuration
Environment loading and global settings
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from dotenv import load_dotenv

DEFAULT_BACKLINKS_WEBHOOK_URL = "https://zuded9wg.rcld.app/webhook/domain"


@dataclass
class AgentConfig:
    """Global configuration"""

    # AWS
    aws_region: str = "us-west-2"

    # Bedrock models
    classifier_model: str = "haiku"
    variation_model: str = "haiku"
    read_timeout: int = 60
    connect_timeout: int = 10
    max_retries: int = 2

    # LLM generation
    max_tokens: int = 1000
    temperature: float = 0.1

    # Backlinks webhook client
    backlinks_webhook_url: str = DEFAULT_BACKLINKS_WEBHOOK_URL
    backlinks_min_interval: float = 1.0
    backlinks_timeout: float = 30.0

    # Logging
    log_level: str = "INFO"

    app_name: str = "flowintent-router"

    @classmethod
    def from_env(cls) -> 'AgentConfig':
        """
        Load configuration from the environment

        A .env file in the working directory is read first; variables already
        set in the process environment win.
        """
        load_dotenv()

        return cls(
            aws_region=os.getenv("AWS_REGION", "us-west-2"),
            classifier_model=os.getenv("AGENT_CLASSIFIER_MODEL", "haiku"),
            variation_model=os.getenv("AB_VARIATION_MODEL", "haiku"),
            read_timeout=int(os.getenv("AGENT_READ_TIMEOUT", "60")),
            connect_timeout=int(os.getenv("AGENT_CONNECT_TIMEOUT", "10")),
            max_retries=int(os.getenv("AGENT_MAX_RETRIES", "2")),
            max_tokens=int(os.getenv("AGENT_MAX_TOKENS", "1000")),
            temperature=float(os.getenv("AGENT_TEMPERATURE", "0.1")),
            backlinks_webhook_url=os.getenv("N8N_BACKLINKS_WEBHOOK_URL") or DEFAULT_BACKLINKS_WEBHOOK_URL,
            backlinks_min_interval=float(os.getenv("BACKLINKS_MIN_INTERVAL", "1.0")),
            backlinks_timeout=float(os.getenv("BACKLINKS_TIMEOUT", "30")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            app_name=os.getenv("AGENT_APP_NAME", "flowintent-router")
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aws_region": self.aws_region,
            "classifier_model": self.classifier_model,
            "variation_model": self.variation_model,
            "read_timeout": self.read_timeout,
            "connect_timeout": self.connect_timeout,
            "max_retries": self.max_retries,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "backlinks_min_interval": self.backlinks_min_interval,
            "backlinks_timeout": self.backlinks_timeout,
            "log_level": self.log_level,
            "app_name": self.app_name
        }


_config: Optional[AgentConfig] = None


def get_config() -> AgentConfig:
    """Global configuration singleton"""
    global _config
    if _config is None:
        _config = AgentConfig.from_env()
    return _config


def reload_config() -> AgentConfig:
    """Re-read the environment"""
    global _config
    _config = AgentConfig.from_env()
    return _config
