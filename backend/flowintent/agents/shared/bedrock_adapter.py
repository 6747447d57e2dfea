"""
Bedrock LLM Adapter
Wraps the AWS Bedrock Runtime boto3 client behind a small text-in / text-out
interface used by the intent classifier and the A/B variation generator.
"""

import asyncio
import json
import time
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config

from .config import get_config
from .errors import ProviderError, RateLimitError
from .structured_logger import get_logger


class BedrockModel:
    """Bedrock model ids"""

    # Anthropic Claude models (inference profiles)
    SONNET_4_5 = "us.anthropic.claude-sonnet-4-5-20250929-v1:0"
    HAIKU_4_5 = "us.anthropic.claude-haiku-4-5-20251001-v1:0"
    HAIKU_3_5 = "us.anthropic.claude-3-5-haiku-20241022-v1:0"

    MODEL_ALIASES = {
        "sonnet": SONNET_4_5,
        "haiku": HAIKU_4_5,
        "haiku-4.5": HAIKU_4_5,
        "haiku-3.5": HAIKU_3_5,
        "claude-sonnet-4-5": SONNET_4_5,
        "claude-haiku-4.5": HAIKU_4_5,
        "claude-3.5-haiku": HAIKU_3_5,
    }

    @classmethod
    def resolve_model_id(cls, model_name: str) -> str:
        """Resolve an alias to a full model id"""
        if model_name.startswith("us.anthropic.") or model_name.startswith("anthropic."):
            return model_name
        return cls.MODEL_ALIASES.get(model_name.lower(), cls.HAIKU_4_5)


class BedrockLLM:
    """
    Bedrock LLM adapter

    Example:
        >>> llm = BedrockLLM(model="haiku")
        >>> result = llm.generate_sync("Classify this query: ...", max_tokens=500)
        >>> result["text"]
    """

    def __init__(
        self,
        model: str = "haiku",
        region: Optional[str] = None,
        read_timeout: Optional[int] = None,
        connect_timeout: Optional[int] = None,
        max_retries: Optional[int] = None
    ):
        """
        Args:
            model: Alias ("sonnet", "haiku") or full model id
            region: AWS region (defaults to config)
            read_timeout: Read timeout in seconds
            connect_timeout: Connect timeout in seconds
            max_retries: botocore retry attempts
        """
        config = get_config()

        self.model_id = BedrockModel.resolve_model_id(model)
        self.region = region or config.aws_region

        boto_config = Config(
            read_timeout=read_timeout or config.read_timeout,
            connect_timeout=connect_timeout or config.connect_timeout,
            retries={'max_attempts': max_retries if max_retries is not None else config.max_retries}
        )

        self.bedrock_runtime = boto3.client(
            service_name='bedrock-runtime',
            region_name=self.region,
            config=boto_config
        )

        self.default_max_tokens = config.max_tokens
        self.default_temperature = config.temperature

        self.logger = get_logger("BedrockLLM")
        self.logger.info("LLM initialized", model=self.model_id, region=self.region)

    async def generate(
        self,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        system: Optional[str] = None
    ) -> Dict[str, Any]:
        """Async wrapper running the blocking call in the default executor"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            lambda: self.generate_sync(
                prompt=prompt,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system
            )
        )

    def generate_sync(
        self,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        system: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Blocking generation call

        Args:
            prompt: User message text
            max_tokens: Max tokens to generate
            temperature: Sampling temperature
            system: Optional system prompt

        Returns:
            dict with ``text``, ``usage`` and ``model``

        Raises:
            RateLimitError: Bedrock throttled the request
            ProviderError: Any other Bedrock failure
        """
        start_time = time.time()

        request_body = {
            "anthropic_version": "bedrock-2023-05-31",
            "max_tokens": max_tokens or self.default_max_tokens,
            "temperature": self.default_temperature if temperature is None else temperature,
            "messages": [
                {
                    "role": "user",
                    "content": prompt
                }
            ]
        }

        if system:
            request_body["system"] = system

        self.logger.debug(
            "LLM call started",
            model=self.model_id,
            prompt_length=len(prompt),
            max_tokens=request_body["max_tokens"],
            temperature=request_body["temperature"],
            has_system=bool(system)
        )

        try:
            response = self.bedrock_runtime.invoke_model(
                modelId=self.model_id,
                body=json.dumps(request_body)
            )
            response_body = json.loads(response['body'].read())
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self.logger.log_performance(
                operation="llm_call",
                duration_ms=duration_ms,
                success=False,
                model=self.model_id,
                error=str(e),
                error_type=type(e).__name__
            )
            if "ThrottlingException" in type(e).__name__ or "ThrottlingException" in str(e):
                raise RateLimitError(str(e), provider="bedrock") from e
            raise ProviderError(str(e), provider="bedrock") from e

        duration_ms = (time.time() - start_time) * 1000
        usage = response_body.get('usage', {})

        result = {
            "text": response_body['content'][0]['text'],
            "usage": usage,
            "model": self.model_id
        }

        self.logger.log_performance(
            operation="llm_call",
            duration_ms=duration_ms,
            success=True,
            model=self.model_id,
            input_tokens=usage.get("input_tokens", 0),
            output_tokens=usage.get("output_tokens", 0)
        )

        return result


def extract_json_text(llm_output: str) -> str:
    """
    Strip a markdown code fence around a JSON payload, if any

    Handles ```json ... ``` and bare ``` ... ``` fences; returns the stripped
    text unchanged otherwise.
    """
    response_text = llm_output.strip()

    if "```json" in response_text:
        start = response_text.find("```json") + 7
        end = response_text.find("```", start)
        response_text = response_text[start:end if end != -1 else None].strip()
    elif "```" in response_text:
        start = response_text.find("```") + 3
        end = response_text.find("```", start)
        response_text = response_text[start:end if end != -1 else None].strip()

    return response_text
