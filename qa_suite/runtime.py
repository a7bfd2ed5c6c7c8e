"""
LLM runtime abstraction for suite generation.

Every hosted provider is reached through an OpenAI-compatible endpoint (Gemini,
OpenAI, or a local server). The runtime makes a single request per call; it
never retries.
"""

from __future__ import annotations
from typing import Optional, Dict, Any, Protocol
import logging

import requests
from openai import OpenAI, OpenAIError

from .config import Settings
from .exceptions import LLMRuntimeError, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a Senior QA Automation Engineer and Business Analyst. "
    "Return JSON only matching the requested schema. "
    "No markdown formatting, no explanations, just valid JSON."
)


class LLMRuntime(Protocol):
    """Protocol for all LLM runtime implementations."""

    def generate(
        self,
        prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 8192,
        **kwargs
    ) -> str:
        """Generate text response from prompt."""
        ...

    def is_available(self) -> bool:
        """Check if this runtime is currently available."""
        ...

    def get_model_info(self) -> Dict[str, Any]:
        """Get information about the current model."""
        ...


class OpenAICompatibleRuntime:
    """
    Runtime for OpenAI-compatible chat completion APIs.
    Works with Gemini's OpenAI endpoint, OpenAI, and local servers.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "no-key",
        model: str = "gemini-2.5-pro",
        name: str = "openai-compatible",
        timeout: float = 120.0,
        json_mode: bool = True
    ):
        if not api_key:
            raise ConfigurationError(f"API key is required for runtime '{name}'")
        self.base_url = base_url
        self.api_key = api_key
        self.model = model
        self.name = name
        self.json_mode = json_mode
        self.client = OpenAI(base_url=base_url, api_key=api_key, timeout=timeout)

    def generate(
        self,
        prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 8192,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        **kwargs
    ) -> str:
        """Generate response using the chat completions API."""
        if self.json_mode:
            kwargs.setdefault("response_format", {"type": "json_object"})
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt}
                ],
                temperature=temperature,
                max_tokens=max_tokens,
                **kwargs
            )
        except OpenAIError as e:
            raise LLMRuntimeError(f"Failed to generate response from {self.name}: {e}")

        if not response.choices:
            return ""
        content = response.choices[0].message.content
        return content.strip() if content else ""

    def is_available(self) -> bool:
        """Check if the service is reachable."""
        try:
            models_url = f"{self.base_url.rstrip('/')}/models"
            response = requests.get(
                models_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=5
            )
            return response.status_code == 200
        except requests.RequestException:
            return False

    def get_model_info(self) -> Dict[str, Any]:
        """Get model information."""
        return {
            "name": self.name,
            "model": self.model,
            "base_url": self.base_url,
            "type": "openai-compatible"
        }


class MockLLMRuntime:
    """Mock runtime for testing - returns predefined responses."""

    def __init__(self, responses: Dict[str, str], default: str = ""):
        """
        Args:
            responses: Map from prompt keywords to mock responses
            default: Response when no keyword matches
        """
        self.responses = responses
        self.default = default
        self.call_count = 0
        self.last_prompt = ""

    def generate(
        self,
        prompt: str,
        temperature: float = 0.2,
        max_tokens: int = 8192,
        **kwargs
    ) -> str:
        """Return mock response based on prompt content."""
        self.call_count += 1
        self.last_prompt = prompt

        for keyword, response in self.responses.items():
            if keyword.lower() in prompt.lower():
                return response

        return self.default

    def is_available(self) -> bool:
        return True

    def get_model_info(self) -> Dict[str, Any]:
        return {
            "name": "mock",
            "type": "mock",
            "responses_count": len(self.responses)
        }


def create_runtime(settings: Settings, require_available: bool = False) -> LLMRuntime:
    """
    Create the runtime described by ``settings``.

    Args:
        settings: Resolved configuration
        require_available: Probe the endpoint and fail fast when it is unreachable

    Raises:
        ConfigurationError: If a hosted provider has no API key
        LLMRuntimeError: If ``require_available`` is set and the endpoint is down
    """
    if settings.is_hosted and not settings.api_key:
        raise ConfigurationError(
            f"Missing API key for provider '{settings.provider}'. "
            "Set QA_SUITE_API_KEY (or API_KEY) in the environment."
        )

    runtime = OpenAICompatibleRuntime(
        base_url=settings.resolved_base_url(),
        api_key=settings.api_key or "no-key",
        model=settings.model,
        name=settings.provider,
        timeout=settings.timeout,
        json_mode=settings.is_hosted
    )

    if require_available and not runtime.is_available():
        raise LLMRuntimeError(f"Runtime '{settings.provider}' is not reachable at {runtime.base_url}")

    logger.info(f"Using runtime: {settings.provider} ({settings.model})")
    return runtime
