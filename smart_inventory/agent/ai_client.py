import time
import logging
from abc import ABC, abstractmethod
from typing import Optional, Dict, List
from dataclasses import dataclass, field

from openai import AsyncOpenAI, OpenAIError

from ..config import settings
from ..constants import Messages
from ..exceptions import AIServiceException, ConfigurationException
from ..middleware.monitoring import instrument_llm_call

logger = logging.getLogger("AIClient")


@dataclass
class AIResponse:
    """Response from the chat completion endpoint with metadata."""
    content: str
    model_used: str
    latency_ms: int
    tokens_used: int
    usage: Dict[str, int] = field(default_factory=dict)


class LlmClient(ABC):
    """
    Boundary to the chat completion service. The assistant only talks to
    this interface.
    """

    @abstractmethod
    async def complete(
        self,
        messages: List[Dict[str, str]],
        max_tokens: Optional[int] = None,
    ) -> AIResponse:
        """Send an OpenAI-style message list, return the reply verbatim."""

    @property
    def configured(self) -> bool:
        return True


class OpenAICompatibleClient(LlmClient):
    """
    Chat completions over any OpenAI-compatible endpoint (Groq by default).

    No retries: the SDK's built-in retries are disabled and a failure is
    surfaced as AIServiceException with a generic message.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.LLM_API_KEY
        self.base_url = base_url or settings.LLM_BASE_URL
        self.model = model or settings.LLM_MODEL
        self.temperature = temperature if temperature is not None else settings.LLM_TEMPERATURE
        self.max_tokens = max_tokens or settings.LLM_MAX_TOKENS

        self.client = None
        if self.api_key:
            self.client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url, max_retries=0)
            logger.info(f"LLM client initialized ({self.model} via {self.base_url})")

    @property
    def configured(self) -> bool:
        return self.client is not None

    async def complete(
        self,
        messages: List[Dict[str, str]],
        max_tokens: Optional[int] = None,
    ) -> AIResponse:
        if not self.client:
            logger.warning("Chat completion requested but LLM_API_KEY is not set")
            raise ConfigurationException(Messages.AI_NOT_CONFIGURED)

        start = time.time()
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=max_tokens or self.max_tokens,
            )
        except OpenAIError as e:
            instrument_llm_call(self.model, 0, ok=False)
            logger.error(f"Chat completion failed [{self.model}]: {e}")
            raise AIServiceException(Messages.AI_GENERIC) from e

        latency = int((time.time() - start) * 1000)
        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }
        tokens = usage.get("total_tokens", 0)
        instrument_llm_call(self.model, tokens, ok=True)
        logger.info(f"LLM [{self.model}]: {tokens} tokens, {latency}ms")

        content = None
        if response.choices:
            content = response.choices[0].message.content
        return AIResponse(
            content=content or "I could not generate a response.",
            model_used=self.model,
            latency_ms=latency,
            tokens_used=tokens,
            usage=usage,
        )
