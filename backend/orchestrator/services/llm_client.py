"""LLM client adapters for the OpenAI and Anthropic APIs"""
import anthropic
import httpx
import openai
from typing import Any, Optional
import logging
from ..config import Settings
from ..exceptions import ProviderError

logger = logging.getLogger(__name__)


class LLMClient:
    """
    Send a system instruction and a user payload to a generative text API

    Subclasses wrap one provider SDK; this class owns error mapping so every
    failure surfaces as ProviderError. SDK retries are disabled.
    """

    provider_name = "llm"
    sdk: Any = None

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        timeout: float = 120.0,
        default_max_tokens: int = 4000,
        temperature: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize LLM client

        Args:
            api_key: Provider API key
            model: Model identifier sent with every request
            base_url: API base URL (no trailing slash)
            timeout: Per-request timeout in seconds
            default_max_tokens: Output budget used when the caller gives none
            temperature: Sampling temperature (provider default when None)
            http_client: AsyncClient handed to the SDK (transport, pooling)
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.default_max_tokens = default_max_tokens
        self.temperature = temperature
        self._http_client = http_client
        self._client = None

        logger.info(f"{self.__class__.__name__} initialized with model: {model}")

    @property
    def client(self):
        """SDK client, created on first use so a missing key fails at call time"""
        if self._client is None:
            self._client = self._build_client()
        return self._client

    def _build_client(self):
        raise NotImplementedError

    async def _complete(self, system: str, user: str, max_tokens: int) -> Any:
        raise NotImplementedError

    def _extract_text(self, response: Any) -> str:
        raise NotImplementedError

    async def generate(self, system: str, user: str, max_tokens: Optional[int] = None) -> str:
        """
        Generate text for a system + user prompt pair

        Args:
            system: System role instruction
            user: User content
            max_tokens: Output-size budget (defaults to the client's)

        Returns:
            Raw text of the first generated message

        Raises:
            ProviderError: on non-2xx status, malformed envelope or network fault
        """
        budget = max_tokens or self.default_max_tokens
        logger.debug(
            f"Calling {self.provider_name} ({self.model}) with max_tokens={budget}, "
            f"system={len(system)} chars, user={len(user)} chars"
        )

        try:
            response = await self._complete(system, user, budget)
        except self.sdk.APITimeoutError as e:
            logger.error(f"{self.provider_name} request timed out: {e}")
            raise ProviderError(self.provider_name, f"request timed out after {self.timeout}s") from e
        except self.sdk.APIConnectionError as e:
            logger.error(f"{self.provider_name} network error: {e}")
            raise ProviderError(self.provider_name, f"network error: {e}") from e
        except self.sdk.APIStatusError as e:
            logger.error(f"{self.provider_name} returned HTTP {e.status_code}: {e.body}")
            raise ProviderError(
                self.provider_name,
                self._error_message(e.body) or f"HTTP {e.status_code}",
                details=e.body,
                upstream_status=e.status_code
            ) from e
        except self.sdk.APIError as e:
            logger.error(f"{self.provider_name} returned an unusable response: {e}")
            raise ProviderError(self.provider_name, "returned invalid response structure", details=str(e)) from e

        # Non-JSON success bodies come back from the SDK as plain text
        if isinstance(response, str):
            raise ProviderError(self.provider_name, "response body is not JSON", details=response[:500])

        text = self._extract_text(response)
        logger.debug(f"{self.provider_name} response length: {len(text)}")
        return text

    @staticmethod
    def _error_message(details: Any) -> Optional[str]:
        """Pull the human-readable message out of an upstream error body"""
        if not isinstance(details, dict):
            return details if isinstance(details, str) and details else None
        error = details.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if isinstance(error, str):
            return error
        return details.get("message")


class OpenAIClient(LLMClient):
    """OpenAI chat completions: system + messages list, returns choices[]"""

    provider_name = "openai"
    sdk = openai

    def _build_client(self) -> openai.AsyncOpenAI:
        return openai.AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0,
            http_client=self._http_client
        )

    async def _complete(self, system: str, user: str, max_tokens: int) -> Any:
        params = {}
        if self.temperature is not None:
            params["temperature"] = self.temperature
        return await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user}
            ],
            max_tokens=max_tokens,
            **params
        )

    def _extract_text(self, response: Any) -> str:
        choices = getattr(response, "choices", None)
        if not choices:
            raise ProviderError(self.provider_name, "returned invalid response structure", details=str(response)[:500])

        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not content:
            raise ProviderError(self.provider_name, "response missing message content", details=str(choices[0])[:500])

        if getattr(choices[0], "finish_reason", None) == "length":
            logger.warning("openai response truncated at max_tokens")
        return content


class AnthropicClient(LLMClient):
    """Anthropic messages: system + single user message, returns content[]"""

    provider_name = "anthropic"
    sdk = anthropic

    def __init__(self, *args, anthropic_version: str = "2023-06-01", **kwargs):
        super().__init__(*args, **kwargs)
        self.anthropic_version = anthropic_version

    def _build_client(self) -> anthropic.AsyncAnthropic:
        return anthropic.AsyncAnthropic(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0,
            default_headers={"anthropic-version": self.anthropic_version},
            http_client=self._http_client
        )

    async def _complete(self, system: str, user: str, max_tokens: int) -> Any:
        params = {}
        if self.temperature is not None:
            params["temperature"] = self.temperature
        return await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            system=system,
            messages=[{"role": "user", "content": user}],
            **params
        )

    def _extract_text(self, response: Any) -> str:
        content = getattr(response, "content", None)
        if not content:
            raise ProviderError(self.provider_name, "returned invalid response structure", details=str(response)[:500])

        for block in content:
            text = getattr(block, "text", None)
            if getattr(block, "type", None) == "text" and text:
                if getattr(response, "stop_reason", None) == "max_tokens":
                    logger.warning("anthropic response truncated at max_tokens")
                return text

        raise ProviderError(self.provider_name, "response missing text content", details=str(content[0])[:500])


def build_llm_client(
    provider: str,
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None
) -> LLMClient:
    """
    Construct a provider client from explicit settings

    Args:
        provider: "openai" or "anthropic"
        settings: Application settings
        http_client: Optional shared AsyncClient

    Returns:
        LLMClient instance
    """
    if provider == "openai":
        return OpenAIClient(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            timeout=settings.llm_timeout,
            default_max_tokens=settings.openai_max_tokens,
            temperature=settings.openai_temperature,
            http_client=http_client
        )
    if provider == "anthropic":
        return AnthropicClient(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
            base_url=settings.anthropic_base_url,
            timeout=settings.llm_timeout,
            default_max_tokens=settings.anthropic_max_tokens,
            anthropic_version=settings.anthropic_version,
            http_client=http_client
        )
    raise ValueError(f"Unknown LLM provider: {provider}")
