from abc import ABC, abstractmethod
from typing import Optional
import os
import logging

logger = logging.getLogger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


class LLMClientInterface(ABC):
    @abstractmethod
    async def generate(self, prompt: str, system_instruction: Optional[str] = None) -> str:
        """Generate text from a prompt."""
        pass


class GeminiAdapter(LLMClientInterface):
    """
    Adapter for Google Gemini API using google-generativeai SDK.
    Requires: pip install google-generativeai
    """
    def __init__(self, api_key: str, model_name: str = "gemini-2.5-flash", temperature: float = 0.7):
        self.api_key = api_key
        self.model_name = model_name
        self.temperature = temperature
        self._client = None
        self._model = None

    def _ensure_client(self):
        """Lazy initialization of the Gemini client."""
        if self._client is None:
            import google.generativeai as genai
            genai.configure(api_key=self.api_key)
            self._client = genai
            self._model = genai.GenerativeModel(self.model_name)
            logger.info(f"Gemini client initialized with model: {self.model_name}")

    async def generate(self, prompt: str, system_instruction: Optional[str] = None) -> str:
        self._ensure_client()

        try:
            full_prompt = prompt
            if system_instruction:
                full_prompt = f"{system_instruction}\n\n{prompt}"

            response = await self._model.generate_content_async(
                full_prompt,
                generation_config={"temperature": self.temperature, "max_output_tokens": 1024},
            )

            result_text = response.text
            logger.debug(f"Gemini response length: {len(result_text)}")
            return result_text

        except Exception as e:
            logger.error(f"Gemini generation error: {e}")
            raise


class OpenAIAdapter(LLMClientInterface):
    """
    Adapter for OpenAI-compatible chat APIs using the openai SDK.
    Also serves Groq through its OpenAI-compatible endpoint.
    Requires: pip install openai
    """
    def __init__(
        self,
        api_key: str,
        model_name: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        temperature: float = 0.7,
    ):
        self.api_key = api_key
        self.model_name = model_name
        self.base_url = base_url
        self.temperature = temperature
        self._client = None

    def _ensure_client(self):
        """Lazy initialization of the OpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
            logger.info(f"OpenAI-compatible client initialized with model: {self.model_name}")

    async def generate(self, prompt: str, system_instruction: Optional[str] = None) -> str:
        self._ensure_client()

        try:
            messages = []
            if system_instruction:
                messages.append({"role": "system", "content": system_instruction})
            messages.append({"role": "user", "content": prompt})

            response = await self._client.chat.completions.create(
                model=self.model_name,
                messages=messages,
                temperature=self.temperature,
            )
            result_text = response.choices[0].message.content
            logger.debug(f"OpenAI response length: {len(result_text or '')}")
            return result_text

        except Exception as e:
            logger.error(f"OpenAI generation error: {e}")
            raise


class LLMFactory:
    @staticmethod
    def create_client(provider: str = "gemini", **kwargs) -> LLMClientInterface:
        """
        Factory method to create LLM clients.

        Args:
            provider: "gemini", "openai" or "groq"
            api_key: Optional API key (defaults to env var)
            model_name: Optional model name override
        """
        api_key = kwargs.get("api_key")
        model_name = kwargs.get("model_name")

        if provider == "gemini":
            key = api_key or os.getenv("GEMINI_API_KEY")
            if not key:
                raise ValueError("GEMINI_API_KEY not set")
            return GeminiAdapter(
                api_key=key,
                model_name=model_name or "gemini-2.5-flash"
            )
        elif provider == "openai":
            key = api_key or os.getenv("OPENAI_API_KEY")
            if not key:
                raise ValueError("OPENAI_API_KEY not set")
            return OpenAIAdapter(
                api_key=key,
                model_name=model_name or "gpt-4o-mini"
            )
        elif provider == "groq":
            key = api_key or os.getenv("GROQ_API_KEY")
            if not key:
                raise ValueError("GROQ_API_KEY not set")
            return OpenAIAdapter(
                api_key=key,
                model_name=model_name or "llama-3.1-8b-instant",
                base_url=GROQ_BASE_URL,
            )
        else:
            raise ValueError(f"Unknown LLM provider: {provider}")

    @staticmethod
    def from_settings(settings) -> LLMClientInterface:
        """Pick the configured provider, else the first one with a key."""
        keys = {
            "gemini": settings.GEMINI_API_KEY,
            "openai": settings.OPENAI_API_KEY,
            "groq": settings.GROQ_API_KEY,
        }
        provider = settings.LLM_PROVIDER or next((p for p, k in keys.items() if k), None)
        if provider is None:
            raise ValueError("No LLM API key found")
        return LLMFactory.create_client(
            provider=provider,
            api_key=keys.get(provider),
            model_name=settings.LLM_MODEL,
        )
