import os
from typing import Optional
from langchain_core.language_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI
from pydantic import SecretStr
from knowledge_scout.core.config import settings

DEFAULT_MODELS = {
    "google": "gemini-2.0-flash",
    "openai": "gpt-4o-mini",
}


class LLMFactory:
    """Factory for creating configured LLM instances with tracing."""

    @staticmethod
    def api_key_for(provider: str) -> str:
        """Return the configured credential for a provider, or an empty string."""
        if provider == "google":
            return settings.GEMINI_API_KEY
        if provider == "openai":
            return settings.OPENAI_API_KEY
        return ""

    @staticmethod
    def create_llm(
        provider: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.7,
        tracing_project: Optional[str] = None,
        api_key: Optional[str] = None
    ) -> BaseChatModel:
        """
        Create a configured chat model instance.

        Args:
            provider: "google" (Gemini) or "openai". Defaults to settings.
            model: The model name to use.
            temperature: The temperature for generation.
            tracing_project: The LangSmith project name for tracing.
            api_key: Provider API key (optional, defaults to settings).
        """
        provider = provider or settings.LLM_PROVIDER
        if provider not in DEFAULT_MODELS:
            raise ValueError(f"Unsupported LLM provider: {provider}")

        model = model or settings.LLM_MODEL or DEFAULT_MODELS[provider]
        key = api_key or LLMFactory.api_key_for(provider)

        # Set env vars for tracing if provided
        if settings.LANGSMITH_TRACING:
            os.environ["LANGCHAIN_TRACING_V2"] = "true"
            os.environ["LANGCHAIN_ENDPOINT"] = settings.LANGSMITH_ENDPOINT
            os.environ["LANGCHAIN_API_KEY"] = settings.LANGSMITH_API_KEY
            os.environ["LANGCHAIN_PROJECT"] = tracing_project or settings.LANGSMITH_PROJECT

        if provider == "google":
            return ChatGoogleGenerativeAI(
                model=model,
                google_api_key=SecretStr(key),
                temperature=temperature,
            )

        return ChatOpenAI(
            model=model,
            api_key=SecretStr(key),
            temperature=temperature,
        )
