"""
Proveedores LLM para el scoring de compatibilidad.

El scorer arma un ScoringRequest (prompts + límites) y el proveedor lo
traduce a la llamada de su SDK. Cada proveedor expone request_arguments()
para poder inspeccionar qué se envía sin tocar la red. El cliente del SDK
se puede inyectar; si no, se crea con la API key de los settings.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from consenso.config import get_settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class ScoringRequest:
    """Pedido de scoring: siempre espera un objeto JSON como respuesta."""

    system_prompt: str
    user_prompt: str
    temperature: float = 0.2
    max_tokens: int = 600


@dataclass
class LLMResponse:
    """Respuesta normalizada de cualquier LLM."""
    text: str
    model: str
    provider: str
    tokens_used: Optional[int] = None


class BaseLLMProvider(ABC):
    """Clase base para proveedores de LLM."""

    provider_name: str = "base"

    @abstractmethod
    async def generate(self, request: ScoringRequest) -> LLMResponse:
        """Envía el pedido al LLM y devuelve el texto (JSON) normalizado."""


class GeminiProvider(BaseLLMProvider):
    """Google Gemini con system_instruction y respuesta application/json."""

    provider_name = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Any = None,
    ):
        settings = get_settings()
        self.model = model or settings.gemini_model

        if client is None:
            from google import genai

            api_key = api_key or settings.gemini_api_key
            if not api_key:
                raise ValueError("GEMINI_API_KEY no configurada")
            client = genai.Client(api_key=api_key)

        self.client = client
        logger.debug("GeminiProvider listo", model=self.model)

    def request_arguments(self, request: ScoringRequest) -> dict:
        from google.genai import types

        return {
            "model": self.model,
            "contents": request.user_prompt,
            "config": types.GenerateContentConfig(
                system_instruction=request.system_prompt,
                temperature=request.temperature,
                max_output_tokens=request.max_tokens,
                response_mime_type="application/json",
            ),
        }

    async def generate(self, request: ScoringRequest) -> LLMResponse:
        response = await self.client.aio.models.generate_content(
            **self.request_arguments(request)
        )

        usage = getattr(response, "usage_metadata", None)
        return LLMResponse(
            text=(response.text or "").strip(),
            model=self.model,
            provider=self.provider_name,
            tokens_used=getattr(usage, "total_token_count", None),
        )


class GroqProvider(BaseLLMProvider):
    """
    Groq (chat completions) en modo json_object.

    Docs: https://console.groq.com/docs/text-chat#json-mode
    """

    provider_name = "groq"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Any = None,
    ):
        settings = get_settings()
        self.model = model or settings.groq_model

        if client is None:
            from groq import AsyncGroq

            api_key = api_key or settings.groq_api_key
            if not api_key:
                raise ValueError("GROQ_API_KEY no configurada")
            client = AsyncGroq(api_key=api_key)

        self.client = client
        logger.debug("GroqProvider listo", model=self.model)

    def request_arguments(self, request: ScoringRequest) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.user_prompt},
            ],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "response_format": {"type": "json_object"},
        }

    async def generate(self, request: ScoringRequest) -> LLMResponse:
        response = await self.client.chat.completions.create(
            **self.request_arguments(request)
        )

        text = response.choices[0].message.content or ""
        usage = getattr(response, "usage", None)
        return LLMResponse(
            text=text.strip(),
            model=self.model,
            provider=self.provider_name,
            tokens_used=getattr(usage, "total_tokens", None),
        )


PROVIDERS = {
    GroqProvider.provider_name: GroqProvider,
    GeminiProvider.provider_name: GeminiProvider,
}


def get_llm_provider(provider: Optional[str] = None, **kwargs) -> BaseLLMProvider:
    """
    Devuelve el proveedor configurado (settings.llm_provider por defecto).

    Los kwargs (api_key, model, client) se pasan al constructor.
    """
    name = (provider or get_settings().llm_provider).lower()
    try:
        provider_class = PROVIDERS[name]
    except KeyError:
        raise ValueError(
            f"Proveedor LLM no soportado: {name}. Usar {' o '.join(map(repr, PROVIDERS))}"
        ) from None
    return provider_class(**kwargs)
