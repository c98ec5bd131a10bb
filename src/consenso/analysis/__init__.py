"""
Módulo de análisis con IA.

Provee el scoring de compatibilidad usando LLM (Gemini/Groq).
"""

from consenso.analysis.compatibility_scorer import (
    BaseCompatibilityScorer,
    CompatibilityScore,
    LLMCompatibilityScorer,
)
from consenso.analysis.llm_providers import (
    get_llm_provider,
    BaseLLMProvider,
    GeminiProvider,
    GroqProvider,
    LLMResponse,
    ScoringRequest,
)

__all__ = [
    # Scorers
    "BaseCompatibilityScorer",
    "CompatibilityScore",
    "LLMCompatibilityScorer",
    # Proveedores LLM
    "get_llm_provider",
    "BaseLLMProvider",
    "GeminiProvider",
    "GroqProvider",
    "LLMResponse",
    "ScoringRequest",
]
