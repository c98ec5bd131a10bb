"""
Scorer de compatibilidad entre los criterios de dos personas.

Colaborador externo del núcleo: un LLM devuelve un score 0-100 y un
comentario. El núcleo solo lo bucketiza y lo guarda en un snapshot.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import structlog
from tenacity import retry, stop_after_attempt, wait_exponential

from consenso.analysis.llm_providers import BaseLLMProvider, ScoringRequest, get_llm_provider
from consenso.config import get_settings
from consenso.models.criteria import UserCriteria

logger = structlog.get_logger()


COMPATIBILITY_SYSTEM_PROMPT = """You are an assistant that analyzes compatibility between two property search criteria.

Compare the criteria and weights of two users and determine:
1. How well their requirements align (0-100%)
2. Where they agree and disagree

Consider:
- Location overlap
- Price range overlap
- Room requirements overlap
- Feature preferences
- Importance weights (1=trivial, 3=nice-to-have, 5=must-have)

Higher weights mean the criterion is more important to that user.
When users have conflicting must-haves, compatibility should be lower.
When they agree on must-haves but differ on nice-to-haves, compatibility can still be high.

Respond with JSON:
{
  "scorePercent": number (0-100),
  "comment": "Brief explanation of where they align and differ"
}"""

COMPATIBILITY_USER_PROMPT_TEMPLATE = """User A criteria: {criteria_a}
User A weights: {weights_a}

User B criteria: {criteria_b}
User B weights: {weights_b}"""

DEFAULT_COMMENT = "Compatibility analysis complete."
FALLBACK_COMMENT = "Unable to compute detailed compatibility. Please try again."


@dataclass
class CompatibilityScore:
    """Score crudo devuelto por el scorer externo."""

    score_percent: float
    comment: str


class BaseCompatibilityScorer(ABC):
    """Interfaz de los scorers de compatibilidad."""

    @abstractmethod
    async def score(self, first: UserCriteria, second: UserCriteria) -> CompatibilityScore:
        """Puntúa el acuerdo entre dos personas."""


class LLMCompatibilityScorer(BaseCompatibilityScorer):
    """Pide al LLM configurado un score y un comentario."""

    def __init__(self, provider: Optional[BaseLLMProvider] = None):
        self._provider = provider or get_llm_provider()
        self.settings = get_settings()

    def _build_prompt(self, first: UserCriteria, second: UserCriteria) -> str:
        def dump(model) -> str:
            data = model.model_dump(mode="json", exclude_none=True, exclude_defaults=True)
            return json.dumps(data)

        return COMPATIBILITY_USER_PROMPT_TEMPLATE.format(
            criteria_a=dump(first.criteria),
            weights_a=dump(first.weights),
            criteria_b=dump(second.criteria),
            weights_b=dump(second.weights),
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _request(self, user_prompt: str) -> str:
        response = await self._provider.generate(
            ScoringRequest(system_prompt=COMPATIBILITY_SYSTEM_PROMPT, user_prompt=user_prompt)
        )
        return response.text

    def _parse(self, raw_text: str) -> CompatibilityScore:
        """Extrae score y comentario; levanta ValueError si no es JSON."""
        text = (raw_text or "").strip()
        if text.startswith("```"):
            parts = text.split("```")
            if len(parts) >= 2:
                text = parts[1].strip()
                if text.startswith("json"):
                    text = text[4:].strip()

        data = json.loads(text)
        raw_score = data.get("scorePercent", data.get("score_percent"))
        if raw_score is None:
            score = self.settings.compatibility_fallback_score
        else:
            score = float(raw_score)
        comment = str(data.get("comment") or "").strip() or DEFAULT_COMMENT

        return CompatibilityScore(score_percent=max(0.0, min(100.0, score)), comment=comment)

    async def score(self, first: UserCriteria, second: UserCriteria) -> CompatibilityScore:
        """
        Puntúa el acuerdo entre dos personas.

        Nunca propaga errores del proveedor: tras los reintentos devuelve
        el score de fallback.
        """
        try:
            raw_text = await self._request(self._build_prompt(first, second))
            result = self._parse(raw_text)
            logger.info(
                "Compatibilidad puntuada",
                users=[first.user_id, second.user_id],
                score=result.score_percent,
            )
            return result
        except Exception as e:
            logger.warning(
                "Error puntuando compatibilidad",
                users=[first.user_id, second.user_id],
                error=str(e),
            )
            return CompatibilityScore(
                score_percent=self.settings.compatibility_fallback_score,
                comment=FALLBACK_COMMENT,
            )
