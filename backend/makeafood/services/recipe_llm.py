# makeafood/services/recipe_llm.py
# Ingredients -> recipe text (LLM)
# - Chat Completions over the provider's OpenAI-compatible endpoint (Gemini / Groq)
# - exactly one call per request: SDK retries off, no timeout override
# - parsing/validation lives in normalizer.py

from __future__ import annotations
import logging
import time
from typing import Any, List, Optional

from openai import APIError, AsyncOpenAI

from makeafood.core.config import ServiceConfig
from makeafood.core.errors import UpstreamError

log = logging.getLogger(__name__)

QUOTA_HINT = "Please check that your LLM API key is valid and has sufficient quota."

# output shape + cardinality rules are advice for the model;
# normalizer only enforces title / non-empty ingredients / non-empty instructions
PROMPT_TEMPLATE = """
You are a professional recipe generator. Create a delicious and practical recipe.

Return ONLY a valid JSON object with this EXACT structure (no extra text):

{
  "title": "Creative recipe name",
  "ingredients": ["detailed ingredient 1 with quantity", "ingredient 2", "etc"],
  "instructions": ["detailed step 1", "step 2", "step 3", "etc"],
  "prep_time": "X minutes",
  "servings": "X servings",
  "difficulty": "Easy/Medium/Hard"
}

Rules:
- Include 6-12 ingredients with specific quantities
- Provide 5-8 clear, detailed cooking steps
- Make it practical and achievable
- Be creative but realistic

Create a recipe using these ingredients:
"""


def build_prompt(ingredients: List[str], template: str = PROMPT_TEMPLATE) -> str:
    return f"{template}{', '.join(ingredients)}"


class RecipeGenerator:
    """
    One chat-completion call with fixed sampling parameters.
    `client` is anything exposing `chat.completions.create(...)` (AsyncOpenAI in prod).
    """

    def __init__(
        self,
        client: Any,
        model: str,
        *,
        temperature: float = 0.7,
        top_p: float = 0.8,
        max_tokens: int = 2048,
    ):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.top_p = top_p
        self.max_tokens = max_tokens

    @classmethod
    def from_config(cls, cfg: ServiceConfig) -> "RecipeGenerator":
        client = AsyncOpenAI(api_key=cfg.api_key, base_url=cfg.base_url, max_retries=0)
        return cls(client, model=cfg.model or "gemini-2.0-flash")

    async def generate(self, prompt: str) -> str:
        started = time.perf_counter()
        try:
            chat = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                top_p=self.top_p,
                max_tokens=self.max_tokens,
            )
        except APIError as e:
            log.error("LLM call failed (model=%s): %s", self.model, e)
            raise UpstreamError(str(e) or e.__class__.__name__, hint=QUOTA_HINT)

        text: Optional[str] = None
        if chat is not None and getattr(chat, "choices", None):
            text = chat.choices[0].message.content
        log.info(
            "LLM call done (model=%s, prompt_chars=%d, %.0f ms)",
            self.model, len(prompt), (time.perf_counter() - started) * 1000,
        )
        if not text:
            raise UpstreamError("Model returned an empty response", hint=QUOTA_HINT)
        return text

    async def aclose(self) -> None:
        close = getattr(self.client, "close", None)
        if close is not None:
            await close()
