import logging
from typing import Callable, Optional

import openai

from scorecoach.settings import Settings, get_settings
from scorecoach.utils.errors import GenerationServiceError

logger = logging.getLogger(__name__)

# A generation service takes an instruction and returns free text.
Generator = Callable[[str], str]


def make_openai_generator(settings: Optional[Settings] = None) -> Generator:
    settings = settings or get_settings()
    client = openai.OpenAI(
        api_key=settings.openai_api_key,
        timeout=settings.generation_timeout_seconds,
        max_retries=0,
    )

    def call_gpt(prompt: str) -> str:
        try:
            resp = client.chat.completions.create(
                model=settings.question_model,
                messages=[
                    {"role": "system", "content": "You are an expert SAT tutor. Respond only with JSON."},
                    {"role": "user", "content": prompt},
                ],
                temperature=settings.question_temperature,
            )
        except openai.APITimeoutError as e:
            raise GenerationServiceError(
                f"Generation timed out after {settings.generation_timeout_seconds}s", cause=e
            ) from e
        except openai.OpenAIError as e:
            raise GenerationServiceError(f"Generation service error: {e}", cause=e) from e

        content = resp.choices[0].message.content if resp.choices else None
        if not content or not content.strip():
            raise GenerationServiceError("Generation service returned empty content")
        return content

    return call_gpt


def default_generator() -> Optional[Generator]:
    """The OpenAI-backed generator when an API key is configured, else None."""
    settings = get_settings()
    if not settings.generation_enabled:
        logger.info("OPENAI_API_KEY not set; questions will come from the fallback bank")
        return None
    return make_openai_generator(settings)
