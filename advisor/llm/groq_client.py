from __future__ import annotations

import json
import logging

from groq import Groq, NotFoundError
from pydantic import ValidationError

from ..chat.models import ModelTurn
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

RESPONSE_FORMAT_INSTRUCTIONS = (
    "Return ONLY valid JSON in this exact format:\n"
    "{\n"
    '  "response": "<what you say to the user, under 80 words>",\n'
    '  "phase": "initial|discovery|filtering|recommendation|refinement",\n'
    '  "affordances": [{"type": "question|action|purpose", "text": "<button label>", "priority": 1}],\n'
    '  "collected_data": {"budget": {"min": 800, "max": 1500}, "purposes": [], "brands": [], '
    '"specs": {}, "priorities": []},\n'
    '  "database_filter": {"price_min": 800, "price_max": 1500, "brands": []}\n'
    "}\n"
    "Omit collected_data and database_filter when you learned nothing new, "
    "and only include a budget the user actually stated."
)


def _create(client: Groq, model: str, system_prompt: str, utterance: str, config: LLMConfig):
    return client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": utterance},
        ],
        max_tokens=config.max_tokens,
        temperature=config.temperature,
        response_format={"type": "json_object"},
    )


def complete_turn(
    system_prompt: str,
    utterance: str,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> ModelTurn | None:
    """
    Ask the model for the next conversational turn.

    Returns ``None`` on any failure (disabled, timeout, API error, bad JSON,
    schema mismatch) so the caller can take its fallback path. A model that
    the provider reports as not found is retried once with
    ``config.fallback_model``.
    """
    if not config.enabled or not config.api_key:
        return None

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        try:
            response = _create(client, config.model, system_prompt, utterance, config)
        except NotFoundError:
            if not config.fallback_model or config.fallback_model == config.model:
                raise
            logger.warning("Model %s not found, retrying with %s", config.model, config.fallback_model)
            response = _create(client, config.fallback_model, system_prompt, utterance, config)

        content = response.choices[0].message.content or ""
        return ModelTurn.model_validate(json.loads(content))

    except (json.JSONDecodeError, ValidationError, TypeError):
        logger.warning("Groq returned an unparseable turn, using fallback", exc_info=True)
        return None
    except Exception:
        logger.warning("Groq LLM call failed, using fallback", exc_info=True)
        return None
