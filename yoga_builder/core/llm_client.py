import logging
from dataclasses import dataclass
from typing import Optional

import httpx


logger = logging.getLogger(__name__)


OPENAI_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-haiku-20240307",
}


class LLMError(Exception):
    pass


@dataclass(frozen=True)
class LLMConfig:
    provider: str  # openai|anthropic
    api_key: str
    model: Optional[str] = None

    @property
    def model_name(self) -> str:
        return self.model or DEFAULT_MODELS[self.provider]


async def _post(url: str, headers: dict, body: dict, transport: httpx.AsyncBaseTransport | None) -> dict:
    async with httpx.AsyncClient(timeout=60, transport=transport) as c:
        r = await c.post(url, headers=headers, json=body)
    if r.is_error:
        raise LLMError(f"{r.status_code}: {r.text}")
    return r.json()


async def complete_openai(
    prompt: str,
    config: LLMConfig,
    *,
    system: Optional[str] = None,
    max_tokens: int = 100,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})

    data = await _post(
        OPENAI_URL,
        {"Authorization": f"Bearer {config.api_key}"},
        {"model": config.model_name, "messages": messages, "temperature": 0.7, "max_tokens": max_tokens},
        transport,
    )
    choices = data.get("choices") or []
    content = ((choices[0].get("message") or {}).get("content") if choices else None) or ""
    if not content.strip():
        raise LLMError("No content returned from OpenAI")
    return content.strip()


async def complete_anthropic(
    prompt: str,
    config: LLMConfig,
    *,
    max_tokens: int = 100,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    data = await _post(
        ANTHROPIC_URL,
        {"x-api-key": config.api_key, "anthropic-version": ANTHROPIC_VERSION},
        {
            "model": config.model_name,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        },
        transport,
    )
    blocks = data.get("content") or []
    content = (blocks[0].get("text") if blocks else None) or ""
    if not content.strip():
        raise LLMError("No content returned from Anthropic")
    return content.strip()


async def complete(
    prompt: str,
    config: LLMConfig,
    *,
    system: Optional[str] = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    if config.provider == "openai":
        return await complete_openai(prompt, config, system=system, transport=transport)
    if config.provider == "anthropic":
        return await complete_anthropic(prompt, config, transport=transport)
    raise LLMError(f"Unknown LLM provider: {config.provider}")
