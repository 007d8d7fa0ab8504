"""Transitional cue generation (three short bottom-to-top cues per pose)."""
from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Callable, Iterable, Optional

import httpx

from yoga_builder.core import llm_client
from yoga_builder.core.llm_client import LLMConfig


logger = logging.getLogger(__name__)


FALLBACK_CUES = ["Ground your feet", "Engage your core", "Lift your arms"]

SYSTEM_PROMPT = (
    "You are a helpful assistant that returns only valid JSON arrays. "
    'Each cue must follow the format "[Verb] your [body part]" - maximum 3 words.'
)

PROMPT_TEMPLATE = """You are an expert yoga instructor. Generate exactly 3 VERY CONCISE transitional cues for guiding students into the yoga pose "{name}".

CRITICAL REQUIREMENTS:
- Each cue MUST follow the structure: "[Action verb] your [body part]"
- Maximum 3 words per cue (verb + "your" + body part)
- Be extremely concise and action-oriented

The cues should be:
1. Bottom-to-top progression (feet/legs -> core/torso -> arms/shoulders)
2. Format: "[Verb] your [body part]" (e.g., "Ground your feet", "Engage your core", "Lift your arms")
3. Each cue focuses on one body region
4. Use simple, direct action verbs

Return ONLY a JSON array of exactly 3 strings, no other text. Example format:
["Ground your feet", "Engage your core", "Lift your arms"]

Pose: {name}"""

_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)


class CueFormatError(ValueError):
    pass


def full_pose_name(pose_name: str, variation_name: str) -> str:
    if variation_name in ("Default", pose_name):
        return pose_name
    return f"{pose_name} - {variation_name}"


def cue_key(pose_name: str, variation_name: str) -> str:
    return f"{pose_name}::{variation_name}"


def build_cue_prompt(name: str) -> str:
    return PROMPT_TEMPLATE.format(name=name)


def parse_cues(content: str) -> list[str]:
    """Pull the JSON array out of a model reply and trim each cue to 3 words."""
    match = _ARRAY_RE.search(content or "")
    raw = match.group(0) if match else content
    try:
        cues = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise CueFormatError(f"Reply is not a JSON array: {content!r}") from e

    if not isinstance(cues, list) or len(cues) != 3:
        raise CueFormatError("Invalid response format: expected array of 3 strings")

    trimmed = [" ".join(str(c).split()[:3]) for c in cues]
    if any(not c for c in trimmed):
        raise CueFormatError("Empty cue in reply")
    return trimmed


async def generate_transitional_cues(
    pose_name: str,
    variation_name: str,
    config: LLMConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[str]:
    name = full_pose_name(pose_name, variation_name)
    try:
        reply = await llm_client.complete(
            build_cue_prompt(name),
            config,
            system=SYSTEM_PROMPT,
            transport=transport,
        )
        return parse_cues(reply)
    except (llm_client.LLMError, ValueError, httpx.HTTPError) as e:
        logger.error("Error generating cues for %s: %s", name, e)
        return list(FALLBACK_CUES)


async def batch_generate_cues(
    variations: Iterable[tuple[str, str]],
    config: LLMConfig,
    on_progress: Optional[Callable[[int, int], None]] = None,
    *,
    delay: float = 0.5,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, list[str]]:
    """Generate cues one variation at a time, pausing between calls for rate limits."""
    items = list(variations)
    results: dict[str, list[str]] = {}
    for i, (pose_name, variation_name) in enumerate(items):
        results[cue_key(pose_name, variation_name)] = await generate_transitional_cues(
            pose_name, variation_name, config, transport=transport
        )
        if delay and i < len(items) - 1:
            await asyncio.sleep(delay)
        if on_progress is not None:
            on_progress(i + 1, len(items))
    return results
