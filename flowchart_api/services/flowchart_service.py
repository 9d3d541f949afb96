"""
Flowchart generation pipeline: prompt → completion → normalized payload.
"""

import json
import re
import logging
from typing import Any, Dict, Sequence

from flowchart_api.core.exceptions import InvalidUpstreamShape, MalformedUpstreamJSON
from flowchart_api.schemas.flowchart import HypothesisInput
from flowchart_api.services.completion_client import CompletionClient
from flowchart_api.services.prompt_builder import build_flowchart_prompt

logger = logging.getLogger(__name__)


# ── JSON Recovery ────────────────────────────────────────────────────────────

def clean_and_parse_json(raw_text: str) -> Any:
    """
    Parse the generated text as JSON.
    1. Strip a markdown code fence (```json ... ```) if present
    2. Otherwise cut any prose around the first { ... } block
    Raises MalformedUpstreamJSON on empty or unparsable text.
    """
    if not raw_text or not raw_text.strip():
        raise MalformedUpstreamJSON()

    cleaned = raw_text.strip()

    fence_match = re.search(r"```(?:json)?\s*\n?(.*?)\n?\s*```", cleaned, re.DOTALL)
    if fence_match:
        cleaned = fence_match.group(1).strip()

    if not cleaned.startswith("{"):
        brace_match = re.search(r"\{.*\}", cleaned, re.DOTALL)
        if brace_match:
            cleaned = brace_match.group(0)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"[FLOWCHART] JSON parse failed. Raw (first 500 chars): {raw_text[:500]}")
        raise MalformedUpstreamJSON(f"{MalformedUpstreamJSON.default_message}: {e}") from e


def normalize_flowchart_payload(raw_text: str) -> Dict[str, Any]:
    """Parse the completion and require a ``nodes`` array.

    The parsed object is returned as-is; node ids and parent links are not
    checked.
    """
    data = clean_and_parse_json(raw_text)
    if not isinstance(data, dict) or not isinstance(data.get("nodes"), list):
        raise InvalidUpstreamShape()
    return data


# ── Pipeline ─────────────────────────────────────────────────────────────────

async def generate_flowchart(
    hypotheses: Sequence[HypothesisInput],
    client: CompletionClient,
) -> Dict[str, Any]:
    logger.info(f"[FLOWCHART] Starting: {len(hypotheses)} hypotheses via {client.provider}")

    prompt = build_flowchart_prompt(hypotheses)
    raw = await client.complete(prompt)
    data = normalize_flowchart_payload(raw)

    logger.info(f"[FLOWCHART] ✓ Generated {len(data['nodes'])} nodes")
    return data
