"""Shared helpers for Gemini responses, parsing, and debugging."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict

logger = logging.getLogger(__name__)


def extract_first_json_value(text: str) -> str:
    """
    Best-effort extraction of a single JSON object/array from a model response.

    Handles:
    - markdown fences
    - leading/trailing prose
    - trailing garbage
    """
    t = (text or "").strip()
    if not t:
        return t

    # Remove markdown fences
    t = re.sub(r"^```(?:json)?\s*", "", t, flags=re.IGNORECASE | re.MULTILINE)
    t = re.sub(r"\s*```\s*$", "", t, flags=re.MULTILINE).strip()

    # If it already looks like JSON
    if (t.startswith("{") and t.endswith("}")) or (t.startswith("[") and t.endswith("]")):
        return t

    first_obj = t.find("{")
    first_arr = t.find("[")
    if first_obj == -1 and first_arr == -1:
        return t

    start = first_obj
    if start == -1 or (first_arr != -1 and first_arr < start):
        start = first_arr

    # Very tolerant: take from start to last '}' or ']' whichever is later
    end = max(t.rfind("}"), t.rfind("]"))

    if end > start:
        return t[start : end + 1].strip()

    return t


def _strip_trailing_commas(json_text: str) -> str:
    # Converts: {"a": 1,} -> {"a": 1}
    # and: [1,2,] -> [1,2]
    return re.sub(r",(\s*[}\]])", r"\1", json_text)


def safe_json_loads(text: str) -> Any:
    """
    Parse JSON with tolerant extraction and a tiny local "repair" (trailing commas).
    Raises json.JSONDecodeError if still invalid.
    """
    json_text = extract_first_json_value(text).strip()

    try:
        return json.loads(json_text)
    except json.JSONDecodeError:
        repaired = _strip_trailing_commas(json_text)
        return json.loads(repaired)


def get_response_text(response: Any) -> str:
    """
    Robust extraction of text from google-genai responses.

    Tries:
    1) response.text
    2) response.candidates[0].content.parts[*].text
    """
    try:
        t = getattr(response, "text", None)
        if isinstance(t, str) and t.strip():
            return t.strip()
    except Exception:
        # .text raises on blocked candidates in some SDK versions
        pass

    candidates = getattr(response, "candidates", None) or []
    if candidates:
        content = getattr(candidates[0], "content", None)
        for part in getattr(content, "parts", None) or []:
            pt = getattr(part, "text", None)
            if isinstance(pt, str) and pt.strip():
                return pt.strip()

    return ""


def response_debug_summary(response: Any) -> Dict[str, Any]:
    """
    Safe, compact debug info (no huge dumps).
    Helps explain "HTTP 200 but empty text" (usually safety filters).
    """
    out: Dict[str, Any] = {}

    candidates = getattr(response, "candidates", None) or []
    out["candidates"] = len(candidates)
    if candidates:
        c0 = candidates[0]
        out["finish_reason"] = getattr(c0, "finish_reason", None)
        out["safety_ratings"] = getattr(c0, "safety_ratings", None)

    feedback = getattr(response, "prompt_feedback", None)
    if feedback is not None:
        out["block_reason"] = getattr(feedback, "block_reason", None)

    return out


def log_empty_response(prefix: str, response: Any) -> None:
    summary = response_debug_summary(response)
    logger.warning(f"{prefix} empty response text. summary={summary}")
