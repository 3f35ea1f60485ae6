"""Utility to extract a JSON object from generative-model output."""

from __future__ import annotations

import json

from resume_studio.errors import ModelOutputError

_decoder = json.JSONDecoder()


def extract_json_object(text: str) -> dict:
    """Extract the first JSON object from model text.

    Tries in order:
    1. Strip fenced code block markers and parse directly
    2. Scan for the first '{' that starts a well-formed object
       (tolerates leading/trailing prose and multiple objects)

    Raises ModelOutputError when no object can be decoded.
    """
    if not isinstance(text, str) or not text.strip():
        raise ModelOutputError("Model returned an empty response.")

    stripped = strip_code_fences(text.strip())

    # 1) Direct parse
    try:
        parsed = json.loads(stripped)
    except json.JSONDecodeError:
        parsed = None
    if isinstance(parsed, dict):
        return parsed

    # 2) First decodable object
    start = stripped.find("{")
    while start != -1:
        try:
            candidate, _end = _decoder.raw_decode(stripped, start)
        except json.JSONDecodeError:
            candidate = None
        if isinstance(candidate, dict):
            return candidate
        start = stripped.find("{", start + 1)

    raise ModelOutputError(f"Could not parse JSON from model output: {stripped[:200]}...")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fence markers from text."""
    lines = text.split("\n")

    # Remove opening fence (```json, ```, etc.)
    if lines and lines[0].strip().startswith("```"):
        lines = lines[1:]

    # Remove closing fence
    while lines and lines[-1].strip() in ("```", ""):
        lines = lines[:-1]

    return "\n".join(lines).strip()
