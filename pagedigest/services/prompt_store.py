"""Prompt catalog lookups: dotted keys into prompts.json, ``$name`` placeholders."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from string import Template
from typing import Any

PROMPTS_PATH = Path(__file__).resolve().parents[1] / "prompts" / "prompts.json"


@lru_cache(maxsize=1)
def _load_catalog() -> dict[str, Any]:
    catalog = json.loads(PROMPTS_PATH.read_text(encoding="utf-8"))
    if not isinstance(catalog, dict):
        raise ValueError(f"{PROMPTS_PATH.name} must hold a JSON object")
    return catalog


def get_template(key: str) -> Template:
    """Template for a dotted key such as ``summarizer.generic``."""
    entry: Any = _load_catalog()
    for segment in key.split("."):
        if not isinstance(entry, dict) or segment not in entry:
            raise KeyError(f"Prompt key not found: {key}")
        entry = entry[segment]
    if not isinstance(entry, str):
        raise TypeError(f"Prompt key {key} names a group, not a prompt")
    return Template(entry)


def render_prompt(key: str, **values: Any) -> str:
    template = get_template(key)
    try:
        return template.substitute(values)
    except KeyError as exc:
        raise KeyError(f"Missing template value '{exc.args[0]}' for prompt '{key}'") from exc
