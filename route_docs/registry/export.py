from __future__ import annotations

import json
from typing import Any

import yaml

from .document import Document


def dump_json(document: Document, indent: int | None = 2) -> str:
    return json.dumps(document.to_dict(), indent=indent, ensure_ascii=False)


def dump_yaml(document: Document) -> str:
    return yaml.safe_dump(document.to_dict(), sort_keys=False, allow_unicode=True)


def load_document(text: str) -> dict[str, Any]:
    stripped = text.lstrip()
    if stripped.startswith("{"):
        return json.loads(text)
    return yaml.safe_load(text)
