"""Dictionary data and file helpers shared by the test modules."""

from __future__ import annotations

import json
from pathlib import Path


EN_DICTIONARY = {
    "SITE_NAME": "BS Custom",
    "GREETING": "Hello, ##name##!",
    "ITEM_COUNT": {
        "singular": "Count items",
        "one": "##count## item",
        "other": "##count## items",
    },
    "PAGE_COUNT": {
        "one": "##count## page",
        "other": "##count## pages",
    },
    "COUNTER": {
        "singular": "",
        "other": "##count##",
    },
    "HTML_KEY": '<b>Bold & "Quoted"</b>',
}

SR_DICTIONARY = {
    "SITE_NAME": "BS Custom",
    "ITEM_COUNT": {
        "singular": "Broj jedinke",
        "one": "##count## item",
        "other": "##count## items",
    },
}


def write_json(path: Path, data: object) -> Path:
    """Write data as UTF-8 JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return path
