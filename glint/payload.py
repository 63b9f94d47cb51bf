"""Load scanner payload collections from YAML."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class PayloadData:
    """Payload sets keyed by vulnerability class."""

    xss: dict[str, Any] = field(default_factory=dict)


def load_payload_data(file: str | Path) -> PayloadData:
    """Read the ``xss`` mapping from a YAML file."""
    text = Path(file).read_text(encoding="utf-8")
    document = yaml.safe_load(text)
    if document is None:
        return PayloadData()
    if not isinstance(document, dict):
        raise ValueError("payload file must hold a mapping")
    xss = document.get("xss")
    if xss is None:
        return PayloadData()
    if not isinstance(xss, dict):
        raise ValueError("'xss' must be a mapping")
    return PayloadData(xss=dict(xss))