"""Test fixtures for Community ID computation.

vectors.json holds flows with their known Community IDs. Each entry has
proto, saddr, daddr, sport, dport (ports may be null for port-less
flows), seed and the expected communityid in base64 or hex form.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

VECTORS_FILE = Path(__file__).parent / "vectors.json"


def load_vectors(path: Path = VECTORS_FILE) -> list[dict[str, Any]]:
    """Load reference vectors from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def vector_id(vector: dict[str, Any]) -> str:
    """Readable pytest id for a vector."""
    return (
        f"{vector['proto']}-{vector['saddr']}:{vector['sport']}"
        f"-{vector['daddr']}:{vector['dport']}-seed{vector['seed']}"
    )


__all__ = [
    "VECTORS_FILE",
    "load_vectors",
    "vector_id",
]
