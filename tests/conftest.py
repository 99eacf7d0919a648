"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from communityid import Flow, Protocol
from tests.fixtures import load_vectors


@pytest.fixture
def make_flow() -> Callable[..., Flow]:
    """
    Provide a factory for flows built from a plain 5-tuple.

    Example usage:
        def test_something(make_flow):
            flow = make_flow(Protocol.TCP, "10.0.0.1", 1234, "10.0.0.2", 80)
    """
    def _make(
        protocol: Protocol | int,
        src: str,
        sport: int | None,
        dst: str,
        dport: int | None,
    ) -> Flow:
        if sport is None and dport is None:
            return Flow.partial(protocol, src, dst)
        return Flow.new(protocol, src, sport, dst, dport)

    return _make


@pytest.fixture
def dns_flow() -> Flow:
    """UDP DNS query from 192.168.1.42 to 8.8.8.8."""
    return Flow.new(Protocol.UDP, "192.168.1.42", 4242, "8.8.8.8", 53)


@pytest.fixture
def reference_vectors() -> list[dict[str, Any]]:
    """Flows with known Community IDs."""
    return load_vectors()


@pytest.fixture
def config_file(tmp_path: Path) -> Callable[[str], Path]:
    """Write YAML text to a temporary config file and return its path."""
    def _write(text: str) -> Path:
        path = tmp_path / "communityid.yaml"
        path.write_text(text, encoding="utf-8")
        return path

    return _write
