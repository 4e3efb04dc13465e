"""Shared pytest fixtures and test helpers for nclctl tests."""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from nclctl.infrastructure.graph.engine import Graph
from nclctl.services.telemetry import disable_telemetry

# Legal move sequences that solve small compiled circuits.
EXISTS_X = "exists x : (x)"
EXISTS_X_SOLUTION = [
    "start",
    "wire.x.out",
    "probe.tryout",
    "probe.result",
    "junction.try",
    "junction.result",
    "finish",
    "goal",
]

FORALL_X = "forall x : (x || !x)"
FORALL_X_SOLUTION = [
    # inv branch: satisfy the formula with !x and set the latch
    "start",
    "wire.x.inv",
    "probe.tryout",
    "probe.result",
    "junction.try",
    "junction.result",
    "finish",
    # retract and switch to the out branch
    "finish",
    "junction.try",
    "probe.tryout",
    "wire.x.out",
    "wire.x.inv",
    "probe.tryout",
    "junction.try",
    "finish",
    "goal",
]

DESCRIPTION = """\
vertices:
  a: [0, 0]
  b: [2, 0]
  c: [1, 2]
edges:
  ab: [a, b, 2]
  bc: [b, c, 2]
  ca: [c, a, 2, label]
"""


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def graph() -> Graph:
    return Graph()


@pytest.fixture
def triangle(graph: Graph) -> Graph:
    """A weight-2 directed triangle: every vertex has inflow 2."""
    for name, pos in (("a", (0, 0)), ("b", (2, 0)), ("c", (1, 2))):
        graph.add_vertex(name, pos)
    graph.add_edge("ab", "a", "b", 2)
    graph.add_edge("bc", "b", "c", 2)
    graph.add_edge("ca", "c", "a", 2)
    return graph


@pytest.fixture
def description_file(tmp_path: Path) -> Path:
    path = tmp_path / "triangle.yaml"
    path.write_text(DESCRIPTION, encoding="utf-8")
    return path


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run the CLI from an empty temp directory with no config in scope."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NCLCTL_CONFIG", raising=False)


@pytest.fixture(autouse=True)
def _telemetry_off() -> Generator[None]:
    """``-v`` enables span recording for the whole context; switch it back off."""
    yield
    disable_telemetry()
