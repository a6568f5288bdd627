"""Conftest fixtures for core tests."""

from pathlib import Path
from typing import Callable

import pytest

from dialog_simulation_engine.core.dialog import (
    DialogEngine,
    DialogTree,
    DialogTreeBuilder,
)
from dialog_simulation_engine.core.run_manager import DialogRun
from tests.helpers import builtin_dialog_files


@pytest.fixture
def scenario_tree() -> DialogTree:
    """Three nodes: intro routes to details (+1 empathy) or straight to end (-1)."""
    return (
        DialogTreeBuilder("Scenario", metrics=["empathy"])
        .participant("victim", "Victim", emotional_state="distressed")
        .node("intro", "Help me, please.", participant="victim")
        .option(
            "intro",
            "to-details",
            "Sit down, tell me what happened.",
            next_node="details",
            metrics={"empathy": 1},
            feedback="Good start.",
            correct=True,
        )
        .option(
            "intro",
            "to-end",
            "Not my problem.",
            next_node="end",
            metrics={"empathy": -1},
            feedback="Dismissive.",
        )
        .node("details", "It started with a call.", participant="victim", emotional_state="calm")
        .option("details", "wrap-up", "We'll take it from here.", next_node="end")
        .node("end", "Goodbye.", participant="victim")
        .build()
    )


@pytest.fixture
def cycle_tree() -> DialogTree:
    """A and B point at each other; B can also leave to done."""
    return (
        DialogTreeBuilder("Cycle", metrics=["patience"], max_steps=500)
        .participant("p", "Person")
        .node("a", "A", participant="p", emotional_state="frustrated")
        .option("a", "a-to-b", "to B", next_node="b", metrics={"patience": 1})
        .node("b", "B", participant="p", emotional_state="calm")
        .option("b", "b-to-a", "to A", next_node="a", metrics={"patience": -1})
        .option("b", "b-done", "finish", next_node="done", correct=True)
        .node("done", "Done.", participant="p", terminal=True)
        .build()
    )


@pytest.fixture
def scenario_engine(scenario_tree: DialogTree) -> DialogEngine:
    """Engine compiled from the scenario tree."""
    return DialogEngine.compile(scenario_tree)


@pytest.fixture
def cycle_engine(cycle_tree: DialogTree) -> DialogEngine:
    """Engine compiled from the cycle tree."""
    return DialogEngine.compile(cycle_tree)


@pytest.fixture
def victim_interview_path() -> Path:
    """Path to the built-in victim interview dialog."""
    (path,) = [p for p in builtin_dialog_files() if p.stem == "victim_interview"]
    return path


@pytest.fixture
def make_run(tmp_path: Path, scenario_tree: DialogTree) -> Callable[..., DialogRun]:
    """Factory for runs on the scenario tree that save into tmp_path."""

    def _make(**kwargs) -> DialogRun:
        kwargs.setdefault("dialog", scenario_tree)
        kwargs.setdefault("source", "pytest")
        kwargs.setdefault("output_dir", tmp_path / "runs")
        return DialogRun.create(**kwargs)

    return _make
