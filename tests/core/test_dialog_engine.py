"""Tests for the DialogEngine."""

import pytest

from dialog_simulation_engine.core.dialog import (
    AlreadyCompleteError,
    DialogEngine,
    DialogEngineError,
    DialogTree,
    DialogTreeBuilder,
    EmotionalState,
    InvalidOptionError,
    InvalidTreeError,
    StepLimitExceededError,
)


@pytest.mark.unit
def test_start_positions_session_on_root(scenario_engine: DialogEngine) -> None:
    """A new session starts on the root with zeroed totals and empty history."""
    session = scenario_engine.start()
    assert session.tree_id == "scenario"
    assert session.current_node_id == "intro"
    assert session.metric_totals == {"empathy": 0}
    assert session.history == []
    assert session.visited_node_ids == ["intro"]
    assert not scenario_engine.is_complete(session)
    assert scenario_engine.current_node(session).id == "intro"


@pytest.mark.unit
def test_option_to_details_accumulates_and_continues(
    scenario_engine: DialogEngine,
) -> None:
    """Selecting the first intro option moves to details with empathy +1."""
    session = scenario_engine.start()
    result = scenario_engine.select_option(session, "to-details")

    assert session.current_node_id == "details"
    assert session.metric_totals["empathy"] == 1
    assert session.history == ["to-details"]
    assert not session.is_complete

    assert result.option_id == "to-details"
    assert result.node_id == "details"
    assert result.feedback_text == "Good start."
    assert result.new_emotional_state == EmotionalState.CALM
    assert result.is_correct
    assert not result.is_complete


@pytest.mark.unit
def test_option_to_end_completes(scenario_engine: DialogEngine) -> None:
    """Selecting the second intro option lands on the terminal node."""
    session = scenario_engine.start()
    result = scenario_engine.select_option(session, "to-end")

    assert session.current_node_id == "end"
    assert session.metric_totals["empathy"] == -1
    assert session.is_complete
    assert session.completed_at is not None
    assert result.is_complete
    assert not result.is_correct
    # end has no mood of its own, so the participant's initial one is reported
    assert result.new_emotional_state == EmotionalState.DISTRESSED


@pytest.mark.unit
def test_invalid_option_leaves_session_unchanged(
    scenario_engine: DialogEngine,
) -> None:
    """An option not on the current node raises and mutates nothing."""
    session = scenario_engine.start()
    scenario_engine.select_option(session, "to-details")
    before = session.model_dump()

    with pytest.raises(InvalidOptionError) as exc:
        scenario_engine.select_option(session, "to-end")  # belongs to intro

    assert exc.value.option_id == "to-end"
    assert exc.value.node_id == "details"
    assert exc.value.available == ["wrap-up"]
    assert isinstance(exc.value, LookupError)
    assert session.model_dump() == before


@pytest.mark.unit
def test_select_after_completion_raises(scenario_engine: DialogEngine) -> None:
    """A completed session rejects further input without changing."""
    session = scenario_engine.start()
    scenario_engine.select_option(session, "to-end")
    before = session.model_dump()

    with pytest.raises(AlreadyCompleteError):
        scenario_engine.select_option(session, "to-details")
    assert session.model_dump() == before


@pytest.mark.unit
def test_cycles_are_walked_iteratively(cycle_engine: DialogEngine) -> None:
    """Many A<->B round trips run without error and then finish."""
    session = cycle_engine.start()
    for _ in range(100):
        cycle_engine.select_option(session, "a-to-b")
        cycle_engine.select_option(session, "b-to-a")

    assert session.current_node_id == "a"
    assert session.steps == 200
    assert session.metric_totals == {"patience": 0}
    assert not session.is_complete

    cycle_engine.select_option(session, "a-to-b")
    result = cycle_engine.select_option(session, "b-done")
    assert result.is_complete
    assert session.history[-2:] == ["a-to-b", "b-done"]


@pytest.mark.unit
def test_step_guard_stops_endless_loops(cycle_tree: DialogTree) -> None:
    """Exceeding max_steps raises and leaves the session as it was."""
    engine = DialogEngine.compile(cycle_tree, max_steps=4)
    session = engine.start()
    for option_id in ["a-to-b", "b-to-a", "a-to-b", "b-to-a"]:
        engine.select_option(session, option_id)
    before = session.model_dump()

    with pytest.raises(StepLimitExceededError) as exc:
        engine.select_option(session, "a-to-b")
    assert exc.value.max_steps == 4
    assert session.model_dump() == before


@pytest.mark.unit
def test_step_guard_defaults(cycle_tree: DialogTree, scenario_tree: DialogTree) -> None:
    """Engine limit beats the tree limit, which beats the global default."""
    assert DialogEngine.compile(cycle_tree).max_steps == 500
    assert DialogEngine.compile(cycle_tree, max_steps=7).max_steps == 7
    assert DialogEngine.compile(scenario_tree).max_steps == 1000


@pytest.mark.unit
def test_option_without_target_ends_session() -> None:
    """An option pointing nowhere completes the session on the same node."""
    tree = (
        DialogTreeBuilder("Dead end")
        .node("only", "Anything else?")
        .option("only", "bye", "No, thanks.", metrics={"clarity": 2})
        .build()
    )
    engine = DialogEngine.compile(tree)
    session = engine.start()
    result = engine.select_option(session, "bye")

    assert result.is_complete
    assert result.new_emotional_state is None
    assert session.current_node_id == "only"
    assert session.visited_node_ids == ["only"]
    assert session.metric_totals["clarity"] == 2


@pytest.mark.unit
def test_untracked_metric_is_rejected() -> None:
    """A misspelled metric name fails validation instead of skewing the score."""
    builder = (
        DialogTreeBuilder("Typo", metrics=["empathy", "clarity"])
        .node("q", "?")
        .option("q", "go", "go", next_node="done", metrics={"empaty": 6, "clarity": 6})
        .node("done", "!")
    )
    with pytest.raises(InvalidTreeError) as exc:
        builder.build()
    assert "untracked metric 'empaty'" in " | ".join(exc.value.problems)

    with pytest.raises(InvalidTreeError):
        DialogEngine(builder.build(validate=False))


@pytest.mark.unit
def test_engine_constructor_validates_tree() -> None:
    """Building an engine directly still rejects a dangling link before start."""
    tree = (
        DialogTreeBuilder("Dangling")
        .node("a", "A")
        .option("a", "go", "go", next_node="nowhere")
        .build(validate=False)
    )
    with pytest.raises(InvalidTreeError) as exc:
        DialogEngine(tree).start()
    assert "unknown node 'nowhere'" in " | ".join(exc.value.problems)


@pytest.mark.unit
def test_dangling_link_is_not_completion(
    scenario_engine: DialogEngine, monkeypatch: pytest.MonkeyPatch
) -> None:
    """An option whose target is missing raises instead of ending the session."""
    session = scenario_engine.start()
    broken = (
        DialogTreeBuilder("Scenario", metrics=["empathy"])
        .node("intro", "Help me, please.")
        .option("intro", "to-details", "Tell me more.", next_node="details")
        .build(validate=False)
    )
    monkeypatch.setattr(scenario_engine, "_tree", broken)
    before = session.model_dump()

    with pytest.raises(DialogEngineError) as exc:
        scenario_engine.select_option(session, "to-details")
    assert "unknown node 'details'" in str(exc.value)
    assert not session.is_complete
    assert session.model_dump() == before


@pytest.mark.parametrize("bad", [0, -3])
@pytest.mark.unit
def test_step_guard_must_be_positive(cycle_tree: DialogTree, bad: int) -> None:
    """A step guard below 1 is refused rather than ignored."""
    with pytest.raises(ValueError):
        DialogEngine.compile(cycle_tree, max_steps=bad)


@pytest.mark.unit
def test_is_complete_checks_session_owner(
    scenario_engine: DialogEngine, cycle_engine: DialogEngine
) -> None:
    """is_complete refuses sessions from another tree like the other queries."""
    with pytest.raises(ValueError):
        scenario_engine.is_complete(cycle_engine.start())


@pytest.mark.unit
def test_root_that_ends_conversation_starts_complete() -> None:
    """A tree whose root has no options is complete from the start."""
    tree = DialogTreeBuilder("Notice").node("only", "Read this notice.").build()
    session = DialogEngine.compile(tree).start()
    assert session.is_complete


@pytest.mark.unit
def test_summarize_is_pure(scenario_engine: DialogEngine) -> None:
    """Summaries repeat exactly and do not touch the session."""
    session = scenario_engine.replay(["to-details", "wrap-up"])
    before = session.model_dump()

    first = scenario_engine.summarize(session)
    second = scenario_engine.summarize(session)

    assert first == second
    assert session.model_dump() == before
    assert first.metric_totals == {"empathy": 1}
    assert first.history == ["to-details", "wrap-up"]
    assert first.overall_score == 1.0
    assert first.scoring == "mean"
    assert first.rating == "poor"
    assert first.correct_choices == 1
    assert first.steps == 2
    assert first.is_complete


@pytest.mark.unit
def test_replay_reproduces_session(victim_interview_path) -> None:
    """Replaying a history gives the same totals, path and score."""
    engine = DialogEngine.compile(victim_interview_path)
    path = [
        "intro-abrupt",
        "defensive-lecture",
        "more-defensive-repeat",
        "defensive-reassure",
        "ask-transaction",
        "action-freeze",
        "advice-complete",
    ]
    original = engine.replay(path)
    replayed = engine.replay(original.history)

    assert replayed.is_complete
    assert replayed.current_node_id == "conclusion"
    assert replayed.history == original.history
    assert replayed.metric_totals == original.metric_totals
    assert replayed.visited_node_ids == original.visited_node_ids
    assert engine.summarize(replayed) == engine.summarize(original)


@pytest.mark.unit
def test_sessions_are_independent(scenario_engine: DialogEngine) -> None:
    """Two sessions on one engine share no state."""
    a = scenario_engine.start()
    b = scenario_engine.start()
    scenario_engine.select_option(a, "to-end")

    assert a.session_id != b.session_id
    assert b.current_node_id == "intro"
    assert b.metric_totals == {"empathy": 0}
    assert not b.is_complete


@pytest.mark.unit
def test_compile_rejects_malformed_tree() -> None:
    """Whole-tree validation happens before any session can start."""
    builder = (
        DialogTreeBuilder("Broken")
        .node("start", "Hi", participant="ghost")
        .option("start", "go", "go", next_node="nowhere")
    )
    tree = builder.build(validate=False)

    with pytest.raises(InvalidTreeError) as exc:
        DialogEngine.compile(tree)

    problems = " | ".join(exc.value.problems)
    assert "unknown participant 'ghost'" in problems
    assert "unknown node 'nowhere'" in problems
    assert isinstance(exc.value, ValueError)
    assert isinstance(exc.value, DialogEngineError)


@pytest.mark.unit
def test_compile_accepts_mapping_and_yaml(scenario_tree: DialogTree) -> None:
    """compile takes a DialogTree, a mapping or YAML text."""
    from_mapping = DialogEngine.compile(scenario_tree.to_dict())
    from_yaml = DialogEngine.compile(scenario_tree.to_yaml())
    assert from_mapping.tree == scenario_tree
    assert from_yaml.tree == scenario_tree

    with pytest.raises(TypeError):
        DialogEngine.compile(42)  # type: ignore[arg-type]


@pytest.mark.unit
def test_session_from_another_tree_is_rejected(
    scenario_engine: DialogEngine, cycle_engine: DialogEngine
) -> None:
    """Engines refuse sessions started on a different tree."""
    session = cycle_engine.start()
    with pytest.raises(ValueError):
        scenario_engine.select_option(session, "to-details")
