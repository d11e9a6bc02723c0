"""
Tests for the dispatch decision table
"""

from src.models.batch_models import ResolvedSentence, TestSentence
from src.orchestrator.dispatch_planner import DispatchPlanner


def resolved(*pairs):
    return [
        ResolvedSentence(
            index=i, sentence=TestSentence(text=text, datasource_id=ds), datasource_id=ds
        )
        for i, (text, ds) in enumerate(pairs)
    ]


SENTENCES = resolved(("a", 1), ("b", 2), ("c", 1))


def test_clear_conversation_dispatches_one_by_one():
    """clear_conversation wins over async_mode"""
    for async_mode in (True, False):
        plan = DispatchPlanner(clear_conversation=True, async_mode=async_mode).plan(SENTENCES)

        assert plan.discipline == "per_sentence_clear"
        assert [s.clear_datasource_ids for s in plan.steps] == [[1], [2], [1]]
        assert [[r.sentence.text for r in s.sentences] for s in plan.steps] == [
            ["a"],
            ["b"],
            ["c"],
        ]


def test_async_mode_submits_whole_batch():
    plan = DispatchPlanner(clear_conversation=False, async_mode=True).plan(SENTENCES)

    assert plan.discipline == "async_batch"
    assert len(plan.steps) == 1
    assert plan.steps[0].clear_datasource_ids == [1, 2]
    assert [r.index for r in plan.steps[0].sentences] == [0, 1, 2]


def test_sync_mode_clears_once_then_one_by_one():
    plan = DispatchPlanner(clear_conversation=False, async_mode=False).plan(SENTENCES)

    assert plan.discipline == "sync_sequential"
    assert [s.clear_datasource_ids for s in plan.steps] == [[1, 2], [], []]
    assert all(len(s.sentences) == 1 for s in plan.steps)


def test_empty_batch_has_no_steps():
    assert DispatchPlanner(False, True).plan([]).steps == []
    assert DispatchPlanner(False, False).plan([]).steps == []
    assert DispatchPlanner(True, True).plan([]).steps == []
