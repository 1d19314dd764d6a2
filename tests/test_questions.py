# tests/test_questions.py
import pytest

from interview_prep.questions import (
    QuestionRecord,
    coerce_question_records,
    dedupe_questions,
    merge_questions,
    toggle_pin,
    split_pinned,
    to_dicts,
)


def q(id_, question="Q", answer="A", pinned=False):
    return QuestionRecord(id=id_, question=question, answer=answer, pinned=pinned)


def test_merge_keeps_existing_record_on_id_clash():
    existing = [q("2", question="old question", answer="old answer", pinned=True)]
    new = [q("1", question="new one"), q("2", question="new two", answer="new answer")]

    merged = merge_questions(existing, new)

    assert len(merged) == 2
    by_id = {r.id: r for r in merged}
    assert by_id["2"].question == "old question"
    assert by_id["2"].answer == "old answer"
    assert by_id["2"].pinned is True
    # existing first, then new in arrival order
    assert [r.id for r in merged] == ["2", "1"]


def test_merge_forces_new_records_unpinned():
    merged = merge_questions([], [q("9", pinned=True)])
    assert merged[0].pinned is False

    kept = merge_questions([], [q("9", pinned=True)], force_unpinned=False)
    assert kept[0].pinned is True


def test_dedupe_first_occurrence_wins():
    records = [q("a", question="first"), q("b"), q("a", question="second"), q("b"), q("c")]
    out = dedupe_questions(records)
    assert [r.id for r in out] == ["a", "b", "c"]
    assert out[0].question == "first"


def test_coerce_drops_invalid_and_stringifies_ids():
    items = [
        {"id": 1, "question": "numeric id", "answer": "x", "pinned": False},
        {"id": "2", "question": "no answer"},
        {"question": "missing id"},
        "not a dict",
        42,
        None,
    ]
    records = coerce_question_records(items)
    assert [r.id for r in records] == ["1", "2"]
    assert records[1].answer == ""
    assert records[1].pinned is False


def test_coerce_handles_none():
    assert coerce_question_records(None) == []


def test_toggle_pin_flips_only_target():
    records = [q("1"), q("2")]
    toggled = toggle_pin(records, "2")
    assert [r.pinned for r in toggled] == [False, True]
    # original list untouched
    assert records[1].pinned is False
    assert toggle_pin(toggled, "2")[1].pinned is False


def test_toggle_pin_unknown_id():
    with pytest.raises(KeyError):
        toggle_pin([q("1")], "missing")


def test_split_pinned():
    pinned, unpinned = split_pinned([q("1", pinned=True), q("2"), q("3", pinned=True)])
    assert [r.id for r in pinned] == ["1", "3"]
    assert [r.id for r in unpinned] == ["2"]


def test_to_dicts():
    assert to_dicts([q("1")]) == [{"id": "1", "question": "Q", "answer": "A", "pinned": False}]
