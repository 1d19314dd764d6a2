# interview_prep/questions.py
from typing import Any, Dict, Iterable, List, Tuple

from pydantic import BaseModel, ValidationError, field_validator


class QuestionRecord(BaseModel):
    id: str
    question: str
    answer: str = ""
    pinned: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v):
        # models sometimes emit numeric ids
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


def coerce_question_records(items: Iterable[Any]) -> List[QuestionRecord]:
    """Keep the dict-shaped items that validate as QuestionRecord; drop the rest."""
    records: List[QuestionRecord] = []
    for item in items or []:
        if isinstance(item, QuestionRecord):
            records.append(item)
            continue
        if not isinstance(item, dict):
            continue
        try:
            records.append(QuestionRecord.model_validate(item))
        except ValidationError:
            continue
    return records


def dedupe_questions(records: Iterable[QuestionRecord]) -> List[QuestionRecord]:
    """Each id at most once; the first occurrence wins."""
    seen = set()
    out: List[QuestionRecord] = []
    for r in records:
        if r.id in seen:
            continue
        seen.add(r.id)
        out.append(r)
    return out


def merge_questions(existing: Iterable[QuestionRecord], new: Iterable[QuestionRecord],
                    force_unpinned: bool = True) -> List[QuestionRecord]:
    """
    Append `new` to `existing` and dedupe. Existing records take precedence
    over new ones sharing an id. Freshly generated records start unpinned.
    """
    incoming = [r.model_copy(update={"pinned": False}) if force_unpinned else r for r in new]
    return dedupe_questions(list(existing) + incoming)


def toggle_pin(records: Iterable[QuestionRecord], question_id: str) -> List[QuestionRecord]:
    records = list(records)
    if not any(r.id == question_id for r in records):
        raise KeyError(question_id)
    return [
        r.model_copy(update={"pinned": not r.pinned}) if r.id == question_id else r
        for r in records
    ]


def split_pinned(records: Iterable[QuestionRecord]) -> Tuple[List[QuestionRecord], List[QuestionRecord]]:
    pinned: List[QuestionRecord] = []
    unpinned: List[QuestionRecord] = []
    for r in records:
        (pinned if r.pinned else unpinned).append(r)
    return pinned, unpinned


def to_dicts(records: Iterable[QuestionRecord]) -> List[Dict[str, Any]]:
    return [r.model_dump() for r in records]
