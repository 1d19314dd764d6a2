# interview_prep/db.py
import os
import json
import uuid
import datetime
from typing import Optional, Dict, Any, List

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.exc import SQLAlchemyError

from interview_prep import monitoring
from interview_prep.questions import QuestionRecord, coerce_question_records, dedupe_questions, to_dicts

# Default dev DB — on Vercel api/index.py sets DATABASE_URL to /tmp before import
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./interview_prep.db")

def _make_engine(url: str):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)

engine = _make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def reconfigure(url: str):
    """Reconfigure the DB engine and session factory at runtime (for tests)."""
    global engine, SessionLocal
    engine = _make_engine(url)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db():
    # Create tables if they don't exist
    try:
        import interview_prep.models as models  # noqa: F841
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError:
        # don't crash the app at import time; requests will surface the failure
        monitoring.logger.exception("DB init failed")


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def _to_dict(ps) -> Dict[str, Any]:
    records = coerce_question_records(json.loads(ps.questions_json or "[]"))
    return {
        "id": ps.id,
        "user_id": ps.user_id,
        "role": ps.role,
        "experience": ps.experience,
        "created_at": ps.created_at.isoformat() + "Z" if ps.created_at else None,
        # stored lists may predate dedup; enforce it on load
        "questions": to_dicts(dedupe_questions(records)),
        "timer": {"time": ps.timer_seconds or 0, "is_running": bool(ps.timer_running)},
    }


def _commit(db: Session, ps) -> Dict[str, Any]:
    try:
        db.commit()
        db.refresh(ps)
        return _to_dict(ps)
    except SQLAlchemyError:
        db.rollback()
        monitoring.logger.exception("DB write failed")
        raise


def create_session(user_id: str, role: str, experience: str,
                   questions: List[QuestionRecord]) -> Dict[str, Any]:
    from interview_prep.models import PracticeSession
    with SessionLocal() as db:
        ps = PracticeSession(
            id=str(uuid.uuid4()),
            user_id=user_id,
            role=role,
            experience=experience,
            created_at=_now(),
            questions_json=json.dumps(to_dicts(dedupe_questions(questions))),
            timer_seconds=0,
            timer_running=False,
        )
        db.add(ps)
        return _commit(db, ps)


def list_sessions(user_id: str) -> List[Dict[str, Any]]:
    """Newest first."""
    from interview_prep.models import PracticeSession
    with SessionLocal() as db:
        rows = (
            db.query(PracticeSession)
            .filter(PracticeSession.user_id == user_id)
            .order_by(PracticeSession.created_at.desc())
            .all()
        )
        return [_to_dict(r) for r in rows]


def get_session(session_id: str) -> Optional[Dict[str, Any]]:
    from interview_prep.models import PracticeSession
    with SessionLocal() as db:
        ps = db.get(PracticeSession, session_id)
        return _to_dict(ps) if ps else None


def update_questions(session_id: str, questions: List[QuestionRecord]) -> Optional[Dict[str, Any]]:
    from interview_prep.models import PracticeSession
    with SessionLocal() as db:
        ps = db.get(PracticeSession, session_id)
        if not ps:
            return None
        ps.questions_json = json.dumps(to_dicts(dedupe_questions(questions)))
        return _commit(db, ps)


def update_timer(session_id: str, time: int, is_running: bool) -> Optional[Dict[str, Any]]:
    from interview_prep.models import PracticeSession
    with SessionLocal() as db:
        ps = db.get(PracticeSession, session_id)
        if not ps:
            return None
        ps.timer_seconds = max(0, int(time))
        ps.timer_running = bool(is_running)
        return _commit(db, ps)


def delete_session(session_id: str) -> bool:
    from interview_prep.models import PracticeSession
    with SessionLocal() as db:
        ps = db.get(PracticeSession, session_id)
        if not ps:
            return False
        db.delete(ps)
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            monitoring.logger.exception("DB delete failed")
            raise
        return True
