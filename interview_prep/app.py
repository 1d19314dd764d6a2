# interview_prep/app.py
import json
import time
from typing import Optional

# Load .env BEFORE any package imports (they read env vars at import time)
from dotenv import load_dotenv
load_dotenv(override=True)

import httpx
from fastapi import FastAPI, Request, Depends, Path
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, PlainTextResponse
from pydantic import BaseModel, Field

from interview_prep import monitoring
from interview_prep import auth as authmod
from interview_prep import db as dbmod
from interview_prep.coach import InterviewCoach, proxy_completer
from interview_prep.config import ProxyConfig, cors_origins
from interview_prep.errors import ProxyError
from interview_prep.proxy import completion_response
from interview_prep.questions import coerce_question_records, toggle_pin, split_pinned

app = FastAPI(title="Interview Prep API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize DB tables on startup
dbmod.init_db()

API_KEY_HEADER = "x-api-key"


# ---------------------------------------------------------------------------
# Dependencies (overridden in tests)
# ---------------------------------------------------------------------------
def get_proxy_config() -> ProxyConfig:
    return ProxyConfig.from_env()


def get_http_client() -> Optional[httpx.Client]:
    """None lets the proxy open a short-lived client per request."""
    return None


def get_coach(config: ProxyConfig = Depends(get_proxy_config),
              client: Optional[httpx.Client] = Depends(get_http_client)) -> InterviewCoach:
    return InterviewCoach(proxy_completer(config, client=client))


# ---------------------------------------------------------------------------
# Auth + rate-limit middleware (runs first on /api/* paths)
# ---------------------------------------------------------------------------
@app.middleware("http")
async def api_key_and_rate_limit_middleware(request: Request, call_next):
    path = request.url.path
    if not path.startswith("/api/") or request.method == "OPTIONS":
        return await call_next(request)

    api_key = request.headers.get(API_KEY_HEADER)
    if not authmod.is_key_allowed(api_key):
        return JSONResponse(status_code=401, content={"error": "Missing or invalid API key"})

    client_id = api_key or (request.client.host if request.client else "")
    allowed, _remaining = authmod.check_rate_limit(client_id)
    if not allowed:
        resp = JSONResponse(status_code=429, content={"error": "Rate limit exceeded"})
        resp.headers["Retry-After"] = "60"
        return resp

    return await call_next(request)


# ---------------------------------------------------------------------------
# Metrics middleware
# ---------------------------------------------------------------------------
@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.time()
    method = request.method
    status = "500"
    try:
        response = await call_next(request)
        status = str(response.status_code)
        return response
    except Exception:
        monitoring.logger.exception("Unhandled exception in request", extra={"path": request.url.path})
        raise
    finally:
        monitoring.observe_request(start, _route_label(request), method, status)


def _route_label(request: Request) -> str:
    # route template, so session and question ids stay out of the label
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------
class CreateSessionRequest(BaseModel):
    role: str = Field(..., min_length=1)
    experience: str = Field(..., min_length=1)


class TimerUpdate(BaseModel):
    time: int = Field(0, ge=0)
    is_running: bool = False


def _error(status_code: int, error_code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "error_code": error_code, "message": message},
    )


def _not_found(what: str) -> JSONResponse:
    return _error(404, "E_NOT_FOUND", f"{what} not found")


def _proxy_failure(e: ProxyError) -> JSONResponse:
    return JSONResponse(status_code=e.status_code, content=e.to_payload())


# ---------------------------------------------------------------------------
# Completion proxy
# ---------------------------------------------------------------------------
@app.api_route("/api/generate", methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"])
async def generate(request: Request,
                   config: ProxyConfig = Depends(get_proxy_config),
                   client: Optional[httpx.Client] = Depends(get_http_client)):
    """
    POST /api/generate
    Body: opaque chat-completion request, forwarded verbatim.
    200 {"content": "..."} or <status> {"error": "..."}
    """
    body = None
    if request.method == "POST":
        raw = await request.body()
        try:
            body = json.loads(raw) if raw else {}
        except ValueError:
            return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})

    status, payload = await run_in_threadpool(completion_response, request.method, body, config, client)
    return JSONResponse(status_code=status, content=payload)


@app.get("/api/test")
async def api_test(config: ProxyConfig = Depends(get_proxy_config)):
    return {"message": "Backend OK", "keyLoaded": config.has_key}


# ---------------------------------------------------------------------------
# Practice sessions
# ---------------------------------------------------------------------------
@app.post("/api/users/{user_id}/sessions")
def create_session(req: CreateSessionRequest,
                   user_id: str = Path(..., description="Owner of the session"),
                   coach: InterviewCoach = Depends(get_coach)):
    """
    POST /api/users/{user_id}/sessions
    Body: { "role": "...", "experience": "..." }
    Generates the opening question set and stores a new session.
    """
    monitoring.logger.info("Creating session", extra={"user_id": user_id, "role": req.role})
    try:
        questions = coach.generate_questions(req.role, req.experience)
    except ProxyError as e:
        return _proxy_failure(e)
    try:
        session = dbmod.create_session(user_id, req.role, req.experience, questions)
    except Exception as e:
        monitoring.logger.exception("Unexpected error creating session")
        return _error(500, "E_INTERNAL", f"Internal server error: {e}")
    return JSONResponse(status_code=201, content={"status": "success", "session": session})


@app.get("/api/users/{user_id}/sessions")
def list_sessions(user_id: str):
    return {"status": "success", "sessions": dbmod.list_sessions(user_id)}


@app.get("/api/sessions/{session_id}")
def get_session(session_id: str):
    session = dbmod.get_session(session_id)
    if not session:
        return _not_found("Session")
    pinned, unpinned = split_pinned(coerce_question_records(session["questions"]))
    return {
        "status": "success",
        "session": session,
        "summary": {"pinned": len(pinned), "unpinned": len(unpinned), "time": session["timer"]["time"]},
    }


@app.delete("/api/sessions/{session_id}")
def delete_session(session_id: str):
    if not dbmod.delete_session(session_id):
        return _not_found("Session")
    return {"status": "success"}


@app.post("/api/sessions/{session_id}/questions/more")
def generate_more_questions(session_id: str, coach: InterviewCoach = Depends(get_coach)):
    session = dbmod.get_session(session_id)
    if not session:
        return _not_found("Session")
    existing = coerce_question_records(session["questions"])
    try:
        merged = coach.generate_more(existing, session["role"], session["experience"])
    except ProxyError as e:
        return _proxy_failure(e)
    updated = dbmod.update_questions(session_id, merged)
    return {"status": "success", "session": updated, "added": len(merged) - len(existing)}


@app.post("/api/sessions/{session_id}/questions/{question_id}/pin")
def pin_question(session_id: str, question_id: str):
    session = dbmod.get_session(session_id)
    if not session:
        return _not_found("Session")
    try:
        questions = toggle_pin(coerce_question_records(session["questions"]), question_id)
    except KeyError:
        return _not_found("Question")
    updated = dbmod.update_questions(session_id, questions)
    if not updated:
        return _not_found("Session")
    pinned = next((q["pinned"] for q in updated["questions"] if q["id"] == question_id), None)
    if pinned is None:
        return _not_found("Question")
    return {"status": "success", "session": updated, "pinned": pinned}


@app.post("/api/sessions/{session_id}/questions/{question_id}/explain")
def explain_question(session_id: str, question_id: str, coach: InterviewCoach = Depends(get_coach)):
    session = dbmod.get_session(session_id)
    if not session:
        return _not_found("Session")
    match = next((q for q in session["questions"] if q["id"] == question_id), None)
    if match is None:
        return _not_found("Question")
    try:
        explanation = coach.explain(match["question"])
    except ProxyError as e:
        return _proxy_failure(e)
    return {"status": "success", "question_id": question_id, "explanation": explanation}


@app.put("/api/sessions/{session_id}/timer")
def save_timer(session_id: str, req: TimerUpdate):
    updated = dbmod.update_timer(session_id, req.time, req.is_running)
    if not updated:
        return _not_found("Session")
    return {"status": "success", "timer": updated["timer"]}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/metrics")
async def metrics():
    if not monitoring.PROMETHEUS_ENABLED:
        return PlainTextResponse("Prometheus disabled", status_code=404)
    payload, content_type = monitoring.prometheus_metrics_response()
    return Response(content=payload, media_type=content_type)
