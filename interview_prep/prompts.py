# interview_prep/prompts.py
"""
Chat-completion request bodies for each user action.

The bodies are what the browser used to POST to /api/generate; the proxy
forwards them verbatim, so they follow the OpenAI chat-completions shape.
"""

import os
import time
from typing import Any, Dict, Optional

QUESTION_MODEL = os.getenv("QUESTION_MODEL", "gemini-2.0-flash")

INITIAL_PROMPT_TEMPLATE = """
Generate 5 high-quality interview questions and answers for:
Role: {role}
Experience: {experience}

Return STRICTLY in this JSON format:
[
  {{ "id": "1", "question": "...", "answer": "...", "pinned": false }},
  ...
]
pinned should always be false by default.
"""

MORE_PROMPT_TEMPLATE = """
Generate 3 more interview question and answer for:
Role: {role}
Experience: {experience}

Return ONLY valid JSON (no markdown, no explanation):
[
  {{ "id": "q_{stamp}_1", "question": "...", "answer": "...", "pinned": false }},
  {{ "id": "q_{stamp}_2", "question": "...", "answer": "...", "pinned": false }},
  {{ "id": "q_{stamp}_3", "question": "...", "answer": "...", "pinned": false }}
]
"""

EXPLAIN_PROMPT_TEMPLATE = """
Explain the answer for this interview question in a detailed and easy-to-understand way.

Format requirements:
- Write the explanation in clear numbered points "1. ", "2. " ...
- Do NOT exceed 10 points.
- Use simple language as if explaining to a beginner.
- Do NOT return JSON.

Question: {question}
"""


def _chat_body(prompt: str, temperature: float, max_tokens: Optional[int] = None,
               model: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "model": model or QUESTION_MODEL,
        "messages": [{"role": "user", "content": prompt}],
        "temperature": temperature,
    }
    if max_tokens is not None:
        body["max_tokens"] = max_tokens
    return body


def build_initial_request(role: str, experience: str, model: Optional[str] = None) -> Dict[str, Any]:
    prompt = INITIAL_PROMPT_TEMPLATE.format(role=role, experience=experience)
    return _chat_body(prompt, temperature=0.7, model=model)


def build_more_questions_request(role: str, experience: str, stamp: Optional[int] = None,
                                 model: Optional[str] = None) -> Dict[str, Any]:
    """`stamp` makes the suggested ids unique per call (defaults to epoch millis)."""
    stamp = int(time.time() * 1000) if stamp is None else stamp
    prompt = MORE_PROMPT_TEMPLATE.format(role=role, experience=experience, stamp=stamp)
    return _chat_body(prompt, temperature=0.7, model=model)


def build_explain_request(question: str, model: Optional[str] = None) -> Dict[str, Any]:
    prompt = EXPLAIN_PROMPT_TEMPLATE.format(question=question)
    return _chat_body(prompt, temperature=0.6, max_tokens=800, model=model)
