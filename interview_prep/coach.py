# interview_prep/coach.py
from typing import Any, Callable, Dict, List, Optional

import httpx

# Import modules (not bare functions) so monkeypatching in tests works correctly
import interview_prep.proxy as _proxy
import interview_prep.sanitizer as _sanitizer
from interview_prep import monitoring
from interview_prep import prompts
from interview_prep.config import ProxyConfig
from interview_prep.questions import (
    QuestionRecord,
    coerce_question_records,
    dedupe_questions,
    merge_questions,
)

Completer = Callable[[Dict[str, Any]], str]

EXPLANATION_FALLBACK = "Explanation not available."


def proxy_completer(config: Optional[ProxyConfig] = None,
                    client: Optional[httpx.Client] = None) -> Completer:
    """Completer that calls the proxy in-process. Reads config from env when not given."""
    def _complete(body: Dict[str, Any]) -> str:
        cfg = config or ProxyConfig.from_env()
        return _proxy.handle_completion("POST", body, cfg, client=client).content
    return _complete


class InterviewCoach:
    """
    Runs one user action end to end: build the request, get a completion,
    sanitize it. ProxyError from the completer propagates; malformed content
    degrades to an empty list.
    """

    def __init__(self, completer: Optional[Completer] = None):
        self.completer = completer or proxy_completer()

    def _questions_from(self, body: Dict[str, Any]) -> List[QuestionRecord]:
        content = self.completer(body)
        items = _sanitizer.parse_question_list(content)
        records = dedupe_questions(coerce_question_records(items))
        if items and not records:
            monitoring.logger.warning("Completion parsed but held no valid question records")
        return records

    def generate_questions(self, role: str, experience: str) -> List[QuestionRecord]:
        monitoring.logger.info("Generating questions", extra={"role": role, "experience": experience})
        return self._questions_from(prompts.build_initial_request(role, experience))

    def generate_more(self, existing: List[QuestionRecord], role: str, experience: str,
                      stamp: Optional[int] = None) -> List[QuestionRecord]:
        new = self._questions_from(prompts.build_more_questions_request(role, experience, stamp=stamp))
        merged = merge_questions(existing, new)
        monitoring.logger.info(
            "Merged generated questions",
            extra={"existing": len(existing), "generated": len(new), "total": len(merged)},
        )
        return merged

    def explain(self, question: str) -> str:
        text = self.completer(prompts.build_explain_request(question))
        return text or EXPLANATION_FALLBACK
