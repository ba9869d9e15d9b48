"""Node functions for the policy-safe answer pipeline.

Each node is an async function that receives ``AnswerAgentState`` and returns
a partial state dict. Nothing here calls a model or the network: the supplied
``kb_search`` closure is the only collaborator.
"""

import logging
import re
from typing import Any, Dict, List

from src.config import settings
from src.context.models import AllowedScope
from src.assistant.schemas import Citation
from src.agents.answer.prompts import (
    REFUSAL_MESSAGES,
    EDUCATION_ONLY_PREFIX,
    ANSWER_HEADER,
    STOPWORDS,
)

logger = logging.getLogger(__name__)

WORD_RE = re.compile(r"[^\w\s-]", re.UNICODE)


def refusal(reason: str) -> Dict[str, Any]:
    return {
        "refused": True,
        "refusal_reason": reason,
        "answer": REFUSAL_MESSAGES[reason],
        "citations": [],
    }


def normalize_question(question: str) -> str:
    """Lower-case, strip punctuation and drop stopwords for keyword retrieval."""
    cleaned = WORD_RE.sub(" ", question.lower())
    return " ".join(token for token in cleaned.split() if token not in STOPWORDS)


# ---------------------------------------------------------------------------
# Stage 1: Gate on snapshot presence and answer scope
# ---------------------------------------------------------------------------

async def gate_node(state: Dict[str, Any]) -> Dict[str, Any]:
    envelope = state["envelope"]
    if not envelope.kb_snapshot_id:
        return refusal("no_snapshot")
    if envelope.allowed_scope == AllowedScope.ESCALATION_REQUIRED:
        return refusal("escalation_required")
    return {"refused": False}


# ---------------------------------------------------------------------------
# Stage 2: Retrieve from the bound snapshot
# ---------------------------------------------------------------------------

async def retrieve_node(state: Dict[str, Any]) -> Dict[str, Any]:
    query = normalize_question(state["question"])
    if not query:
        # An empty query matches every rule version; that is not grounding
        return refusal("no_grounding")

    result = await state["kb_search"](query)
    if not result.items:
        logger.info(f"[{state['envelope'].trace_id}] no snapshot items matched '{query}'")
        return refusal("no_grounding")
    return {"items": list(result.items)}


# ---------------------------------------------------------------------------
# Stage 3: Compose an extractive answer with one citation per excerpt
# ---------------------------------------------------------------------------

async def compose_node(state: Dict[str, Any]) -> Dict[str, Any]:
    envelope = state["envelope"]
    items = state["items"][: settings.ANSWER_MAX_CITATIONS]

    citations: List[Citation] = []
    lines = []
    if envelope.allowed_scope == AllowedScope.EDUCATION_ONLY:
        lines.append(EDUCATION_ONLY_PREFIX)
    lines.append(ANSWER_HEADER)
    for index, item in enumerate(items, start=1):
        citations.append(Citation(
            kb_snapshot_id=envelope.kb_snapshot_id,
            rule_version_id=item.rule_version_id,
            excerpt=item.excerpt,
        ))
        lines.append(f"[{index}] {item.excerpt or ''}".rstrip())

    return {
        "refused": False,
        "refusal_reason": None,
        "answer": "\n".join(lines),
        "citations": citations,
    }


# ---------------------------------------------------------------------------
# Stage 4: Enforce the citation contract
# ---------------------------------------------------------------------------

async def verify_node(state: Dict[str, Any]) -> Dict[str, Any]:
    envelope = state["envelope"]
    citations = state.get("citations") or []
    if not citations:
        return refusal("citation_contract")
    if any(c.kb_snapshot_id != envelope.kb_snapshot_id for c in citations):
        logger.error(f"[{envelope.trace_id}] citation bound to a foreign snapshot; refusing")
        return refusal("citation_contract")
    return {"refused": False}
