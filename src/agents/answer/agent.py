"""Policy-safe answer pipeline.

Graph topology::

    START → gate ─┬─→ END (refused)
                  └─→ retrieve ─┬─→ END (refused)
                                └─→ compose → verify → END
"""

from typing import TypedDict, Optional, List, Any

from langgraph.graph import StateGraph, END

from src.assistant.schemas import (
    AnswerEnvelope,
    AnswerResult,
    Citation,
    KbSearchFn,
)
from src.snapshots.schemas import KbSearchItem
from src.agents.answer.nodes import gate_node, retrieve_node, compose_node, verify_node


class AnswerAgentState(TypedDict):
    envelope: AnswerEnvelope
    question: str
    kb_search: Any
    items: List[KbSearchItem]
    refused: bool
    refusal_reason: Optional[str]
    answer: Optional[str]
    citations: List[Citation]


def _check_refused(next_node: str):
    def route(state):
        return END if state.get("refused") else next_node
    return route


def create_answer_agent():
    workflow = StateGraph(AnswerAgentState)

    workflow.add_node("gate", gate_node)
    workflow.add_node("retrieve", retrieve_node)
    workflow.add_node("compose", compose_node)
    workflow.add_node("verify", verify_node)

    workflow.set_entry_point("gate")
    workflow.add_conditional_edges("gate", _check_refused("retrieve"), {
        "retrieve": "retrieve",
        END: END,
    })
    workflow.add_conditional_edges("retrieve", _check_refused("compose"), {
        "compose": "compose",
        END: END,
    })
    workflow.add_edge("compose", "verify")
    workflow.add_edge("verify", END)

    return workflow.compile()


# Singleton instance accessor
answer_agent = create_answer_agent()


async def build_policy_safe_answer(
    envelope: AnswerEnvelope,
    question: str,
    kb_search: KbSearchFn,
) -> AnswerResult:
    """Default answer orchestrator: extractive, cited, and refusing when ungrounded."""
    initial_state: AnswerAgentState = {
        "envelope": envelope,
        "question": question,
        "kb_search": kb_search,
        "items": [],
        "refused": False,
        "refusal_reason": None,
        "answer": None,
        "citations": [],
    }

    final_state = await answer_agent.ainvoke(initial_state)

    return AnswerResult(
        trace_id=envelope.trace_id,
        refused=final_state["refused"],
        refusal_reason=final_state.get("refusal_reason"),
        answer=final_state.get("answer"),
        citations=final_state.get("citations") or [],
        locale=envelope.locale,
        allowed_scope=envelope.allowed_scope,
        kb_snapshot_id=envelope.kb_snapshot_id or None,
    )
