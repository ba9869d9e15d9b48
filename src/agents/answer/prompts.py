REFUSAL_MESSAGES = {
    "no_snapshot": (
        "I can't answer that yet: no reviewed knowledge base has been published for this project."
    ),
    "escalation_required": (
        "This question needs to be handled by a qualified reviewer. "
        "Please escalate it through your compliance contact."
    ),
    "no_grounding": (
        "I couldn't find reviewed guidance covering that question, so I won't guess."
    ),
    "citation_contract": (
        "I can't give a reliable answer from the reviewed knowledge base for that question."
    ),
    "orchestrator_error": (
        "I can't answer that right now. Please try again later."
    ),
}

EDUCATION_ONLY_PREFIX = (
    "For general educational purposes only; this is not legal or compliance advice."
)

ANSWER_HEADER = "Based on the reviewed knowledge base:"

# Dropped from questions before keyword retrieval
STOPWORDS = frozenset({
    "a", "an", "and", "are", "about", "as", "at", "be", "can", "do", "does",
    "for", "from", "how", "i", "in", "is", "it", "me", "my", "of", "on", "or",
    "our", "should", "the", "there", "to", "under", "we", "what", "when",
    "which", "who", "why", "with",
})
