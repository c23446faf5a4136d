"""
Render retrieval results as a user-facing, extractive answer.

No text is generated: the answer is the ranked passages, verbatim.
"""

from ..contracts.retrieval_contracts import NO_DOCUMENTS_MESSAGE, RetrievalResult

ANSWER_HEADER = "Here are the most relevant excerpts I found:"
ANSWER_FOOTER = "Tip: Ask follow-up questions to narrow down."
NO_MATCHES_MESSAGE = "No relevant excerpts were found for that question."


def format_hit(rank: int, score: float, text: str) -> str:
    return f"#{rank} (score {score:.3f}):\n{text}"


def format_answer(result: RetrievalResult) -> str:
    """
    Format a RetrievalResult for display.

    The no-documents sentinel renders as its message.

    Example:
        >>> print(format_answer(result))
        Here are the most relevant excerpts I found:

        #1 (score 0.512):
        The cat sat.

        Tip: Ask follow-up questions to narrow down.
    """
    if result.no_documents:
        return result.message or NO_DOCUMENTS_MESSAGE
    if not result.hits:
        return NO_MATCHES_MESSAGE

    context = "\n\n".join(format_hit(h.rank, h.score, h.text) for h in result.hits)
    return f"{ANSWER_HEADER}\n\n{context}\n\n{ANSWER_FOOTER}"
