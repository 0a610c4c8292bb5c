"""Prompt template for retrieval-augmented answers.

The template is kept here, in one place, so it is easy to audit and
version.
"""

from __future__ import annotations

from collections.abc import Sequence

CONTEXT_SEPARATOR = "\n\n---\n\n"
NO_CONTEXT = "(no context available)"

RAG_PROMPT_TEMPLATE = """\
Based on the following context from a document, please answer the user's \
question. Use only the information in the context. If the context doesn't \
contain the answer, say that you couldn't find the information in the document.

Context:
{context}

Question:
{question}

Answer:"""


def format_context(context_chunks: Sequence[str]) -> str:
    """Join retrieved chunk texts with :data:`CONTEXT_SEPARATOR`."""
    if not context_chunks:
        return NO_CONTEXT
    return CONTEXT_SEPARATOR.join(context_chunks)


def assemble_prompt(context_chunks: Sequence[str], question: str) -> str:
    """Build the generation prompt for *question* grounded in *context_chunks*.

    Parameters
    ----------
    context_chunks:
        Retrieved chunk texts, most relevant first.
    question:
        The user's question, inserted verbatim.

    Returns
    -------
    str
        A single prompt string ready for :meth:`GenerationClient.generate`.
    """
    return RAG_PROMPT_TEMPLATE.format(context=format_context(context_chunks), question=question)
