"""Splices relevant session memory into a prompt before generation."""

from __future__ import annotations

from typing import Optional

from . import journal
from .config import DIM, RESET
from .memory import SessionMemory

RESPONSE_PREVIEW = 100


def enrich(prompt: str, memory: Optional[SessionMemory]) -> str:
    """Return ``prompt`` followed by the context blocks relevant to it.

    With no memory, or nothing relevant in it, the prompt comes back unchanged.
    """
    if memory is None:
        return prompt

    context = memory.relevant_context(prompt)
    enriched = prompt

    if context.exchanges:
        lines = "\n".join(
            f'Previous related request: "{e.prompt}" resulted in code that {e.response[:RESPONSE_PREVIEW]}...'
            for e in context.exchanges
        )
        enriched = f"{enriched}\n\nContext from previous interactions:\n{lines}"

    if context.files:
        lines = "\n".join(
            f'I previously created file {f.path} for this request: "{f.source_prompt}"'
            for f in context.files
        )
        enriched = f"{enriched}\n\nPreviously created files:\n{lines}"

    summary = f"Added context from {len(context.exchanges)} conversations and {len(context.files)} files"
    print(f"{DIM}[{summary}]{RESET}")
    journal.log_interaction("context", summary)
    return enriched
