"""Session memory: recent exchanges and generated files kept for prompt context.

Memory lives for the lifetime of the process only. The audit files written
by :mod:`codesphere.journal` are a separate concern and are never read back
into it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

SNIPPET_LIMIT = 500
MAX_EXCHANGES = 10
MAX_FILES = 20
RELEVANT_EXCHANGES = 3
RELEVANT_FILES = 2
DEFAULT_COMPACT_KEEP = 3


def truncate_plain(text: str, limit: int = SNIPPET_LIMIT) -> str:
    """Cut ``text`` to ``limit`` characters with no marker."""
    return text[:limit]


def truncate_with_ellipsis(text: str, limit: int = SNIPPET_LIMIT) -> str:
    """Cut ``text`` to ``limit`` characters, appending ``...`` only if it was cut."""
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def tokenize(text: str) -> list[str]:
    return text.lower().split()


def word_overlap_count(query: str, stored: str) -> int:
    """Count query words (repeats included) that also occur in ``stored``."""
    stored_words = set(tokenize(stored))
    return sum(1 for word in tokenize(query) if word in stored_words)


@dataclass(frozen=True)
class Exchange:
    """One completed prompt/response turn."""

    prompt: str
    response: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class GeneratedFileRecord:
    """One file the assistant wrote."""

    path: str
    content_snippet: str
    source_prompt: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class RelevantContext:
    exchanges: list[Exchange]
    files: list[GeneratedFileRecord]

    def is_empty(self) -> bool:
        return not self.exchanges and not self.files


@dataclass
class SessionMemory:
    """Bounded FIFO logs of exchanges and generated files.

    Relevance is a plain word-overlap test against the stored prompt. The
    most recent relevant entries are returned in chronological order; they
    are not ranked by overlap.
    """

    max_exchanges: int = MAX_EXCHANGES
    max_files: int = MAX_FILES
    _exchanges: list[Exchange] = field(default_factory=list, init=False, repr=False)
    _files: list[GeneratedFileRecord] = field(default_factory=list, init=False, repr=False)

    @property
    def exchanges(self) -> list[Exchange]:
        return list(self._exchanges)

    @property
    def file_records(self) -> list[GeneratedFileRecord]:
        return list(self._files)

    def record_exchange(self, prompt: str, response: str) -> Exchange:
        exchange = Exchange(prompt=prompt, response=truncate_plain(str(response)))
        self._exchanges.append(exchange)
        if len(self._exchanges) > self.max_exchanges:
            self._exchanges = self._exchanges[-self.max_exchanges :]
        return exchange

    def record_file(self, path: str, content: str, prompt: str) -> GeneratedFileRecord:
        record = GeneratedFileRecord(
            path=str(path),
            content_snippet=truncate_with_ellipsis(content),
            source_prompt=prompt,
        )
        self._files.append(record)
        if len(self._files) > self.max_files:
            self._files = self._files[-self.max_files :]
        return record

    def relevant_context(self, prompt: str) -> RelevantContext:
        exchanges = [e for e in self._exchanges if word_overlap_count(prompt, e.prompt) > 0]
        files = [f for f in self._files if word_overlap_count(prompt, f.source_prompt) > 0]
        return RelevantContext(
            exchanges=exchanges[-RELEVANT_EXCHANGES:],
            files=files[-RELEVANT_FILES:],
        )

    def compact(self, keep_last: int = DEFAULT_COMPACT_KEEP) -> int:
        """Keep only the last ``keep_last`` exchanges. Returns how many were dropped."""
        before = len(self._exchanges)
        self._exchanges = self._exchanges[-keep_last:] if keep_last > 0 else []
        return before - len(self._exchanges)
