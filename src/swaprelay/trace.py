"""Per-request step trace returned to API callers."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceEntry:
    """A single tagged step record."""

    tag: str
    data: dict = field(default_factory=dict)

    def render(self) -> str:
        return f"{self.tag} | {json.dumps(self.data, default=str)}"


class TraceRecorder:
    """Append-only, ordered log of the steps taken for one swap request.

    Never persisted; it lives exactly as long as the response it is
    attached to.
    """

    def __init__(self):
        self._entries: list[TraceEntry] = []

    def record(self, tag: str, **data: Any) -> TraceEntry:
        """Append an entry and return it."""
        entry = TraceEntry(tag=tag, data=data)
        self._entries.append(entry)
        logger.debug(entry.render())
        return entry

    @property
    def entries(self) -> tuple[TraceEntry, ...]:
        return tuple(self._entries)

    @property
    def tags(self) -> list[str]:
        return [e.tag for e in self._entries]

    def find(self, tag: str) -> list[TraceEntry]:
        """All entries recorded under a tag, in order."""
        return [e for e in self._entries if e.tag == tag]

    def render(self) -> list[str]:
        """Render as ``TAG | json`` lines for the ``logs`` response field."""
        return [e.render() for e in self._entries]

    def __len__(self) -> int:
        return len(self._entries)
