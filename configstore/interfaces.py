from __future__ import annotations

from typing import Any, Protocol


class ConfigDocumentStore(Protocol):
    """
    Named JSON documents persisted as whole units.
    """

    def load(self, name: str) -> dict[str, Any]:
        """Load and return the full document. The caller owns the returned dict."""
        ...

    def save(self, name: str, doc: dict[str, Any]) -> None:
        """Persist the full document atomically."""
        ...

    def exists(self, name: str) -> bool:
        ...
