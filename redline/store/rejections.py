"""
Rejection Store
================

Durable, per-document record of suggestions the user has rejected,
keyed by suggestion fingerprint. The review engine consults it when
a session starts (to drop already-rejected suggestions) and writes
to it on every rejection.

Implementations:
    - InMemoryRejectionStore: process-local, for tests and one-shot runs
    - JsonFileRejectionStore: one JSON file per document

A store is scoped to ONE document and injected into the engine; there
is no module-level registry.

Invalidation:
    A rejection is only meaningful while the text at its range is
    unchanged. `prune(text)` drops records whose original phrase no
    longer matches text[start:end].
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, Optional

from pydantic import ValidationError

from redline.config import RedlineConfig
from redline.schemas.rejection import RejectionPayload
from redline.utils import save_json

logger = logging.getLogger("redline.store.rejections")


class RejectionStoreError(RuntimeError):
    """Raised when a rejection store cannot persist its records."""


class RejectionStore(ABC):
    """
    Abstract fingerprint → RejectionPayload store.

    Subclasses implement the primitive operations; the derived
    helpers (`is_rejected`, `add`, `range_keys`, `prune`) are shared.
    """

    @abstractmethod
    def has(self, fingerprint: str) -> bool:
        """True if `fingerprint` has been rejected."""

    @abstractmethod
    def put(self, fingerprint: str, payload: RejectionPayload) -> None:
        """Record a rejection. Re-adding a fingerprint overwrites its payload."""

    @abstractmethod
    def discard(self, fingerprint: str) -> bool:
        """Forget a rejection. Returns True if it was present."""

    @abstractmethod
    def records(self) -> dict[str, RejectionPayload]:
        """Copy of all records, in insertion order."""

    @abstractmethod
    def clear(self) -> None:
        """Forget every rejection."""

    # ── Derived helpers ────────────────────────────────────────────

    def is_rejected(self, fingerprint: str) -> bool:
        return self.has(fingerprint)

    def add(self, fingerprint: str, payload: RejectionPayload) -> None:
        self.put(fingerprint, payload)

    def get(self, fingerprint: str) -> Optional[RejectionPayload]:
        return self.records().get(fingerprint)

    def __contains__(self, fingerprint: object) -> bool:
        return isinstance(fingerprint, str) and self.has(fingerprint)

    def __len__(self) -> int:
        return len(self.records())

    def __iter__(self) -> Iterator[str]:
        return iter(self.records())

    def range_keys(self) -> list[str]:
        """
        Deduplicated "start-end" keys, in insertion order.

        This is the rejection list sent with the next correction
        request so the backend skips ranges the user dismissed.
        """
        keys: dict[str, None] = {}
        for payload in self.records().values():
            key = payload.range_key.strip()
            if key:
                keys[key] = None
        return list(keys)

    def prune(self, text: str) -> int:
        """
        Drop rejections whose original phrase no longer matches `text`.

        Args:
            text: Current document text.

        Returns:
            Number of records removed.
        """
        stale = [
            fp for fp, payload in self.records().items()
            if text[payload.start:payload.end] != payload.original
        ]
        for fp in stale:
            self.discard(fp)
        if stale:
            logger.info(f"Pruned {len(stale)} stale rejection(s)")
        return len(stale)


class InMemoryRejectionStore(RejectionStore):
    """Process-local rejection store."""

    def __init__(self, records: Optional[dict[str, RejectionPayload]] = None):
        self._records: dict[str, RejectionPayload] = dict(records or {})

    def has(self, fingerprint: str) -> bool:
        return fingerprint in self._records

    def put(self, fingerprint: str, payload: RejectionPayload) -> None:
        self._records[fingerprint] = payload

    def discard(self, fingerprint: str) -> bool:
        return self._records.pop(fingerprint, None) is not None

    def records(self) -> dict[str, RejectionPayload]:
        return dict(self._records)

    def clear(self) -> None:
        self._records.clear()


class JsonFileRejectionStore(InMemoryRejectionStore):
    """
    Rejection store persisted as a JSON object in a single file.

    File layout:
        {"<fingerprint>": {<RejectionPayload wire fields>}, ...}

    The file is loaded once on construction and rewritten after every
    change. An unreadable or corrupt file is logged, removed and
    treated as empty. Write failures raise RejectionStoreError after
    the in-memory state has been updated.

    Args:
        path: File holding this document's rejections.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> dict[str, RejectionPayload]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            if not isinstance(raw, dict):
                raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
            return {
                str(fp): RejectionPayload.model_validate(payload)
                for fp, payload in raw.items()
            }
        except (OSError, ValueError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning(f"Discarding unreadable rejection file {self.path}: {e}")
            self.path.unlink(missing_ok=True)
            return {}

    def _flush(self) -> None:
        data = {fp: payload.to_wire() for fp, payload in self._records.items()}
        try:
            save_json(data, self.path)
        except OSError as e:
            raise RejectionStoreError(f"Could not write {self.path}: {e}") from e

    def put(self, fingerprint: str, payload: RejectionPayload) -> None:
        super().put(fingerprint, payload)
        self._flush()

    def discard(self, fingerprint: str) -> bool:
        removed = super().discard(fingerprint)
        if removed:
            self._flush()
        return removed

    def clear(self) -> None:
        super().clear()
        self._flush()


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def document_store_path(doc_id: str, config: RedlineConfig) -> Path:
    """Path of the rejection file for `doc_id` under the configured store dir."""
    safe_id = _UNSAFE_CHARS.sub("_", doc_id).strip("._") or "default"
    filename = config.store.file_template.format(doc_id=safe_id)
    return config.store.store_dir / filename


def open_document_store(doc_id: str, config: RedlineConfig) -> JsonFileRejectionStore:
    """Open (or create on first write) the rejection store of a document."""
    return JsonFileRejectionStore(document_store_path(doc_id, config))
