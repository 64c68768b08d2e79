"""Per-document persistence of rejected suggestions."""

from redline.store.rejections import (
    InMemoryRejectionStore,
    JsonFileRejectionStore,
    RejectionStore,
    RejectionStoreError,
    document_store_path,
    open_document_store,
)

__all__ = [
    "InMemoryRejectionStore",
    "JsonFileRejectionStore",
    "RejectionStore",
    "RejectionStoreError",
    "document_store_path",
    "open_document_store",
]
