"""
Redline — Suggestion Review Reconciliation
===========================================

Redline reconciles a batch of grammar-correction suggestions against
a document. Users accept or reject suggestions one at a time or all
at once; pending suggestions keep correct positions as earlier ones
are applied, and rejected suggestions are remembered per document so
they are not shown again.

Architecture Overview:
    Backend batch → Ingest → ReviewSession (accept / reject / navigate)
                                  ↓                     ↓
                           live text + preview    RejectionStore

Modules:
    - schemas:  Pydantic data contracts (Suggestion, RejectionPayload, …)
    - review:   Fingerprinting, remapping, ingestion, preview, engine
    - store:    Per-document rejection stores
    - config:   Settings (env / .env / YAML)
    - cli:      Command-line review tool
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
