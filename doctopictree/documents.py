"""
documents.py

Document records entering the doctopictree pipeline.

- ``DocumentRecord`` validates the ``{name, content, size}`` dicts handed over
  by an external file-ingestion layer (PDF / Word / text parsing is out of
  scope here; only decoded plain text is expected).
- ``Document`` is the immutable, term-annotated form used by clustering.
- ``ingest_records`` validates a batch without ever aborting it: every
  rejected record becomes a ``DroppedDocument`` with a reason.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError


_EXTENSION_RE = re.compile(r"\.[^/.]+$")


class DocumentRecord(BaseModel):
    """
    Plain-text record produced by the ingestion collaborator.

    ``error`` is set by that collaborator when it failed to decode the file;
    such records are reported and skipped.
    """

    name: str = Field(..., min_length=1)
    content: str = ""
    size: Optional[int] = Field(default=None, ge=0)
    summary: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class Document:
    """
    A single document of the corpus.

    Attributes
    ----------
    name:
        Identifier, usually the uploaded file name.
    content:
        Raw extracted text.
    size:
        Byte size reported by ingestion (falls back to the UTF-8 length).
    terms:
        Term → frequency mapping from TermExtractor. Empty until
        term extraction has run.
    summary:
        Optional summary text; preferred over ``content`` for labeling.
    """

    name: str
    content: str
    size: int
    terms: Dict[str, int] = field(default_factory=dict)
    summary: Optional[str] = None

    @property
    def display_name(self) -> str:
        """File name without its extension."""
        return _EXTENSION_RE.sub("", self.name)

    @property
    def total_terms(self) -> int:
        return sum(self.terms.values())

    @property
    def char_count(self) -> int:
        return len(self.content)

    @property
    def label_text(self) -> str:
        """Text used for labeling: the summary when present, else the content."""
        return self.summary or self.content


@dataclass
class DroppedDocument:
    name: str
    reason: str
    content_length: int = 0


@dataclass
class IngestResult:
    documents: List[Document]
    dropped: List[DroppedDocument]


RecordLike = Union[DocumentRecord, Mapping[str, Any]]


def ingest_records(
    records: Iterable[RecordLike],
    *,
    min_content_length: int = 50,
    logger: Optional[Callable[[str], None]] = None,
) -> IngestResult:
    """
    Validate raw records and turn them into (not yet term-annotated) Documents.

    Parameters
    ----------
    records:
        ``DocumentRecord`` instances or plain dicts with ``name``, ``content``
        and optionally ``size``, ``summary`` and ``error``.
    min_content_length:
        Records whose stripped content is shorter than this are dropped with
        reason ``"insufficient content"``.
    logger:
        Optional callback for per-record drop messages.

    Returns
    -------
    IngestResult
        Accepted documents in input order, plus one DroppedDocument per
        rejected record.
    """
    documents: List[Document] = []
    dropped: List[DroppedDocument] = []

    def _drop(name: str, reason: str, content_length: int = 0) -> None:
        dropped.append(DroppedDocument(name=name, reason=reason, content_length=content_length))
        if logger is not None:
            logger(f"[ingest] Skipping {name}: {reason} ({content_length} chars)")

    for position, raw in enumerate(records):
        if isinstance(raw, DocumentRecord):
            record = raw
        else:
            try:
                record = DocumentRecord.model_validate(raw)
            except ValidationError as exc:
                name = _record_name(raw, position)
                _drop(name, f"invalid record: {exc.error_count()} validation error(s)")
                continue

        if record.error:
            _drop(record.name, f"ingestion failed: {record.error}", len(record.content))
            continue

        content = record.content.strip()
        if len(content) < min_content_length:
            _drop(record.name, "insufficient content", len(content))
            continue

        size = record.size if record.size is not None else len(content.encode("utf-8"))
        documents.append(
            Document(
                name=record.name,
                content=content,
                size=size,
                summary=record.summary or None,
            )
        )

    return IngestResult(documents=documents, dropped=dropped)


def _record_name(raw: Any, position: int) -> str:
    if isinstance(raw, Mapping):
        name = raw.get("name")
        if isinstance(name, str) and name:
            return name
    return f"record_{position}"
