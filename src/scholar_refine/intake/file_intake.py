"""Ordered list of uploaded reference PDFs.

Files arrive from Streamlit's uploader, which covers both drag-and-drop and
the file picker. Only PDFs are kept; everything else is reported back to the
caller so the UI can show a notice.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from scholar_refine.models.document import Document, UploadLike

logger = logging.getLogger(__name__)


@dataclass
class IntakeReport:
    """Outcome of one ``DocumentList.add`` call."""

    accepted: list[str] = field(default_factory=list)
    rejected: list[str] = field(default_factory=list)

    @property
    def has_rejections(self) -> bool:
        return bool(self.rejected)


class DocumentList:
    """Append-only (by user action) list of PDF documents with remove-by-position."""

    def __init__(self, documents: Iterable[Document] | None = None):
        self._documents: list[Document] = []
        if documents is not None:
            self.add(documents)

    def add(self, items: Iterable[Document | UploadLike]) -> IntakeReport:
        """Append every PDF in ``items`` after the existing entries."""
        report = IntakeReport()
        for item in items:
            doc = item if isinstance(item, Document) else Document.from_upload(item)
            if doc.is_pdf:
                self._documents.append(doc)
                report.accepted.append(doc.name)
            else:
                report.rejected.append(doc.name)

        if report.rejected:
            logger.info(
                "Rejected %d non-PDF file(s): %s",
                len(report.rejected),
                ", ".join(report.rejected),
            )
        return report

    def remove(self, index: int) -> Document:
        """Remove and return the entry at ``index``."""
        if not 0 <= index < len(self._documents):
            raise IndexError(
                f"document index {index} out of range for {len(self._documents)} document(s)"
            )
        return self._documents.pop(index)

    def clear(self) -> None:
        self._documents.clear()

    @property
    def names(self) -> list[str]:
        return [d.name for d in self._documents]

    def __len__(self) -> int:
        return len(self._documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(list(self._documents))

    def __getitem__(self, index: int) -> Document:
        return self._documents[index]

    def __bool__(self) -> bool:
        return bool(self._documents)
