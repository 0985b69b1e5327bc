"""Uploaded reference document."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

PDF_MEDIA_TYPE = "application/pdf"


class UploadLike(Protocol):
    """Anything shaped like a Streamlit ``UploadedFile``."""

    name: str
    type: str

    def getvalue(self) -> bytes: ...


@dataclass(frozen=True, eq=False)
class Document:
    """A binary blob with a declared media type.

    Equality is identity: two uploads with the same name and bytes are still
    separate list entries.
    """

    name: str
    media_type: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_pdf(self) -> bool:
        return self.media_type == PDF_MEDIA_TYPE

    @classmethod
    def from_upload(cls, upload: UploadLike) -> Document:
        return cls(
            name=upload.name,
            media_type=upload.type or "",
            data=upload.getvalue(),
        )
