"""Upload session document persisted in the session store."""

from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, Field, model_validator
from ..utils.helpers import build_destination_key


class PartRecord(BaseModel):
    """Multipart part reference for one uploaded chunk."""

    part_number: int = Field(..., ge=1, description="Part number (1-indexed)")
    etag: str = Field(..., description="ETag returned by storage after uploading the part")


class UploadSession(BaseModel):
    """State of one source-to-storage transfer."""

    source_url: str
    total_size: int = Field(..., gt=0)
    content_type: str
    chunk_size: int = Field(..., gt=0)
    total_chunks: int = Field(..., gt=0)
    uploaded: List[bool]
    filename: str
    folder: str = ""
    destination_key: Optional[str] = None
    multipart_upload_id: Optional[str] = None
    parts: List[Optional[PartRecord]]
    completed: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_chunk_bookkeeping(self) -> "UploadSession":
        """Keep uploaded flags and parts aligned with the chunk count."""
        if len(self.uploaded) != self.total_chunks:
            raise ValueError("uploaded flags must have one entry per chunk")
        if len(self.parts) != self.total_chunks:
            raise ValueError("parts must have one slot per chunk")
        for index, (flag, part) in enumerate(zip(self.uploaded, self.parts)):
            if flag != (part is not None):
                raise ValueError(f"chunk {index}: uploaded flag and part record disagree")
            if part is not None and part.part_number != index + 1:
                raise ValueError(f"chunk {index}: expected part number {index + 1}")
        return self

    @classmethod
    def new(
        cls,
        source_url: str,
        total_size: int,
        content_type: str,
        chunk_size: int,
        total_chunks: int,
        filename: str,
    ) -> "UploadSession":
        """Create a fresh session with no chunk uploaded."""
        return cls(
            source_url=source_url,
            total_size=total_size,
            content_type=content_type,
            chunk_size=chunk_size,
            total_chunks=total_chunks,
            uploaded=[False] * total_chunks,
            parts=[None] * total_chunks,
            filename=filename,
        )

    @property
    def uploaded_count(self) -> int:
        return sum(1 for flag in self.uploaded if flag)

    @property
    def all_uploaded(self) -> bool:
        return all(self.uploaded)

    @property
    def resolved_key(self) -> str:
        """Frozen destination key, or the key the current folder would produce."""
        return self.destination_key or build_destination_key(self.folder, self.filename)

    def ordered_parts(self) -> List[PartRecord]:
        """Defined parts sorted by part number."""
        return sorted(
            (part for part in self.parts if part is not None),
            key=lambda part: part.part_number,
        )

    def record_part(self, index: int, etag: str) -> None:
        self.parts[index] = PartRecord(part_number=index + 1, etag=etag)
        self.uploaded[index] = True

    def to_json(self) -> str:
        return self.model_dump_json()

    @classmethod
    def from_json(cls, raw: str) -> "UploadSession":
        return cls.model_validate_json(raw)
