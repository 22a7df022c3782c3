"""Orchestrator data models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..errors import ApillonError
from ..models import UploadFile


class UploadState(Enum):
    """Upload session lifecycle."""
    IDLE = "idle"
    SESSION_STARTING = "session_starting"
    UPLOADING_FILES = "uploading_files"
    SESSION_ENDING = "session_ending"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (UploadState.COMPLETE, UploadState.FAILED)


@dataclass
class FileUploadSlot:
    """One requested file and the signed URL assigned to it."""
    index: int
    file: UploadFile
    url: Optional[str] = None
    uploaded: bool = False

    @property
    def file_name(self) -> str:
        return self.file.file_name


@dataclass
class UploadSession:
    """State of a single upload orchestration. Not shared or reused."""
    bucket_uuid: str
    slots: List[FileUploadSlot] = field(default_factory=list)
    session_uuid: Optional[str] = None
    state: UploadState = UploadState.IDLE
    error: Optional[ApillonError] = None

    @classmethod
    def for_files(cls, bucket_uuid: str, files) -> "UploadSession":
        return cls(
            bucket_uuid=bucket_uuid,
            slots=[FileUploadSlot(index=i, file=f) for i, f in enumerate(files)],
        )

    @property
    def assigned_count(self) -> int:
        return sum(1 for s in self.slots if s.url)

    def assign_urls(self, urls: List[str]) -> None:
        for slot, url in zip(self.slots, urls):
            slot.url = url
