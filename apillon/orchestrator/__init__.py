"""Orchestrator package - session upload workflow."""
from .models import FileUploadSlot, UploadSession, UploadState
from .session_upload import SessionUploadHandler

__all__ = ["SessionUploadHandler", "UploadSession", "UploadState", "FileUploadSlot"]
