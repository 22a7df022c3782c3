"""
Session upload handler.

Three-phase protocol:
1. Start a session; the API returns one signed URL per file.
2. PUT each file's bytes to its URL, sequentially and in input order.
3. End the session.

The first failure stops the run. Files already uploaded are not rolled
back and the session is left open; retrying from scratch is up to the caller.
"""
import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..config import ClientConfig
from ..errors import ApillonError, InvalidInputError, ProtocolViolationError
from ..models import FileMetadata, StartUploadResult, UploadFile
from ..protocols import IAPIClient, ISignedUploader
from ..services import routes
from ..services.api_client import decode_json
from ..utils.events import FILE_UPLOADED, STATE_CHANGED, EventEmitter
from .models import UploadSession, UploadState

logger = logging.getLogger(__name__)


class SessionUploadHandler:
    """Runs the upload session state machine for one call at a time."""

    def __init__(
        self,
        api_client: IAPIClient,
        uploader: ISignedUploader,
        config: ClientConfig,
        events: Optional[EventEmitter] = None,
    ):
        """
        Initialize session upload handler.

        Args:
            api_client: Authenticated, retrying API client (phases 1 and 3)
            uploader: Signed URL uploader (phase 2)
            config: Client configuration
            events: Optional emitter for state_changed / file_uploaded
        """
        self._api = api_client
        self._uploader = uploader
        self._config = config
        self._events = events or EventEmitter()

    def on(self, event_name: str, callback: Callable):
        """
        Subscribe to progress events.

        state_changed(session) fires on every transition,
        file_uploaded(session, slot) after each successful PUT.
        """
        self._events.on(event_name, callback)

    def off(self, event_name: str, callback: Callable):
        self._events.off(event_name, callback)

    def _metadata_payload(self, files: Sequence[FileMetadata]) -> Dict[str, Any]:
        return {
            "files": [f.to_payload(self._config.default_content_type) for f in files]
        }

    @staticmethod
    def _validate(bucket_uuid: str, files: Sequence[UploadFile]) -> None:
        if not bucket_uuid:
            raise InvalidInputError("bucket UUID cannot be empty")
        if not files:
            raise InvalidInputError("no files provided for upload")
        for index, f in enumerate(files):
            if not f.file_name:
                raise InvalidInputError(
                    f"file at index {index} has no name", file_index=index
                )
            if not f.content:
                raise InvalidInputError(
                    f"file content is empty for file {f.file_name}",
                    file_index=index,
                    file_name=f.file_name,
                )

    async def _transition(self, session: UploadSession, state: UploadState) -> None:
        logger.debug(
            "Upload session %s in bucket %s: %s -> %s",
            session.session_uuid or "-", session.bucket_uuid,
            session.state.value, state.value,
        )
        session.state = state
        await self._events.emit(STATE_CHANGED, session)

    # =========================================================================
    # Phases
    # =========================================================================

    async def start_session(
        self,
        bucket_uuid: str,
        files: Sequence[FileMetadata],
    ) -> StartUploadResult:
        """
        Register files and obtain signed upload URLs.

        Raises:
            InvalidInputError: empty bucket, empty list or unnamed file
            ProtocolViolationError: malformed response or missing session id
        """
        if not files:
            raise InvalidInputError("no files provided for upload")
        for index, f in enumerate(files):
            if not f.file_name:
                raise InvalidInputError(f"file at index {index} has no name", file_index=index)

        path = routes.upload_start(bucket_uuid)
        payload = decode_json(
            await self._api.post(path, json=self._metadata_payload(files)),
            "start upload",
        )
        return StartUploadResult.from_dict(payload)

    async def upload_to_url(self, url: str, content: bytes) -> None:
        """PUT raw bytes to a signed URL. No credentials, no retry."""
        await self._uploader.put(url, content)

    async def end_session(self, bucket_uuid: str, session_uuid: str) -> Dict[str, Any]:
        """Close an upload session. Returns the decoded response ({} if empty)."""
        raw = await self._api.post(routes.upload_end(bucket_uuid, session_uuid))
        if not raw.strip():
            return {}
        return decode_json(raw, "end upload session")

    # =========================================================================
    # Orchestration
    # =========================================================================

    async def upload(self, bucket_uuid: str, files: Sequence[UploadFile]) -> Dict[str, Any]:
        """
        Upload files to a bucket through a session.

        Args:
            bucket_uuid: Target bucket
            files: Files to upload, in upload order

        Returns:
            Decoded end-session response

        Raises:
            ApillonError subclass tagged with phase, bucket and (for uploads)
            file_index/file_name
        """
        files: List[UploadFile] = list(files or [])
        session = UploadSession.for_files(bucket_uuid, files)

        try:
            self._validate(bucket_uuid, files)

            await self._transition(session, UploadState.SESSION_STARTING)
            started = await self.start_session(bucket_uuid, [f.metadata for f in files])
            urls = started.urls
            if len(urls) < len(files):
                raise ProtocolViolationError(
                    f"not enough signed URLs provided. Expected {len(files)}, got {len(urls)}"
                )
            session.session_uuid = started.session_uuid
            session.assign_urls(urls)

            # Fresh signed URLs may not accept writes right away
            await asyncio.sleep(self._config.url_ready_delay)

            await self._transition(session, UploadState.UPLOADING_FILES)
            for slot in session.slots:
                try:
                    await self.upload_to_url(slot.url, slot.file.data)
                except ApillonError as exc:
                    exc.with_context(file_index=slot.index, file_name=slot.file_name)
                    raise
                slot.uploaded = True
                await self._events.emit(FILE_UPLOADED, session, slot)

            await self._transition(session, UploadState.SESSION_ENDING)
            result = await self.end_session(bucket_uuid, session.session_uuid)
            await self._transition(session, UploadState.COMPLETE)
            return result

        except ApillonError as exc:
            exc.with_context(phase=session.state.value, bucket_uuid=bucket_uuid or None)
            session.error = exc
            await self._transition(session, UploadState.FAILED)
            raise
        except BaseException:
            # Cancellation or an unexpected error; no events, the run is over
            session.state = UploadState.FAILED
            raise
