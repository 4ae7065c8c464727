"""
HTTP client for the notes API.

Fetches rendered note bodies and note metadata. Faults are reported as
ContentFetchError and never retried here; retry policy is the caller's.
"""

from urllib.parse import quote

import httpx
from pydantic import ValidationError

from notesync.config import ApiConfig
from notesync.models.views import NoteMetadata
from notesync.utils.exceptions import ContentFetchError
from notesync.utils.logger import get_logger

logger = get_logger(__name__)


class NotesApiClient:
    """
    Async client for ``/api/notes/{id}/content`` and ``/api/notes/{id}/metadata``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the notes API client.

        Args:
            base_url: Server root, e.g. http://localhost:3000
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, transport=transport
        )

    @classmethod
    def from_config(
        cls, config: ApiConfig, transport: httpx.AsyncBaseTransport | None = None
    ) -> "NotesApiClient":
        return cls(base_url=config.base_url, timeout=config.timeout, transport=transport)

    @staticmethod
    def _note_path(note_id: str, resource: str) -> str:
        # Ids are a single path segment even if they contain / or ?
        return f"/api/notes/{quote(note_id, safe='')}/{resource}"

    async def _get(self, path: str, note_id: str) -> httpx.Response:
        try:
            return await self.client.get(path)
        except httpx.HTTPError as e:
            logger.error(
                "Notes API request failed: {}",
                e,
                extra={"path": path, "note_id": note_id, "error": str(e)},
            )
            raise ContentFetchError(
                f"Request for note {note_id} failed: {e}",
                context={"note_id": note_id, "path": path},
            ) from e

    async def get_note_content(self, note_id: str) -> str:
        """
        Fetch the rendered HTML of a note.

        Args:
            note_id: Note identifier

        Returns:
            HTML string

        Raises:
            ContentFetchError: Non-200 status, non-HTML response, or transport failure
        """
        response = await self._get(self._note_path(note_id, "content"), note_id)

        if response.status_code != 200:
            raise ContentFetchError(
                f"Failed to fetch note content: status {response.status_code}",
                context={"note_id": note_id, "status": response.status_code},
            )

        content_type = response.headers.get("Content-Type", "")
        if "text/html" not in content_type:
            raise ContentFetchError(
                f"Unexpected content type: {content_type}",
                context={"note_id": note_id, "content_type": content_type},
            )

        return response.text

    async def get_note_metadata(self, note_id: str) -> NoteMetadata | None:
        """
        Fetch title, links and backlinks of a note.

        Args:
            note_id: Note identifier

        Returns:
            NoteMetadata, or None if the server does not know the note

        Raises:
            ContentFetchError: Other non-200 status, non-JSON response,
                undecodable body, or transport failure
        """
        response = await self._get(self._note_path(note_id, "metadata"), note_id)

        if response.status_code == 404:
            return None

        if response.status_code != 200:
            raise ContentFetchError(
                f"Failed to fetch note metadata: status {response.status_code}",
                context={"note_id": note_id, "status": response.status_code},
            )

        content_type = response.headers.get("Content-Type", "")
        if content_type.split(";")[0].strip() != "application/json":
            raise ContentFetchError(
                f"Unexpected content type: {content_type}",
                context={"note_id": note_id, "content_type": content_type},
            )

        try:
            return NoteMetadata.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ContentFetchError(
                f"Invalid metadata for note {note_id}: {e}",
                context={"note_id": note_id},
            ) from e

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "NotesApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
