"""Google Drive export sink."""

import base64
import json
import logging
import uuid
from dataclasses import dataclass

import httpx

from manga_strip.services.export import ExportSink

logger = logging.getLogger(__name__)

ROOT_FOLDER_NAME = "Comic Strip Generator"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

_FILES_URL = "https://www.googleapis.com/drive/v3/files"
_UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"


@dataclass
class GoogleDriveExportClient(ExportSink):
    """Uploads frames into per-project folders on Google Drive."""

    access_token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, access_token: str) -> "GoogleDriveExportClient":
        """Create a Drive client with a managed httpx session."""
        return cls(access_token=access_token, http_client=httpx.AsyncClient())

    async def upload(
        self, image_url: str, file_name: str, project_name: str, description: str
    ) -> bool:
        """Upload an image into the project's Drive folder."""
        try:
            folder_id = await self._get_or_create_project_folder(project_name)
            content, mime_type = await self._fetch_image(image_url)
            metadata = {
                "name": file_name,
                "parents": [folder_id],
                "description": description,
            }
            boundary = uuid.uuid4().hex
            response = await self.http_client.post(
                _UPLOAD_URL,
                params={"uploadType": "multipart"},
                headers={
                    **self._auth_headers(),
                    "Content-Type": f"multipart/related; boundary={boundary}",
                },
                content=_multipart_body(boundary, metadata, content, mime_type),
                timeout=30,
            )
            response.raise_for_status()
        except (httpx.HTTPError, RuntimeError, ValueError) as exc:
            logger.warning("Drive upload failed: %s", exc)
            return False
        return True

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _get_or_create_project_folder(self, project_name: str) -> str:
        root_id = await self._find_folder(ROOT_FOLDER_NAME)
        if root_id is None:
            root_id = await self._create_folder(ROOT_FOLDER_NAME)
        folder_id = await self._find_folder(project_name, parent_id=root_id)
        if folder_id is None:
            folder_id = await self._create_folder(project_name, parent_id=root_id)
        return folder_id

    async def _find_folder(self, name: str, parent_id: str | None = None) -> str | None:
        escaped = name.replace("\\", "\\\\").replace("'", "\\'")
        query = f"name='{escaped}' and mimeType='{FOLDER_MIME_TYPE}' and trashed=false"
        if parent_id:
            query += f" and '{parent_id}' in parents"
        response = await self.http_client.get(
            _FILES_URL,
            params={"q": query, "fields": "files(id, name)"},
            headers=self._auth_headers(),
            timeout=10,
        )
        response.raise_for_status()
        files = response.json().get("files") or []
        return files[0]["id"] if files else None

    async def _create_folder(self, name: str, parent_id: str | None = None) -> str:
        payload: dict[str, object] = {"name": name, "mimeType": FOLDER_MIME_TYPE}
        if parent_id:
            payload["parents"] = [parent_id]
        response = await self.http_client.post(
            _FILES_URL, json=payload, headers=self._auth_headers(), timeout=10
        )
        response.raise_for_status()
        folder_id = response.json().get("id")
        if not folder_id:
            raise RuntimeError(f"Drive did not return an id for folder {name!r}")
        return folder_id

    async def _fetch_image(self, image_url: str) -> tuple[bytes, str]:
        if image_url.startswith("data:"):
            return _decode_data_url(image_url)
        response = await self.http_client.get(image_url, timeout=20)
        response.raise_for_status()
        mime_type = response.headers.get("content-type", "image/jpeg")
        return response.content, mime_type

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}


def _decode_data_url(data_url: str) -> tuple[bytes, str]:
    """Split a base64 data URL into bytes and MIME type."""
    header, _, encoded = data_url.partition(",")
    if not encoded or ";base64" not in header:
        raise ValueError("Unsupported data URL")
    mime_type = header[len("data:") :].split(";", 1)[0] or "image/jpeg"
    return base64.b64decode(encoded), mime_type


def _multipart_body(
    boundary: str, metadata: dict[str, object], content: bytes, mime_type: str
) -> bytes:
    """Build a multipart/related body with JSON metadata and file bytes."""
    return b"".join(
        [
            f"--{boundary}\r\n".encode(),
            b"Content-Type: application/json; charset=UTF-8\r\n\r\n",
            json.dumps(metadata).encode("utf-8"),
            f"\r\n--{boundary}\r\n".encode(),
            f"Content-Type: {mime_type}\r\n\r\n".encode(),
            content,
            f"\r\n--{boundary}--\r\n".encode(),
        ]
    )
