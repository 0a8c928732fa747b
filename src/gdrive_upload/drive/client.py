# SPDX-License-Identifier: GPL-3.0-or-later
# src/gdrive_upload/drive/client.py
"""
Interfaccia stretta verso Google Drive (v3) e sua implementazione su googleapiclient.

Superficie pubblica:
- DriveStore
    Protocollo con le sole tre operazioni usate dall'action: list per query, create, update.
    La logica di locate/upload dipende solo da questo, quindi è testabile con un fake.
- GoogleDriveStore(service)
    Implementazione su una resource Drive v3 (`googleapiclient.discovery.build`).
    Include Shared Drives (`supportsAllDrives`/`includeItemsFromAllDrives`), pagina
    lazy sul listing, upload multipart (non resumable) del contenuto.

Note d’uso:
- Nessun retry: qualunque errore HTTP/di trasporto/di token diventa `DriveUploadError`
  e interrompe il run.
- Il contenuto viene letto dallo stream prima della richiesta (l'upload multipart lo
  tiene comunque tutto in memoria): un errore di lettura resta `LocalReadError` e non
  viene confuso con un errore Drive.
"""

from __future__ import annotations

import io
from typing import IO, Any, Callable, Dict, Iterator, Optional, Protocol, cast

from googleapiclient.http import MediaIoBaseUpload

from ..exceptions import DriveUploadError, LocalReadError
from ..logging_utils import get_structured_logger

logger = get_structured_logger("gdrive_upload.drive.client")

DEFAULT_MIMETYPE = "application/octet-stream"


class DriveStore(Protocol):
    def list_file_ids(self, query: str) -> Iterator[str]:
        """ID dei file che soddisfano `query`, su tutte le pagine."""
        ...

    def create(self, metadata: Dict[str, Any], stream: IO[bytes], mimetype: str) -> str:
        """Crea un file con `metadata` e contenuto `stream`; ritorna il nuovo ID."""
        ...

    def update(self, file_id: str, stream: IO[bytes], mimetype: str) -> str:
        """Sostituisce il contenuto di `file_id`; ritorna l'ID (invariato)."""
        ...


def _execute(op: Callable[[], Any], *, op_name: str) -> Dict[str, Any]:
    try:
        return cast(Dict[str, Any], op())
    except Exception as e:  # noqa: BLE001
        status = getattr(getattr(e, "resp", None), "status", None)
        logger.debug(
            "drive.request.failed",
            extra={"op": op_name, "status": status, "exc_type": type(e).__name__, "error_message": str(e)[:300]},
        )
        raise DriveUploadError(f"Google Drive {op_name} failed: {e}") from e


def _media_from(stream: IO[bytes], mimetype: str) -> MediaIoBaseUpload:
    try:
        body = stream.read()
    except OSError as e:
        name = getattr(stream, "name", None)
        raise LocalReadError(
            f"Cannot read local file {name or '<stream>'}: {e.strerror or e}",
            file_path=name if isinstance(name, str) else None,
        ) from e
    return MediaIoBaseUpload(io.BytesIO(body), mimetype=mimetype or DEFAULT_MIMETYPE, resumable=False)


class GoogleDriveStore:
    """`DriveStore` sopra una resource Drive v3."""

    def __init__(self, service: Any, *, page_size: int = 100) -> None:
        self._service = service
        self._page_size = page_size

    def list_file_ids(self, query: str) -> Iterator[str]:
        page_token: Optional[str] = None
        while True:

            def _call() -> Any:
                return (
                    self._service.files()
                    .list(
                        q=query,
                        fields="nextPageToken, files(id)",
                        pageSize=self._page_size,
                        pageToken=page_token,
                        includeItemsFromAllDrives=True,
                        supportsAllDrives=True,
                    )
                    .execute()
                )

            resp = _execute(_call, op_name="files.list")
            for f in resp.get("files", []):
                yield cast(str, f["id"])

            page_token = resp.get("nextPageToken")
            if not page_token:
                break

    def create(self, metadata: Dict[str, Any], stream: IO[bytes], mimetype: str) -> str:
        media = _media_from(stream, mimetype)

        def _call() -> Any:
            return (
                self._service.files()
                .create(body=metadata, media_body=media, fields="id", supportsAllDrives=True)
                .execute()
            )

        resp = _execute(_call, op_name="files.create")
        return cast(str, resp["id"])

    def update(self, file_id: str, stream: IO[bytes], mimetype: str) -> str:
        media = _media_from(stream, mimetype)

        def _call() -> Any:
            return (
                self._service.files()
                .update(fileId=file_id, media_body=media, fields="id", supportsAllDrives=True)
                .execute()
            )

        resp = _execute(_call, op_name="files.update")
        return cast(str, resp.get("id") or file_id)


__all__ = ["DriveStore", "GoogleDriveStore", "DEFAULT_MIMETYPE"]
