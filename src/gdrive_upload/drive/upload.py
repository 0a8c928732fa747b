# SPDX-License-Identifier: GPL-3.0-or-later
# src/gdrive_upload/drive/upload.py
from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Literal, Optional, Union

from ..exceptions import DriveFileExistsError, LocalReadError
from ..logging_utils import get_structured_logger, mask_partial, tail_path
from .client import DEFAULT_MIMETYPE, DriveStore
from .locate import locate_file_id

logger = get_structured_logger("gdrive_upload.drive.upload")


@dataclass(frozen=True)
class UploadOutcome:
    target: str
    file_name: str
    file_id: str
    action: Literal["created", "updated"]


def remote_name_for(target: Union[str, PathLike[str]]) -> str:
    """Nome remoto = basename del path locale (estensione e maiuscole invariate)."""
    return Path(target).name


def _guess_mimetype(file_name: str) -> str:
    mime, _ = mimetypes.guess_type(file_name)
    return mime or DEFAULT_MIMETYPE


def upload_file(
    store: DriveStore,
    target: Union[str, PathLike[str]],
    folder_id: str,
    overwrite: bool,
    *,
    existing_file_id: Optional[str] = None,
) -> UploadOutcome:
    """Carica `target` in `folder_id`, creando il file o aggiornandolo in place.

    Con `overwrite` il file omonimo viene cercato e, se presente, aggiornato (ID invariato).
    Senza `overwrite` non si fa alcuna ricerca: un secondo upload dello stesso nome crea
    un secondo file. `existing_file_id` permette al chiamante di indicare un ID già noto;
    senza `overwrite` quell'ID blocca l'upload invece di essere sovrascritto.

    Raises:
        AmbiguousNameError: più file omonimi nella cartella (solo con `overwrite`).
        DriveFileExistsError: ID esistente noto ma `overwrite` disabilitato.
        LocalReadError: file locale assente o non leggibile.
        DriveUploadError: errore Drive durante list/create/update.
    """
    path = Path(target)
    file_name = remote_name_for(path)

    file_id = existing_file_id
    if overwrite and file_id is None:
        file_id = locate_file_id(store, file_name, folder_id)

    if file_id is not None and not overwrite:
        raise DriveFileExistsError(
            f"File {file_name} already exists. Set 'overwrite' to 'true' to update it.",
            drive_id=file_id,
        )

    mimetype = _guess_mimetype(file_name)
    try:
        fh = path.open("rb")
    except OSError as e:
        raise LocalReadError(f"Cannot read local file {path}: {e.strerror or e}", file_path=path) from e

    with fh:
        if file_id is None:
            logger.info(
                "drive.upload.create",
                extra={"file_name": file_name, "folder": mask_partial(folder_id), "target": tail_path(path)},
            )
            new_id = store.create({"name": file_name, "parents": [folder_id]}, fh, mimetype)
            outcome = UploadOutcome(target=str(target), file_name=file_name, file_id=new_id, action="created")
        else:
            logger.info(
                "drive.upload.update",
                extra={"file_name": file_name, "file_id": mask_partial(file_id), "target": tail_path(path)},
            )
            updated_id = store.update(file_id, fh, mimetype)
            outcome = UploadOutcome(target=str(target), file_name=file_name, file_id=updated_id, action="updated")

    logger.debug(
        "drive.upload.done",
        extra={"file_name": file_name, "file_id": mask_partial(outcome.file_id), "action": outcome.action},
    )
    return outcome


__all__ = ["UploadOutcome", "remote_name_for", "upload_file"]
