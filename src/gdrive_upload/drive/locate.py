# SPDX-License-Identifier: GPL-3.0-or-later
# src/gdrive_upload/drive/locate.py
from __future__ import annotations

from typing import Optional

from ..exceptions import AmbiguousNameError
from ..logging_utils import get_structured_logger, mask_partial
from .client import DriveStore

logger = get_structured_logger("gdrive_upload.drive.locate")


def _escape_query_value(value: str) -> str:
    # Grammatica query Drive: backslash e apice singolo vanno preceduti da backslash
    return value.replace("\\", "\\\\").replace("'", "\\'")


def build_name_query(file_name: str, folder_id: str) -> str:
    """Query per nome esatto, cartella padre e file non cestinati."""
    return (
        f"name = '{_escape_query_value(file_name)}'"
        f" and '{_escape_query_value(folder_id)}' in parents"
        " and trashed = false"
    )


def locate_file_id(store: DriveStore, file_name: str, folder_id: str) -> Optional[str]:
    """Ritorna l'ID dell'unico file `file_name` in `folder_id`, None se assente.

    Raises:
        AmbiguousNameError: se esistono due o più corrispondenze (su qualunque pagina).
    """
    found: Optional[str] = None
    for file_id in store.list_file_ids(build_name_query(file_name, folder_id)):
        if found is not None:
            logger.error(
                "drive.locate.ambiguous",
                extra={"file_name": file_name, "folder": mask_partial(folder_id), "matches": "2+"},
            )
            raise AmbiguousNameError(
                f"More than one entry match the file name {file_name}. Remove the duplicates before overwriting.",
                drive_id=folder_id,
            )
        found = file_id

    logger.debug(
        "drive.locate.done",
        extra={"file_name": file_name, "folder": mask_partial(folder_id), "matches": 0 if found is None else 1},
    )
    return found


__all__ = ["build_name_query", "locate_file_id"]
