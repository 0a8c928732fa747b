# SPDX-License-Identifier: GPL-3.0-or-later
"""Package interno 'drive' (client/locate/upload).

Struttura:
- gdrive_upload/drive/client.py  → interfaccia `DriveStore` + implementazione su googleapiclient
- gdrive_upload/drive/locate.py  → ricerca per nome nella cartella di destinazione
- gdrive_upload/drive/upload.py  → decisione create/update e upload del contenuto
"""

from .client import DriveStore, GoogleDriveStore
from .locate import build_name_query, locate_file_id
from .upload import UploadOutcome, upload_file

__all__ = [
    "DriveStore",
    "GoogleDriveStore",
    "build_name_query",
    "locate_file_id",
    "UploadOutcome",
    "upload_file",
]
