# SPDX-License-Identifier: GPL-3.0-or-later
# src/gdrive_upload/auth.py
"""
Autenticazione Service Account per Google Drive (v3).

Superficie pubblica:
- decode_service_account_info(encoded)
    Decodifica l'input `credentials` (base64 -> UTF-8 -> JSON) e verifica i campi minimi
    (`client_email`, `private_key`).
- build_credentials(info)
    Credenziali JWT del service account con il solo scope `drive.file`
    (file creati da questa applicazione, non l'intero Drive).
- build_drive_service(credentials)
    Resource Drive v3 costruita dal discovery document statico della libreria.

Note d’uso:
- Nessuna chiamata di rete: il token viene richiesto da `google-auth` al primo utilizzo.
- Il contenuto della chiave non compare mai in messaggi di errore o log.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any, Dict, Mapping

from google.oauth2 import service_account
from googleapiclient.discovery import build

from .exceptions import ConfigError, CredentialFormatError
from .logging_utils import get_structured_logger, mask_partial

logger = get_structured_logger("gdrive_upload.auth")

DRIVE_FILE_SCOPE = "https://www.googleapis.com/auth/drive.file"
SCOPES = [DRIVE_FILE_SCOPE]
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"

_REQUIRED_FIELDS = ("client_email", "private_key")


def decode_service_account_info(encoded: str) -> Dict[str, Any]:
    """Decodifica la chiave JSON del service account codificata in base64.

    Raises:
        CredentialFormatError: base64/UTF-8/JSON non validi, payload non-oggetto
            o campi obbligatori mancanti.
    """
    compact = "".join((encoded or "").split())
    if not compact:
        raise CredentialFormatError("Service account credentials are empty.")
    try:
        raw = base64.b64decode(compact, validate=False)
    except (binascii.Error, ValueError) as e:
        raise CredentialFormatError("Service account credentials are not valid base64.") from e
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CredentialFormatError("Service account credentials are not UTF-8 encoded JSON.") from e
    try:
        info = json.loads(text)
    except json.JSONDecodeError as e:
        raise CredentialFormatError("Service account credentials are not valid JSON.") from e
    if not isinstance(info, dict):
        raise CredentialFormatError("Service account credentials must be a JSON object.")

    missing = [k for k in _REQUIRED_FIELDS if not isinstance(info.get(k), str) or not info.get(k)]
    if missing:
        raise CredentialFormatError(f"Service account credentials missing fields: {', '.join(missing)}.")
    return info


def build_credentials(info: Mapping[str, Any]) -> service_account.Credentials:
    """Costruisce le credenziali del service account con scope `drive.file`."""
    payload = dict(info)
    payload.setdefault("token_uri", DEFAULT_TOKEN_URI)
    try:
        creds = service_account.Credentials.from_service_account_info(payload, scopes=SCOPES)
    except Exception as e:  # noqa: BLE001
        raise CredentialFormatError(
            f"Service account private key could not be loaded ({type(e).__name__})."
        ) from e

    logger.debug(
        "auth.credentials.built",
        extra={"client": mask_partial(str(payload.get("client_email", ""))), "scopes": "drive.file"},
    )
    return creds


def build_drive_service(credentials: Any) -> Any:
    """Costruisce e restituisce un client Google Drive v3."""
    try:
        return build("drive", "v3", credentials=credentials, cache_discovery=False)
    except Exception as e:  # noqa: BLE001
        raise ConfigError(f"Google Drive client creation failed: {e}") from e


__all__ = [
    "DRIVE_FILE_SCOPE",
    "SCOPES",
    "decode_service_account_info",
    "build_credentials",
    "build_drive_service",
]
