# SPDX-License-Identifier: GPL-3.0-or-later
# src/gdrive_upload/exceptions.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

"""
Eccezioni SSoT per gdrive-upload.

Ruoli principali:
- `PipelineError`: base per tutte le eccezioni di dominio (no I/O, no exit).
- Sottoclassi tipizzate: ConfigError / CredentialFormatError (input e chiave),
  LocalReadError (file locale), DriveUploadError / AmbiguousNameError /
  DriveFileExistsError (Drive).
- `EXIT_CODES` + `exit_code_for`: tabella centralizzata per l'entrypoint CLI.

Linee guida:
- Nessuna eccezione fa I/O o termina il processo.
- I messaggi includono contesto “safe” in __str__ (solo basename del file, ID mascherato).
- Il materiale delle credenziali non finisce mai nel messaggio.
"""

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class PipelineError(Exception):
    """Eccezione generica per errori bloccanti durante l'upload.

    Accetta un messaggio e un payload contestuale opzionale (file_path, drive_id, run_id)
    utile per logging strutturato e diagnosi.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        file_path: Optional[str | Path] = None,
        drive_id: Optional[str] = None,
        run_id: Optional[str] = None,
        **_: Any,
    ) -> None:
        super().__init__(message or "")
        self.file_path: Optional[str | Path] = file_path
        self.drive_id: Optional[str] = drive_id
        self.run_id: Optional[str] = run_id

    @staticmethod
    def _safe_file_repr(fp: str | Path) -> str:
        """Mostra solo il nome (niente path assoluti)."""
        try:
            return Path(fp).name or str(fp)
        except Exception:
            return str(fp)

    @staticmethod
    def _mask_id(val: str, keep: int = 6) -> str:
        """Maschera l'ID Drive lasciando solo le ultime `keep` cifre."""
        try:
            s = str(val)
            if len(s) <= keep:
                return s
            return f"…{s[-keep:]}"
        except Exception:
            return "…"

    def __str__(self) -> str:
        base_msg = super().__str__() or self.__class__.__name__
        context_parts: list[str] = []
        if self.file_path:
            context_parts.append(f"file={self._safe_file_repr(self.file_path)}")
        if self.drive_id:
            context_parts.append(f"drive_id={self._mask_id(self.drive_id)}")
        if self.run_id:
            context_parts.append(f"run_id={self.run_id}")
        context_info = f" [{' | '.join(context_parts)}]" if context_parts else ""
        return f"{base_msg}{context_info}"


# ---------------------------------------------------------------------------
# Input e credenziali
# ---------------------------------------------------------------------------


class ConfigError(PipelineError):
    """Input dell'action mancante o vuoto."""

    pass


class CredentialFormatError(ConfigError):
    """Payload credenziali non decodificabile (base64/UTF-8/JSON) o campi obbligatori assenti."""

    pass


# ---------------------------------------------------------------------------
# File locale
# ---------------------------------------------------------------------------


class LocalReadError(PipelineError):
    """File target assente o non leggibile."""

    pass


# ---------------------------------------------------------------------------
# Google Drive
# ---------------------------------------------------------------------------


class DriveUploadError(PipelineError):
    """Errore di trasporto/API durante list, create o update su Drive."""

    pass


class AmbiguousNameError(PipelineError):
    """Più di un file non cestinato con lo stesso nome nella cartella di destinazione."""

    pass


class DriveFileExistsError(PipelineError):
    """File già presente su Drive ma `overwrite` non abilitato."""

    pass


# ---------------------------------------------------------------------------
# Exit codes centralizzati (nessun side-effect)
# ---------------------------------------------------------------------------

EXIT_CODES = {
    "PipelineError": 1,
    "ConfigError": 2,
    "CredentialFormatError": 2,
    "LocalReadError": 3,
    "DriveUploadError": 22,
    "AmbiguousNameError": 23,
    "DriveFileExistsError": 24,
}


def exit_code_for(exc: BaseException) -> int:
    """Restituisce il codice di uscita per un’eccezione (fallback a PipelineError=1)."""
    return EXIT_CODES.get(type(exc).__name__, EXIT_CODES["PipelineError"])


__all__ = [
    "PipelineError",
    "ConfigError",
    "CredentialFormatError",
    "LocalReadError",
    "DriveUploadError",
    "AmbiguousNameError",
    "DriveFileExistsError",
    "EXIT_CODES",
    "exit_code_for",
]
