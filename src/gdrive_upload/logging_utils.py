# SPDX-License-Identifier: GPL-3.0-or-later
# src/gdrive_upload/logging_utils.py
"""Logging strutturato per gdrive-upload.

Obiettivi:
- Logger **idempotente**, con filtri di **contesto** (run_id) e **redazione**.
- Niente `print` per la diagnostica: tutti i moduli usano logging strutturato su stdout,
  che è lo stream raccolto dal runner GitHub Actions.
- Utility di **masking** coerenti per ID Drive e percorsi.

Formato di output:
    %(asctime)s %(levelname)s %(name)s: %(message)s | run_id=<run> file_name=<f> file_id=<id> ...

Indice funzioni principali (ruolo):
- `get_structured_logger(name, *, run_id=None, level=None, redact_logs=None)`:
    istanzia un logger con handler console e filtri di contesto/redazione.
- `redact_secrets(msg)`: redige chiavi private PEM e token bearer in testo libero.
- `mask_partial(value, keep=3)`: maschera parzialmente un identificativo da includere in `extra`.
- `tail_path(p, keep_segments=2)`: coda compatta di un path per log.

Livello:
- `GDRIVE_UPLOAD_LOG_LEVEL` se impostata, altrimenti DEBUG quando il runner espone
  `RUNNER_DEBUG=1` (re-run con debug logging), altrimenti INFO.

Redazione:
- `GDRIVE_UPLOAD_REDACT_LOGS=false` la disattiva per tutti i logger creati senza `redact_logs`
  esplicito; il valore è letto a ogni record, quindi vale anche dopo il caricamento del .env.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

# ---------------------------------------------
# Redazione (API semplice usata dai moduli)
# ---------------------------------------------
_SENSITIVE_KEYS = {"credentials", "private_key", "Authorization"}

_REDACTIONS = (
    (
        re.compile(r"-----BEGIN [A-Z ]*PRIVATE KEY-----.*?-----END [A-Z ]*PRIVATE KEY-----", re.DOTALL),
        "-----PRIVATE KEY***-----",
    ),
    (re.compile(r"Authorization\s*:\s*Bearer\s+\S+", re.IGNORECASE), "Authorization: Bearer ***"),
    (re.compile(r"ya29\.[0-9A-Za-z_\-]+"), "ya29.***"),
)


def redact_secrets(msg: str) -> str:
    """Redige chiavi/token se accidentalmente presenti in un testo libero."""
    if not msg:
        return msg
    out = msg
    for pattern, replacement in _REDACTIONS:
        out = pattern.sub(replacement, out)
    return out


def mask_partial(value: Optional[str], keep: int = 3) -> str:
    """Maschera parzialmente un identificativo: 'abcdef' -> 'abc...'."""
    if not value:
        return ""
    return value[:keep] + "..." if len(value) > keep else value


def tail_path(p: Union[Path, str], keep_segments: int = 2) -> str:
    """Restituisce la coda del path per logging compatto (accetta `Path` o `str`)."""
    parts = list(Path(p).parts)
    return "/".join(parts[-keep_segments:]) if parts else str(p)


# ---------------------------------------------
# Structured logging
# ---------------------------------------------
@dataclass
class _CtxView:
    run_id: Optional[str] = None
    redact_logs: Optional[bool] = None


class _ContextFilter(logging.Filter):
    """Arricchisce ogni record con campi standardizzati."""

    def __init__(self, ctx: _CtxView):
        super().__init__()
        self.ctx = ctx

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "run_id"):
            record.run_id = self.ctx.run_id or "-"
        return True


_REDACT_ENV = "GDRIVE_UPLOAD_REDACT_LOGS"
_FALSY = {"0", "false", "no", "off"}


def _redaction_from_env() -> bool:
    # letta a ogni record: i logger di modulo nascono prima del caricamento del .env
    return (os.getenv(_REDACT_ENV) or "").strip().lower() not in _FALSY


class _RedactFilter(logging.Filter):
    """Applica redazione ai record del proprio logger.

    `enabled=None` segue `GDRIVE_UPLOAD_REDACT_LOGS` (default: attiva).
    I record propagati dai logger figli non vengono toccati: ciascun logger decide per sé.
    """

    def __init__(self, owner: str, enabled: Optional[bool] = None):
        super().__init__()
        self.owner = owner
        self.enabled = enabled

    def is_active(self) -> bool:
        return _redaction_from_env() if self.enabled is None else self.enabled

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != self.owner or not self.is_active():
            return True
        try:
            if isinstance(record.msg, str):
                record.msg = redact_secrets(record.msg)
            for field in _SENSITIVE_KEYS:
                if hasattr(record, field):
                    setattr(record, field, "***")
            err = getattr(record, "error_message", None)
            if isinstance(err, str):
                record.error_message = redact_secrets(err)
        except Exception:  # noqa: BLE001
            # mai bloccare il logging per un errore di redazione
            pass
        return True


class _EventDefaultFilter(logging.Filter):
    """Garantisce che 'event' sia sempre presente; se manca usa il messaggio come codice evento."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover
        try:
            if not hasattr(record, "event"):
                msg = record.getMessage() if hasattr(record, "getMessage") else getattr(record, "msg", "")
                if isinstance(msg, str):
                    record.event = msg.strip() or "log"
                else:
                    record.event = "log"
        except Exception:
            pass
        return True


class _KVFormatter(logging.Formatter):
    """Formatter semplice e leggibile, con campi chiave-valore stabili."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        kv = []
        for k in (
            "run_id",
            "file_name",
            "file_id",
            "folder",
            "target",
            "targets",
            "overwrite",
            "matches",
            "error_message",
        ):
            v = getattr(record, k, None)
            if v is not None and v != "":
                kv.append(f"{k}={v}")
        if kv:
            return f"{base} | " + " ".join(kv)
        return base


def _make_console_handler(level: int, fmt: str) -> logging.Handler:
    ch = logging.StreamHandler(stream=sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(_KVFormatter(fmt))
    return ch


def _ensure_no_duplicate_handlers(lg: logging.Logger, key: str) -> None:
    """Evita handler duplicati (idempotenza)."""
    to_remove = []
    for h in lg.handlers:
        if getattr(h, "_logging_utils_key", None) == key:
            to_remove.append(h)
    for h in to_remove:
        lg.removeHandler(h)


def _set_logger_filter(lg: logging.Logger, flt: logging.Filter, key: str) -> None:
    """Sostituisce (se presente) un filtro identificato dal key e lo rimpiazza."""
    to_remove = [f for f in lg.filters if getattr(f, "_logging_utils_key", None) == key]
    for f in to_remove:
        lg.removeFilter(f)
    flt._logging_utils_key = key  # type: ignore[attr-defined]
    lg.addFilter(flt)


def _resolve_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        # lettura diretta da os.environ: nessun caricamento .env a import-time
        env_level = (os.getenv("GDRIVE_UPLOAD_LOG_LEVEL") or "").strip()
        if env_level:
            level = env_level
        elif (os.getenv("RUNNER_DEBUG") or "").strip() == "1":
            return logging.DEBUG
        else:
            return logging.INFO
    return int(getattr(logging, str(level).upper(), logging.INFO))


def get_structured_logger(
    name: str,
    *,
    run_id: Optional[str] = None,
    level: int | str | None = None,
    redact_logs: Optional[bool] = None,
    propagate: Optional[bool] = None,
) -> logging.Logger:
    """Restituisce un logger configurato e idempotente.

    Parametri:
        name:        nome del logger (es. 'gdrive_upload.drive.upload').
        run_id:      identificativo run aggiunto a ogni record.
        level:       livello logging (default: env `GDRIVE_UPLOAD_LOG_LEVEL` / `RUNNER_DEBUG`, fallback INFO).
        redact_logs: abilita/disabilita redazione (default: env `GDRIVE_UPLOAD_REDACT_LOGS`, attiva se assente).
        propagate:   propagazione al root logger (default: False, True sotto pytest).

    Ritorna:
        logging.Logger pronto all'uso.
    """
    resolved_level = _resolve_level(level)

    lg = logging.getLogger(name)
    lg.setLevel(resolved_level)
    if propagate is None:
        propagate = False
    # Nei test pytest intercettiamo i log via caplog (attaccato al root): senza propagazione
    # i test non vedono i messaggi. Il comportamento runtime resta invariato.
    if not propagate and (os.getenv("PYTEST_CURRENT_TEST") or "pytest" in sys.modules):
        propagate = True
    lg.propagate = propagate

    ctx = _CtxView(run_id=run_id, redact_logs=redact_logs)
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"

    ctx_filter = _ContextFilter(ctx)
    redact_filter = _RedactFilter(name, redact_logs)
    event_filter = _EventDefaultFilter()
    _set_logger_filter(lg, ctx_filter, f"{name}::ctx_filter")
    _set_logger_filter(lg, redact_filter, f"{name}::redact_filter")
    _set_logger_filter(lg, event_filter, f"{name}::event_filter")

    key_console = f"{name}::console"
    _ensure_no_duplicate_handlers(lg, key_console)
    ch = _make_console_handler(resolved_level, fmt)
    ch._logging_utils_key = key_console  # type: ignore[attr-defined]
    ch.addFilter(ctx_filter)
    ch.addFilter(redact_filter)
    ch.addFilter(event_filter)
    lg.addHandler(ch)
    return lg


__all__ = [
    "get_structured_logger",
    "redact_secrets",
    "mask_partial",
    "tail_path",
]
