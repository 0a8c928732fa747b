# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

"""Env utilities senza side-effects a import-time.

Espone:
- ``ensure_dotenv_loaded(path=None)``: carica .env on-demand (idempotente).
- ``get_env_var(name, default=None, required=False)``: lettura sicura.
- ``get_bool(name, default=False)``: parsing booleano da ENV.
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from gdrive_upload.logging_utils import get_structured_logger

__all__ = [
    "ensure_dotenv_loaded",
    "get_env_var",
    "get_bool",
]

_LOGGER = get_structured_logger("gdrive_upload.env_utils")
_LOADED_PATHS: set[str] = set()


def ensure_dotenv_loaded(path: Optional[str | Path] = None) -> bool:
    """Carica un file .env (default: `.env` nella CWD) una sola volta per path.

    Ritorna True se il caricamento è stato eseguito in questa chiamata,
    False se quel file era già stato caricato. Le variabili già presenti nell'ambiente
    (es. quelle impostate dal runner) non vengono sovrascritte.
    """
    dotenv_path = (Path(path) if path is not None else Path.cwd() / ".env").resolve()
    key = str(dotenv_path)
    if key in _LOADED_PATHS:
        return False
    loaded = load_dotenv(dotenv_path=dotenv_path, override=False)
    _LOADED_PATHS.add(key)
    _LOGGER.debug("env.loaded", extra={"loaded": bool(loaded), "target": dotenv_path.name})
    return True


def get_env_var(name: str, default: Optional[str] = None, *, required: bool | None = False) -> Optional[str]:
    """Ritorna il valore di una variabile d'ambiente.

    - Trimma spazi; se vuota, tratta come non impostata.
    - Se ``required`` e non presente, solleva ``KeyError``.
    """
    ensure_dotenv_loaded()
    val = os.environ.get(name)
    if val is None:
        if required:
            raise KeyError(f"ENV missing: {name}")
        return default
    sval = val.strip()
    if sval == "":
        if required:
            raise KeyError(f"ENV empty: {name}")
        return default
    return sval


def get_bool(name: str, default: bool = False, *, env: Mapping[str, str] | None = None) -> bool:
    """Parsa un booleano da ENV (o mapping fornito) usando valori comuni truthy/falsy.

    Truthy: 1,true,yes,on (case-insensitive). Falsy: 0,false,no,off.
    Se non impostata o non riconosciuta, ritorna ``default``.
    Passando ``env`` si evita il caricamento di .env ed è possibile usare mapping custom.
    """
    source: Mapping[str, str]
    if env is not None:
        source = env
    else:
        ensure_dotenv_loaded()
        source = os.environ
    val = source.get(name)
    if val is None:
        return bool(default)
    s = str(val).strip().lower()
    if s in {"1", "true", "yes", "on"}:
        return True
    if s in {"0", "false", "no", "off"}:
        return False
    return bool(default)
