# SPDX-License-Identifier: GPL-3.0-or-later
# src/gdrive_upload/inputs.py
"""Lettura degli input dell'action.

Il runner espone ogni input come variabile d'ambiente `INPUT_<NOME>` (spazi -> `_`,
maiuscolo). I valori sono trimmati; un valore vuoto vale come assente.
Nessuna validazione dei path: gli errori di I/O emergono in fase di upload.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import List, Optional

from .env_utils import get_env_var
from .exceptions import ConfigError

__all__ = ["ActionInputs", "input_env_name", "get_input", "get_multiline_input", "load_action_inputs"]


@dataclass(frozen=True)
class ActionInputs:
    credentials: str = field(repr=False)
    parent_folder_id: str
    targets: List[str]
    overwrite: bool = False


def input_env_name(name: str) -> str:
    return f"INPUT_{name.replace(' ', '_').upper()}"


def get_input(name: str, *, required: bool = False, env: Optional[Mapping[str, str]] = None) -> str:
    """Ritorna il valore trimmato dell'input `name` ("" se assente e non obbligatorio).

    Raises:
        ConfigError: se `required` e l'input è assente o vuoto.
    """
    key = input_env_name(name)
    if env is not None:
        value = (env.get(key) or "").strip()
    else:
        value = get_env_var(key, default="") or ""
    if required and not value:
        raise ConfigError(f"Input required and not supplied: {name}")
    return value


def get_multiline_input(name: str, *, required: bool = False, env: Optional[Mapping[str, str]] = None) -> List[str]:
    """Una voce per riga, trimmata; le righe vuote sono scartate."""
    raw = get_input(name, required=required, env=env)
    lines = [line.strip() for line in raw.splitlines()]
    return [line for line in lines if line]


def load_action_inputs(env: Optional[Mapping[str, str]] = None) -> ActionInputs:
    """Legge i quattro input dell'action.

    Passando `env` si legge da quel mapping (niente .env, niente os.environ).
    """
    credentials = get_input("credentials", required=True, env=env)
    parent_folder_id = get_input("parent_folder_id", required=True, env=env)
    targets = get_multiline_input("targets", required=True, env=env)
    if not targets:
        raise ConfigError("Input required and not supplied: targets")
    overwrite = get_input("overwrite", env=env) == "true"
    return ActionInputs(
        credentials=credentials,
        parent_folder_id=parent_folder_id,
        targets=targets,
        overwrite=overwrite,
    )
