# SPDX-License-Identifier: GPL-3.0-or-later
# src/gdrive_upload/workflow.py
"""Workflow commands GitHub Actions (sink dei fallimenti).

Il runner interpreta le righe `::<comando>::<messaggio>` scritte su stdout. Qui serve
solo `::error::`, emesso una volta dall'entrypoint quando il run fallisce; il resto
della diagnostica passa dal logging strutturato.
"""

from __future__ import annotations

import sys
from typing import Optional, TextIO

__all__ = ["escape_data", "format_command", "set_failed"]


def escape_data(value: str) -> str:
    """Escape dei caratteri che il runner tratta come delimitatori (`%`, CR, LF)."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def format_command(command: str, message: str) -> str:
    return f"::{command}::{escape_data(message)}"


def set_failed(message: str, *, stream: Optional[TextIO] = None) -> None:
    """Segnala il fallimento del run con il messaggio dell'errore come motivo visibile."""
    out = stream if stream is not None else sys.stdout
    out.write(format_command("error", message) + "\n")
    out.flush()
