# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

from gdrive_upload.orchestrator import cli

if __name__ == "__main__":
    cli()
