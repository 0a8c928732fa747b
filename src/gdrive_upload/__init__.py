# SPDX-License-Identifier: GPL-3.0-or-later
"""gdrive-upload: carica file locali in una cartella Google Drive da un job GitHub Actions."""

from typing import List

__version__ = "1.0.0"

__all__: List[str] = ["__version__"]
