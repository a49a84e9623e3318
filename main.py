"""Atajo de desarrollo: `python main.py check-email a@b.com` sin `pip install -e .`.

El código vive en `src/`; instalado, el comando equivalente es `hbl`.
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from cli.main import app  # noqa: E402

if __name__ == "__main__":
    app(prog_name="hbl")
