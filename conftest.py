"""Root conftest: exports .env.test before pulse_chat.config is imported."""
from __future__ import annotations

import os
from pathlib import Path


def _export_env_file(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip())


_export_env_file(Path(__file__).resolve().parent / ".env.test")
