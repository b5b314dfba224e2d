from __future__ import annotations

import importlib.metadata
import subprocess
from pathlib import Path
from typing import Optional


def get_version() -> str:
    try:
        return importlib.metadata.version("folio")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0+unknown"


def _git_commit() -> Optional[str]:
    # Only meaningful when running from a source checkout
    here = Path(__file__).resolve().parent
    try:
        out = subprocess.check_output(["git", "rev-parse", "--short=7", "HEAD"], cwd=str(here),
                                      stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError):
        return None
    return out.decode().strip() or None


def get_version_string() -> str:
    commit = _git_commit()
    if commit:
        return f"folio {get_version()} ({commit})"
    return f"folio {get_version()}"
