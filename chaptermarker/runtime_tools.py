"""External tool resolution and invocation helpers.

Responsibilities:
- Resolve ffmpeg/ffprobe paths with bundled-first precedence, then `PATH`.
- Run a tool synchronously and map failures to stage-scoped dependency errors.
"""

from __future__ import annotations

from pathlib import Path
import shutil
import subprocess
import sys
from typing import Sequence

from .errors import DependencyError
from .parsing import normalize_optional_string


def resolve_executable(command_name: str) -> str:
    """Resolve an executable with bundled-first precedence, then PATH.

    Resolution order:
    1. Bundled app directories (`./bin/<tool>` then `./<tool>` from app root).
    2. System `PATH`.
    3. Raw command name (allowing subprocess to raise a native missing-binary error).
    """

    normalized = command_name.strip()
    if not normalized:
        return command_name

    for candidate in _bundled_candidates(normalized):
        if candidate.is_file():
            return str(candidate)

    resolved_path = shutil.which(normalized)
    if resolved_path is not None:
        return resolved_path

    return normalized


def run_tool(
    tool_name: str,
    arguments: Sequence[str],
    *,
    stage: str,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Run `tool_name` with `arguments` and return the completed process.

    Raises:
        DependencyError: If the tool is missing, or exits non-zero while `check` is set.
    """

    command = [resolve_executable(tool_name), *arguments]
    try:
        return subprocess.run(
            command,
            check=check,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as exc:
        raise DependencyError(
            stage=stage,
            detail=f"Required tool `{tool_name}` is not available on PATH.",
            hint=f"Install {tool_name} (ships with ffmpeg) and rerun.",
        ) from exc
    except subprocess.CalledProcessError as exc:
        stderr = normalize_optional_string(exc.stderr) or "no stderr output"
        raise DependencyError(
            stage=stage,
            detail=f"`{tool_name}` failed with exit code {exc.returncode}: {stderr}",
            hint="Verify the input file is a readable audio file.",
        ) from exc


def _bundled_candidates(command_name: str) -> list[Path]:
    """Return deterministic bundled candidate paths for one executable name."""

    app_root = _app_root()
    names = _candidate_names(command_name)
    candidates: list[Path] = []
    for name in names:
        candidates.append(app_root / "bin" / name)
        candidates.append(app_root / name)
    return candidates


def _candidate_names(command_name: str) -> tuple[str, ...]:
    """Return command name variants including Windows `.exe` fallback."""

    lowered = command_name.lower()
    if lowered.endswith(".exe"):
        return (command_name,)
    return (command_name, f"{command_name}.exe")


def _app_root() -> Path:
    """Resolve runtime application root for frozen and non-frozen execution."""

    frozen = bool(getattr(sys, "frozen", False))
    if frozen:
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[1]
