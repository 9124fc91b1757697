"""Discovery and safe resolution of log files in the configured log directory."""
from __future__ import annotations

from pathlib import Path


def _is_under(path: Path, root: Path) -> bool:
    try:
        path.resolve(strict=False).relative_to(root.resolve(strict=False))
        return True
    except ValueError:
        return False


def list_log_files(log_dir: Path, suffix: str = ".log") -> list[str]:
    """Names of log files directly inside `log_dir`, sorted by name."""
    if not log_dir.is_dir():
        return []
    return sorted(
        entry.name
        for entry in log_dir.iterdir()
        if entry.is_file() and entry.name.endswith(suffix)
    )


def resolve_log_path(file_name: str, log_dir: Path) -> Path:
    """Resolve `file_name` inside `log_dir`.

    Raises ValueError for names escaping the directory and FileNotFoundError
    when the file does not exist.
    """
    cleaned = (file_name or "").strip()
    if not cleaned:
        raise ValueError("File name is required")
    candidate = log_dir / cleaned
    if not _is_under(candidate, log_dir):
        raise ValueError("Invalid file path")
    if not candidate.is_file():
        raise FileNotFoundError(f"File not found: {cleaned}")
    return candidate
