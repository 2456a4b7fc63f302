"""Local file storage for the device registry."""

from pathlib import Path


def read(path: Path) -> str | None:
    """Read file contents, or None if doesn't exist."""
    if not path.exists():
        return None
    return path.read_text(encoding="utf-8")


def write(path: Path, data: str) -> None:
    """Write data via a sibling temp file, creating parent dirs if needed.

    Readers never see a half-written file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f".{path.name}.tmp")
    tmp.write_text(data, encoding="utf-8")
    tmp.replace(path)
