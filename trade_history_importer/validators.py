"""Input validators used by console prompts."""

from collections.abc import Callable
from pathlib import Path

PromptValidator = Callable[[str], bool | str]

ACCEPTED_EXTENSIONS = (".csv", ".txt")


def validate_import_path(raw: str) -> bool | str:
    """Validate non-empty, existing, extension-matching export file input."""
    if not (text := raw.strip()):
        return "This field is required."
    if not (path := Path(text).expanduser().resolve()).is_file():
        return "Path must be a file."
    if path.suffix.lower() not in ACCEPTED_EXTENSIONS:
        return f"Only {' and '.join(ACCEPTED_EXTENSIONS)} files are supported."
    return True
