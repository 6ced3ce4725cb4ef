"""Path argument mapping for --doc, --contract, --log-file and --output."""

from __future__ import annotations

import re
import unicodedata
from pathlib import Path

from .constants import CONTRACT_FILENAME, DATA_DIRNAME, DOCUMENT_FILENAME
from .errors import PathMappingError

_WINDOWS_DRIVE_RELATIVE_RE = re.compile(r"^[A-Za-z]:[^/\\]")


def app_root() -> Path:
    """The installed package directory, which '@' refers to."""
    return Path(__file__).resolve().parent


def bundled_document_path() -> Path:
    return app_root() / DATA_DIRNAME / DOCUMENT_FILENAME


def bundled_contract_path() -> Path:
    return app_root() / DATA_DIRNAME / CONTRACT_FILENAME


def map_path_argument(
    *,
    raw_path: str | None,
    app_root_abs: Path,
    argument_name: str,
    cwd: Path | None = None,
) -> Path:
    """Map '~', '@' and relative paths to an absolute path.

    Relative paths resolve against ``cwd`` (the process working directory when
    omitted).
    """
    if raw_path is None:
        raise PathMappingError(f"{argument_name} path is missing.")

    normalized_input = unicodedata.normalize("NFC", raw_path)
    if normalized_input.strip() == "":
        raise PathMappingError(f"{argument_name} path is empty.")
    if "\0" in normalized_input:
        raise PathMappingError(f"{argument_name} contains NUL (\\0).")
    if _is_windows_rooted_not_fully_qualified(normalized_input):
        raise PathMappingError(
            f"{argument_name} uses an unsupported Windows rooted-not-qualified path."
        )

    mapped = _map_special_prefixes(normalized_input, app_root_abs, argument_name)
    if not mapped.is_absolute():
        mapped = (cwd if cwd is not None else Path.cwd()) / mapped

    return mapped.resolve(strict=False)


def resolve_existing_file(
    *, raw_path: str | None, default: Path, argument_name: str
) -> Path:
    if raw_path is None:
        return default
    mapped = map_path_argument(
        raw_path=raw_path,
        app_root_abs=app_root(),
        argument_name=argument_name,
    )
    if not mapped.exists():
        raise PathMappingError(f"{argument_name} does not exist: {mapped}")
    if not mapped.is_file():
        raise PathMappingError(f"{argument_name} must point to a file: {mapped}")
    return mapped


def _map_special_prefixes(path_text: str, app_root_abs: Path, argument_name: str) -> Path:
    if path_text.startswith("~"):
        try:
            return Path(path_text).expanduser()
        except RuntimeError as exc:
            raise PathMappingError(
                f"Failed to expand user home in path for {argument_name}: {path_text}"
            ) from exc
    if path_text.startswith("@"):
        return _map_app_root_path(path_text, app_root_abs)
    return Path(path_text)


def _map_app_root_path(path_text: str, app_root_abs: Path) -> Path:
    remainder = path_text[1:].lstrip("/\\")
    if remainder == "":
        return app_root_abs

    segments = [segment for segment in re.split(r"[\\/]+", remainder) if segment]
    return app_root_abs.joinpath(*segments)


def _is_windows_rooted_not_fully_qualified(path_text: str) -> bool:
    if path_text.startswith("\\") and not path_text.startswith("\\\\"):
        return True
    return _WINDOWS_DRIVE_RELATIVE_RE.match(path_text) is not None
