"""Starter content for newly created extension projects."""

from pathlib import PurePosixPath
from typing import Any
from uuid import UUID

from src.studio.models import FileType, ProjectFile

DEFAULT_VERSION = "0.1.0"

DEFAULT_SETTINGS: dict[str, Any] = {
    "theme": "dark",
    "auto_save": True,
}

_EXTENSION_TYPES = {
    ".html": FileType.HTML,
    ".htm": FileType.HTML,
    ".css": FileType.CSS,
    ".js": FileType.JAVASCRIPT,
    ".mjs": FileType.JAVASCRIPT,
    ".json": FileType.JSON,
    ".png": FileType.IMAGE,
    ".jpg": FileType.IMAGE,
    ".jpeg": FileType.IMAGE,
    ".gif": FileType.IMAGE,
    ".svg": FileType.IMAGE,
    ".ico": FileType.IMAGE,
}


def infer_file_type(name: str) -> FileType:
    """Guess the file type from its extension."""
    return _EXTENSION_TYPES.get(PurePosixPath(name).suffix.lower(), FileType.OTHER)


def default_manifest(name: str, description: str | None = None) -> dict[str, Any]:
    """Manifest V3 document for a popup-only extension."""
    return {
        "manifest_version": 3,
        "name": name,
        "version": DEFAULT_VERSION,
        "description": description or "",
        "action": {
            "default_popup": "popup.html",
            "default_title": name,
        },
        "permissions": [],
        "host_permissions": [],
    }


def _popup_html(name: str, description: str | None) -> str:
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        f"  <title>{name}</title>\n"
        '  <link rel="stylesheet" href="popup.css">\n'
        "</head>\n"
        "<body>\n"
        f"  <h1>{name}</h1>\n"
        f"  <p>{description or ''}</p>\n"
        '  <script src="popup.js"></script>\n'
        "</body>\n"
        "</html>\n"
    )


_POPUP_CSS = """body {
  width: 300px;
  padding: 10px;
  font-family: Arial, sans-serif;
}

h1 {
  font-size: 18px;
  color: #333;
}
"""


def _popup_js(name: str) -> str:
    return (
        "document.addEventListener('DOMContentLoaded', () => {\n"
        f"  console.log({name!r} + ' popup loaded');\n"
        "});\n"
    )


def starter_files(project_id: UUID, name: str, description: str | None = None) -> list[ProjectFile]:
    """popup.html, popup.css and popup.js rows for a new project (not yet added)."""
    contents = {
        "popup.html": _popup_html(name, description),
        "popup.css": _POPUP_CSS,
        "popup.js": _popup_js(name),
    }
    return [
        ProjectFile(
            project_id=project_id,
            name=filename,
            path=filename,
            file_type=infer_file_type(filename).value,
            content=content,
        )
        for filename, content in contents.items()
    ]
