"""Display helpers for paths, icons and sizes."""

import math

DIR_ICON = "📁"
DEFAULT_ICON = "📄"

ICONS = {
    "js": "🟨",
    "jsx": "🟨",
    "ts": "🔷",
    "tsx": "🔷",
    "py": "🐍",
    "md": "📝",
    "json": "📄",
    "css": "🎨",
    "html": "🌐",
    "png": "🖼️",
    "jpg": "🖼️",
    "jpeg": "🖼️",
    "gif": "🖼️",
    "svg": "🖼️",
}

SIZE_UNITS = ["B", "KB", "MB", "GB"]


def file_icon(name: str, type: str) -> str:
    """Icon for a tree entry."""
    if type == "dir":
        return DIR_ICON
    extension = name.rsplit(".", 1)[-1].lower()
    return ICONS.get(extension, DEFAULT_ICON)


def format_file_size(size: int | None) -> str:
    """Human readable size, empty for zero/unknown."""
    if not size:
        return ""
    i = min(int(math.floor(math.log(size) / math.log(1024))), len(SIZE_UNITS) - 1)
    return f"{size / math.pow(1024, i):.1f} {SIZE_UNITS[i]}"


def breadcrumbs(path: str) -> list[str]:
    path = path.strip("/")
    return path.split("/") if path else []


def crumb_path(crumbs: list[str], index: int) -> str:
    """Path up to and including crumb ``index``."""
    if index < 0 or index >= len(crumbs):
        raise IndexError(f"No breadcrumb {index}")
    return "/".join(crumbs[: index + 1])


def parent_path(path: str) -> str:
    return "/".join(breadcrumbs(path)[:-1])


def join_path(base: str, name: str) -> str:
    """Resolve ``name`` relative to ``base`` (supports .., leading /)."""
    if name.startswith("/"):
        parts: list[str] = []
    else:
        parts = breadcrumbs(base)
    for part in name.split("/"):
        if part in ("", "."):
            continue
        if part == "..":
            if parts:
                parts.pop()
            continue
        parts.append(part)
    return "/".join(parts)
