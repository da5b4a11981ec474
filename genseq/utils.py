"""
Utility functions and environment configuration for the genseq library.
"""

from __future__ import annotations

import linecache
import os
import sys
from dataclasses import dataclass, field
from typing import Any


def _is_site_package(path: str) -> bool:
    normalized = path.replace("\\", "/").lower()
    return "/site-packages/" in normalized


def _is_stdlib(path: str) -> bool:
    normalized = path.replace("\\", "/").lower()
    if normalized.startswith("<"):
        return False
    return (
        "/lib/python" in normalized
        or "/frameworks/python.framework" in normalized
        or "/.local/share/uv/python" in normalized
    )


def _is_genseq_internal(path: str) -> bool:
    normalized = path.replace("\\", "/").lower()
    return "/genseq/" in normalized and "/tests/" not in normalized


def _is_user_frame(path: str) -> bool:
    if path.startswith("<"):
        return True
    return not (_is_site_package(path) or _is_stdlib(path) or _is_genseq_internal(path))


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes")


# Environment variable to control debug mode
DEBUG_SEQUENCES = _env_flag("GENSEQ_DEBUG")

# Storage strategy used when neither the decorator nor the annotation picks one
DEFAULT_STORAGE = os.environ.get("GENSEQ_DEFAULT_STORAGE", "value").strip().lower() or "value"


@dataclass(frozen=True)
class CreationContext:
    """Where a sequence was created."""

    filename: str
    line: int
    function: str
    code: str | None = None
    stack_trace: tuple[dict[str, Any], ...] = field(default_factory=tuple)

    def format_location(self) -> str:
        """Format the creation location as a string."""
        return f"{self.filename}:{self.line} in {self.function}"

    def format_full(self) -> str:
        """Format the full creation context with stack trace."""
        lines = [f"Sequence created at {self.format_location()}"]
        if self.code:
            lines.append(f"    {self.code}")
        if self.stack_trace:
            lines.append("\nCreation stack trace:")
            for frame in self.stack_trace:
                lines.append(
                    f'  File "{frame["filename"]}", line {frame["line"]}, in {frame["function"]}'
                )
                if frame.get("code"):
                    lines.append(f"    {frame['code']}")
        return "\n".join(lines)


def capture_creation_context(skip_frames: int = 2) -> CreationContext | None:
    """
    Capture the caller's stack context for debugging sequence creation.

    Args:
        skip_frames: Number of frames to skip (default 2 to skip this function and caller)

    Returns:
        CreationContext with frame info, or ``None`` when frames are unavailable.
        Outside of debug mode the walk stops at the first user frame.
    """
    try:
        frame = sys._getframe(skip_frames)
    except (AttributeError, ValueError):
        # sys._getframe is missing on some implementations, or the stack is shallower
        return None

    filename = frame.f_code.co_filename
    line = frame.f_lineno
    code = linecache.getline(filename, line).strip() or None

    stack_data: list[dict[str, Any]] = []
    current_frame = frame.f_back
    max_depth = 12 if DEBUG_SEQUENCES else 8

    while current_frame is not None and len(stack_data) < max_depth:
        frame_filename = current_frame.f_code.co_filename
        frame_data: dict[str, Any] = {
            "filename": frame_filename,
            "line": current_frame.f_lineno,
            "function": current_frame.f_code.co_name,
        }
        code_line = linecache.getline(frame_filename, current_frame.f_lineno)
        if code_line:
            frame_data["code"] = code_line.strip()
        stack_data.append(frame_data)

        if not DEBUG_SEQUENCES and _is_user_frame(frame_filename):
            break
        current_frame = current_frame.f_back

    return CreationContext(
        filename=filename,
        line=line,
        function=frame.f_code.co_name,
        code=code,
        stack_trace=tuple(stack_data),
    )


__all__ = [
    "DEBUG_SEQUENCES",
    "DEFAULT_STORAGE",
    "CreationContext",
    "capture_creation_context",
]
