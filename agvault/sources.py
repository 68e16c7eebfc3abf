"""File handles consumed by the pipeline: a name, a size, a mime type and a reader."""

from __future__ import annotations

import mimetypes
import pathlib
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from .config import DEFAULT_MIME_TYPE
from .errors import SourceReadError


def normalize_path(path_like: Union[str, pathlib.Path]) -> pathlib.Path:
    path = path_like if isinstance(path_like, pathlib.Path) else pathlib.Path(str(path_like))
    path = path.expanduser()
    try:
        return path.resolve(strict=False)
    except Exception:
        return path


def guess_mime_type(name: str) -> str:
    guessed, _ = mimetypes.guess_type(name, strict=False)
    return guessed or ""


@dataclass(frozen=True)
class SourceFile:
    name: str
    size: int
    mime_type: str
    reader: Callable[[], bytes] = field(repr=False, compare=False)
    path: Optional[pathlib.Path] = None

    @classmethod
    def from_path(
        cls,
        path_like: Union[str, pathlib.Path],
        *,
        mime_type: Optional[str] = None,
    ) -> "SourceFile":
        path = normalize_path(path_like)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Input file not found: {path}")
        return cls(
            name=path.name,
            size=path.stat().st_size,
            mime_type=mime_type if mime_type is not None else guess_mime_type(path.name),
            reader=path.read_bytes,
            path=path,
        )

    @classmethod
    def from_bytes(cls, name: str, data: bytes, mime_type: Optional[str] = None) -> "SourceFile":
        payload = bytes(data)
        return cls(
            name=name,
            size=len(payload),
            mime_type=mime_type if mime_type is not None else guess_mime_type(name),
            reader=lambda: payload,
        )

    @property
    def effective_mime_type(self) -> str:
        return self.mime_type or DEFAULT_MIME_TYPE

    def read(self) -> bytes:
        """Return the whole content, byte exact, or raise :class:`SourceReadError`."""
        try:
            data = self.reader()
        except OSError as exc:
            raise SourceReadError(f"Failed to read file {self.name}: {exc}") from exc
        return bytes(data)
