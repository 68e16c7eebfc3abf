"""Ordered collection of candidate files awaiting encryption."""

from __future__ import annotations

import pathlib
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Union

from . import config
from .naming import format_gigabytes
from .sources import SourceFile


def validate_source(source: SourceFile, max_bytes: Optional[int] = None) -> Optional[str]:
    """Return a user facing rejection message, or ``None`` when ``source`` is acceptable."""
    limit = max_bytes or config.MAX_INPUT_BYTES
    if source.size > limit:
        return (
            f'File "{source.name}" ({format_gigabytes(source.size)}) '
            f"exceeds the {format_gigabytes(limit)} limit"
        )
    if source.size == 0:
        return f'File "{source.name}" is empty and cannot be encrypted'
    return None


@dataclass(frozen=True)
class AddResult:
    accepted: List[SourceFile] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return bool(self.accepted) or not self.errors


class InputSet:
    """Candidate files in the order they will be encrypted.

    ``reorder`` ignores an out-of-range source index and clamps the target.
    """

    def __init__(self, max_bytes: Optional[int] = None):
        self.max_bytes = max_bytes
        self._files: List[SourceFile] = []
        self.error: Optional[str] = None

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[SourceFile]:
        return iter(list(self._files))

    def __getitem__(self, index: int) -> SourceFile:
        return self._files[index]

    @property
    def files(self) -> List[SourceFile]:
        return list(self._files)

    def add(self, candidates: Iterable[Union[SourceFile, str, pathlib.Path]]) -> AddResult:
        if isinstance(candidates, (str, bytes, pathlib.PurePath, SourceFile)):
            raise TypeError("add expects an iterable of files, not a single file")
        accepted: List[SourceFile] = []
        errors: List[str] = []
        for candidate in candidates:
            if isinstance(candidate, SourceFile):
                source = candidate
            else:
                try:
                    source = SourceFile.from_path(candidate)
                except FileNotFoundError as exc:
                    errors.append(str(exc))
                    continue
            message = validate_source(source, self.max_bytes)
            if message:
                errors.append(message)
            else:
                accepted.append(source)

        result = AddResult(accepted=accepted, errors=errors)
        if not accepted and errors:
            self.error = "; ".join(errors)
            return result
        self._files.extend(accepted)
        self.error = "; ".join(errors) if errors else None
        return result

    def remove(self, index: int) -> None:
        self._files = [f for i, f in enumerate(self._files) if i != index]

    def reorder(self, from_index: int, to_index: int) -> None:
        """Move one file; an out-of-range ``from_index`` leaves the order untouched."""
        if not 0 <= from_index < len(self._files):
            return
        files = list(self._files)
        moved = files.pop(from_index)
        files.insert(to_index, moved)
        self._files = files

    def remove_all(self) -> None:
        self._files = []
        self.error = None

    def clear(self) -> None:
        self.remove_all()

    def clear_error(self) -> None:
        self.error = None
