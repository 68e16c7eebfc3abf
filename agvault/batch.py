"""Multi-file encryption runs.

A run walks the files strictly in order, one at a time, under a single
password. Each file gets a :class:`BatchItem` that records its status,
last known progress and, when it failed, why. Whether a failing file is
skipped or aborts the whole run is the :class:`FailurePolicy` of the
orchestrator.
"""

from __future__ import annotations

import enum
import pathlib
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Union

from . import config
from .errors import (
    AgVaultError,
    BatchError,
    ErrorKind,
    SourceReadError,
    ValidationError,
    error_kind,
)
from .kdf import RandomSource
from .naming import sanitize_group_name
from .pipeline import EncryptionResult, encrypt_file, ensure_size_limit
from .sources import SourceFile

BatchProgressCallback = Callable[[float], None]
FileProgressCallback = Callable[[int, int, float], None]


class ItemStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    DONE = "done"
    FAILED = "failed"


class BatchState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class FailurePolicy(str, enum.Enum):
    SKIP = "skip"
    STRICT = "strict"


@dataclass
class BatchItem:
    source: SourceFile
    index: int
    status: ItemStatus = ItemStatus.PENDING
    progress: float = 0.0
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    output: Optional[EncryptionResult] = None

    def _fail(self, exc: BaseException) -> None:
        self.status = ItemStatus.FAILED
        self.error = str(exc)
        self.error_kind = error_kind(exc)


@dataclass(frozen=True)
class BatchResult:
    outputs: List[EncryptionResult]
    group_name: str
    items: List[BatchItem] = field(default_factory=list)

    @property
    def failed(self) -> List[BatchItem]:
        return [item for item in self.items if item.status is ItemStatus.FAILED]


@dataclass(frozen=True)
class BatchStatus:
    state: BatchState
    progress: float
    current_index: int
    total_files: int
    error: Optional[str] = None


def _build_item(index: int, candidate: Union[SourceFile, str, pathlib.Path]) -> BatchItem:
    if isinstance(candidate, SourceFile):
        return BatchItem(source=candidate, index=index)
    try:
        return BatchItem(source=SourceFile.from_path(candidate), index=index)
    except FileNotFoundError as exc:
        placeholder = SourceFile(
            name=pathlib.Path(str(candidate)).name,
            size=0,
            mime_type="",
            reader=bytes,
        )
        item = BatchItem(source=placeholder, index=index)
        item._fail(SourceReadError(str(exc)))
        return item


class BatchOrchestrator:
    """Drives :func:`encrypt_file` over an ordered set of files.

    One orchestrator runs one batch at a time; callers must serialize runs.
    """

    def __init__(
        self,
        *,
        policy: FailurePolicy = FailurePolicy.SKIP,
        max_bytes: Optional[int] = None,
        rng: Optional[RandomSource] = None,
    ):
        self.policy = FailurePolicy(policy)
        self.max_bytes = max_bytes
        self.rng = rng
        self.items: List[BatchItem] = []
        self._state = BatchState.IDLE
        self._progress = 0.0
        self._current_index = 0
        self._error: Optional[str] = None

    def reset(self) -> None:
        self.items = []
        self._state = BatchState.IDLE
        self._progress = 0.0
        self._current_index = 0
        self._error = None

    def status(self) -> BatchStatus:
        return BatchStatus(
            state=self._state,
            progress=self._progress,
            current_index=self._current_index,
            total_files=len(self.items),
            error=self._error,
        )

    def _validate_password(self, password: Union[str, bytes]) -> None:
        if not password:
            raise ValidationError("Files and password are required")
        if len(password) < config.MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {config.MIN_PASSWORD_LENGTH} characters long"
            )

    def _fail_run(self, message: str) -> BatchError:
        self._state = BatchState.FAILED
        self._error = message
        self._progress = 0.0
        return BatchError(message, self.items)

    def _prevalidate(self) -> None:
        for item in self.items:
            if item.status is ItemStatus.FAILED:
                continue
            try:
                ensure_size_limit(item.source, self.max_bytes)
            except ValidationError as exc:
                item._fail(exc)
        rejected = [item for item in self.items if item.status is ItemStatus.FAILED]
        if rejected:
            detail = "; ".join(item.error or "" for item in rejected)
            raise self._fail_run(f"Batch rejected: {detail}")

    def encrypt_batch(
        self,
        files: Iterable[Union[SourceFile, str]],
        password: Union[str, bytes],
        group_name: Optional[str] = None,
        *,
        on_progress: Optional[BatchProgressCallback] = None,
        on_file_progress: Optional[FileProgressCallback] = None,
    ) -> BatchResult:
        """Encrypt ``files`` in order and return the successful outputs.

        Raises :class:`BatchError` when no file succeeds, or, under
        :attr:`FailurePolicy.STRICT`, as soon as any file fails.
        """
        if isinstance(files, (str, bytes, pathlib.PurePath, SourceFile)):
            raise TypeError("encrypt_batch expects an iterable of files, not a single file")
        self.reset()
        candidates = list(files)
        if not candidates:
            raise self._fail_run("Files and password are required")
        try:
            self._validate_password(password)
        except ValidationError as exc:
            self._fail_run(str(exc))
            raise

        self.items = [_build_item(idx, candidate) for idx, candidate in enumerate(candidates)]
        total = len(self.items)
        self._state = BatchState.RUNNING

        def _report(index: int, file_progress: float) -> None:
            overall = ((index * 100) + file_progress) / total
            # Aggregate progress never moves backwards within a run.
            self._progress = max(self._progress, overall)
            self._current_index = index
            self.items[index].progress = max(self.items[index].progress, file_progress)
            if on_file_progress is not None:
                on_file_progress(index, total, file_progress)
            if on_progress is not None:
                on_progress(self._progress)

        if self.policy is FailurePolicy.STRICT:
            self._prevalidate()

        outputs: List[EncryptionResult] = []
        for item in self.items:
            _report(item.index, 0.0)
            if item.status is ItemStatus.FAILED:
                continue
            item.status = ItemStatus.IN_PROGRESS
            try:
                result = encrypt_file(
                    item.source,
                    password,
                    progress=lambda pct, _idx=item.index: _report(_idx, pct),
                    rng=self.rng,
                    max_bytes=self.max_bytes,
                )
            except AgVaultError as exc:
                item._fail(exc)
                if self.policy is FailurePolicy.STRICT:
                    raise self._fail_run(f"{item.source.name}: {exc}") from exc
                continue
            item.status = ItemStatus.DONE
            item.output = result
            outputs.append(result)

        if not outputs:
            raise self._fail_run("No files were successfully encrypted")

        self._state = BatchState.COMPLETED
        self._current_index = total
        self._progress = 100.0
        if on_progress is not None:
            on_progress(self._progress)
        return BatchResult(
            outputs=outputs,
            group_name=sanitize_group_name(group_name),
            items=list(self.items),
        )


def encrypt_batch(
    files: Iterable[Union[SourceFile, str]],
    password: Union[str, bytes],
    group_name: Optional[str] = None,
    *,
    policy: FailurePolicy = FailurePolicy.SKIP,
    on_progress: Optional[BatchProgressCallback] = None,
    on_file_progress: Optional[FileProgressCallback] = None,
    max_bytes: Optional[int] = None,
    rng: Optional[RandomSource] = None,
) -> BatchResult:
    orchestrator = BatchOrchestrator(policy=policy, max_bytes=max_bytes, rng=rng)
    return orchestrator.encrypt_batch(
        files,
        password,
        group_name,
        on_progress=on_progress,
        on_file_progress=on_file_progress,
    )
