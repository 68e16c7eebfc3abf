# AGVAULT COMMAND LINE ->

import argparse
import pathlib
import sys
import typing

import colorama

from .batch import BatchOrchestrator, FailurePolicy, ItemStatus
from .container import peek_header
from .errors import AgVaultError, BatchError, FormatError, ValidationError
from .naming import encrypted_name, format_file_size, numbered_name, original_name, sanitize_filename
from .password import evaluate_password
from .pipeline import decrypt_file
from .presentation import describe_decrypt_failure
from .progress import ProgressReporter
from .sources import SourceFile, normalize_path
from .version import __version__


class _BatchProgressView:
    """Projects batch callbacks onto a :class:`ProgressReporter`."""

    def __init__(self, orchestrator: BatchOrchestrator, total: int, stream=None):
        self._orchestrator = orchestrator
        self._reporter = ProgressReporter(total, stream=stream)
        self._finalized: typing.Set[int] = set()
        self._previous: typing.Optional[int] = None

    def _label(self, index: int) -> str:
        return self._orchestrator.items[index].source.name

    def _finalize(self, index: int) -> None:
        if index in self._finalized:
            return
        self._finalized.add(index)
        failed = self._orchestrator.items[index].status is ItemStatus.FAILED
        self._reporter.finalize_file(index, self._label(index), failed=failed)

    def on_file_progress(self, index: int, total: int, percent: float) -> None:
        if self._previous is not None and self._previous != index:
            self._finalize(self._previous)
        self._previous = index
        if percent >= 100:
            self._finalize(index)
        else:
            self._reporter.update(index, percent, "encrypting", self._label(index))

    def close(self) -> None:
        for item in self._orchestrator.items:
            if item.status is not ItemStatus.PENDING:
                self._finalize(item.index)
        self._reporter.reset_terminal_state()


def _output_dir_for(args, sources: typing.List[str], group_name: str) -> typing.Optional[pathlib.Path]:
    base = normalize_path(args.out_dir) if args.out_dir else None
    if len(sources) == 1:
        return base
    root = base or normalize_path(sources[0]).parent
    return root / group_name


def _restored_name(stored: str, source: SourceFile) -> str:
    name = sanitize_filename(pathlib.PurePath(stored).name)
    if name in ("", ".", "..") or source.path.parent / name == source.path:
        return original_name(source.name)
    return name


def _unique_target(target_dir: pathlib.Path, filename: str, taken: typing.Set[pathlib.Path]) -> pathlib.Path:
    """Pick ``filename`` in ``target_dir``, numbering it when an earlier file of this run took it."""
    candidate = target_dir / filename
    counter = 1
    while candidate in taken:
        candidate = target_dir / encrypted_name(numbered_name(original_name(filename), counter))
        counter += 1
    taken.add(candidate)
    return candidate


def _cmd_encrypt(args) -> int:
    policy = FailurePolicy.STRICT if args.strict else FailurePolicy.SKIP
    orchestrator = BatchOrchestrator(policy=policy)
    view = None if args.silent else _BatchProgressView(orchestrator, len(args.paths))
    try:
        result = orchestrator.encrypt_batch(
            args.paths,
            args.password or "",
            args.group,
            on_file_progress=view.on_file_progress if view else None,
        )
    except ValidationError as exc:
        print(f"Encryption failed: {exc}")
        return 1
    except BatchError as exc:
        if view:
            view.close()
        for item in exc.items:
            status = "FAIL!" if item.status is ItemStatus.FAILED else "SKIPPED"
            reason = f" {item.error}" if item.error else ""
            print(f"{args.paths[item.index]}: {status}{reason}")
        print(f"Encryption failed: {exc}")
        return 1
    if view:
        view.close()

    out_dir = _output_dir_for(args, args.paths, result.group_name)
    failures = 0
    taken: typing.Set[pathlib.Path] = set()
    for item in result.items:
        raw_path = args.paths[item.index]
        if item.status is not ItemStatus.DONE or item.output is None:
            failures += 1
            print(f"{raw_path}: FAIL! {item.error}")
            continue
        target_dir = out_dir or normalize_path(raw_path).parent
        out_path = _unique_target(target_dir, item.output.filename, taken)
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            out_path.write_bytes(item.output.data)
        except OSError as exc:
            failures += 1
            print(f"{raw_path}: FAIL! {exc}")
            continue
        print(f"{raw_path}: SUCCESS! -> {out_path}")
    return 0 if failures == 0 else 1


def _cmd_decrypt(args) -> int:
    try:
        source = SourceFile.from_path(args.path)
    except FileNotFoundError as exc:
        print(f"Decryption failed: {exc}")
        return 1
    reporter = None if args.silent else ProgressReporter(1)
    progress = (lambda pct: reporter.update(0, pct, "decrypting", source.name)) if reporter else None
    try:
        result = decrypt_file(source, args.password or "", progress=progress)
    except AgVaultError as exc:
        if reporter:
            reporter.finalize_file(0, source.name, failed=True)
        print(describe_decrypt_failure(exc))
        return 1
    if reporter:
        reporter.finalize_file(0, source.name)
    if args.out:
        out_path = normalize_path(args.out)
    else:
        out_path = source.path.parent / _restored_name(result.filename, source)
    try:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_bytes(result.data)
    except OSError as exc:
        print(f"Decryption failed: {exc}")
        return 1
    print(f"{args.path}: SUCCESS! -> {out_path} ({result.mime_type})")
    return 0


def _cmd_inspect(args) -> int:
    path = normalize_path(args.path)
    if not path.is_file():
        print(f"Input file not found: {path}")
        return 1
    try:
        header = peek_header(path.read_bytes())
    except FormatError as exc:
        print(f"{args.path}: {exc}")
        return 1
    print(f"version:   {header.version}")
    print(f"filename:  {header.original_filename}")
    print(f"mime type: {header.original_mime_type}")
    print(f"salt:      {header.salt_length} bytes")
    print(f"iv:        {header.iv_length} bytes")
    print(f"content:   {format_file_size(header.content_length)}")
    return 0


def _cmd_password(args) -> int:
    policy = evaluate_password(args.password)
    print(f"strength: {policy.strength}")
    for message in policy.errors:
        print(f"- {message}")
    return 0 if policy.is_valid else 1


def cli(argv=None) -> int:
    colorama.just_fix_windows_console()
    parser = argparse.ArgumentParser(prog="agvault", description="Password protected file containers")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    encrypt = subparsers.add_parser("encrypt", help="Encrypt one or more files into .ag containers")
    encrypt.add_argument("paths", nargs="+", help="One or more file paths")
    encrypt.add_argument("-p", "--password", default="", help="Password (at least 8 characters)")
    encrypt.add_argument(
        "--group",
        default=None,
        help="Folder name for a multi-file batch (default: encrypted_files)"
    )
    encrypt.add_argument("--out-dir", default=None, help="Directory to write containers into")
    encrypt.add_argument(
        "--strict",
        action="store_true",
        help="Fail the whole batch if any file is rejected"
    )
    encrypt.add_argument("--silent", action="store_true", help="Hide progress bars")

    decrypt = subparsers.add_parser("decrypt", help="Decrypt a .ag container")
    decrypt.add_argument("path", help="Container path")
    decrypt.add_argument("-p", "--password", default="", help="Password used at encryption")
    decrypt.add_argument("-o", "--out", default=None, help="Output file (default: original name)")
    decrypt.add_argument("--silent", action="store_true", help="Hide progress bars")

    inspect = subparsers.add_parser("inspect", help="Show container metadata without decrypting")
    inspect.add_argument("path", help="Container path")

    password = subparsers.add_parser("password", help="Rate a password")
    password.add_argument("password", help="Password to rate")

    args = parser.parse_args(argv)
    handlers = {
        "encrypt": _cmd_encrypt,
        "decrypt": _cmd_decrypt,
        "inspect": _cmd_inspect,
        "password": _cmd_password,
    }
    return handlers[args.command](args)


def main(argv=None) -> int:
    return cli(argv)


if __name__ == "__main__":
    sys.exit(main())
