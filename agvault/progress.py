"""Two-bar terminal progress display used by the command line interface."""

from __future__ import annotations

import os
import shutil
import sys
import time
from typing import Dict, Optional

import colorama

from . import config


class ProgressReporter:
    """Overall bar plus current-file bar, redrawn in place on ANSI terminals.

    Plugs into the batch callbacks: ``update`` takes a file index and a 0-100
    percentage, ``finalize_file`` marks a file done or failed.
    """

    def __init__(self, total_files: int, stream=None, min_interval: float = 0.1):
        self.total_files = max(total_files, 1)
        self.stream = stream or sys.stdout
        self._printed = False
        self._min_interval = max(0.0, float(min_interval))
        self._is_tty = bool(getattr(self.stream, "isatty", lambda: False)())
        self._last_render = 0.0
        self._last_fraction: Dict[int, float] = {}
        try:
            self._term_width = shutil.get_terminal_size().columns
        except (OSError, ValueError):
            self._term_width = 80
        self._green = colorama.Fore.GREEN
        self._red = colorama.Fore.RED
        self._reset = colorama.Fore.RESET
        term = os.getenv("TERM")
        self._supports_ansi = self._is_tty and (
            os.name != "nt"
            or os.getenv("WT_SESSION")
            or os.getenv("ANSICON")
            or (term and term != "dumb")
        )

    def reset_terminal_state(self) -> None:
        if self._printed:
            self.stream.write("\n")
            self.stream.flush()
        self._printed = False

    def _render_bar(self, fraction: float, width: Optional[int] = None) -> str:
        width = width or config.PROGRESS_BAR_WIDTH
        fraction = max(0.0, min(1.0, fraction))
        filled = int(fraction * width)
        if filled >= width:
            return f"({self._green}{'❚' * width}{self._reset})"
        return f"({'❚' * filled}{'·' * (width - filled)})"

    def _write(self, line1: str, line2: str, force: bool = False) -> None:
        now = time.monotonic()
        if not force and self._printed and (now - self._last_render) < self._min_interval:
            return
        line1 = line1[: self._term_width]
        if len(line2) > self._term_width and "[" in line2:
            # Keep the bracketed filename whole and trim the text before it.
            prefix, _, rest = line2.partition("[")
            label = "[" + rest
            room = max(10, self._term_width - len(label) - 1)
            line2 = (prefix[:room] + label)[: self._term_width]
        else:
            line2 = line2[: self._term_width]

        if self._supports_ansi:
            if self._printed:
                self.stream.write("\x1b[1A\r")
            else:
                self.stream.write("\r\x1b[2K")
            self.stream.write("\r\x1b[2K" + line1 + "\n")
            self.stream.write("\r\x1b[2K" + line2)
            self.stream.flush()
        elif not self._printed or force:
            self.stream.write(line1 + "\n")
            self.stream.write(line2 + "\n")
            self.stream.flush()

        self._printed = True
        self._last_render = now

    def _overall(self) -> float:
        return sum(self._last_fraction.values()) / self.total_files

    def update(self, file_index: int, percent: float, phase: str = "encrypting", label: str = "") -> None:
        fraction = max(0.0, min(1.0, float(percent) / 100.0))
        self._last_fraction[file_index] = max(self._last_fraction.get(file_index, 0.0), fraction)
        overall_fraction = self._overall()
        completed = sum(1 for frac in self._last_fraction.values() if frac >= 1.0)
        if self.total_files == 1:
            status_text = f"{phase} {label}".strip() if fraction < 1.0 else "complete"
        else:
            status_text = f"{completed}/{self.total_files} files"
        label_text = f" [{label}]" if label else ""
        line1 = f"Overall {self._render_bar(overall_fraction)} {overall_fraction * 100:3.0f}% {status_text}"
        line2 = f"File    {self._render_bar(fraction)} {fraction * 100:3.0f}% phase: {phase}{label_text}"
        self._write(line1.replace("\n", " "), line2.replace("\n", " "))

    def finalize_file(self, file_index: int, label: str = "", *, failed: bool = False) -> None:
        self._last_fraction[file_index] = 1.0
        overall_fraction = self._overall()
        done = sum(1 for frac in self._last_fraction.values() if frac >= 1.0)
        label_text = f" [{label}]" if label else ""
        if failed:
            indicator = f" {self._red}✗{self._reset}"
            phase = "failed"
        else:
            indicator = f" {self._green}✓{self._reset}"
            phase = "done"
        line1 = f"Overall {self._render_bar(overall_fraction)} {overall_fraction * 100:3.0f}% {done}/{self.total_files} files"
        line2 = f"File    {self._render_bar(1.0)} 100% phase: {phase}{label_text}{indicator}"
        self._write(line1, line2, force=True)
        self.stream.write("\n")
        self.stream.flush()
        self._printed = False
