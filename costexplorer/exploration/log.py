# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Append-only exploration log files.

An exploration writes six text files into its output directory:

- explored: every query, whatever the answer
- sat: realized costs of SAT answers
- models: SAT lines, each followed by the model
- unsat: UNSAT query bounds
- timed_out: TIMEOUT/UNKNOWN query bounds
- pareto: the final best point(s)

Every record is flushed as soon as it is written. A failed write is logged
and dropped; the exploration goes on.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import IO, Mapping, Optional, Sequence

from costexplorer.exceptions import LogParseError
from costexplorer.exploration.logformat import LogGrammar, ModelRecord, PointRecord
from costexplorer.exploration.types import SatResult
from costexplorer.settings.schema import LogFileNames

logger = logging.getLogger(__name__)


class LogKind(Enum):
    EXPLORED = "explored"
    SAT = "sat"
    MODELS = "models"
    UNSAT = "unsat"
    TIMED_OUT = "timed_out"
    PARETO = "pareto"


class ExplorationLog:
    """Owner of the log file handles of one exploration.

    Files are opened lazily by open(), never in the constructor, so creating
    an engine does not clobber the logs of a run that is about to be resumed.
    """

    def __init__(
        self,
        output_dir: Path,
        names: Sequence[str],
        file_names: Optional[LogFileNames] = None,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.grammar = LogGrammar(names)
        self.file_names = file_names or LogFileNames()
        self._handles: dict[LogKind, IO[str]] = {}

    @property
    def is_open(self) -> bool:
        return bool(self._handles)

    def path(self, kind: LogKind, directory: Optional[Path] = None) -> Path:
        base = Path(directory) if directory is not None else self.output_dir
        return base / getattr(self.file_names, kind.value)

    def open(self, append: bool = False) -> None:
        """Open all log files, truncating them unless ``append`` is set.

        The Pareto log is always truncated: it holds the final frontier of
        the latest run only.

        Failures are reported and leave the affected files closed; writes to
        them are then dropped.
        """
        if self.is_open:
            return

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Unable to create output directory {self.output_dir}: {e}")
            return

        mode = "a" if append else "w"
        for kind in LogKind:
            kind_mode = "w" if kind is LogKind.PARETO else mode
            try:
                self._handles[kind] = open(self.path(kind), kind_mode, encoding="utf-8")
            except OSError as e:
                logger.error(f"Unable to open {self.path(kind)} for output: {e}")

        logger.debug(f"Opened exploration logs in {self.output_dir} (mode={mode})")

    def close(self) -> None:
        """Flush and close every open handle. Safe to call repeatedly."""
        handles, self._handles = self._handles, {}
        for kind, handle in handles.items():
            try:
                handle.flush()
                handle.close()
            except OSError as e:
                logger.error(f"Error closing {self.path(kind)}: {e}")

    def write(self, kind: LogKind, text: str) -> bool:
        """Append ``text`` plus a newline to one log and flush it.

        Returns:
            True if the record reached the file
        """
        handle = self._handles.get(kind)
        if handle is None:
            logger.error(f"Log file {self.path(kind)} is not open; record lost")
            return False
        try:
            handle.write(text + "\n")
            handle.flush()
        except OSError as e:
            logger.error(f"Error writing {self.path(kind)}: {e}")
            return False
        return True

    # Record helpers

    def record_explored(self, values: Sequence[float], result: SatResult, seconds: float) -> None:
        self.write(LogKind.EXPLORED, self.grammar.format_point(values, result, seconds))

    def record_sat(
        self, costs: Sequence[int], model: Mapping[str, str], seconds: float
    ) -> None:
        line = self.grammar.format_point(costs, SatResult.SAT, seconds)
        self.write(LogKind.SAT, line)
        self.write(LogKind.MODELS, line + "\n" + self.grammar.format_model(model))

    def record_unsat(self, values: Sequence[float], result: SatResult, seconds: float) -> None:
        self.write(LogKind.UNSAT, self.grammar.format_point(values, result, seconds))

    def record_timed_out(self, values: Sequence[float], result: SatResult, seconds: float) -> None:
        self.write(LogKind.TIMED_OUT, self.grammar.format_point(values, result, seconds))

    def record_pareto(self, points: Sequence[Sequence[float]]) -> None:
        for values in points:
            self.write(LogKind.PARETO, self.grammar.format_pareto(values))

    # Reading back

    def _read_lines(self, kind: LogKind, directory: Optional[Path]) -> Optional[list[str]]:
        path = self.path(kind, directory)
        try:
            with open(path, encoding="utf-8") as f:
                text = f.read()
        except FileNotFoundError:
            logger.warning(f"Log file {path} not found; treating it as empty")
            return None

        lines = text.splitlines()
        # A record cut short by a crash has no trailing newline; drop it
        if lines and not text.endswith("\n"):
            logger.warning(f"Ignoring incomplete last line of {path}: {lines[-1]!r}")
            lines = lines[:-1]
        return lines

    def read_points(self, kind: LogKind, directory: Optional[Path] = None) -> list[PointRecord]:
        """Parse one point log.

        Raises:
            LogParseError: If a complete line does not match the grammar
        """
        if kind == LogKind.MODELS:
            raise ValueError("Use read_models() for the model log")
        lines = self._read_lines(kind, directory)
        if lines is None:
            return []
        return self.grammar.parse_points(lines, str(self.path(kind, directory)))

    def read_models(self, directory: Optional[Path] = None) -> list[ModelRecord]:
        """Parse the model log into (SAT line, model) records.

        Raises:
            LogParseError: If the file does not alternate point and model lines
        """
        lines = self._read_lines(LogKind.MODELS, directory)
        if lines is None:
            return []
        try:
            return self.grammar.parse_models(lines, str(self.path(LogKind.MODELS, directory)))
        except LogParseError:
            logger.error(f"Model log {self.path(LogKind.MODELS, directory)} is corrupt")
            raise
