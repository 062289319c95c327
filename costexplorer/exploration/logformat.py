# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Line grammar of the exploration logs.

The logs are the only state an exploration persists and the format a run is
resumed from, so writing and reading live side by side here.

Point line (explored, SAT, UNSAT and timed-out logs)::

    Latency : 42 Processors : 3  Result : SAT Time : 0.012345 seconds

Pareto line (no result part)::

    Latency : 42 Processors : 3

Model line (follows each point line in the model log)::

    {x_0=1, x_1=7}

A backslash escapes ``,``, ``=`` and itself inside model keys and values,
and ``\\n`` stands for a newline. Surrounding whitespace is not kept.

Values are integers; a Pareto value may also be ``inf`` when a
one-dimensional search found no SAT point.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence

from costexplorer.exceptions import LogParseError
from costexplorer.exploration.types import SatResult

_VALUE = r"-?\d+|inf"
_TIME_FORMAT = "{:.6f}"


@dataclass(frozen=True)
class PointRecord:
    """One parsed point line.

    Attributes:
        values: One cost per dimension (ints, or inf)
        result: Oracle tag, absent on Pareto lines
        seconds: Query time, absent on Pareto lines
    """

    values: tuple[float, ...]
    result: Optional[SatResult] = None
    seconds: Optional[float] = None

    def int_values(self) -> tuple[int, ...]:
        return tuple(int(v) for v in self.values)


@dataclass(frozen=True)
class ModelRecord:
    """A SAT point line with the model dumped after it."""

    point: PointRecord
    model: dict[str, str]


def _format_value(value: float) -> str:
    if isinstance(value, float) and math.isinf(value):
        return "inf"
    return str(int(value))


def _parse_value(token: str) -> float:
    return math.inf if token == "inf" else int(token)


_MODEL_ESCAPES = {"\\": "\\\\", ",": "\\,", "=": "\\=", "\n": "\\n"}


def _escape_model_text(text: str) -> str:
    return "".join(_MODEL_ESCAPES.get(c, c) for c in text)


def _unescape_model_text(text: str) -> str:
    chars = []
    i = 0
    while i < len(text):
        if text[i] == "\\" and i + 1 < len(text):
            escaped = text[i + 1]
            chars.append("\n" if escaped == "n" else escaped)
            i += 2
        else:
            chars.append(text[i])
            i += 1
    return "".join(chars)


def _split_unescaped(text: str, separator: str) -> list[str]:
    """Split on ``separator`` where it is not preceded by a backslash escape."""
    parts = []
    current = []
    i = 0
    while i < len(text):
        if text[i] == "\\" and i + 1 < len(text):
            current.append(text[i:i + 2])
            i += 2
            continue
        if text[i] == separator:
            parts.append("".join(current))
            current = []
        else:
            current.append(text[i])
        i += 1
    parts.append("".join(current))
    return parts


class LogGrammar:
    """Formats and parses log lines for a fixed list of dimension names."""

    def __init__(self, names: Sequence[str]):
        if not names:
            raise ValueError("LogGrammar needs at least one dimension name")
        self.names = tuple(names)

        point = r"\s+".join(
            rf"{re.escape(name)} : (?P<v{i}>{_VALUE})" for i, name in enumerate(self.names)
        )
        self._point_re = re.compile(
            rf"^\s*{point}\s*"
            rf"(?:Result : (?P<result>[A-Z]+)\s+Time : (?P<seconds>\d+(?:\.\d+)?) seconds)?\s*$"
        )

    # Writing

    def format_values(self, values: Sequence[float]) -> str:
        """``"<Name> : <value> "`` for every dimension."""
        if len(values) != len(self.names):
            raise ValueError(f"Expected {len(self.names)} values, got {len(values)}")
        return "".join(f"{name} : {_format_value(v)} " for name, v in zip(self.names, values))

    def format_point(self, values: Sequence[float], result: SatResult, seconds: float) -> str:
        return (
            f"{self.format_values(values)} Result : {result} "
            f"Time : {_TIME_FORMAT.format(seconds)} seconds"
        )

    def format_pareto(self, values: Sequence[float]) -> str:
        return self.format_values(values)

    @staticmethod
    def format_model(model: Mapping[str, str]) -> str:
        return "{" + ", ".join(
            f"{_escape_model_text(str(key))}={_escape_model_text(str(value))}"
            for key, value in model.items()
        ) + "}"

    # Reading

    def parse_point(
        self, line: str, file_name: str | None = None, line_number: int | None = None
    ) -> PointRecord:
        match = self._point_re.match(line)
        if match is None:
            raise LogParseError(f"Malformed point line: {line.strip()!r}", file_name, line_number)

        values = tuple(_parse_value(match.group(f"v{i}")) for i in range(len(self.names)))

        result = None
        seconds = None
        if match.group("result") is not None:
            try:
                result = SatResult(match.group("result"))
            except ValueError:
                raise LogParseError(
                    f"Unknown result tag {match.group('result')!r}", file_name, line_number
                ) from None
            seconds = float(match.group("seconds"))

        return PointRecord(values, result, seconds)

    @staticmethod
    def parse_model(
        line: str, file_name: str | None = None, line_number: int | None = None
    ) -> dict[str, str]:
        text = line.strip()
        if not (text.startswith("{") and text.endswith("}")):
            raise LogParseError(f"Malformed model line: {text!r}", file_name, line_number)

        body = text[1:-1].strip()
        model: dict[str, str] = {}
        if not body:
            return model

        for entry in _split_unescaped(body, ","):
            key, *rest = _split_unescaped(entry, "=")
            if not rest or not key.strip():
                raise LogParseError(f"Malformed model entry: {entry.strip()!r}", file_name, line_number)
            value = "=".join(rest)
            model[_unescape_model_text(key.strip())] = _unescape_model_text(value.strip())
        return model

    def parse_points(self, lines: Iterable[str], file_name: str | None = None) -> list[PointRecord]:
        """Parse every non-blank line as a point line."""
        return [
            self.parse_point(line, file_name, number)
            for number, line in enumerate(lines, start=1)
            if line.strip()
        ]

    def parse_models(self, lines: Iterable[str], file_name: str | None = None) -> list[ModelRecord]:
        """Parse alternating point and model lines."""
        records = []
        pending: Optional[PointRecord] = None

        for number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            if pending is None:
                pending = self.parse_point(line, file_name, number)
            else:
                records.append(ModelRecord(pending, self.parse_model(line, file_name, number)))
                pending = None

        if pending is not None:
            raise LogParseError("Point line without a model line", file_name)
        return records
