# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Exception hierarchy for costexplorer.

Every error the engine raises on purpose derives from ExplorationError, so
callers can separate exploration failures from unrelated bugs. All of these
are fatal: the engine never catches them itself. Oracle timeouts are not
errors and never show up here.
"""


class ExplorationError(Exception):
    """Base exception for all exploration failures."""

    pass


class ConfigurationError(ExplorationError):
    """Invalid setup detected before the first query.

    Raised for a missing or unusable output directory, inverted bounds,
    a dimension count the algorithm cannot handle, a solver lacking a
    required capability, or settings that fail validation.
    """

    pass


class DimensionError(ExplorationError, IndexError):
    """A dimension index outside ``range(dimensions)`` was requested."""

    def __init__(self, dimension: int, dimensions: int):
        self.dimension = dimension
        self.dimensions = dimensions
        super().__init__(
            f"Undefined constraint dimension {dimension} "
            f"(exploration has {dimensions} dimension(s))"
        )


class OracleResultError(ExplorationError):
    """The oracle returned something the engine cannot interpret."""

    pass


class KneeInvariantError(ExplorationError):
    """A knee node's generator no longer equals the meet of its witnesses."""

    pass


class LogParseError(ExplorationError):
    """A resumption log line does not match the log grammar."""

    def __init__(self, message: str, file_name: str | None = None, line_number: int | None = None):
        self.file_name = file_name
        self.line_number = line_number
        location = ""
        if file_name is not None:
            location = f"{file_name}"
            if line_number is not None:
                location += f":{line_number}"
            location += ": "
        super().__init__(f"{location}{message}")
