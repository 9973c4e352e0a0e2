"""Error taxonomy for QTI migration.

Every failure raised by the package is a ``QTIError`` carrying an ``ErrorType``,
a human-readable message and, where known, the item identifier and element
path that localize it inside a large document.
"""

from __future__ import annotations
from enum import Enum
from typing import List, Optional


class ErrorType(str, Enum):
    """Categories of migration failures."""

    PARSING = "parsing"
    VALIDATION = "validation"
    MIGRATION = "migration"
    IO = "io"
    UNSUPPORTED = "unsupported"


_TYPE_LABELS = {
    ErrorType.PARSING: "Parsing Error",
    ErrorType.VALIDATION: "Validation Error",
    ErrorType.MIGRATION: "Migration Error",
    ErrorType.IO: "I/O Error",
    ErrorType.UNSUPPORTED: "Unsupported Feature",
}


class QTIError(Exception):
    """Base class for all migration errors."""

    error_type: ErrorType = ErrorType.MIGRATION

    def __init__(
        self,
        message: str,
        *,
        details: str = "",
        item_id: str = "",
        element_path: str = "",
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.item_id = item_id
        self.element_path = element_path
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def type_label(self) -> str:
        return _TYPE_LABELS.get(self.error_type, "Unknown Error")

    def __str__(self) -> str:
        if self.item_id:
            return f"[{self.item_id}] {self.type_label}: {self.message}"
        return f"{self.type_label}: {self.message}"


class ParsingError(QTIError):
    """Raised when input bytes are not a well-formed document of the expected shape."""

    error_type = ErrorType.PARSING


class ValidationError(QTIError):
    """Raised when a well-formed document is semantically invalid."""

    error_type = ErrorType.VALIDATION


class MigrationError(QTIError):
    """Raised when the transformation step itself fails."""

    error_type = ErrorType.MIGRATION


class InputOutputError(QTIError):
    """Raised on stream or file access failures."""

    error_type = ErrorType.IO


class UnsupportedError(QTIError):
    """Raised for versions or version pairs that are not implemented."""

    error_type = ErrorType.UNSUPPORTED


class UnsupportedVersionError(UnsupportedError):
    """Raised when a version string matches no known QTI family."""

    def __init__(self, version: str):
        super().__init__(
            f"unsupported QTI version: {version!r}",
            details="Supported versions: 1.2, 2.1, 2.2, 3.0",
        )
        self.version = version


class UnsupportedPathError(UnsupportedError):
    """Raised when no transformation rule set exists for a version pair."""

    def __init__(self, from_version: str, to_version: str):
        super().__init__(
            f"unsupported migration path: {from_version} to {to_version}",
            details="Implemented paths: 1.2 -> 2.1, 2.1 -> 3.0",
        )
        self.from_version = from_version
        self.to_version = to_version


class ErrorList:
    """Accumulates errors so that a check can report all problems at once."""

    def __init__(self) -> None:
        self.errors: List[QTIError] = []

    def add(self, error: QTIError) -> None:
        self.errors.append(error)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def by_type(self, error_type: ErrorType) -> List[QTIError]:
        return [e for e in self.errors if e.error_type == error_type]

    def __len__(self) -> int:
        return len(self.errors)

    def __str__(self) -> str:
        if not self.errors:
            return "no errors"
        if len(self.errors) == 1:
            return str(self.errors[0])
        return f"{len(self.errors)} errors occurred during processing"
