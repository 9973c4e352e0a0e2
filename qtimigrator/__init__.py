"""qti-migrator: migrate IMS QTI documents between schema generations."""

__version__ = "0.1.0"

from qtimigrator.errors import (  # noqa: E402
    QTIError,
    ErrorType,
    ParsingError,
    MigrationError,
    ValidationError,
    InputOutputError,
    UnsupportedError,
    UnsupportedPathError,
    UnsupportedVersionError,
)
from qtimigrator.migrator import (  # noqa: E402
    analyze,
    migrate,
    serialize,
    load_document,
    analyze_content,
    migrate_content,
)
from qtimigrator.versions import VersionFamily, resolve_version  # noqa: E402
from qtimigrator.analysis.report import AnalysisReport  # noqa: E402


__all__ = [
    "__version__",
    "QTIError",
    "ErrorType",
    "ParsingError",
    "MigrationError",
    "ValidationError",
    "InputOutputError",
    "UnsupportedError",
    "UnsupportedPathError",
    "UnsupportedVersionError",
    "analyze",
    "migrate",
    "serialize",
    "load_document",
    "analyze_content",
    "migrate_content",
    "VersionFamily",
    "resolve_version",
    "AnalysisReport",
]
