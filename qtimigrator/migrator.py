"""Orchestration of parsing, canonicalization, analysis and transformation.

Every call works on its own document tree; nothing is shared between calls.
Callers are expected to analyze first and stop on a fatal error: ``migrate``
does not repeat the Analyzer's checks.
"""

from typing import Union

from loguru import logger

from qtimigrator.models import qti21 as b
from qtimigrator.models import qti30 as c
from qtimigrator.xmlio.reader import read_document
from qtimigrator.xmlio.writer import write_qti21, write_qti30
from qtimigrator.errors import ValidationError, UnsupportedPathError
from qtimigrator.versions import VersionFamily, resolve_version, is_supported_path
from qtimigrator.analysis.report import AnalysisReport
from qtimigrator.models.canonical import CanonicalDocument
from qtimigrator.analysis.analyzer import Analyzer
from qtimigrator.canonical.canonicalize import canonicalize
from qtimigrator.transform.qti12_to_21 import Qti12To21Transformer
from qtimigrator.transform.qti21_to_30 import Qti21To30Transformer


MigratedDocument = Union[b.Document21, c.Document30]

_TRANSFORMERS = {
    VersionFamily.QTI12: Qti12To21Transformer,
    VersionFamily.QTI21: Qti21To30Transformer,
}


def load_document(content: bytes, version: str) -> CanonicalDocument:
    """Parse ``content`` as a document of ``version`` and canonicalize it.

    Raises:
        UnsupportedVersionError: If ``version`` matches no known family.
        ParsingError: If the bytes are not a readable document of the family.
        ValidationError: If the declared version belongs to another family.
    """
    family = resolve_version(version)
    logger.debug(f"Reading {family.label} document ({len(content)} bytes)")
    return canonicalize(read_document(content, family), family)


def migrate(document: CanonicalDocument, from_version: str, to_version: str) -> MigratedDocument:
    """Transform a canonical document into the next schema generation.

    Raises:
        UnsupportedPathError: If the pair has no implemented rule set.
        ValidationError: If ``document`` is not of the ``from_version`` family.
    """
    source, target = resolve_version(from_version), resolve_version(to_version)
    if not is_supported_path(source, target):
        raise UnsupportedPathError(from_version.strip(), to_version.strip())
    if document.family is not source:
        raise ValidationError(
            f"document is {document.family.label}, expected {source.label}",
            details=f"declared version {document.version!r}",
        )
    logger.info(f"Migrating {source.label} -> {target.label}")
    return _TRANSFORMERS[source]().transform(document)


def serialize(document: MigratedDocument) -> bytes:
    if isinstance(document, c.Document30):
        return write_qti30(document)
    return write_qti21(document)


def migrate_content(content: bytes, from_version: str, to_version: str) -> bytes:
    """Parse, migrate and serialize in one step."""
    # Unsupported pairs fail before parsing.
    source, target = resolve_version(from_version), resolve_version(to_version)
    if not is_supported_path(source, target):
        raise UnsupportedPathError(from_version.strip(), to_version.strip())
    document = load_document(content, from_version)
    return serialize(migrate(document, from_version, to_version))


def analyze(document: CanonicalDocument, from_version: str, to_version: str, verbosity: int = 1) -> AnalysisReport:
    return Analyzer(verbosity).analyze(document, from_version, to_version)


def analyze_content(content: bytes, from_version: str, to_version: str, verbosity: int = 1) -> AnalysisReport:
    return analyze(load_document(content, from_version), from_version, to_version, verbosity)
