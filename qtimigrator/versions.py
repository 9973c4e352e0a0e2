"""Version resolution for the supported QTI schema families."""

from enum import Enum
from typing import Tuple

from qtimigrator.errors import UnsupportedVersionError


class VersionFamily(str, Enum):
    """A schema generation; the value is the family's canonical version string."""

    QTI12 = "1.2"
    QTI21 = "2.1"
    QTI30 = "3.0"

    @property
    def label(self) -> str:
        return f"QTI {self.value}"


# Order matters only for readability; prefixes do not overlap.
_FAMILY_PREFIXES: Tuple[Tuple[str, VersionFamily], ...] = (
    ("1.2", VersionFamily.QTI12),
    ("2.1", VersionFamily.QTI21),
    ("2.2", VersionFamily.QTI21),
    ("3.0", VersionFamily.QTI30),
)


def resolve_version(version: str) -> VersionFamily:
    """Map a free-form version string to its schema family.

    Matching is by prefix after trimming whitespace, so patch releases
    ("1.2.1", "2.2.3") resolve to their family.

    Raises:
        UnsupportedVersionError: If the string matches no known family.
    """
    cleaned = (version or "").strip()
    if cleaned:
        for prefix, family in _FAMILY_PREFIXES:
            if cleaned.startswith(prefix):
                return family
    raise UnsupportedVersionError(version)


def is_family_member(version: str, family: VersionFamily) -> bool:
    """Return True when ``version`` resolves to ``family``."""
    try:
        return resolve_version(version) is family
    except UnsupportedVersionError:
        return False


# Adjacent families with an implemented rule set.
MIGRATION_PATHS: Tuple[Tuple[VersionFamily, VersionFamily], ...] = (
    (VersionFamily.QTI12, VersionFamily.QTI21),
    (VersionFamily.QTI21, VersionFamily.QTI30),
)


def is_supported_path(source: VersionFamily, target: VersionFamily) -> bool:
    return (source, target) in MIGRATION_PATHS
