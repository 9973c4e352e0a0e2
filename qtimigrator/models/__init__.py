from .qti12 import Document12
from .qti21 import Document21
from .qti30 import Document30
from .common import Material, Metadata, QTIModel
from .canonical import CanonicalItem, CanonicalDocument


__all__ = [
    "CanonicalDocument",
    "CanonicalItem",
    "Document12",
    "Document21",
    "Document30",
    "Material",
    "Metadata",
    "QTIModel",
]
