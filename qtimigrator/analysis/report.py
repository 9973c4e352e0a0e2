"""Analysis report models produced by the Analyzer."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field, BaseModel


class DetailAction(str, Enum):
    RENAME = "rename"
    TRANSFORM = "transform"
    VALIDATE = "validate"


class MigrationDetail(BaseModel):
    """A predicted, non-blocking change the transformation will make."""

    action: DetailAction
    description: str
    item_id: Optional[str] = None
    element_path: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None


class AnalysisWarning(BaseModel):
    message: str
    suggestion: Optional[str] = None
    item_id: Optional[str] = None
    element_path: Optional[str] = None


class AnalysisError(BaseModel):
    message: str
    fatal: bool = False
    item_id: Optional[str] = None
    element_path: Optional[str] = None


class AnalysisReport(BaseModel):
    source_version: str
    target_version: str
    total_items: int = 0
    compatible_items: int = 0
    incompatible_items: int = 0
    warnings: List[AnalysisWarning] = Field(default_factory=list)
    errors: List[AnalysisError] = Field(default_factory=list)
    details: List[MigrationDetail] = Field(default_factory=list)

    def has_errors(self) -> bool:
        """True when any fatal error blocks the migration."""
        return any(error.fatal for error in self.errors)

    def by_action(self) -> Dict[DetailAction, List[MigrationDetail]]:
        """Details grouped by action, groups in first-seen order."""
        grouped: Dict[DetailAction, List[MigrationDetail]] = {}
        for detail in self.details:
            grouped.setdefault(detail.action, []).append(detail)
        return grouped
