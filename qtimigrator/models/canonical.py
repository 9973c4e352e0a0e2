"""Canonical Document Model.

A version-agnostic superset used between the family readers and the
transformation engines. An item may carry both the legacy presentation /
response-processing pair and the newer item body / declaration set.
Boolean-like attributes are already normalized to ``bool`` and nested
containers are flattened into ordered lists.
"""

from typing import List, Union, Literal, Iterator, Optional, Annotated

from pydantic import Field

from qtimigrator.versions import VersionFamily
from qtimigrator.models.common import Material, Metadata, QTIModel, Objective, RubricBlock
from qtimigrator.models.conditions import ConditionVar


# Legacy side


class ChoiceLabel(QTIModel):
    ident: str = ""
    material: Optional[Material] = None


class ChoiceRender(QTIModel):
    shuffle: bool = False
    shuffle_source: Optional[str] = Field(None, description="Raw shuffle attribute; None when absent")
    min_number: int = 0
    max_number: int = 0
    labels: List[ChoiceLabel] = Field(default_factory=list)


class FibRender(QTIModel):
    fib_type: Optional[str] = None
    rows: int = 0
    max_chars: int = 0
    columns: int = 0
    prompt: Optional[str] = None


class ResponseWidget(QTIModel):
    kind: Literal["response"] = "response"
    ident: str = ""
    response_type: str = "response_lid"
    cardinality: Optional[str] = Field(None, description="Raw rcardinality, not yet validated")
    render_choice: Optional[ChoiceRender] = None
    render_fib: Optional[FibRender] = None


PresentationEntry = Annotated[Union[Material, ResponseWidget], Field(discriminator="kind")]


class CanonicalPresentation(QTIModel):
    label: Optional[str] = None
    entries: List[PresentationEntry] = Field(default_factory=list)

    def widgets(self) -> List[ResponseWidget]:
        return [entry for entry in self.entries if isinstance(entry, ResponseWidget)]

    def materials(self) -> List[Material]:
        return [entry for entry in self.entries if isinstance(entry, Material)]


class ScoreVariable(QTIModel):
    name: str = "SCORE"
    var_type: Optional[str] = None
    default_value: Optional[str] = None
    min_value: Optional[str] = None
    max_value: Optional[str] = None


class ScoreAssignment(QTIModel):
    action: str = "Set"
    var_name: str = "SCORE"
    value: str = ""


class OutcomeRule(QTIModel):
    """One legacy ``respcondition``."""

    title: Optional[str] = None
    continue_on: Optional[bool] = Field(None, description="None when the source had no yes/no continue flag")
    condition: Optional[ConditionVar] = None
    assignments: List[ScoreAssignment] = Field(default_factory=list)
    feedback_refs: List[str] = Field(default_factory=list)

    def sets_full_credit(self) -> bool:
        return any(a.action == "set" and a.value == "1" for a in self.assignments)


class CanonicalResponseProcessing(QTIModel):
    score_model: Optional[str] = None
    variables: List[ScoreVariable] = Field(default_factory=list)
    rules: List[OutcomeRule] = Field(default_factory=list)


# Mid/new side


class Paragraph(QTIModel):
    kind: Literal["p"] = "p"
    content: str = ""


class Division(QTIModel):
    kind: Literal["div"] = "div"
    css_class: Optional[str] = None
    content: str = ""


class SimpleChoice(QTIModel):
    identifier: str = ""
    fixed: bool = False
    content: str = ""


class ChoiceInteraction(QTIModel):
    kind: Literal["choice"] = "choice"
    response_identifier: str = ""
    shuffle: bool = False
    max_choices: int = 0
    min_choices: int = 0
    prompt: Optional[str] = None
    choices: List[SimpleChoice] = Field(default_factory=list)


class TextEntryInteraction(QTIModel):
    kind: Literal["text_entry"] = "text_entry"
    response_identifier: str = ""
    expected_length: int = 0
    pattern_mask: Optional[str] = None
    placeholder_text: Optional[str] = None


class ExtendedTextInteraction(QTIModel):
    kind: Literal["extended_text"] = "extended_text"
    response_identifier: str = ""
    min_strings: int = 0
    max_strings: int = 0
    expected_lines: int = 0
    expected_length: int = 0
    prompt: Optional[str] = None


Interaction = Union[ChoiceInteraction, TextEntryInteraction, ExtendedTextInteraction]

BodyBlock = Annotated[
    Union[Paragraph, Division, ChoiceInteraction, TextEntryInteraction, ExtendedTextInteraction],
    Field(discriminator="kind"),
]


class ItemBody(QTIModel):
    blocks: List[BodyBlock] = Field(default_factory=list)

    def interactions(self) -> List[Interaction]:
        return [
            block
            for block in self.blocks
            if isinstance(block, (ChoiceInteraction, TextEntryInteraction, ExtendedTextInteraction))
        ]


class MapEntry(QTIModel):
    map_key: str = ""
    mapped_value: float = 0.0


class Mapping(QTIModel):
    lower_bound: Optional[float] = None
    upper_bound: Optional[float] = None
    default_value: float = 0.0
    entries: List[MapEntry] = Field(default_factory=list)


class ResponseDeclaration(QTIModel):
    identifier: str = ""
    cardinality: str = "single"
    base_type: Optional[str] = None
    correct_response: List[str] = Field(default_factory=list)
    mapping: Optional[Mapping] = None


class OutcomeDeclaration(QTIModel):
    identifier: str = ""
    cardinality: str = "single"
    base_type: Optional[str] = None
    default_value: Optional[str] = None


class TemplateDeclaration(QTIModel):
    identifier: str = ""
    cardinality: str = "single"
    base_type: Optional[str] = None
    param_variable: bool = False
    default_value: Optional[str] = None


class Feedback(QTIModel):
    """Item feedback; ``content`` holds markup when the source had no materials."""

    ident: str = ""
    title: Optional[str] = None
    materials: List[Material] = Field(default_factory=list)
    content: Optional[str] = None
    outcome_identifier: Optional[str] = None
    show_hide: Optional[str] = None


# Containers


class CanonicalItem(QTIModel):
    ident: str = ""
    title: Optional[str] = None
    max_attempts: int = 0
    adaptive: bool = False
    time_dependent: bool = False
    metadata: Optional[Metadata] = None
    presentation: Optional[CanonicalPresentation] = None
    response_processing: Optional[CanonicalResponseProcessing] = None
    item_body: Optional[ItemBody] = None
    response_declarations: List[ResponseDeclaration] = Field(default_factory=list)
    outcome_declarations: List[OutcomeDeclaration] = Field(default_factory=list)
    template_declarations: List[TemplateDeclaration] = Field(default_factory=list)
    feedback: List[Feedback] = Field(default_factory=list)
    rubric_block: Optional[RubricBlock] = None


class CanonicalSection(QTIModel):
    ident: str = ""
    title: Optional[str] = None
    metadata: Optional[Metadata] = None
    items: List[CanonicalItem] = Field(default_factory=list)


class CanonicalAssessment(QTIModel):
    ident: str = ""
    title: Optional[str] = None
    metadata: Optional[Metadata] = None
    objectives: List[Objective] = Field(default_factory=list)
    rubric_block: Optional[RubricBlock] = None
    sections: List[CanonicalSection] = Field(default_factory=list)


class CanonicalDocument(QTIModel):
    version: str
    family: VersionFamily
    items: List[CanonicalItem] = Field(default_factory=list)
    assessment: Optional[CanonicalAssessment] = None
    metadata: Optional[Metadata] = None

    def all_items(self) -> Iterator[CanonicalItem]:
        """Top-level items first, then section items in document order."""
        yield from self.items
        if self.assessment is not None:
            for section in self.assessment.sections:
                yield from section.items
