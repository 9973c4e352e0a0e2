"""QTI 3.0 document model.

Element and attribute names follow the ``qti-`` prefixed, kebab-case
vocabulary; the field names here stay snake_case and the writer applies the
serialized names.
"""

from typing import List, Union, Literal, Optional, Annotated

from pydantic import Field

from qtimigrator.models.common import Metadata, QTIModel, Objective, RubricBlock


QTI30_NAMESPACE = "http://www.imsglobal.org/xsd/imsqtiasi_v3p0"


class Paragraph30(QTIModel):
    kind: Literal["p"] = "p"
    content: str = ""


class Division30(QTIModel):
    kind: Literal["div"] = "div"
    css_class: Optional[str] = Field(None, description="Serialized as data-qti-class")
    content: str = ""


class SimpleChoice30(QTIModel):
    identifier: str = ""
    fixed: Optional[str] = None
    content: str = ""


class ChoiceInteraction30(QTIModel):
    kind: Literal["qti-choice-interaction"] = "qti-choice-interaction"
    response_identifier: str = ""
    shuffle: Optional[str] = None
    max_choices: int = 0
    min_choices: int = 0
    prompt: Optional[str] = None
    choices: List[SimpleChoice30] = Field(default_factory=list)


class TextEntryInteraction30(QTIModel):
    kind: Literal["qti-text-entry-interaction"] = "qti-text-entry-interaction"
    response_identifier: str = ""
    expected_length: int = 0
    pattern_mask: Optional[str] = None
    placeholder_text: Optional[str] = None


class ExtendedTextInteraction30(QTIModel):
    kind: Literal["qti-extended-text-interaction"] = "qti-extended-text-interaction"
    response_identifier: str = ""
    min_strings: int = 0
    max_strings: int = 0
    expected_lines: int = 0
    expected_length: int = 0
    prompt: Optional[str] = None


BodyBlock30 = Annotated[
    Union[Paragraph30, Division30, ChoiceInteraction30, TextEntryInteraction30, ExtendedTextInteraction30],
    Field(discriminator="kind"),
]


class ItemBody30(QTIModel):
    blocks: List[BodyBlock30] = Field(default_factory=list)


class MapEntry30(QTIModel):
    map_key: str = ""
    mapped_value: float = 0.0


class Mapping30(QTIModel):
    lower_bound: Optional[float] = None
    upper_bound: Optional[float] = None
    default_value: float = 0.0
    entries: List[MapEntry30] = Field(default_factory=list)


class ResponseDeclaration30(QTIModel):
    identifier: str = ""
    cardinality: str = "single"
    base_type: Optional[str] = None
    correct_response: List[str] = Field(default_factory=list)
    mapping: Optional[Mapping30] = None


class OutcomeDeclaration30(QTIModel):
    identifier: str = ""
    cardinality: str = "single"
    base_type: Optional[str] = None
    default_value: Optional[str] = None


class TemplateDeclaration30(QTIModel):
    identifier: str = ""
    cardinality: str = "single"
    base_type: Optional[str] = None
    param_variable: Optional[str] = None
    default_value: Optional[str] = None


class ModalFeedback30(QTIModel):
    identifier: str = ""
    title: Optional[str] = None
    outcome_identifier: Optional[str] = None
    show_hide: Optional[str] = None
    content: str = ""


class AssessmentItem30(QTIModel):
    identifier: str = ""
    title: Optional[str] = None
    adaptive: Optional[str] = None
    time_dependent: Optional[str] = None
    metadata: Optional[Metadata] = None
    response_declarations: List[ResponseDeclaration30] = Field(default_factory=list)
    outcome_declarations: List[OutcomeDeclaration30] = Field(default_factory=list)
    template_declarations: List[TemplateDeclaration30] = Field(default_factory=list)
    item_body: Optional[ItemBody30] = None
    modal_feedback: List[ModalFeedback30] = Field(default_factory=list)
    rubric_block: Optional[RubricBlock] = None


class Section30(QTIModel):
    ident: str = ""
    title: Optional[str] = None
    metadata: Optional[Metadata] = None
    items: List[AssessmentItem30] = Field(default_factory=list)


class Assessment30(QTIModel):
    """Assessment kept in the flat ``assessment``/``section`` layout."""

    ident: str = ""
    title: Optional[str] = None
    metadata: Optional[Metadata] = None
    objectives: List[Objective] = Field(default_factory=list)
    rubric_block: Optional[RubricBlock] = None
    sections: List[Section30] = Field(default_factory=list)


class Document30(QTIModel):
    version: Optional[str] = None
    items: List[AssessmentItem30] = Field(default_factory=list)
    assessment: Optional[Assessment30] = None
    metadata: Optional[Metadata] = None

    @property
    def is_single_item(self) -> bool:
        """True when the document serializes as a lone ``qti-assessment-item``."""
        return len(self.items) == 1 and self.assessment is None
