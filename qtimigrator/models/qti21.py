"""QTI 2.1 / 2.2 document model.

The mid generation is a hybrid: items may still carry the legacy
``presentation``/``resprocessing`` pair next to the newer ``itemBody`` and
declaration elements.
"""

from typing import List, Union, Literal, Optional, Annotated

from pydantic import Field

from qtimigrator.models.qti12 import FlowMat, Presentation, ResProcessing
from qtimigrator.models.common import Material, Metadata, QTIModel, Objective, RubricBlock


class Paragraph21(QTIModel):
    kind: Literal["p"] = "p"
    content: str = ""


class Division21(QTIModel):
    kind: Literal["div"] = "div"
    css_class: Optional[str] = None
    content: str = ""


class SimpleChoice21(QTIModel):
    identifier: str = ""
    fixed: Optional[str] = None
    content: str = ""


class ChoiceInteraction21(QTIModel):
    kind: Literal["choiceInteraction"] = "choiceInteraction"
    response_identifier: str = ""
    shuffle: Optional[str] = None
    max_choices: int = 0
    min_choices: int = 0
    prompt: Optional[str] = None
    choices: List[SimpleChoice21] = Field(default_factory=list)


class TextEntryInteraction21(QTIModel):
    kind: Literal["textEntryInteraction"] = "textEntryInteraction"
    response_identifier: str = ""
    expected_length: int = 0
    pattern_mask: Optional[str] = None
    placeholder_text: Optional[str] = None


class ExtendedTextInteraction21(QTIModel):
    kind: Literal["extendedTextInteraction"] = "extendedTextInteraction"
    response_identifier: str = ""
    min_strings: int = 0
    max_strings: int = 0
    expected_lines: int = 0
    expected_length: int = 0
    prompt: Optional[str] = None


BodyBlock21 = Annotated[
    Union[Paragraph21, Division21, ChoiceInteraction21, TextEntryInteraction21, ExtendedTextInteraction21],
    Field(discriminator="kind"),
]


class ItemBody21(QTIModel):
    blocks: List[BodyBlock21] = Field(default_factory=list)


class MapEntry21(QTIModel):
    map_key: str = ""
    mapped_value: float = 0.0


class Mapping21(QTIModel):
    lower_bound: Optional[float] = None
    upper_bound: Optional[float] = None
    default_value: float = 0.0
    entries: List[MapEntry21] = Field(default_factory=list)


class ResponseDeclaration21(QTIModel):
    identifier: str = ""
    cardinality: str = "single"
    base_type: Optional[str] = None
    correct_response: List[str] = Field(default_factory=list)
    mapping: Optional[Mapping21] = None


class OutcomeDeclaration21(QTIModel):
    identifier: str = ""
    cardinality: str = "single"
    base_type: Optional[str] = None
    default_value: Optional[str] = None


class TemplateDeclaration21(QTIModel):
    identifier: str = ""
    cardinality: str = "single"
    base_type: Optional[str] = None
    param_variable: Optional[str] = None
    default_value: Optional[str] = None


class ItemFeedback21(QTIModel):
    ident: str = ""
    title: Optional[str] = None
    materials: List[Material] = Field(default_factory=list)
    flow_mats: List[FlowMat] = Field(default_factory=list)


class ModalFeedback21(QTIModel):
    identifier: str = ""
    title: Optional[str] = None
    outcome_identifier: Optional[str] = None
    show_hide: Optional[str] = None
    content: str = ""


class Item21(QTIModel):
    ident: str = ""
    title: Optional[str] = None
    max_attempts: int = 0
    adaptive: Optional[str] = None
    time_dependent: Optional[str] = None
    metadata: Optional[Metadata] = None
    # legacy structures still accepted by the mid generation
    presentation: Optional[Presentation] = None
    resprocessing: Optional[ResProcessing] = None
    item_body: Optional[ItemBody21] = None
    response_declarations: List[ResponseDeclaration21] = Field(default_factory=list)
    outcome_declarations: List[OutcomeDeclaration21] = Field(default_factory=list)
    template_declarations: List[TemplateDeclaration21] = Field(default_factory=list)
    feedback: List[ItemFeedback21] = Field(default_factory=list)
    modal_feedback: List[ModalFeedback21] = Field(default_factory=list)
    rubric_block: Optional[RubricBlock] = None


class Section21(QTIModel):
    ident: str = ""
    title: Optional[str] = None
    metadata: Optional[Metadata] = None
    items: List[Item21] = Field(default_factory=list)


class Assessment21(QTIModel):
    ident: str = ""
    title: Optional[str] = None
    metadata: Optional[Metadata] = None
    objectives: List[Objective] = Field(default_factory=list)
    rubric_block: Optional[RubricBlock] = None
    sections: List[Section21] = Field(default_factory=list)


class Document21(QTIModel):
    version: Optional[str] = None
    items: List[Item21] = Field(default_factory=list)
    assessment: Optional[Assessment21] = None
    metadata: Optional[Metadata] = None
