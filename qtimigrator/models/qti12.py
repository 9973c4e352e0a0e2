"""QTI 1.2 document model.

Shaped after the ``questestinterop`` vocabulary: presentation/flow
containers, ``response_*`` widgets and ``resprocessing`` condition lists.
Attribute values are kept as they appear in the source (``shuffle="yes"``,
``continue="no"``); normalization happens in the canonicalizer.
"""

from typing import List, Union, Literal, Optional, Annotated

from pydantic import Field

from qtimigrator.models.common import Material, Metadata, QTIModel, Objective, RubricBlock
from qtimigrator.models.conditions import ConditionVar


class ResponseLabel(QTIModel):
    ident: str = ""
    rarea: Optional[str] = None
    rrange: Optional[str] = None
    material: Optional[Material] = None


class RenderChoice(QTIModel):
    shuffle: Optional[str] = None
    min_number: int = 0
    max_number: int = 0
    labels: List[ResponseLabel] = Field(default_factory=list)


class RenderFib(QTIModel):
    encoding: Optional[str] = None
    fib_type: Optional[str] = None
    rows: int = 0
    max_chars: int = 0
    columns: int = 0
    prompt: Optional[str] = None


class Response(QTIModel):
    """A ``response_lid``, ``response_str`` or ``response_num`` widget."""

    kind: Literal["response"] = "response"
    ident: str = ""
    response_type: str = "response_lid"
    rcardinality: Optional[str] = None
    rtiming: Optional[str] = None
    render_choice: Optional[RenderChoice] = None
    render_fib: Optional[RenderFib] = None


class Flow(QTIModel):
    kind: Literal["flow"] = "flow"
    flow_class: Optional[str] = None
    children: List["PresentationChild"] = Field(default_factory=list)


PresentationChild = Annotated[Union[Material, Response, Flow], Field(discriminator="kind")]

Flow.model_rebuild()


class Presentation(QTIModel):
    label: Optional[str] = None
    children: List[PresentationChild] = Field(default_factory=list)


class DecVar(QTIModel):
    var_name: str = "SCORE"
    var_type: Optional[str] = None
    default_value: Optional[str] = None
    min_value: Optional[str] = None
    max_value: Optional[str] = None


class SetVar(QTIModel):
    action: str = "Set"
    var_name: str = "SCORE"
    value: str = ""


class DisplayFeedback(QTIModel):
    feedback_type: Optional[str] = None
    link_ref_id: str = ""


class RespCondition(QTIModel):
    title: Optional[str] = None
    continue_value: Optional[str] = None
    condition: Optional[ConditionVar] = None
    set_vars: List[SetVar] = Field(default_factory=list)
    display_feedback: List[DisplayFeedback] = Field(default_factory=list)



class ResProcessing(QTIModel):
    score_model: Optional[str] = None
    outcomes: List[DecVar] = Field(default_factory=list)
    conditions: List[RespCondition] = Field(default_factory=list)


class FlowMat(QTIModel):
    materials: List[Material] = Field(default_factory=list)
    flow_mats: List["FlowMat"] = Field(default_factory=list)


FlowMat.model_rebuild()


class ItemFeedback12(QTIModel):
    ident: str = ""
    title: Optional[str] = None
    materials: List[Material] = Field(default_factory=list)
    flow_mats: List[FlowMat] = Field(default_factory=list)


class Item12(QTIModel):
    ident: str = ""
    title: Optional[str] = None
    max_attempts: int = 0
    metadata: Optional[Metadata] = None
    presentation: Optional[Presentation] = None
    resprocessing: Optional[ResProcessing] = None
    feedback: List[ItemFeedback12] = Field(default_factory=list)
    rubric_block: Optional[RubricBlock] = None


class Section12(QTIModel):
    ident: str = ""
    title: Optional[str] = None
    metadata: Optional[Metadata] = None
    items: List[Item12] = Field(default_factory=list)
    sections: List["Section12"] = Field(default_factory=list)


Section12.model_rebuild()


class Assessment12(QTIModel):
    ident: str = ""
    title: Optional[str] = None
    metadata: Optional[Metadata] = None
    objectives: List[Objective] = Field(default_factory=list)
    rubric_block: Optional[RubricBlock] = None
    sections: List[Section12] = Field(default_factory=list)


class Document12(QTIModel):
    version: Optional[str] = None
    items: List[Item12] = Field(default_factory=list)
    assessment: Optional[Assessment12] = None
    metadata: Optional[Metadata] = None
