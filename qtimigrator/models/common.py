"""Leaf models and closed enumerations shared by every QTI family."""

from enum import Enum
from typing import List, Literal, Optional

from pydantic import Field, BaseModel, ConfigDict


class QTIModel(BaseModel):
    """Base for all document models: immutable once built."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class Cardinality(str, Enum):
    """Number of values a variable holds."""

    SINGLE = "single"
    MULTIPLE = "multiple"
    ORDERED = "ordered"
    RECORD = "record"


class BaseType(str, Enum):
    """Primitive value type of a declared variable."""

    IDENTIFIER = "identifier"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    POINT = "point"
    PAIR = "pair"
    DIRECTED_PAIR = "directedPair"
    DURATION = "duration"
    FILE = "file"
    URI = "uri"


class View(str, Enum):
    """Audience of a rubric block."""

    AUTHOR = "author"
    CANDIDATE = "candidate"
    PROCTOR = "proctor"
    SCORER = "scorer"
    TEST_CONSTRUCTOR = "testConstructor"
    TUTOR = "tutor"


class InteractionKind(str, Enum):
    """Interaction type names of the mid generation."""

    CHOICE = "choiceInteraction"
    ORDER = "orderInteraction"
    ASSOCIATE = "associateInteraction"
    MATCH = "matchInteraction"
    GAP_MATCH = "gapMatchInteraction"
    INLINE_CHOICE = "inlineChoiceInteraction"
    TEXT_ENTRY = "textEntryInteraction"
    EXTENDED_TEXT = "extendedTextInteraction"
    HOTTEXT = "hottextInteraction"
    HOTSPOT = "hotspotInteraction"
    SELECT_POINT = "selectPointInteraction"
    GRAPHIC_ORDER = "graphicOrderInteraction"
    GRAPHIC_ASSOCIATE = "graphicAssociateInteraction"
    GRAPHIC_GAP_MATCH = "graphicGapMatchInteraction"
    POSITION_OBJECT = "positionObjectInteraction"
    SLIDER = "sliderInteraction"
    DRAWING = "drawingInteraction"
    UPLOAD = "uploadInteraction"
    CUSTOM = "customInteraction"


class ScoreVarType(str, Enum):
    """Legacy score-variable types (``decvar@vartype``)."""

    INTEGER = "integer"
    DECIMAL = "decimal"
    SCIENTIFIC = "scientific"
    BOOLEAN = "boolean"


def enum_values(enum_cls) -> frozenset:
    return frozenset(member.value for member in enum_cls)


class MatText(QTIModel):
    text_type: Optional[str] = None
    charset: Optional[str] = None
    xml_space: Optional[str] = None
    content: str = ""

    @property
    def is_html(self) -> bool:
        return self.text_type == "text/html"


class MatImage(QTIModel):
    uri: str = ""
    image_type: Optional[str] = None
    width: int = 0
    height: int = 0


class MatAudio(QTIModel):
    uri: str = ""
    audio_type: Optional[str] = None


class MatVideo(QTIModel):
    uri: str = ""
    video_type: Optional[str] = None
    width: int = 0
    height: int = 0


class Material(QTIModel):
    """A legacy block of text and media."""

    kind: Literal["material"] = "material"
    label: Optional[str] = None
    texts: List[MatText] = Field(default_factory=list)
    images: List[MatImage] = Field(default_factory=list)
    audio: List[MatAudio] = Field(default_factory=list)
    video: List[MatVideo] = Field(default_factory=list)


class QTIMetadata(QTIModel):
    time_dependent: bool = False
    composite: bool = False
    interaction_type: Optional[str] = None
    feedback_type: Optional[str] = None
    solution_available: bool = False
    scoring_mode: Optional[str] = None
    tool_name: Optional[str] = None
    tool_version: Optional[str] = None
    tool_vendor: Optional[str] = None


class Metadata(QTIModel):
    """Schema marker, LOM passthrough and QTI-specific hints."""

    schema_name: Optional[str] = None
    schema_version: Optional[str] = None
    lom: Optional[str] = Field(None, description="Serialized LOM element, carried verbatim")
    qti_metadata: Optional[QTIMetadata] = None


class RubricBlock(QTIModel):
    use: Optional[str] = None
    view: Optional[str] = None
    content: str = ""


class Objective(QTIModel):
    title: Optional[str] = None
    material: Optional[Material] = None
