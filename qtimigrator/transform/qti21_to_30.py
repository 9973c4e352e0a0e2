"""QTI 2.1 -> 3.0 transformation rules.

The new generation renames elements to the ``qti-`` prefixed kebab-case
vocabulary and remaps a few enumerations. All renames are table-driven; each
enumeration-keyed table covers every member of its enumeration.

Assessments keep the mid-generation ``assessment``/``section`` layout; only
items and their declarations use the new element names.
"""

from enum import Enum
from typing import Dict, Type, Optional

from loguru import logger

from qtimigrator import markup
from qtimigrator.models import qti30 as c
from qtimigrator.models import canonical as cdm
from qtimigrator.models.common import View, BaseType, Metadata, RubricBlock, InteractionKind


TARGET_VERSION = "3.0"

ELEMENT_NAMES_30: Dict[str, str] = {
    "item": "qti-assessment-item",
    "assessmentItem": "qti-assessment-item",
    "itemBody": "qti-item-body",
    "choiceInteraction": "qti-choice-interaction",
    "simpleChoice": "qti-simple-choice",
    "prompt": "qti-prompt",
    "textEntryInteraction": "qti-text-entry-interaction",
    "extendedTextInteraction": "qti-extended-text-interaction",
    "responseDeclaration": "qti-response-declaration",
    "correctResponse": "qti-correct-response",
    "value": "qti-value",
    "mapping": "qti-mapping",
    "mapEntry": "qti-map-entry",
    "outcomeDeclaration": "qti-outcome-declaration",
    "defaultValue": "qti-default-value",
    "templateDeclaration": "qti-template-declaration",
    "itemfeedback": "qti-modal-feedback",
    "modalFeedback": "qti-modal-feedback",
    "rubricBlock": "qti-rubric-block",
    "metadata": "qti-metadata",
    "qtimetadata": "qti-metadata-container",
    "assessment": "qti-assessment-test",
}

ATTRIBUTE_NAMES_30: Dict[str, str] = {
    "responseIdentifier": "response-identifier",
    "maxChoices": "max-choices",
    "minChoices": "min-choices",
    "expectedLength": "expected-length",
    "patternMask": "pattern-mask",
    "placeholderText": "placeholder-text",
    "minStrings": "min-strings",
    "maxStrings": "max-strings",
    "expectedLines": "expected-lines",
    "baseType": "base-type",
    "lowerBound": "lower-bound",
    "upperBound": "upper-bound",
    "defaultValue": "default-value",
    "mapKey": "map-key",
    "mappedValue": "mapped-value",
    "paramVariable": "param-variable",
    "timeDependent": "time-dependent",
    "outcomeIdentifier": "outcome-identifier",
    "showHide": "show-hide",
    "class": "data-qti-class",
}

INTERACTION_TYPES_30: Dict[InteractionKind, str] = {
    InteractionKind.CHOICE: "qti-choice-interaction",
    InteractionKind.ORDER: "qti-order-interaction",
    InteractionKind.ASSOCIATE: "qti-associate-interaction",
    InteractionKind.MATCH: "qti-match-interaction",
    InteractionKind.GAP_MATCH: "qti-gap-match-interaction",
    InteractionKind.INLINE_CHOICE: "qti-inline-choice-interaction",
    InteractionKind.TEXT_ENTRY: "qti-text-entry-interaction",
    InteractionKind.EXTENDED_TEXT: "qti-extended-text-interaction",
    InteractionKind.HOTTEXT: "qti-hottext-interaction",
    InteractionKind.HOTSPOT: "qti-hotspot-interaction",
    InteractionKind.SELECT_POINT: "qti-select-point-interaction",
    InteractionKind.GRAPHIC_ORDER: "qti-graphic-order-interaction",
    InteractionKind.GRAPHIC_ASSOCIATE: "qti-graphic-associate-interaction",
    InteractionKind.GRAPHIC_GAP_MATCH: "qti-graphic-gap-match-interaction",
    InteractionKind.POSITION_OBJECT: "qti-position-object-interaction",
    InteractionKind.SLIDER: "qti-slider-interaction",
    InteractionKind.DRAWING: "qti-drawing-interaction",
    InteractionKind.UPLOAD: "qti-upload-interaction",
    InteractionKind.CUSTOM: "qti-custom-interaction",
}

BASE_TYPES_30: Dict[BaseType, str] = {
    BaseType.IDENTIFIER: "identifier",
    BaseType.BOOLEAN: "boolean",
    BaseType.INTEGER: "integer",
    BaseType.FLOAT: "float",
    BaseType.STRING: "string",
    BaseType.POINT: "point",
    BaseType.PAIR: "directedPair",
    BaseType.DIRECTED_PAIR: "directedPair",
    BaseType.DURATION: "duration",
    BaseType.FILE: "uri",
    BaseType.URI: "uri",
}

VIEWS_30: Dict[View, str] = {
    View.AUTHOR: "author",
    View.CANDIDATE: "candidate",
    View.PROCTOR: "proctor",
    View.SCORER: "scorer",
    View.TEST_CONSTRUCTOR: "test-constructor",
    View.TUTOR: "tutor",
}


def translate(table: Dict, enum_cls: Type[Enum], value: Optional[str]) -> Optional[str]:
    """Look ``value`` up in an enumeration-keyed table; unknown values pass through."""
    if value is None:
        return None
    try:
        return table[enum_cls(value)]
    except ValueError:
        return value


def translate_interaction_type(value: Optional[str]) -> Optional[str]:
    return translate(INTERACTION_TYPES_30, InteractionKind, value)


def translate_base_type(value: Optional[str]) -> Optional[str]:
    return translate(BASE_TYPES_30, BaseType, value)


def translate_view(value: Optional[str]) -> Optional[str]:
    return translate(VIEWS_30, View, value)


def _flag(value: bool) -> str:
    return "true" if value else "false"


def migrate_metadata(metadata: Optional[Metadata]) -> Optional[Metadata]:
    if metadata is None:
        return None
    qti_metadata = metadata.qti_metadata
    if qti_metadata is not None:
        qti_metadata = qti_metadata.model_copy(
            update={"interaction_type": translate_interaction_type(qti_metadata.interaction_type)}
        )
    return metadata.model_copy(update={"schema_version": TARGET_VERSION, "qti_metadata": qti_metadata})


def migrate_rubric_block(rubric_block: Optional[RubricBlock]) -> Optional[RubricBlock]:
    if rubric_block is None:
        return None
    return RubricBlock(
        use=rubric_block.use,
        view=translate_view(rubric_block.view),
        content=markup.rewrite_for_qti30(rubric_block.content),
    )


class Qti21To30Transformer:
    """Builds a fresh QTI 3.0 document from a canonical QTI 2.1 document."""

    def transform(self, doc: cdm.CanonicalDocument) -> c.Document30:
        assessment = None
        if doc.assessment is not None:
            logger.warning(
                "Assessment structure is written with the QTI 2.1 assessment/section layout; "
                "only items use QTI 3.0 element names"
            )
            assessment = c.Assessment30(
                ident=doc.assessment.ident,
                title=doc.assessment.title,
                metadata=migrate_metadata(doc.assessment.metadata),
                objectives=doc.assessment.objectives,
                rubric_block=migrate_rubric_block(doc.assessment.rubric_block),
                sections=[
                    c.Section30(
                        ident=section.ident,
                        title=section.title,
                        metadata=migrate_metadata(section.metadata),
                        items=[self.transform_item(item) for item in section.items],
                    )
                    for section in doc.assessment.sections
                ],
            )
        return c.Document30(
            version=TARGET_VERSION,
            items=[self.transform_item(item) for item in doc.items],
            assessment=assessment,
            metadata=migrate_metadata(doc.metadata),
        )

    def transform_item(self, item: cdm.CanonicalItem) -> c.AssessmentItem30:
        logger.debug(f"Transforming item '{item.ident}' to QTI 3.0")
        if item.presentation is not None or item.response_processing is not None:
            logger.warning(f"Item '{item.ident}': legacy presentation/resprocessing is not carried into QTI 3.0")
        item_body = None
        if item.item_body is not None:
            item_body = c.ItemBody30(blocks=[self.block(block) for block in item.item_body.blocks])
        return c.AssessmentItem30(
            identifier=item.ident,
            title=item.title,
            adaptive=_flag(item.adaptive),
            time_dependent=_flag(item.time_dependent),
            metadata=migrate_metadata(item.metadata),
            response_declarations=[
                c.ResponseDeclaration30(
                    identifier=d.identifier,
                    cardinality=d.cardinality,
                    base_type=translate_base_type(d.base_type),
                    correct_response=list(d.correct_response),
                    mapping=self.mapping(d.mapping),
                )
                for d in item.response_declarations
            ],
            outcome_declarations=[
                c.OutcomeDeclaration30(
                    identifier=d.identifier,
                    cardinality=d.cardinality,
                    base_type=translate_base_type(d.base_type),
                    default_value=d.default_value,
                )
                for d in item.outcome_declarations
            ],
            template_declarations=[
                c.TemplateDeclaration30(
                    identifier=d.identifier,
                    cardinality=d.cardinality,
                    base_type=translate_base_type(d.base_type),
                    param_variable="true" if d.param_variable else None,
                    default_value=d.default_value,
                )
                for d in item.template_declarations
            ],
            item_body=item_body,
            modal_feedback=[self.feedback(fb) for fb in item.feedback],
            rubric_block=migrate_rubric_block(item.rubric_block),
        )

    def block(self, block: cdm.BodyBlock) -> c.BodyBlock30:
        rewrite = markup.rewrite_for_qti30
        if isinstance(block, cdm.Paragraph):
            return c.Paragraph30(content=rewrite(block.content))
        if isinstance(block, cdm.Division):
            return c.Division30(css_class=block.css_class, content=rewrite(block.content))
        if isinstance(block, cdm.ChoiceInteraction):
            return c.ChoiceInteraction30(
                response_identifier=block.response_identifier,
                shuffle=_flag(block.shuffle),
                max_choices=block.max_choices,
                min_choices=block.min_choices,
                prompt=rewrite(block.prompt) if block.prompt is not None else None,
                choices=[
                    c.SimpleChoice30(
                        identifier=choice.identifier,
                        fixed="true" if choice.fixed else None,
                        content=rewrite(choice.content),
                    )
                    for choice in block.choices
                ],
            )
        if isinstance(block, cdm.TextEntryInteraction):
            return c.TextEntryInteraction30(
                response_identifier=block.response_identifier,
                expected_length=block.expected_length,
                pattern_mask=block.pattern_mask,
                placeholder_text=block.placeholder_text,
            )
        return c.ExtendedTextInteraction30(
            response_identifier=block.response_identifier,
            min_strings=block.min_strings,
            max_strings=block.max_strings,
            expected_lines=block.expected_lines,
            expected_length=block.expected_length,
            prompt=rewrite(block.prompt) if block.prompt is not None else None,
        )

    @staticmethod
    def mapping(mapping: Optional[cdm.Mapping]) -> Optional[c.Mapping30]:
        if mapping is None:
            return None
        return c.Mapping30(
            lower_bound=mapping.lower_bound,
            upper_bound=mapping.upper_bound,
            default_value=mapping.default_value,
            entries=[c.MapEntry30(map_key=e.map_key, mapped_value=e.mapped_value) for e in mapping.entries],
        )

    @staticmethod
    def feedback(feedback: cdm.Feedback) -> c.ModalFeedback30:
        if feedback.materials:
            content = "".join(markup.material_markup(material) for material in feedback.materials)
        else:
            content = feedback.content or ""
        return c.ModalFeedback30(
            identifier=feedback.ident,
            title=feedback.title,
            outcome_identifier=feedback.outcome_identifier,
            show_hide=feedback.show_hide,
            content=markup.rewrite_for_qti30(content),
        )
