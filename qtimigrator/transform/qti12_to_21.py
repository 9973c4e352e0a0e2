"""QTI 1.2 -> 2.1 transformation rules.

Legacy ``presentation`` content becomes an ``itemBody``, response widgets
become interactions, and ``resprocessing`` yields response and outcome
declarations. The conversion is lossy: audio, video and scoring logic beyond
correct-answer extraction are not carried over.
"""

from typing import List, Optional

from loguru import logger

from qtimigrator import markup
from qtimigrator.models import qti21 as b
from qtimigrator.models import canonical as cdm
from qtimigrator.models.common import BaseType, Material, Metadata, Cardinality, ScoreVarType


TARGET_VERSION = "2.1"

# decvar@vartype -> outcome baseType; anything else becomes float
SCORE_TYPE_TO_BASE_TYPE = {
    ScoreVarType.INTEGER: BaseType.INTEGER,
    ScoreVarType.DECIMAL: BaseType.FLOAT,
    ScoreVarType.SCIENTIFIC: BaseType.FLOAT,
    ScoreVarType.BOOLEAN: BaseType.BOOLEAN,
}

# render_fib@fibtype -> response baseType; anything else becomes string
FIB_TYPE_TO_BASE_TYPE = {
    "integer": BaseType.INTEGER,
    "decimal": BaseType.FLOAT,
}

EXPLICIT_CARDINALITIES = (Cardinality.SINGLE, Cardinality.MULTIPLE, Cardinality.ORDERED)

DEFAULT_OUTCOME = b.OutcomeDeclaration21(
    identifier="SCORE",
    cardinality=Cardinality.SINGLE.value,
    base_type=BaseType.FLOAT.value,
    default_value="0.0",
)


def infer_cardinality(widget: cdm.ResponseWidget) -> str:
    """Explicit ``rcardinality`` first, then ``maxnumber > 1``, else single."""
    explicit = widget.cardinality or ""
    if explicit in {c.value for c in EXPLICIT_CARDINALITIES}:
        return explicit
    if widget.render_choice is not None and widget.render_choice.max_number > 1:
        return Cardinality.MULTIPLE.value
    return Cardinality.SINGLE.value


def infer_base_type(widget: cdm.ResponseWidget) -> str:
    if widget.render_choice is not None:
        return BaseType.IDENTIFIER.value
    if widget.render_fib is not None:
        fib_type = widget.render_fib.fib_type or ""
        return FIB_TYPE_TO_BASE_TYPE.get(fib_type, BaseType.STRING).value
    return BaseType.STRING.value


def score_base_type(var_type: Optional[str]) -> str:
    try:
        return SCORE_TYPE_TO_BASE_TYPE[ScoreVarType(var_type or "")].value
    except ValueError:
        return BaseType.FLOAT.value


def extract_correct_response(
    response_ident: str, processing: Optional[cdm.CanonicalResponseProcessing]
) -> List[str]:
    """Collect correct values for one response identifier.

    Only ``varequal`` tests attached directly to a condition count, and only
    when the same condition sets a variable to ``"1"``. Tests nested inside
    ``and``/``or``/``not`` are ignored.
    """
    if processing is None:
        return []
    values = []
    for rule in processing.rules:
        if rule.condition is None or not rule.sets_full_credit():
            continue
        for test in rule.condition.top_level_equalities():
            if test.resp_ident == response_ident:
                values.append(test.value)
    return values


def migrate_metadata(metadata: Optional[Metadata]) -> Optional[Metadata]:
    if metadata is None:
        return None
    return metadata.model_copy(update={"schema_version": TARGET_VERSION})


class Qti12To21Transformer:
    """Builds a fresh QTI 2.1 document from a canonical QTI 1.2 document."""

    def transform(self, doc: cdm.CanonicalDocument) -> b.Document21:
        assessment = None
        if doc.assessment is not None:
            assessment = b.Assessment21(
                ident=doc.assessment.ident,
                title=doc.assessment.title,
                metadata=migrate_metadata(doc.assessment.metadata),
                objectives=doc.assessment.objectives,
                rubric_block=doc.assessment.rubric_block,
                sections=[
                    b.Section21(
                        ident=section.ident,
                        title=section.title,
                        metadata=migrate_metadata(section.metadata),
                        items=[self.transform_item(item) for item in section.items],
                    )
                    for section in doc.assessment.sections
                ],
            )
        return b.Document21(
            version=TARGET_VERSION,
            items=[self.transform_item(item) for item in doc.items],
            assessment=assessment,
            metadata=migrate_metadata(doc.metadata),
        )

    def transform_item(self, item: cdm.CanonicalItem) -> b.Item21:
        logger.debug(f"Transforming item '{item.ident}' to QTI 2.1")
        item_body = None
        response_declarations = []
        if item.presentation is not None:
            item_body = self.item_body(item)
            response_declarations = [
                b.ResponseDeclaration21(
                    identifier=widget.ident,
                    cardinality=infer_cardinality(widget),
                    base_type=infer_base_type(widget),
                    correct_response=extract_correct_response(widget.ident, item.response_processing),
                )
                for widget in item.presentation.widgets()
            ]
        outcome_declarations = []
        if item.response_processing is not None:
            outcome_declarations = self.outcome_declarations(item.response_processing)
        return b.Item21(
            ident=item.ident,
            title=item.title,
            max_attempts=item.max_attempts,
            metadata=migrate_metadata(item.metadata),
            item_body=item_body,
            response_declarations=response_declarations,
            outcome_declarations=outcome_declarations,
            feedback=[
                b.ItemFeedback21(ident=fb.ident, title=fb.title, materials=fb.materials) for fb in item.feedback
            ],
            rubric_block=item.rubric_block,
        )

    def item_body(self, item: cdm.CanonicalItem) -> b.ItemBody21:
        blocks = []
        for entry in item.presentation.entries:
            if isinstance(entry, Material):
                self._warn_dropped_media(item.ident, entry)
                blocks.extend(b.Paragraph21(content=fragment) for fragment in markup.material_fragments(entry))
                continue
            interaction = self.interaction(entry)
            if interaction is None:
                logger.warning(f"Item '{item.ident}': response '{entry.ident}' has no render element, skipped")
            else:
                blocks.append(interaction)
        return b.ItemBody21(blocks=blocks)

    def interaction(self, widget: cdm.ResponseWidget):
        if widget.render_choice is not None:
            render = widget.render_choice
            return b.ChoiceInteraction21(
                response_identifier=widget.ident,
                shuffle="true" if render.shuffle else "false",
                max_choices=max(render.max_number, 0),
                min_choices=max(render.min_number, 0),
                choices=[
                    b.SimpleChoice21(
                        identifier=label.ident,
                        content=markup.material_markup(label.material) if label.material else "",
                    )
                    for label in render.labels
                ],
            )
        if widget.render_fib is not None:
            fib = widget.render_fib
            if fib.rows > 1:
                return b.ExtendedTextInteraction21(
                    response_identifier=widget.ident,
                    expected_lines=fib.rows,
                    expected_length=max(fib.max_chars, 0),
                )
            return b.TextEntryInteraction21(
                response_identifier=widget.ident,
                expected_length=max(fib.max_chars, 0),
            )
        return None

    def outcome_declarations(self, processing: cdm.CanonicalResponseProcessing) -> List[b.OutcomeDeclaration21]:
        outcomes = [
            b.OutcomeDeclaration21(
                identifier=variable.name,
                cardinality=Cardinality.SINGLE.value,
                base_type=score_base_type(variable.var_type),
                default_value=variable.default_value or None,
            )
            for variable in processing.variables
        ]
        return outcomes or [DEFAULT_OUTCOME]

    @staticmethod
    def _warn_dropped_media(item_ident: str, material: Material) -> None:
        if material.audio or material.video:
            logger.warning(
                f"Item '{item_ident}': {len(material.audio)} audio and {len(material.video)} video "
                "reference(s) have no QTI 2.1 paragraph equivalent and were dropped"
            )
