"""Side-effect-free prediction of what a migration will change.

The Analyzer walks a canonical document and records every rename, value
transformation and validation the transformation engine is expected to
perform, plus non-blocking warnings and fatal blockers. It never invokes the
engine and never mutates its input.

Verbosity only controls how much detail is attached to each entry: element
paths from level 2, old/new values from level 3. The set of entries is the
same at every level.
"""

from typing import List, Optional

from loguru import logger

from qtimigrator import markup
from qtimigrator.models import canonical as cdm
from qtimigrator.models.common import View, BaseType, Material, Metadata, InteractionKind, enum_values
from qtimigrator.versions import VersionFamily, resolve_version, is_supported_path
from qtimigrator.analysis.report import (
    DetailAction,
    AnalysisError,
    AnalysisReport,
    MigrationDetail,
    AnalysisWarning,
)
from qtimigrator.transform.qti12_to_21 import extract_correct_response
from qtimigrator.transform.qti21_to_30 import ELEMENT_NAMES_30, BASE_TYPES_30, translate_interaction_type


KNOWN_INTERACTION_TYPES = enum_values(InteractionKind)

_INTERACTION_ELEMENTS = {
    cdm.ChoiceInteraction: "choiceInteraction",
    cdm.TextEntryInteraction: "textEntryInteraction",
    cdm.ExtendedTextInteraction: "extendedTextInteraction",
}


def item_path(ident: str) -> str:
    return f"item[@ident='{ident}']"


class _ItemScope:
    """Records entries for one item; knows whether the item needs attention."""

    def __init__(self, report: AnalysisReport, item_id: Optional[str]):
        self.report = report
        self.item_id = item_id
        self.flagged = False

    def detail(self, action: DetailAction, description: str, path: str, old: str, new: str) -> None:
        self.report.details.append(
            MigrationDetail(
                action=action,
                description=description,
                item_id=self.item_id,
                element_path=path,
                old_value=old,
                new_value=new,
            )
        )

    def warn(self, message: str, suggestion: str, path: str) -> None:
        self.flagged = True
        self.report.warnings.append(
            AnalysisWarning(message=message, suggestion=suggestion, item_id=self.item_id, element_path=path)
        )


class Analyzer:
    """Predicts migration changes for one source/target version pair."""

    def __init__(self, verbosity: int = 1):
        self.verbosity = verbosity

    def analyze(self, doc: cdm.CanonicalDocument, from_version: str, to_version: str) -> AnalysisReport:
        """Analyze ``doc`` for a migration from ``from_version`` to ``to_version``.

        Raises:
            UnsupportedVersionError: If either version string is unknown.
        """
        source, target = resolve_version(from_version), resolve_version(to_version)
        items = list(doc.all_items())
        report = AnalysisReport(
            source_version=from_version.strip(),
            target_version=to_version.strip(),
            total_items=len(items),
        )
        logger.info(f"Analyzing {len(items)} item(s) for {source.label} -> {target.label}")

        blocker = self._blocker(doc, source, target)
        if blocker is not None:
            report.errors.append(AnalysisError(message=blocker, fatal=True))
            report.incompatible_items = len(items)
            return self._apply_verbosity(report)

        analyze_item = self._item_12_to_21 if source is VersionFamily.QTI12 else self._item_21_to_30
        for item in items:
            scope = _ItemScope(report, item.ident)
            analyze_item(item, scope)
            if scope.flagged:
                report.incompatible_items += 1
        if source is VersionFamily.QTI21 and doc.assessment is not None:
            self._assessment_21_to_30(doc.assessment, _ItemScope(report, doc.assessment.ident))

        report.compatible_items = report.total_items - report.incompatible_items
        return self._apply_verbosity(report)

    @staticmethod
    def _blocker(doc: cdm.CanonicalDocument, source: VersionFamily, target: VersionFamily) -> Optional[str]:
        if not is_supported_path(source, target):
            return f"Migration from {source.label} to {target.label} is not supported"
        if doc.family is not source:
            return f"Document is {doc.family.label}, not {source.label}"
        return None

    def _apply_verbosity(self, report: AnalysisReport) -> AnalysisReport:
        strip = {}
        if self.verbosity < 2:
            strip["element_path"] = None
        details_strip = dict(strip)
        if self.verbosity < 3:
            details_strip.update(old_value=None, new_value=None)
        return report.model_copy(
            update={
                "details": [d.model_copy(update=details_strip) for d in report.details],
                "warnings": [w.model_copy(update=strip) for w in report.warnings],
                "errors": [e.model_copy(update=strip) for e in report.errors],
            }
        )

    # QTI 1.2 -> 2.1

    def _item_12_to_21(self, item: cdm.CanonicalItem, scope: _ItemScope) -> None:
        base = item_path(item.ident)
        if item.presentation is not None:
            for widget in item.presentation.widgets():
                self._widget_12_to_21(item, widget, scope)
            for index, material in enumerate(item.presentation.materials(), start=1):
                self._material_12_to_21(f"{base}/presentation/material[{index}]", material, scope)

        processing = item.response_processing
        if processing is not None:
            if not processing.score_model:
                scope.warn(
                    "Score model not specified in QTI 1.2",
                    "Default score model 'SumOfScores' will be applied",
                    f"{base}/resprocessing",
                )
            if not processing.variables:
                scope.detail(
                    DetailAction.TRANSFORM,
                    "No score variables declared; a default SCORE outcome will be synthesized",
                    f"{base}/resprocessing/outcomes",
                    "(none)",
                    'outcomeDeclaration identifier="SCORE" baseType="float"',
                )
            for index, rule in enumerate(processing.rules, start=1):
                if rule.continue_on is not None:
                    scope.detail(
                        DetailAction.TRANSFORM,
                        "Convert continue attribute from yes/no to true/false",
                        f"{base}/resprocessing/respcondition[{index}]",
                        f'continue="{"yes" if rule.continue_on else "no"}"',
                        f'continue="{"true" if rule.continue_on else "false"}"',
                    )

        self._interaction_hint_12_to_21(item, scope)

    def _widget_12_to_21(self, item: cdm.CanonicalItem, widget: cdm.ResponseWidget, scope: _ItemScope) -> None:
        path = f"{item_path(item.ident)}/presentation/{widget.response_type}[@ident='{widget.ident}']"
        if widget.render_choice is not None:
            render = widget.render_choice
            if render.shuffle_source is not None:
                description = (
                    "Convert shuffle attribute from yes/no to true/false"
                    if render.shuffle_source in ("yes", "no")
                    else "Unrecognized shuffle value becomes false"
                )
                scope.detail(
                    DetailAction.TRANSFORM,
                    description,
                    f"{path}/render_choice",
                    f'shuffle="{render.shuffle_source}"',
                    f'shuffle="{"true" if render.shuffle else "false"}"',
                )
        elif widget.render_fib is not None:
            target = "extendedTextInteraction" if widget.render_fib.rows > 1 else "textEntryInteraction"
            scope.detail(
                DetailAction.TRANSFORM,
                f"Fill-in-blank response becomes {target}",
                f"{path}/render_fib",
                f'render_fib rows="{widget.render_fib.rows}"',
                target,
            )
        else:
            scope.warn(
                f"Response '{widget.ident}' has no render element",
                "The response will be skipped; add a render_choice or render_fib",
                path,
            )

        processing = item.response_processing
        if processing is None:
            return
        found = set(extract_correct_response(widget.ident, processing))
        nested = [
            test.value
            for rule in processing.rules
            if rule.condition is not None and rule.sets_full_credit()
            for test in rule.condition.nested_equalities()
            if test.resp_ident == widget.ident and test.value not in found
        ]
        if nested:
            scope.warn(
                f"Correct response for '{widget.ident}' appears only inside nested and/or/not conditions",
                "Nested conditions are not inspected; add the correct response after migration",
                f"{item_path(item.ident)}/resprocessing",
            )

    def _material_12_to_21(self, path: str, material: Material, scope: _ItemScope) -> None:
        for index, text in enumerate(material.texts, start=1):
            if text.is_html:
                scope.detail(
                    DetailAction.VALIDATE,
                    "HTML content will be validated and converted to XHTML if necessary",
                    f"{path}/mattext[{index}]",
                    "text/html content",
                    "XHTML content (validated)",
                )
        for index, image in enumerate(material.images, start=1):
            if not image.image_type:
                scope.warn(
                    "Image type not specified",
                    "Image type will be inferred from file extension or set to 'image/jpeg' as default",
                    f"{path}/matimage[{index}]",
                )
        if material.audio or material.video:
            scope.warn(
                "Audio/video material has no QTI 2.1 paragraph equivalent",
                "Audio and video references will be dropped; re-add them as objects after migration",
                path,
            )

    @staticmethod
    def _interaction_hint_12_to_21(item: cdm.CanonicalItem, scope: _ItemScope) -> None:
        hint = _interaction_hint(item.metadata)
        if hint and hint not in KNOWN_INTERACTION_TYPES:
            scope.warn(
                f"Interaction type '{hint}' may need adjustment for QTI 2.1",
                "Review interaction type mapping for QTI 2.1 compliance",
                f"{item_path(item.ident)}/metadata/qtimetadata/interactiontype",
            )

    # QTI 2.1 -> 3.0

    def _item_21_to_30(self, item: cdm.CanonicalItem, scope: _ItemScope) -> None:
        base = item_path(item.ident)
        scope.detail(
            DetailAction.RENAME,
            "Item element renamed to qti-assessment-item in QTI 3.0",
            base,
            "item",
            ELEMENT_NAMES_30["item"],
        )
        if item.presentation is not None or item.response_processing is not None:
            scope.warn(
                "Legacy presentation/resprocessing found in a QTI 2.1 item",
                "Legacy content is not carried into QTI 3.0; convert it to an itemBody first",
                base,
            )
        if item.item_body is not None:
            self._item_body_21_to_30(item, scope)
        self._declarations_21_to_30(item, scope)

        for feedback in item.feedback:
            old = "modalFeedback" if feedback.content is not None and not feedback.materials else "itemfeedback"
            scope.detail(
                DetailAction.RENAME,
                "Item feedback becomes qti-modal-feedback in QTI 3.0",
                f"{base}/{old}[@ident='{feedback.ident}']",
                old,
                ELEMENT_NAMES_30[old],
            )

        metadata = item.metadata
        if metadata is not None and metadata.qti_metadata is not None:
            scope.detail(
                DetailAction.RENAME,
                "QTI metadata container renamed in QTI 3.0",
                f"{base}/metadata/qtimetadata",
                "qtimetadata",
                ELEMENT_NAMES_30["qtimetadata"],
            )
            hint = metadata.qti_metadata.interaction_type
            if hint and hint not in KNOWN_INTERACTION_TYPES:
                scope.warn(
                    f"Interaction type '{hint}' has no QTI 3.0 mapping",
                    "The value will be copied unchanged; review it after migration",
                    f"{base}/metadata/qtimetadata/interactiontype",
                )
            elif hint:
                scope.detail(
                    DetailAction.TRANSFORM,
                    "Interaction type hint translated for QTI 3.0",
                    f"{base}/metadata/qtimetadata/interactiontype",
                    hint,
                    translate_interaction_type(hint),
                )

        rubric = item.rubric_block
        if rubric is not None:
            scope.detail(
                DetailAction.RENAME,
                "Rubric block renamed in QTI 3.0",
                f"{base}/rubricBlock",
                "rubricBlock",
                ELEMENT_NAMES_30["rubricBlock"],
            )
            self._view_21_to_30(rubric.view, f"{base}/rubricBlock/@view", scope)
            self._class_attributes(rubric.content, f"{base}/rubricBlock", scope)

    def _item_body_21_to_30(self, item: cdm.CanonicalItem, scope: _ItemScope) -> None:
        base = f"{item_path(item.ident)}/itemBody"
        scope.detail(
            DetailAction.RENAME,
            "ItemBody element renamed to qti-item-body in QTI 3.0",
            base,
            "itemBody",
            ELEMENT_NAMES_30["itemBody"],
        )
        for block in item.item_body.blocks:
            if isinstance(block, cdm.Paragraph):
                self._class_attributes(block.content, f"{base}/p", scope)
            elif isinstance(block, cdm.Division):
                if block.css_class is not None:
                    scope.detail(
                        DetailAction.TRANSFORM,
                        "Class attribute becomes data-qti-class in QTI 3.0",
                        f"{base}/div/@class",
                        f'class="{block.css_class}"',
                        f'data-qti-class="{block.css_class}"',
                    )
                self._class_attributes(block.content, f"{base}/div", scope)
            else:
                element = _INTERACTION_ELEMENTS[type(block)]
                path = f"{base}/{element}[@responseIdentifier='{block.response_identifier}']"
                scope.detail(
                    DetailAction.RENAME,
                    "Interaction elements prefixed with 'qti-' in QTI 3.0",
                    path,
                    element,
                    ELEMENT_NAMES_30[element],
                )
                if isinstance(block, cdm.ChoiceInteraction) and block.choices:
                    scope.detail(
                        DetailAction.RENAME,
                        "SimpleChoice elements renamed to qti-simple-choice in QTI 3.0",
                        f"{path}/simpleChoice",
                        "simpleChoice",
                        ELEMENT_NAMES_30["simpleChoice"],
                    )
                    for choice in block.choices:
                        self._class_attributes(choice.content, f"{path}/simpleChoice", scope)

    def _declarations_21_to_30(self, item: cdm.CanonicalItem, scope: _ItemScope) -> None:
        base = item_path(item.ident)
        groups = (
            ("responseDeclaration", "Response declaration renamed in QTI 3.0", item.response_declarations),
            ("outcomeDeclaration", "Outcome declaration renamed in QTI 3.0", item.outcome_declarations),
            ("templateDeclaration", "Template declaration renamed in QTI 3.0", item.template_declarations),
        )
        for element, description, declarations in groups:
            for decl in declarations:
                path = f"{base}/{element}[@identifier='{decl.identifier}']"
                scope.detail(DetailAction.RENAME, description, path, element, ELEMENT_NAMES_30[element])
                self._base_type_21_to_30(decl.base_type, f"{path}/@baseType", scope)

    @staticmethod
    def _base_type_21_to_30(base_type: Optional[str], path: str, scope: _ItemScope) -> None:
        if base_type not in enum_values(BaseType):
            return
        translated = BASE_TYPES_30[BaseType(base_type)]
        if translated != base_type:
            scope.detail(
                DetailAction.TRANSFORM,
                f"BaseType '{base_type}' renamed to '{translated}' in QTI 3.0",
                path,
                base_type,
                translated,
            )

    @staticmethod
    def _view_21_to_30(view: Optional[str], path: str, scope: _ItemScope) -> None:
        if view == View.TEST_CONSTRUCTOR.value:
            scope.detail(
                DetailAction.TRANSFORM,
                "View 'testConstructor' hyphenated in QTI 3.0",
                path,
                view,
                "test-constructor",
            )

    @staticmethod
    def _class_attributes(content: Optional[str], path: str, scope: _ItemScope) -> None:
        if markup.has_class_attribute(content):
            scope.warn(
                "HTML class attributes found in content",
                "Class attributes will be converted to data-qti-class in QTI 3.0",
                path,
            )

    def _assessment_21_to_30(self, assessment: cdm.CanonicalAssessment, scope: _ItemScope) -> None:
        scope.detail(
            DetailAction.RENAME,
            "Assessment element renamed to qti-assessment-test in QTI 3.0",
            "assessment",
            "assessment",
            ELEMENT_NAMES_30["assessment"],
        )
        scope.warn(
            "Assessment and section structure keeps the QTI 2.1 layout",
            "Only the document root and items use QTI 3.0 names; review the assessment structure after migration",
            "assessment/section",
        )
        if assessment.rubric_block is not None:
            self._view_21_to_30(assessment.rubric_block.view, "assessment/rubricBlock/@view", scope)


def _interaction_hint(metadata: Optional[Metadata]) -> Optional[str]:
    if metadata is None or metadata.qti_metadata is None:
        return None
    return metadata.qti_metadata.interaction_type
