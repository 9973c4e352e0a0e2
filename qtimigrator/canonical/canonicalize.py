"""Convert family-specific document models into the canonical model.

Each canonicalizer defaults an absent version to its family's canonical
version string, rejects versions from another family, flattens nested
containers and normalizes boolean-like attribute encodings.
"""

from typing import List, Union, Iterable, Optional

from loguru import logger

from qtimigrator.errors import ErrorList, ValidationError
from qtimigrator.versions import VersionFamily, is_family_member
from qtimigrator.models import qti12 as a
from qtimigrator.models import qti21 as b
from qtimigrator.models import qti30 as c
from qtimigrator.models import canonical as cdm
from qtimigrator.models.common import Material


FamilyDocument = Union[a.Document12, b.Document21, c.Document30]


def yes_no(value: Optional[str]) -> bool:
    """Legacy encoding: only the exact string ``"yes"`` is true."""
    return value == "yes"


def true_false(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


def _continue_flag(value: Optional[str]) -> Optional[bool]:
    """Only the exact strings ``"yes"`` and ``"no"`` count; anything else is absent."""
    if value in ("yes", "no"):
        return value == "yes"
    return None


def _check_version(version: Optional[str], family: VersionFamily) -> str:
    if version is None or not version.strip():
        return family.value
    if not is_family_member(version, family):
        raise ValidationError(
            f"invalid QTI version for {family.label} document: {version!r}",
            details=f"Expected a {family.label} family version",
        )
    return version.strip()


# Family A


def _flatten_children(children: Iterable) -> List:
    entries = []
    for child in children:
        if isinstance(child, a.Flow):
            entries.extend(_flatten_children(child.children))
        elif isinstance(child, a.Response):
            entries.append(_widget(child))
        else:
            entries.append(child)
    return entries


def _widget(response: a.Response) -> cdm.ResponseWidget:
    render_choice = None
    if response.render_choice is not None:
        rc = response.render_choice
        render_choice = cdm.ChoiceRender(
            shuffle=yes_no(rc.shuffle),
            shuffle_source=rc.shuffle,
            min_number=rc.min_number,
            max_number=rc.max_number,
            labels=[cdm.ChoiceLabel(ident=label.ident, material=label.material) for label in rc.labels],
        )
    render_fib = None
    if response.render_fib is not None:
        rf = response.render_fib
        render_fib = cdm.FibRender(
            fib_type=rf.fib_type,
            rows=rf.rows,
            max_chars=rf.max_chars,
            columns=rf.columns,
            prompt=rf.prompt,
        )
    return cdm.ResponseWidget(
        ident=response.ident,
        response_type=response.response_type,
        cardinality=response.rcardinality,
        render_choice=render_choice,
        render_fib=render_fib,
    )


def _presentation(presentation: Optional[a.Presentation]) -> Optional[cdm.CanonicalPresentation]:
    if presentation is None:
        return None
    return cdm.CanonicalPresentation(label=presentation.label, entries=_flatten_children(presentation.children))


def _response_processing(resprocessing: Optional[a.ResProcessing]) -> Optional[cdm.CanonicalResponseProcessing]:
    if resprocessing is None:
        return None
    return cdm.CanonicalResponseProcessing(
        score_model=resprocessing.score_model,
        variables=[
            cdm.ScoreVariable(
                name=decvar.var_name,
                var_type=decvar.var_type,
                default_value=decvar.default_value,
                min_value=decvar.min_value,
                max_value=decvar.max_value,
            )
            for decvar in resprocessing.outcomes
        ],
        rules=[
            cdm.OutcomeRule(
                title=rc.title,
                continue_on=_continue_flag(rc.continue_value),
                condition=rc.condition,
                assignments=[
                    cdm.ScoreAssignment(action=sv.action, var_name=sv.var_name, value=sv.value)
                    for sv in rc.set_vars
                ],
                feedback_refs=[df.link_ref_id for df in rc.display_feedback],
            )
            for rc in resprocessing.conditions
        ],
    )


def _flatten_flow_mats(flow_mats: Iterable[a.FlowMat]) -> List[Material]:
    materials: List[Material] = []
    for flow_mat in flow_mats:
        materials.extend(flow_mat.materials)
        materials.extend(_flatten_flow_mats(flow_mat.flow_mats))
    return materials


def _legacy_feedback(feedback: Union[a.ItemFeedback12, b.ItemFeedback21]) -> cdm.Feedback:
    return cdm.Feedback(
        ident=feedback.ident,
        title=feedback.title,
        materials=list(feedback.materials) + _flatten_flow_mats(feedback.flow_mats),
    )


def _modal_feedback(feedback: Union[b.ModalFeedback21, c.ModalFeedback30]) -> cdm.Feedback:
    return cdm.Feedback(
        ident=feedback.identifier,
        title=feedback.title,
        content=feedback.content,
        outcome_identifier=feedback.outcome_identifier,
        show_hide=feedback.show_hide,
    )


def _item12(item: a.Item12) -> cdm.CanonicalItem:
    return cdm.CanonicalItem(
        ident=item.ident,
        title=item.title,
        max_attempts=item.max_attempts,
        metadata=item.metadata,
        presentation=_presentation(item.presentation),
        response_processing=_response_processing(item.resprocessing),
        feedback=[_legacy_feedback(fb) for fb in item.feedback],
        rubric_block=item.rubric_block,
    )


def _flatten_sections12(sections: Iterable[a.Section12]) -> List[cdm.CanonicalSection]:
    flat: List[cdm.CanonicalSection] = []
    for section in sections:
        flat.append(
            cdm.CanonicalSection(
                ident=section.ident,
                title=section.title,
                metadata=section.metadata,
                items=[_item12(item) for item in section.items],
            )
        )
        flat.extend(_flatten_sections12(section.sections))
    return flat


def canonicalize_qti12(doc: a.Document12) -> cdm.CanonicalDocument:
    """Canonicalize a QTI 1.2 document."""
    version = _check_version(doc.version, VersionFamily.QTI12)
    assessment = None
    if doc.assessment is not None:
        assessment = cdm.CanonicalAssessment(
            ident=doc.assessment.ident,
            title=doc.assessment.title,
            metadata=doc.assessment.metadata,
            objectives=doc.assessment.objectives,
            rubric_block=doc.assessment.rubric_block,
            sections=_flatten_sections12(doc.assessment.sections),
        )
    result = cdm.CanonicalDocument(
        version=version,
        family=VersionFamily.QTI12,
        items=[_item12(item) for item in doc.items],
        assessment=assessment,
        metadata=doc.metadata,
    )
    check_identifiers(result)
    logger.debug(f"Canonicalized QTI 1.2 document with {sum(1 for _ in result.all_items())} item(s)")
    return result


# Family B


def _block21(block) -> cdm.BodyBlock:
    if isinstance(block, b.Paragraph21):
        return cdm.Paragraph(content=block.content)
    if isinstance(block, b.Division21):
        return cdm.Division(css_class=block.css_class, content=block.content)
    if isinstance(block, b.ChoiceInteraction21):
        return cdm.ChoiceInteraction(
            response_identifier=block.response_identifier,
            shuffle=true_false(block.shuffle),
            max_choices=block.max_choices,
            min_choices=block.min_choices,
            prompt=block.prompt,
            choices=[
                cdm.SimpleChoice(identifier=ch.identifier, fixed=true_false(ch.fixed), content=ch.content)
                for ch in block.choices
            ],
        )
    if isinstance(block, b.TextEntryInteraction21):
        return cdm.TextEntryInteraction(
            response_identifier=block.response_identifier,
            expected_length=block.expected_length,
            pattern_mask=block.pattern_mask,
            placeholder_text=block.placeholder_text,
        )
    return cdm.ExtendedTextInteraction(
        response_identifier=block.response_identifier,
        min_strings=block.min_strings,
        max_strings=block.max_strings,
        expected_lines=block.expected_lines,
        expected_length=block.expected_length,
        prompt=block.prompt,
    )


def _mapping(mapping) -> Optional[cdm.Mapping]:
    if mapping is None:
        return None
    return cdm.Mapping(
        lower_bound=mapping.lower_bound,
        upper_bound=mapping.upper_bound,
        default_value=mapping.default_value,
        entries=[cdm.MapEntry(map_key=e.map_key, mapped_value=e.mapped_value) for e in mapping.entries],
    )


def _declarations(item: Union[b.Item21, c.AssessmentItem30]) -> dict:
    """Declarations share field names across families B and C."""
    return dict(
        response_declarations=[
            cdm.ResponseDeclaration(
                identifier=d.identifier,
                cardinality=d.cardinality,
                base_type=d.base_type,
                correct_response=list(d.correct_response),
                mapping=_mapping(d.mapping),
            )
            for d in item.response_declarations
        ],
        outcome_declarations=[
            cdm.OutcomeDeclaration(
                identifier=d.identifier,
                cardinality=d.cardinality,
                base_type=d.base_type,
                default_value=d.default_value,
            )
            for d in item.outcome_declarations
        ],
        template_declarations=[
            cdm.TemplateDeclaration(
                identifier=d.identifier,
                cardinality=d.cardinality,
                base_type=d.base_type,
                param_variable=true_false(d.param_variable),
                default_value=d.default_value,
            )
            for d in item.template_declarations
        ],
    )


def _item21(item: b.Item21) -> cdm.CanonicalItem:
    item_body = None
    if item.item_body is not None:
        item_body = cdm.ItemBody(blocks=[_block21(block) for block in item.item_body.blocks])
    return cdm.CanonicalItem(
        ident=item.ident,
        title=item.title,
        max_attempts=item.max_attempts,
        adaptive=true_false(item.adaptive),
        time_dependent=true_false(item.time_dependent),
        metadata=item.metadata,
        presentation=_presentation(item.presentation),
        response_processing=_response_processing(item.resprocessing),
        item_body=item_body,
        feedback=[_legacy_feedback(fb) for fb in item.feedback] + [_modal_feedback(fb) for fb in item.modal_feedback],
        rubric_block=item.rubric_block,
        **_declarations(item),
    )


def canonicalize_qti21(doc: b.Document21) -> cdm.CanonicalDocument:
    """Canonicalize a QTI 2.1 or 2.2 document."""
    version = _check_version(doc.version, VersionFamily.QTI21)
    assessment = None
    if doc.assessment is not None:
        assessment = cdm.CanonicalAssessment(
            ident=doc.assessment.ident,
            title=doc.assessment.title,
            metadata=doc.assessment.metadata,
            objectives=doc.assessment.objectives,
            rubric_block=doc.assessment.rubric_block,
            sections=[
                cdm.CanonicalSection(
                    ident=section.ident,
                    title=section.title,
                    metadata=section.metadata,
                    items=[_item21(item) for item in section.items],
                )
                for section in doc.assessment.sections
            ],
        )
    result = cdm.CanonicalDocument(
        version=version,
        family=VersionFamily.QTI21,
        items=[_item21(item) for item in doc.items],
        assessment=assessment,
        metadata=doc.metadata,
    )
    check_identifiers(result)
    logger.debug(f"Canonicalized QTI {version} document with {sum(1 for _ in result.all_items())} item(s)")
    return result


# Family C


def _block30(block) -> cdm.BodyBlock:
    if isinstance(block, c.Paragraph30):
        return cdm.Paragraph(content=block.content)
    if isinstance(block, c.Division30):
        return cdm.Division(css_class=block.css_class, content=block.content)
    if isinstance(block, c.ChoiceInteraction30):
        return cdm.ChoiceInteraction(
            response_identifier=block.response_identifier,
            shuffle=true_false(block.shuffle),
            max_choices=block.max_choices,
            min_choices=block.min_choices,
            prompt=block.prompt,
            choices=[
                cdm.SimpleChoice(identifier=ch.identifier, fixed=true_false(ch.fixed), content=ch.content)
                for ch in block.choices
            ],
        )
    if isinstance(block, c.TextEntryInteraction30):
        return cdm.TextEntryInteraction(
            response_identifier=block.response_identifier,
            expected_length=block.expected_length,
            pattern_mask=block.pattern_mask,
            placeholder_text=block.placeholder_text,
        )
    return cdm.ExtendedTextInteraction(
        response_identifier=block.response_identifier,
        min_strings=block.min_strings,
        max_strings=block.max_strings,
        expected_lines=block.expected_lines,
        expected_length=block.expected_length,
        prompt=block.prompt,
    )


def _item30(item: c.AssessmentItem30) -> cdm.CanonicalItem:
    item_body = None
    if item.item_body is not None:
        item_body = cdm.ItemBody(blocks=[_block30(block) for block in item.item_body.blocks])
    return cdm.CanonicalItem(
        ident=item.identifier,
        title=item.title,
        adaptive=true_false(item.adaptive),
        time_dependent=true_false(item.time_dependent),
        metadata=item.metadata,
        item_body=item_body,
        feedback=[_modal_feedback(fb) for fb in item.modal_feedback],
        rubric_block=item.rubric_block,
        **_declarations(item),
    )


def canonicalize_qti30(doc: c.Document30) -> cdm.CanonicalDocument:
    """Canonicalize a QTI 3.0 document, single-item or container form."""
    version = _check_version(doc.version, VersionFamily.QTI30)
    assessment = None
    if doc.assessment is not None:
        assessment = cdm.CanonicalAssessment(
            ident=doc.assessment.ident,
            title=doc.assessment.title,
            metadata=doc.assessment.metadata,
            objectives=doc.assessment.objectives,
            rubric_block=doc.assessment.rubric_block,
            sections=[
                cdm.CanonicalSection(
                    ident=section.ident,
                    title=section.title,
                    metadata=section.metadata,
                    items=[_item30(item) for item in section.items],
                )
                for section in doc.assessment.sections
            ],
        )
    result = cdm.CanonicalDocument(
        version=version,
        family=VersionFamily.QTI30,
        items=[_item30(item) for item in doc.items],
        assessment=assessment,
        metadata=doc.metadata,
    )
    check_identifiers(result)
    logger.debug(f"Canonicalized QTI 3.0 document with {sum(1 for _ in result.all_items())} item(s)")
    return result


_CANONICALIZERS = {
    VersionFamily.QTI12: (a.Document12, canonicalize_qti12),
    VersionFamily.QTI21: (b.Document21, canonicalize_qti21),
    VersionFamily.QTI30: (c.Document30, canonicalize_qti30),
}


def canonicalize(doc: FamilyDocument, family: VersionFamily) -> cdm.CanonicalDocument:
    """Dispatch to the canonicalizer of ``family``.

    Raises:
        ValidationError: If ``doc`` is not a model of ``family`` or declares a
            version outside it.
    """
    expected_type, canonicalizer = _CANONICALIZERS[family]
    if not isinstance(doc, expected_type):
        raise ValidationError(
            f"{type(doc).__name__} cannot be canonicalized as {family.label}",
            details="The canonicalizer does not match the document family",
        )
    return canonicalizer(doc)


# Identifier checks


class _Scope:
    """One identifier namespace inside an item."""

    def __init__(self, item: cdm.CanonicalItem, errors: ErrorList):
        self.item = item
        self.errors = errors
        self.seen = {}

    def claim(self, identifier: str, path: str) -> None:
        if not identifier:
            return
        if identifier in self.seen:
            self.errors.add(
                ValidationError(
                    f"duplicate identifier {identifier!r}",
                    details=f"first declared at {self.seen[identifier]}",
                    item_id=self.item.ident,
                    element_path=path,
                )
            )
            return
        self.seen[identifier] = path


def _item_identifier_errors(item: cdm.CanonicalItem, errors: ErrorList) -> None:
    root = f"item[@ident='{item.ident}']"

    if item.presentation is not None:
        widgets = _Scope(item, errors)
        for widget in item.presentation.widgets():
            path = f"{root}/presentation/{widget.response_type}[@ident='{widget.ident}']"
            widgets.claim(widget.ident, path)
            if widget.render_choice is not None:
                labels = _Scope(item, errors)
                for label in widget.render_choice.labels:
                    labels.claim(label.ident, f"{path}/render_choice/response_label[@ident='{label.ident}']")

    declarations = _Scope(item, errors)
    for kind, entries in (
        ("responseDeclaration", item.response_declarations),
        ("outcomeDeclaration", item.outcome_declarations),
        ("templateDeclaration", item.template_declarations),
    ):
        for declaration in entries:
            declarations.claim(declaration.identifier, f"{root}/{kind}[@identifier='{declaration.identifier}']")

    if item.item_body is not None:
        bindings = _Scope(item, errors)
        for interaction in item.item_body.interactions():
            path = f"{root}/itemBody/{interaction.kind}[@responseIdentifier='{interaction.response_identifier}']"
            bindings.claim(interaction.response_identifier, path)
            if isinstance(interaction, cdm.ChoiceInteraction):
                choices = _Scope(item, errors)
                for choice in interaction.choices:
                    choices.claim(choice.identifier, f"{path}/simpleChoice[@identifier='{choice.identifier}']")


def check_identifiers(doc: cdm.CanonicalDocument) -> None:
    """Enforce per-item identifier uniqueness.

    Every item is checked before raising; the first problem is raised and
    its details mention how many were found in total.
    """
    errors = ErrorList()
    for item in doc.all_items():
        _item_identifier_errors(item, errors)
    if not errors.has_errors():
        return
    first = errors.errors[0]
    if len(errors) > 1:
        raise ValidationError(
            first.message,
            details=f"{first.details} ({errors})",
            item_id=first.item_id,
            element_path=first.element_path,
        )
    raise first
