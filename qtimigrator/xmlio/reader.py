"""Read QTI XML into the family document models.

Readers are permissive about the element spellings seen in the wild (for
example ``itemmetadata`` next to ``metadata``, ``imagtype`` next to
``imagetype``) but strict about numbers: a non-numeric value in a numeric
attribute is a ``ParsingError``.
"""

import xml.etree.ElementTree as ET
from typing import List, Optional

from loguru import logger

from qtimigrator.models import qti12 as a
from qtimigrator.models import qti21 as b
from qtimigrator.models import qti30 as c
from qtimigrator.errors import ParsingError
from qtimigrator.versions import VersionFamily
from qtimigrator.xmlio.vocabulary import QTI21, QTI30, Vocabulary
from qtimigrator.models.common import (
    MatText,
    Material,
    MatAudio,
    MatImage,
    MatVideo,
    Metadata,
    Objective,
    QTIMetadata,
    RubricBlock,
)
from qtimigrator.models.conditions import COMPARISON_OPS, Or, And, Not, VarEqual, VarCompare, ConditionVar
from qtimigrator.xmlio.helpers import (
    attr,
    text,
    child,
    children,
    int_attr,
    localname,
    outer_xml,
    parse_xml,
    content_of,
    float_attr,
)


RESPONSE_TAGS = ("response_lid", "response_str", "response_num")

_QTI_METADATA_BOOLEANS = ("timedependent", "composite", "solutionavailable")
_QTI_METADATA_STRINGS = ("interactiontype", "feedbacktype", "scoringmode", "toolname", "toolversion", "toolvendor")
_QTI_METADATA_FIELDS = {
    "timedependent": "time_dependent",
    "composite": "composite",
    "solutionavailable": "solution_available",
    "interactiontype": "interaction_type",
    "feedbacktype": "feedback_type",
    "scoringmode": "scoring_mode",
    "toolname": "tool_name",
    "toolversion": "tool_version",
    "toolvendor": "tool_vendor",
}


# Shared leaves


def _truthy(value: str) -> bool:
    return value.strip().lower() in ("true", "yes", "1")


def read_qti_metadata(el: Optional[ET.Element]) -> Optional[QTIMetadata]:
    """Accepts named child elements and ``qtimetadatafield`` label/entry pairs."""
    if el is None:
        return None
    raw = {}
    for node in el:
        name = localname(node.tag).lower()
        if name == "qtimetadatafield":
            label = text(child(node, "fieldlabel")).lower().removeprefix("qmd_")
            raw[label] = text(child(node, "fieldentry"))
        else:
            raw[name] = text(node)
    values = {}
    for key, field in _QTI_METADATA_FIELDS.items():
        if key not in raw:
            continue
        values[field] = _truthy(raw[key]) if key in _QTI_METADATA_BOOLEANS else (raw[key] or None)
    return QTIMetadata(**values)


def read_metadata(el: Optional[ET.Element], container: str = "qtimetadata") -> Optional[Metadata]:
    if el is None:
        return None
    return Metadata(
        schema_name=text(child(el, "schema")) or None,
        schema_version=text(child(el, "schemaversion")) or None,
        lom=outer_xml(child(el, "lom")),
        qti_metadata=read_qti_metadata(child(el, container)),
    )


def read_material(el: ET.Element) -> Material:
    return Material(
        label=attr(el, "label"),
        texts=[
            MatText(
                text_type=attr(node, "texttype"),
                charset=attr(node, "charset"),
                xml_space=attr(node, "space"),
                content=content_of(node),
            )
            for node in children(el, "mattext", "matemtext")
        ],
        images=[
            MatImage(
                uri=attr(node, "uri") or "",
                image_type=attr(node, "imagetype", "imagtype"),
                width=int_attr(node, "width"),
                height=int_attr(node, "height"),
            )
            for node in children(el, "matimage")
        ],
        audio=[
            MatAudio(uri=attr(node, "uri") or "", audio_type=attr(node, "audiotype"))
            for node in children(el, "mataudio")
        ],
        video=[
            MatVideo(
                uri=attr(node, "uri") or "",
                video_type=attr(node, "videotype"),
                width=int_attr(node, "width"),
                height=int_attr(node, "height"),
            )
            for node in children(el, "matvideo")
        ],
    )


def read_rubric(el: Optional[ET.Element]) -> Optional[RubricBlock]:
    if el is None:
        return None
    return RubricBlock(use=attr(el, "use"), view=attr(el, "view"), content=content_of(el))


def read_objectives(el: ET.Element) -> List[Objective]:
    objectives = []
    for group in children(el, "objectives"):
        nested = children(group, "objective")
        for node in nested or [group]:
            material = child(node, "material")
            objectives.append(
                Objective(
                    title=attr(node, "title", "view"),
                    material=read_material(material) if material is not None else None,
                )
            )
    return objectives


# Family A


def read_condition(el: ET.Element):
    name = localname(el.tag)
    if name == "varequal":
        return VarEqual(resp_ident=attr(el, "respident") or "", case=attr(el, "case"), value=text(el))
    if name in COMPARISON_OPS:
        return VarCompare(
            op=name,
            resp_ident=attr(el, "respident") or "",
            value=text(el),
            qualifier=attr(el, "setmatch", "areatype", "case"),
        )
    combinators = {"not": Not, "and": And, "or": Or}
    if name in combinators:
        operands = [op for op in (read_condition(node) for node in el) if op is not None]
        return combinators[name](operands=operands)
    logger.debug(f"Ignoring unsupported condition element <{name}>")
    return None


def read_conditionvar(el: Optional[ET.Element]) -> Optional[ConditionVar]:
    if el is None:
        return None
    return ConditionVar(expressions=[op for op in (read_condition(node) for node in el) if op is not None])


def _response_labels(el: ET.Element) -> List[a.ResponseLabel]:
    labels = []
    for node in el:
        name = localname(node.tag)
        if name == "response_label":
            material = child(node, "material")
            labels.append(
                a.ResponseLabel(
                    ident=attr(node, "ident") or "",
                    rarea=attr(node, "rarea"),
                    rrange=attr(node, "rrange"),
                    material=read_material(material) if material is not None else None,
                )
            )
        elif name == "flow_label":
            labels.extend(_response_labels(node))
    return labels


def read_response(el: ET.Element) -> a.Response:
    render_choice = None
    rc = child(el, "render_choice")
    if rc is not None:
        render_choice = a.RenderChoice(
            shuffle=attr(rc, "shuffle"),
            min_number=int_attr(rc, "minnumber"),
            max_number=int_attr(rc, "maxnumber"),
            labels=_response_labels(rc),
        )
    render_fib = None
    rf = child(el, "render_fib")
    if rf is not None:
        render_fib = a.RenderFib(
            encoding=attr(rf, "encoding"),
            fib_type=attr(rf, "fibtype"),
            rows=int_attr(rf, "rows"),
            max_chars=int_attr(rf, "maxchars"),
            columns=int_attr(rf, "columns"),
            prompt=attr(rf, "prompt"),
        )
    return a.Response(
        ident=attr(el, "ident") or "",
        response_type=localname(el.tag),
        rcardinality=attr(el, "rcardinality"),
        rtiming=attr(el, "rtiming"),
        render_choice=render_choice,
        render_fib=render_fib,
    )


def read_presentation_children(el: ET.Element) -> list:
    entries = []
    for node in el:
        name = localname(node.tag)
        if name == "material":
            entries.append(read_material(node))
        elif name in RESPONSE_TAGS:
            entries.append(read_response(node))
        elif name == "flow":
            entries.append(a.Flow(flow_class=attr(node, "class"), children=read_presentation_children(node)))
        else:
            logger.debug(f"Ignoring presentation element <{name}>")
    return entries


def read_presentation(el: Optional[ET.Element]) -> Optional[a.Presentation]:
    if el is None:
        return None
    return a.Presentation(label=attr(el, "label"), children=read_presentation_children(el))


def read_resprocessing(el: Optional[ET.Element]) -> Optional[a.ResProcessing]:
    if el is None:
        return None
    return a.ResProcessing(
        score_model=attr(el, "scoremodel"),
        outcomes=[
            a.DecVar(
                var_name=attr(node, "varname") or "SCORE",
                var_type=attr(node, "vartype"),
                default_value=attr(node, "defaultval"),
                min_value=attr(node, "minvalue"),
                max_value=attr(node, "maxvalue"),
            )
            for node in children(child(el, "outcomes"), "decvar")
        ],
        conditions=[
            a.RespCondition(
                title=attr(node, "title"),
                continue_value=attr(node, "continue"),
                condition=read_conditionvar(child(node, "conditionvar")),
                set_vars=[
                    a.SetVar(
                        action=attr(sv, "action") or "Set",
                        var_name=attr(sv, "varname") or "SCORE",
                        value=text(sv),
                    )
                    for sv in children(node, "setvar")
                ],
                display_feedback=[
                    a.DisplayFeedback(feedback_type=attr(df, "feedbacktype"), link_ref_id=attr(df, "linkrefid") or "")
                    for df in children(node, "displayfeedback")
                ],
            )
            for node in children(el, "respcondition")
        ],
    )


def read_flow_mat(el: ET.Element) -> a.FlowMat:
    return a.FlowMat(
        materials=[read_material(node) for node in children(el, "material")],
        flow_mats=[read_flow_mat(node) for node in children(el, "flow_mat")],
    )


def _item_metadata(el: ET.Element) -> Optional[Metadata]:
    return read_metadata(child(el, "metadata", "itemmetadata"))


def read_item12(el: ET.Element) -> a.Item12:
    return a.Item12(
        ident=attr(el, "ident") or "",
        title=attr(el, "title"),
        max_attempts=int_attr(el, "maxattempts"),
        metadata=_item_metadata(el),
        presentation=read_presentation(child(el, "presentation")),
        resprocessing=read_resprocessing(child(el, "resprocessing")),
        feedback=[
            a.ItemFeedback12(
                ident=attr(node, "ident") or "",
                title=attr(node, "title"),
                materials=[read_material(m) for m in children(node, "material")],
                flow_mats=[read_flow_mat(f) for f in children(node, "flow_mat")],
            )
            for node in children(el, "itemfeedback")
        ],
        rubric_block=read_rubric(child(el, "rubricBlock", "rubric")),
    )


def read_section12(el: ET.Element) -> a.Section12:
    return a.Section12(
        ident=attr(el, "ident") or "",
        title=attr(el, "title"),
        metadata=read_metadata(child(el, "metadata", "sectionmetadata")),
        items=[read_item12(node) for node in children(el, "item")],
        sections=[read_section12(node) for node in children(el, "section")],
    )


def _expect_root(root: ET.Element, family: VersionFamily, *names: str) -> str:
    name = localname(root.tag)
    if name not in names:
        raise ParsingError(
            f"unexpected root element <{name}> for a {family.label} document",
            details=f"Expected one of: {', '.join(names)}",
        )
    return name


def parse_qti12(content: bytes) -> a.Document12:
    """Parse a QTI 1.2 ``questestinterop`` document."""
    root = parse_xml(content, VersionFamily.QTI12.label)
    _expect_root(root, VersionFamily.QTI12, "questestinterop")
    assessment = None
    node = child(root, "assessment")
    if node is not None:
        assessment = a.Assessment12(
            ident=attr(node, "ident") or "",
            title=attr(node, "title"),
            metadata=read_metadata(child(node, "metadata", "assessmentmetadata")),
            objectives=read_objectives(node),
            rubric_block=read_rubric(child(node, "rubricBlock", "rubric")),
            sections=[read_section12(s) for s in children(node, "section")],
        )
    return a.Document12(
        version=attr(root, "version"),
        items=[read_item12(item) for item in children(root, "item")],
        assessment=assessment,
        metadata=read_metadata(child(root, "metadata")),
    )


# Families B and C share one body/declaration shape under different names


def read_body_block(el: ET.Element, vocab: Vocabulary):
    name = localname(el.tag)
    if name == "p":
        return vocab.model("p")(content=content_of(el))
    if name == "div":
        return vocab.model("div")(css_class=attr(el, vocab.at("class")), content=content_of(el))
    if name == vocab.el("choiceInteraction"):
        prompt = child(el, vocab.el("prompt"))
        return vocab.model("choiceInteraction")(
            response_identifier=attr(el, vocab.at("responseIdentifier")) or "",
            shuffle=attr(el, "shuffle"),
            max_choices=int_attr(el, vocab.at("maxChoices")),
            min_choices=int_attr(el, vocab.at("minChoices")),
            prompt=content_of(prompt) if prompt is not None else None,
            choices=[
                vocab.model("simpleChoice")(
                    identifier=attr(node, "identifier") or "",
                    fixed=attr(node, "fixed"),
                    content=content_of(node),
                )
                for node in children(el, vocab.el("simpleChoice"))
            ],
        )
    if name == vocab.el("textEntryInteraction"):
        return vocab.model("textEntryInteraction")(
            response_identifier=attr(el, vocab.at("responseIdentifier")) or "",
            expected_length=int_attr(el, vocab.at("expectedLength")),
            pattern_mask=attr(el, vocab.at("patternMask")),
            placeholder_text=attr(el, vocab.at("placeholderText")),
        )
    if name == vocab.el("extendedTextInteraction"):
        prompt = child(el, vocab.el("prompt"))
        return vocab.model("extendedTextInteraction")(
            response_identifier=attr(el, vocab.at("responseIdentifier")) or "",
            min_strings=int_attr(el, vocab.at("minStrings")),
            max_strings=int_attr(el, vocab.at("maxStrings")),
            expected_lines=int_attr(el, vocab.at("expectedLines")),
            expected_length=int_attr(el, vocab.at("expectedLength")),
            prompt=content_of(prompt) if prompt is not None else None,
        )
    logger.warning(f"Unsupported item body element <{name}> skipped")
    return None


def read_item_body(el: Optional[ET.Element], vocab: Vocabulary):
    if el is None:
        return None
    blocks = [block for block in (read_body_block(node, vocab) for node in el) if block is not None]
    return vocab.model("itemBody")(blocks=blocks)


def _default_value(el: ET.Element, vocab: Vocabulary) -> Optional[str]:
    node = child(el, vocab.el("defaultValue"))
    if node is None:
        return None
    values = children(node, vocab.el("value"))
    return text(values[0]) if values else text(node)


def read_declarations(el: ET.Element, vocab: Vocabulary) -> dict:
    responses = []
    for node in children(el, vocab.el("responseDeclaration")):
        mapping = None
        mapping_el = child(node, vocab.el("mapping"))
        if mapping_el is not None:
            mapping = vocab.model("mapping")(
                lower_bound=float_attr(mapping_el, vocab.at("lowerBound")),
                upper_bound=float_attr(mapping_el, vocab.at("upperBound")),
                default_value=float_attr(mapping_el, vocab.at("defaultValue")) or 0.0,
                entries=[
                    vocab.model("mapEntry")(
                        map_key=attr(entry, vocab.at("mapKey")) or "",
                        mapped_value=float_attr(entry, vocab.at("mappedValue")) or 0.0,
                    )
                    for entry in children(mapping_el, vocab.el("mapEntry"))
                ],
            )
        responses.append(
            vocab.model("responseDeclaration")(
                identifier=attr(node, "identifier") or "",
                cardinality=attr(node, "cardinality") or "single",
                base_type=attr(node, vocab.at("baseType")),
                correct_response=[
                    text(value)
                    for value in children(child(node, vocab.el("correctResponse")), vocab.el("value"))
                ],
                mapping=mapping,
            )
        )
    outcomes = [
        vocab.model("outcomeDeclaration")(
            identifier=attr(node, "identifier") or "",
            cardinality=attr(node, "cardinality") or "single",
            base_type=attr(node, vocab.at("baseType")),
            default_value=_default_value(node, vocab),
        )
        for node in children(el, vocab.el("outcomeDeclaration"))
    ]
    templates = [
        vocab.model("templateDeclaration")(
            identifier=attr(node, "identifier") or "",
            cardinality=attr(node, "cardinality") or "single",
            base_type=attr(node, vocab.at("baseType")),
            param_variable=attr(node, vocab.at("paramVariable")),
            default_value=_default_value(node, vocab),
        )
        for node in children(el, vocab.el("templateDeclaration"))
    ]
    return dict(response_declarations=responses, outcome_declarations=outcomes, template_declarations=templates)


def read_modal_feedback(el: ET.Element, vocab: Vocabulary) -> list:
    return [
        vocab.model("modalFeedback")(
            identifier=attr(node, "identifier") or "",
            title=attr(node, "title"),
            outcome_identifier=attr(node, vocab.at("outcomeIdentifier")),
            show_hide=attr(node, vocab.at("showHide")),
            content=content_of(node),
        )
        for node in children(el, vocab.el("modalFeedback"))
    ]


# Family B


def read_item21(el: ET.Element) -> b.Item21:
    return b.Item21(
        ident=attr(el, "ident", "identifier") or "",
        title=attr(el, "title"),
        max_attempts=int_attr(el, "maxattempts", "maxAttempts"),
        adaptive=attr(el, "adaptive"),
        time_dependent=attr(el, "timeDependent"),
        metadata=_item_metadata(el),
        presentation=read_presentation(child(el, "presentation")),
        resprocessing=read_resprocessing(child(el, "resprocessing")),
        item_body=read_item_body(child(el, "itemBody"), QTI21),
        feedback=[
            b.ItemFeedback21(
                ident=attr(node, "ident") or "",
                title=attr(node, "title"),
                materials=[read_material(m) for m in children(node, "material")],
                flow_mats=[read_flow_mat(f) for f in children(node, "flow_mat")],
            )
            for node in children(el, "itemfeedback")
        ],
        modal_feedback=read_modal_feedback(el, QTI21),
        rubric_block=read_rubric(child(el, "rubricBlock")),
        **read_declarations(el, QTI21),
    )


def parse_qti21(content: bytes) -> b.Document21:
    """Parse a QTI 2.1/2.2 document: a ``questestinterop`` container or a lone ``assessmentItem``."""
    root = parse_xml(content, VersionFamily.QTI21.label)
    name = _expect_root(root, VersionFamily.QTI21, "questestinterop", "assessmentItem")
    if name == "assessmentItem":
        return b.Document21(version=attr(root, "version"), items=[read_item21(root)])
    assessment = None
    node = child(root, "assessment")
    if node is not None:
        assessment = b.Assessment21(
            ident=attr(node, "ident", "identifier") or "",
            title=attr(node, "title"),
            metadata=read_metadata(child(node, "metadata")),
            objectives=read_objectives(node),
            rubric_block=read_rubric(child(node, "rubricBlock")),
            sections=[
                b.Section21(
                    ident=attr(s, "ident", "identifier") or "",
                    title=attr(s, "title"),
                    metadata=read_metadata(child(s, "metadata")),
                    items=[read_item21(item) for item in children(s, "item", "assessmentItem")],
                )
                for s in children(node, "section")
            ],
        )
    return b.Document21(
        version=attr(root, "version"),
        items=[read_item21(item) for item in children(root, "item", "assessmentItem")],
        assessment=assessment,
        metadata=read_metadata(child(root, "metadata")),
    )


# Family C


def read_item30(el: ET.Element) -> c.AssessmentItem30:
    return c.AssessmentItem30(
        identifier=attr(el, "identifier") or "",
        title=attr(el, "title"),
        adaptive=attr(el, "adaptive"),
        time_dependent=attr(el, QTI30.at("timeDependent")),
        metadata=read_metadata(child(el, QTI30.el("metadata")), container=QTI30.el("qtimetadata")),
        item_body=read_item_body(child(el, QTI30.el("itemBody")), QTI30),
        modal_feedback=read_modal_feedback(el, QTI30),
        rubric_block=read_rubric(child(el, QTI30.el("rubricBlock"))),
        **read_declarations(el, QTI30),
    )


def parse_qti30(content: bytes) -> c.Document30:
    """Parse a QTI 3.0 document in single-item or flat container form."""
    root = parse_xml(content, VersionFamily.QTI30.label)
    item_tag = QTI30.el("item")
    name = _expect_root(root, VersionFamily.QTI30, item_tag, QTI30.el("assessment"), "questestinterop")
    if name == item_tag:
        return c.Document30(version=attr(root, "version"), items=[read_item30(root)])
    metadata_tag, container_tag = QTI30.el("metadata"), QTI30.el("qtimetadata")
    assessment = None
    node = child(root, "assessment")
    if node is not None:
        assessment = c.Assessment30(
            ident=attr(node, "ident", "identifier") or "",
            title=attr(node, "title"),
            metadata=read_metadata(child(node, metadata_tag), container=container_tag),
            objectives=read_objectives(node),
            rubric_block=read_rubric(child(node, QTI30.el("rubricBlock"))),
            sections=[
                c.Section30(
                    ident=attr(s, "ident", "identifier") or "",
                    title=attr(s, "title"),
                    metadata=read_metadata(child(s, metadata_tag), container=container_tag),
                    items=[read_item30(item) for item in children(s, item_tag)],
                )
                for s in children(node, "section")
            ],
        )
    return c.Document30(
        version=attr(root, "version"),
        items=[read_item30(item) for item in children(root, item_tag)],
        assessment=assessment,
        metadata=read_metadata(child(root, metadata_tag), container=container_tag),
    )


_READERS = {
    VersionFamily.QTI12: parse_qti12,
    VersionFamily.QTI21: parse_qti21,
    VersionFamily.QTI30: parse_qti30,
}


def read_document(content: bytes, family: VersionFamily):
    """Parse ``content`` with the reader of ``family``."""
    return _READERS[family](content)
