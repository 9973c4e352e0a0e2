"""Serialize family B and C document models to XML bytes.

Output is deterministic: fixed attribute order, two-space indentation and no
attributes for absent values or zero counts. Scores and mapping values are
always written in full precision. Markup held by content elements
(paragraphs, choices, prompts, feedback) is embedded as parsed child nodes
and left unindented.
"""

import xml.etree.ElementTree as ET
from typing import List, Union, Optional

from loguru import logger

from qtimigrator.models import qti21 as b
from qtimigrator.models import qti30 as c
from qtimigrator.markup import numeric_entities
from qtimigrator.xmlio.helpers import XML_HEADER
from qtimigrator.xmlio.vocabulary import QTI21, QTI30, Vocabulary
from qtimigrator.models.common import Material, Metadata, Objective, RubricBlock


AttributeValue = Union[str, int, float, None]


def _format_float(value: float) -> str:
    text = repr(value)
    return text[:-2] if text.endswith(".0") else text


def _format(value: AttributeValue) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, int):
        return str(value) if value else None
    return value


class XMLWriter:
    """Builds an ElementTree for one document generation."""

    def __init__(self, vocab: Vocabulary):
        self.vocab = vocab
        self._content = set()

    # Primitives

    def element(self, parent: Optional[ET.Element], name: str, *attributes) -> ET.Element:
        """Create ``name`` (mid-generation spelling) with ``(attribute, value)`` pairs in order."""
        tag = self.vocab.el(name)
        el = ET.Element(tag) if parent is None else ET.SubElement(parent, tag)
        for key, value in attributes:
            formatted = _format(value)
            if formatted is not None:
                el.set(self.vocab.at(key), formatted)
        return el

    def leaf(self, parent: ET.Element, name: str, value: Optional[str]) -> None:
        if value:
            self.element(parent, name).text = value

    def content(self, el: ET.Element, markup: Optional[str]) -> ET.Element:
        """Embed ``markup`` inside ``el``; ill-formed fragments become escaped text."""
        self._content.add(el)
        if not markup:
            return el
        try:
            wrapper = ET.fromstring(f"<fragment>{numeric_entities(markup)}</fragment>")
        except ET.ParseError:
            logger.debug("Markup fragment is not well-formed, embedding it as text")
            el.text = markup
            return el
        el.text = wrapper.text
        el.extend(list(wrapper))
        return el

    def indent(self, el: ET.Element, level: int = 0) -> None:
        if el in self._content or not len(el):
            return
        pad = "\n" + "  " * (level + 1)
        el.text = pad
        for node in el:
            self.indent(node, level + 1)
            node.tail = pad
        el[-1].tail = "\n" + "  " * level

    def serialize(self, root: ET.Element) -> bytes:
        self.indent(root)
        return (XML_HEADER + ET.tostring(root, encoding="unicode") + "\n").encode("utf-8")

    # Shared leaves

    def metadata(self, parent: ET.Element, metadata: Optional[Metadata]) -> None:
        if metadata is None:
            return
        el = self.element(parent, "metadata")
        self.leaf(el, "schema", metadata.schema_name)
        self.leaf(el, "schemaversion", metadata.schema_version)
        if metadata.lom:
            try:
                el.append(ET.fromstring(metadata.lom))
            except ET.ParseError:
                logger.warning("LOM metadata is not well-formed XML and was not written")
        qti = metadata.qti_metadata
        if qti is None:
            return
        container = self.element(el, "qtimetadata")
        for name, flag in (
            ("timedependent", qti.time_dependent),
            ("composite", qti.composite),
            ("solutionavailable", qti.solution_available),
        ):
            if flag:
                self.leaf(container, name, "true")
        self.leaf(container, "interactiontype", qti.interaction_type)
        self.leaf(container, "feedbacktype", qti.feedback_type)
        self.leaf(container, "scoringmode", qti.scoring_mode)
        self.leaf(container, "toolname", qti.tool_name)
        self.leaf(container, "toolversion", qti.tool_version)
        self.leaf(container, "toolvendor", qti.tool_vendor)

    def material(self, parent: ET.Element, material: Material) -> None:
        el = self.element(parent, "material", ("label", material.label))
        for text in material.texts:
            node = self.element(el, "mattext", ("texttype", text.text_type), ("charset", text.charset))
            node.text = text.content
        for image in material.images:
            self.element(
                el,
                "matimage",
                ("imagetype", image.image_type),
                ("uri", image.uri),
                ("width", image.width),
                ("height", image.height),
            )
        for audio in material.audio:
            self.element(el, "mataudio", ("audiotype", audio.audio_type), ("uri", audio.uri))
        for video in material.video:
            self.element(
                el,
                "matvideo",
                ("videotype", video.video_type),
                ("uri", video.uri),
                ("width", video.width),
                ("height", video.height),
            )

    def rubric(self, parent: ET.Element, rubric: Optional[RubricBlock]) -> None:
        if rubric is not None:
            el = self.element(parent, "rubricBlock", ("use", rubric.use), ("view", rubric.view))
            self.content(el, rubric.content)

    def objectives(self, parent: ET.Element, objectives: List[Objective]) -> None:
        if not objectives:
            return
        group = self.element(parent, "objectives")
        for objective in objectives:
            el = self.element(group, "objective", ("title", objective.title))
            if objective.material is not None:
                self.material(el, objective.material)

    # Item parts shared by both generations

    def item_body(self, parent: ET.Element, body) -> None:
        if body is None:
            return
        el = self.element(parent, "itemBody")
        for block in body.blocks:
            self.block(el, block)

    def block(self, parent: ET.Element, block) -> None:
        if isinstance(block, (b.Paragraph21, c.Paragraph30)):
            self.content(self.element(parent, "p"), block.content)
        elif isinstance(block, (b.Division21, c.Division30)):
            self.content(self.element(parent, "div", ("class", block.css_class)), block.content)
        elif isinstance(block, (b.ChoiceInteraction21, c.ChoiceInteraction30)):
            el = self.element(
                parent,
                "choiceInteraction",
                ("responseIdentifier", block.response_identifier),
                ("shuffle", block.shuffle),
                ("maxChoices", block.max_choices),
                ("minChoices", block.min_choices),
            )
            if block.prompt is not None:
                self.content(self.element(el, "prompt"), block.prompt)
            for choice in block.choices:
                node = self.element(el, "simpleChoice", ("identifier", choice.identifier), ("fixed", choice.fixed))
                self.content(node, choice.content)
        elif isinstance(block, (b.TextEntryInteraction21, c.TextEntryInteraction30)):
            self.element(
                parent,
                "textEntryInteraction",
                ("responseIdentifier", block.response_identifier),
                ("expectedLength", block.expected_length),
                ("patternMask", block.pattern_mask),
                ("placeholderText", block.placeholder_text),
            )
        else:
            el = self.element(
                parent,
                "extendedTextInteraction",
                ("responseIdentifier", block.response_identifier),
                ("minStrings", block.min_strings),
                ("maxStrings", block.max_strings),
                ("expectedLines", block.expected_lines),
                ("expectedLength", block.expected_length),
            )
            if block.prompt is not None:
                self.content(self.element(el, "prompt"), block.prompt)

    def default_value(self, parent: ET.Element, value: Optional[str]) -> None:
        if value is not None:
            el = self.element(parent, "defaultValue")
            self.element(el, "value").text = value

    def declarations(self, parent: ET.Element, item) -> None:
        for decl in item.response_declarations:
            el = self.element(
                parent,
                "responseDeclaration",
                ("identifier", decl.identifier),
                ("cardinality", decl.cardinality),
                ("baseType", decl.base_type),
            )
            if decl.correct_response:
                correct = self.element(el, "correctResponse")
                for value in decl.correct_response:
                    self.element(correct, "value").text = value
            if decl.mapping is not None:
                mapping = self.element(
                    el,
                    "mapping",
                    ("lowerBound", decl.mapping.lower_bound),
                    ("upperBound", decl.mapping.upper_bound),
                    ("defaultValue", decl.mapping.default_value),
                )
                for entry in decl.mapping.entries:
                    self.element(mapping, "mapEntry", ("mapKey", entry.map_key), ("mappedValue", entry.mapped_value))
        for decl in item.outcome_declarations:
            el = self.element(
                parent,
                "outcomeDeclaration",
                ("identifier", decl.identifier),
                ("cardinality", decl.cardinality),
                ("baseType", decl.base_type),
            )
            self.default_value(el, decl.default_value)
        for decl in item.template_declarations:
            el = self.element(
                parent,
                "templateDeclaration",
                ("identifier", decl.identifier),
                ("cardinality", decl.cardinality),
                ("baseType", decl.base_type),
                ("paramVariable", decl.param_variable),
            )
            self.default_value(el, decl.default_value)

    def modal_feedback(self, parent: ET.Element, feedback) -> None:
        for fb in feedback:
            el = self.element(
                parent,
                "modalFeedback",
                ("identifier", fb.identifier),
                ("title", fb.title),
                ("outcomeIdentifier", fb.outcome_identifier),
                ("showHide", fb.show_hide),
            )
            self.content(el, fb.content)


# Family B


class Qti21Writer(XMLWriter):
    def __init__(self):
        super().__init__(QTI21)

    def flow_mat(self, parent: ET.Element, flow_mat: b.FlowMat) -> None:
        el = self.element(parent, "flow_mat")
        for material in flow_mat.materials:
            self.material(el, material)
        for nested in flow_mat.flow_mats:
            self.flow_mat(el, nested)

    def item(self, parent: ET.Element, item: b.Item21) -> None:
        if item.presentation is not None or item.resprocessing is not None:
            logger.warning(f"Item '{item.ident}': legacy presentation/resprocessing is not written")
        el = self.element(
            parent,
            "item",
            ("ident", item.ident),
            ("title", item.title),
            ("maxattempts", item.max_attempts),
            ("adaptive", item.adaptive),
            ("timeDependent", item.time_dependent),
        )
        self.metadata(el, item.metadata)
        self.declarations(el, item)
        self.item_body(el, item.item_body)
        for fb in item.feedback:
            node = self.element(el, "itemfeedback", ("ident", fb.ident), ("title", fb.title))
            for material in fb.materials:
                self.material(node, material)
            for flow_mat in fb.flow_mats:
                self.flow_mat(node, flow_mat)
        self.modal_feedback(el, item.modal_feedback)
        self.rubric(el, item.rubric_block)

    def write(self, doc: b.Document21) -> bytes:
        root = self.element(None, "questestinterop", ("version", doc.version or "2.1"))
        for item in doc.items:
            self.item(root, item)
        if doc.assessment is not None:
            assessment = doc.assessment
            el = self.element(root, "assessment", ("ident", assessment.ident), ("title", assessment.title))
            self.metadata(el, assessment.metadata)
            self.objectives(el, assessment.objectives)
            self.rubric(el, assessment.rubric_block)
            for section in assessment.sections:
                node = self.element(el, "section", ("ident", section.ident), ("title", section.title))
                self.metadata(node, section.metadata)
                for item in section.items:
                    self.item(node, item)
        self.metadata(root, doc.metadata)
        return self.serialize(root)


# Family C


class Qti30Writer(XMLWriter):
    def __init__(self):
        super().__init__(QTI30)

    def item(self, parent: Optional[ET.Element], item: c.AssessmentItem30) -> ET.Element:
        el = self.element(parent, "item")
        if parent is None:
            el.set("xmlns", c.QTI30_NAMESPACE)
        for key, value in (
            ("identifier", item.identifier),
            ("title", item.title),
            ("adaptive", item.adaptive),
            ("timeDependent", item.time_dependent),
        ):
            formatted = _format(value)
            if formatted is not None:
                el.set(self.vocab.at(key), formatted)
        self.metadata(el, item.metadata)
        self.declarations(el, item)
        self.item_body(el, item.item_body)
        self.modal_feedback(el, item.modal_feedback)
        self.rubric(el, item.rubric_block)
        return el

    def write(self, doc: c.Document30) -> bytes:
        if doc.is_single_item:
            return self.serialize(self.item(None, doc.items[0]))
        root_name = "assessment" if doc.assessment is not None else "questestinterop"
        root = self.element(None, root_name)
        root.set("xmlns", c.QTI30_NAMESPACE)
        root.set("version", doc.version or "3.0")
        for item in doc.items:
            self.item(root, item)
        if doc.assessment is not None:
            assessment = doc.assessment
            # Inner assessment/section keep mid-generation names.
            el = ET.SubElement(root, "assessment")
            for key, value in (("ident", assessment.ident), ("title", assessment.title)):
                if value:
                    el.set(key, value)
            self.metadata(el, assessment.metadata)
            self.objectives(el, assessment.objectives)
            self.rubric(el, assessment.rubric_block)
            for section in assessment.sections:
                node = ET.SubElement(el, "section")
                for key, value in (("ident", section.ident), ("title", section.title)):
                    if value:
                        node.set(key, value)
                self.metadata(node, section.metadata)
                for item in section.items:
                    self.item(node, item)
        self.metadata(root, doc.metadata)
        return self.serialize(root)


def write_qti21(doc: b.Document21) -> bytes:
    return Qti21Writer().write(doc)


def write_qti30(doc: c.Document30) -> bytes:
    return Qti30Writer().write(doc)
