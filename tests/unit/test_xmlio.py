"""Tests for the XML readers and writers."""

import pytest

from qtimigrator.errors import ParsingError
from qtimigrator.models import qti12 as a
from qtimigrator.models import qti21 as b
from qtimigrator.models import qti30 as c
from qtimigrator.xmlio.reader import parse_qti12, parse_qti21, parse_qti30
from qtimigrator.xmlio.writer import write_qti21, write_qti30
from qtimigrator.models.conditions import Or, VarEqual


class TestQti12Reader:
    def test_choice_item(self, qti12_choice):
        doc = parse_qti12(qti12_choice)
        assert doc.version is None
        item = doc.items[0]
        assert (item.ident, item.title, item.max_attempts) == ("q1", "Capital of France", 2)
        assert item.metadata.qti_metadata.interaction_type == "choiceInteraction"

        material, response = item.presentation.children
        assert material.texts[0].content == "Which city is the capital of France?"
        assert (response.ident, response.response_type, response.rcardinality) == ("RESP1", "response_lid", "single")
        assert response.render_choice.shuffle == "yes"
        assert [label.ident for label in response.render_choice.labels] == ["A", "B", "C"]

        processing = item.resprocessing
        assert processing.score_model == "SumOfScores"
        assert processing.outcomes[0].var_type == "integer"
        condition = processing.conditions[0]
        assert condition.continue_value == "no"
        assert condition.condition.expressions == [VarEqual(resp_ident="RESP1", value="B")]
        assert (condition.set_vars[0].action, condition.set_vars[0].value) == ("set", "1")

    def test_nested_structure(self, qti12_mixed):
        doc = parse_qti12(qti12_mixed)
        assert doc.items == []
        section = doc.assessment.sections[0]
        assert section.ident == "S1"
        flow = section.items[0].presentation.children[0]
        assert isinstance(flow, a.Flow)
        material = flow.children[0]
        assert material.texts[0].content == "<p>Name the element<br>with symbol O</p>"
        assert material.images[0].image_type is None
        assert material.images[0].width == 120
        assert isinstance(section.items[0].resprocessing.conditions[0].condition.expressions[0], Or)
        assert section.sections[0].items[0].ident == "essay1"

    def test_malformed_xml(self):
        with pytest.raises(ParsingError, match="failed to parse QTI 1.2 document"):
            parse_qti12(b"<questestinterop><item>")

    def test_wrong_root(self):
        with pytest.raises(ParsingError, match="unexpected root element <assessmentItem>"):
            parse_qti12(b"<assessmentItem identifier='x'/>")

    def test_non_numeric_attribute(self):
        with pytest.raises(ParsingError, match="not an integer"):
            parse_qti12(b'<questestinterop><item ident="q" maxattempts="two"/></questestinterop>')

    def test_unknown_condition_ignored(self):
        content = b"""<questestinterop><item ident="q"><resprocessing><respcondition>
            <conditionvar><other/><varequal respident="R">A</varequal></conditionvar>
            </respcondition></resprocessing></item></questestinterop>"""
        condition = parse_qti12(content).items[0].resprocessing.conditions[0].condition
        assert condition.expressions == [VarEqual(resp_ident="R", value="A")]


class TestQti21Reader:
    def test_item(self, qti21_item):
        doc = parse_qti21(qti21_item)
        assert doc.version == "2.1"
        item = doc.items[0]
        responses = {d.identifier: d for d in item.response_declarations}
        assert responses["RESP"].base_type == "pair"
        assert responses["RESP"].correct_response == ["A B"]
        assert responses["UPLOAD"].base_type == "file"
        assert item.outcome_declarations[0].default_value == "0.0"

        paragraph, choice = item.item_body.blocks
        assert paragraph.content == 'Pick the <span class="hint">right</span> pair.'
        assert isinstance(choice, b.ChoiceInteraction21)
        assert (choice.shuffle, choice.max_choices, choice.prompt) == ("true", 1, "Choose one")
        assert [(ch.identifier, ch.fixed, ch.content) for ch in choice.choices] == [
            ("A", None, "First"),
            ("B", "true", "Second"),
        ]
        assert item.rubric_block.view == "testConstructor"
        assert item.rubric_block.content == "Marking notes"

    def test_assessment(self, qti21_assessment):
        doc = parse_qti21(qti21_assessment)
        assert doc.version == "2.2.3"
        items = doc.assessment.sections[0].items
        assert [item.ident for item in items] == ["i1", "i2"]
        assert isinstance(items[1].item_body.blocks[0], b.ExtendedTextInteraction21)

    def test_lone_assessment_item(self):
        content = b"""<assessmentItem identifier="solo" title="Solo">
            <itemBody><textEntryInteraction responseIdentifier="R" expectedLength="4"/></itemBody>
            </assessmentItem>"""
        doc = parse_qti21(content)
        assert doc.items[0].ident == "solo"
        assert doc.items[0].item_body.blocks[0].expected_length == 4

    def test_unsupported_body_element_skipped(self):
        content = b"""<questestinterop><item ident="q"><itemBody>
            <table><tr><td>x</td></tr></table><p>kept</p>
            </itemBody></item></questestinterop>"""
        blocks = parse_qti21(content).items[0].item_body.blocks
        assert [block.content for block in blocks] == ["kept"]


class TestQti30Reader:
    def test_namespaced_single_item(self):
        content = b"""<qti-assessment-item xmlns="http://www.imsglobal.org/xsd/imsqtiasi_v3p0"
                identifier="q1" time-dependent="false">
            <qti-response-declaration identifier="R" cardinality="single" base-type="directedPair">
              <qti-correct-response><qti-value>A B</qti-value></qti-correct-response>
            </qti-response-declaration>
            <qti-item-body>
              <div data-qti-class="stem"><b>Bold</b> text</div>
              <qti-choice-interaction response-identifier="R" max-choices="1">
                <qti-simple-choice identifier="A">Alpha</qti-simple-choice>
              </qti-choice-interaction>
            </qti-item-body>
            </qti-assessment-item>"""
        item = parse_qti30(content).items[0]
        assert (item.identifier, item.time_dependent) == ("q1", "false")
        assert item.response_declarations[0].base_type == "directedPair"
        assert item.response_declarations[0].correct_response == ["A B"]
        division, choice = item.item_body.blocks
        assert division.css_class == "stem"
        assert division.content == "<b>Bold</b> text"
        assert choice.response_identifier == "R"
        assert choice.choices[0].content == "Alpha"

    def test_wrong_root(self):
        with pytest.raises(ParsingError, match="unexpected root element <item>"):
            parse_qti30(b"<item ident='q'/>")


class TestWriters:
    def _item21(self, **kwargs) -> b.Document21:
        return b.Document21(version="2.1", items=[b.Item21(ident="q1", **kwargs)])

    def test_qti21_header_and_indent(self):
        body = b.ItemBody21(blocks=[b.TextEntryInteraction21(response_identifier="R")])
        out = write_qti21(self._item21(item_body=body)).decode("utf-8")
        assert out.startswith('<?xml version="1.0" encoding="UTF-8"?>\n<questestinterop version="2.1">\n  <item ')
        assert '\n      <textEntryInteraction responseIdentifier="R" />' in out
        assert "expectedLength" not in out
        assert out.endswith("</questestinterop>\n")

    def test_content_embedded_without_indentation(self):
        body = b.ItemBody21(blocks=[b.Paragraph21(content="Pick <b>bold</b> text")])
        out = write_qti21(self._item21(item_body=body)).decode("utf-8")
        assert "<p>Pick <b>bold</b> text</p>" in out

    def test_ill_formed_content_escaped(self):
        body = b.ItemBody21(blocks=[b.Paragraph21(content="a < b")])
        out = write_qti21(self._item21(item_body=body)).decode("utf-8")
        assert "<p>a &lt; b</p>" in out

    def test_child_order(self):
        out = write_qti21(
            self._item21(
                response_declarations=[b.ResponseDeclaration21(identifier="R", base_type="string")],
                item_body=b.ItemBody21(),
                modal_feedback=[b.ModalFeedback21(identifier="F", content="Done")],
                rubric_block=None,
            )
        ).decode("utf-8")
        assert out.index("<responseDeclaration") < out.index("<itemBody") < out.index("<modalFeedback")

    def test_qti30_single_item_root(self):
        doc = c.Document30(version="3.0", items=[c.AssessmentItem30(identifier="q1", adaptive="false")])
        out = write_qti30(doc).decode("utf-8")
        assert (
            '<qti-assessment-item xmlns="http://www.imsglobal.org/xsd/imsqtiasi_v3p0" identifier="q1" '
            'adaptive="false"' in out
        )

    def test_qti30_assessment_root(self):
        section = c.Section30(ident="S1", items=[c.AssessmentItem30(identifier="i1")])
        doc = c.Document30(version="3.0", assessment=c.Assessment30(ident="T1", sections=[section]))
        out = write_qti30(doc).decode("utf-8")
        assert '<qti-assessment-test xmlns="http://www.imsglobal.org/xsd/imsqtiasi_v3p0" version="3.0">' in out
        assert '<assessment ident="T1">' in out
        assert '<section ident="S1">' in out
        assert '<qti-assessment-item identifier="i1"' in out

    def test_qti30_output_reads_back(self):
        body = c.ItemBody30(blocks=[c.Division30(css_class="stem", content="Hello <i>you</i>")])
        outcome = c.OutcomeDeclaration30(identifier="SCORE", base_type="float", default_value="0")
        item = c.AssessmentItem30(identifier="q1", item_body=body, outcome_declarations=[outcome])
        doc = c.Document30(version="3.0", items=[item])
        read_back = parse_qti30(write_qti30(doc)).items[0]
        assert read_back.item_body == body
        assert read_back.outcome_declarations == [outcome]

    def test_html_entities_kept_as_markup(self):
        body = b.ItemBody21(blocks=[b.Paragraph21(content="<b>Bold</b>&nbsp;text &amp; more")])
        out = write_qti21(self._item21(item_body=body)).decode("utf-8")
        assert "<p><b>Bold</b>\u00a0text &amp; more</p>" in out

    def test_mapping_values_full_precision(self):
        mapping = c.Mapping30(
            lower_bound=0.0,
            upper_bound=1234567.0,
            entries=[c.MapEntry30(map_key="A", mapped_value=0.3333333), c.MapEntry30(map_key="B", mapped_value=0.0)],
        )
        declaration = c.ResponseDeclaration30(identifier="R", base_type="identifier", mapping=mapping)
        item = c.AssessmentItem30(identifier="q1", response_declarations=[declaration])
        doc = c.Document30(version="3.0", items=[item])
        out = write_qti30(doc).decode("utf-8")
        assert '<qti-mapping lower-bound="0" upper-bound="1234567" default-value="0">' in out
        assert '<qti-map-entry map-key="A" mapped-value="0.3333333" />' in out
        assert '<qti-map-entry map-key="B" mapped-value="0" />' in out
        assert parse_qti30(write_qti30(doc)).items[0].response_declarations[0].mapping == mapping

    def test_zero_counts_omitted(self):
        out = write_qti21(self._item21(max_attempts=0)).decode("utf-8")
        assert "maxattempts" not in out
