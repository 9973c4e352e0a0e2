"""Tests for the QTI 1.2 -> 2.1 rule set."""

import pytest

from qtimigrator.models import qti21 as b
from qtimigrator.models import canonical as cdm
from qtimigrator.versions import VersionFamily
from qtimigrator.models.common import MatText, Material, MatAudio, MatImage, Metadata, ScoreVarType
from qtimigrator.models.conditions import Or, VarEqual, ConditionVar
from qtimigrator.transform.qti12_to_21 import (
    SCORE_TYPE_TO_BASE_TYPE,
    Qti12To21Transformer,
    score_base_type,
    infer_base_type,
    migrate_metadata,
    infer_cardinality,
    extract_correct_response,
)


def _fib(rows=0, max_chars=0, fib_type=None) -> cdm.ResponseWidget:
    return cdm.ResponseWidget(
        ident="R",
        response_type="response_str",
        render_fib=cdm.FibRender(rows=rows, max_chars=max_chars, fib_type=fib_type),
    )


def _choice(shuffle=False, max_number=0, min_number=0, cardinality=None) -> cdm.ResponseWidget:
    return cdm.ResponseWidget(
        ident="R",
        cardinality=cardinality,
        render_choice=cdm.ChoiceRender(
            shuffle=shuffle,
            max_number=max_number,
            min_number=min_number,
            labels=[cdm.ChoiceLabel(ident="A", material=Material(texts=[MatText(content="Alpha")]))],
        ),
    )


def _rule(*expressions, value="1", action="set") -> cdm.OutcomeRule:
    return cdm.OutcomeRule(
        condition=ConditionVar(expressions=list(expressions)),
        assignments=[cdm.ScoreAssignment(action=action, value=value)],
    )


def _document(*items: cdm.CanonicalItem) -> cdm.CanonicalDocument:
    return cdm.CanonicalDocument(version="1.2", family=VersionFamily.QTI12, items=list(items))


class TestInteractionSelection:
    """Legacy widgets become interactions."""

    @pytest.mark.parametrize(
        "rows, expected",
        [(0, b.TextEntryInteraction21), (1, b.TextEntryInteraction21), (2, b.ExtendedTextInteraction21)],
    )
    def test_fib_rows_boundary(self, rows, expected):
        """rows > 1 is extended text; exactly 1 stays text entry."""
        assert isinstance(Qti12To21Transformer().interaction(_fib(rows=rows)), expected)

    def test_fib_lengths_copied_when_positive(self):
        interaction = Qti12To21Transformer().interaction(_fib(rows=3, max_chars=500))
        assert interaction.expected_lines == 3
        assert interaction.expected_length == 500
        assert Qti12To21Transformer().interaction(_fib(max_chars=-4)).expected_length == 0

    @pytest.mark.parametrize("shuffle, expected", [(True, "true"), (False, "false")])
    def test_choice_shuffle(self, shuffle, expected):
        assert Qti12To21Transformer().interaction(_choice(shuffle=shuffle)).shuffle == expected

    def test_choice_bounds_and_labels(self):
        interaction = Qti12To21Transformer().interaction(_choice(max_number=2, min_number=1))
        assert interaction.max_choices == 2
        assert interaction.min_choices == 1
        assert interaction.choices[0].identifier == "A"
        assert interaction.choices[0].content == "Alpha"

    def test_widget_without_render(self):
        assert Qti12To21Transformer().interaction(cdm.ResponseWidget(ident="R")) is None


class TestInference:
    """Cardinality and base-type inference."""

    @pytest.mark.parametrize(
        "widget, expected",
        [
            (_choice(cardinality="ordered", max_number=5), "ordered"),
            (_choice(cardinality="multiple"), "multiple"),
            (_choice(cardinality="Single", max_number=2), "multiple"),
            (_choice(cardinality="Ordered"), "single"),
            (_choice(cardinality="record", max_number=3), "multiple"),
            (_choice(max_number=2), "multiple"),
            (_choice(max_number=1), "single"),
            (_fib(), "single"),
        ],
    )
    def test_cardinality_precedence(self, widget, expected):
        assert infer_cardinality(widget) == expected

    @pytest.mark.parametrize(
        "widget, expected",
        [
            (_choice(), "identifier"),
            (_fib(fib_type="integer"), "integer"),
            (_fib(fib_type="decimal"), "float"),
            (_fib(fib_type="Integer"), "string"),
            (_fib(fib_type="String"), "string"),
            (_fib(), "string"),
        ],
    )
    def test_base_type(self, widget, expected):
        assert infer_base_type(widget) == expected

    @pytest.mark.parametrize(
        "var_type, expected",
        [
            ("integer", "integer"),
            ("Integer", "float"),
            ("decimal", "float"),
            ("scientific", "float"),
            ("boolean", "boolean"),
            ("enumerated", "float"),
            (None, "float"),
        ],
    )
    def test_score_base_type(self, var_type, expected):
        assert score_base_type(var_type) == expected

    def test_score_table_covers_every_type(self):
        assert set(SCORE_TYPE_TO_BASE_TYPE) == set(ScoreVarType)


class TestCorrectResponse:
    """Correct-answer extraction from legacy response processing."""

    def test_top_level_equality(self):
        processing = cdm.CanonicalResponseProcessing(
            rules=[_rule(VarEqual(resp_ident="R", value="B")), _rule(VarEqual(resp_ident="R", value="C"), value="0")]
        )
        assert extract_correct_response("R", processing) == ["B"]

    def test_action_matched_exactly(self):
        processing = cdm.CanonicalResponseProcessing(rules=[_rule(VarEqual(resp_ident="R", value="B"), action="Set")])
        assert extract_correct_response("R", processing) == []

    def test_other_response_ignored(self):
        processing = cdm.CanonicalResponseProcessing(rules=[_rule(VarEqual(resp_ident="OTHER", value="B"))])
        assert extract_correct_response("R", processing) == []

    def test_nested_combinators_not_descended(self):
        nested = Or(operands=[VarEqual(resp_ident="R", value="B"), VarEqual(resp_ident="R", value="C")])
        processing = cdm.CanonicalResponseProcessing(rules=[_rule(nested)])
        assert extract_correct_response("R", processing) == []

    def test_no_processing(self):
        assert extract_correct_response("R", None) == []


class TestItemTransformation:
    """Whole-item transformation."""

    def test_outcomes_from_score_variables(self):
        processing = cdm.CanonicalResponseProcessing(
            variables=[cdm.ScoreVariable(name="SCORE", var_type="integer", default_value="0")]
        )
        item = Qti12To21Transformer().transform_item(cdm.CanonicalItem(ident="q1", response_processing=processing))
        outcome = item.outcome_declarations[0]
        assert (outcome.identifier, outcome.base_type, outcome.default_value) == ("SCORE", "integer", "0")

    def test_default_score_synthesized(self):
        item = Qti12To21Transformer().transform_item(
            cdm.CanonicalItem(ident="q1", response_processing=cdm.CanonicalResponseProcessing())
        )
        assert len(item.outcome_declarations) == 1
        outcome = item.outcome_declarations[0]
        assert (outcome.identifier, outcome.base_type, outcome.default_value) == ("SCORE", "float", "0.0")

    def test_no_outcomes_without_processing(self):
        item = Qti12To21Transformer().transform_item(cdm.CanonicalItem(ident="q1"))
        assert item.outcome_declarations == []
        assert item.item_body is None

    def test_materials_become_paragraphs(self):
        material = Material(
            texts=[MatText(content="Plain"), MatText(text_type="text/html", content="a<br>b")],
            images=[MatImage(uri="pic.png", width=50)],
            audio=[MatAudio(uri="sound.mp3")],
        )
        item = cdm.CanonicalItem(
            ident="q1", presentation=cdm.CanonicalPresentation(entries=[material, _choice()])
        )
        body = Qti12To21Transformer().transform_item(item).item_body
        contents = [block.content for block in body.blocks if isinstance(block, b.Paragraph21)]
        assert contents == ["Plain", "a<br/>b", '<img src="pic.png" width="50" />']
        assert isinstance(body.blocks[-1], b.ChoiceInteraction21)

    def test_widget_without_render_skipped(self):
        item = cdm.CanonicalItem(
            ident="q1", presentation=cdm.CanonicalPresentation(entries=[cdm.ResponseWidget(ident="R")])
        )
        migrated = Qti12To21Transformer().transform_item(item)
        assert migrated.item_body.blocks == []
        assert [d.identifier for d in migrated.response_declarations] == ["R"]

    def test_document_version_and_metadata(self):
        item = cdm.CanonicalItem(ident="q1", metadata=Metadata(schema_version="1.2"))
        doc = Qti12To21Transformer().transform(_document(item))
        assert doc.version == "2.1"
        assert doc.items[0].metadata.schema_version == "2.1"
        assert migrate_metadata(None) is None

    def test_source_not_mutated(self):
        source = _document(cdm.CanonicalItem(ident="q1", presentation=cdm.CanonicalPresentation(entries=[_choice()])))
        before = source.model_dump()
        Qti12To21Transformer().transform(source)
        assert source.model_dump() == before
