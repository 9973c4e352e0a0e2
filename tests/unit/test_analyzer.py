"""Tests for the migration Analyzer."""

import pytest

from qtimigrator.errors import UnsupportedVersionError
from qtimigrator.migrator import load_document
from qtimigrator.analysis.report import DetailAction, AnalysisError, AnalysisReport, MigrationDetail
from qtimigrator.analysis.analyzer import Analyzer


def _messages(report: AnalysisReport):
    return [w.message for w in report.warnings]


class TestBlockers:
    """Fatal errors stop the analysis before any per-item work."""

    @pytest.mark.parametrize("source, target", [("1.2", "3.0"), ("2.1", "1.2"), ("1.2", "1.2")])
    def test_unsupported_path(self, qti12_choice, source, target):
        doc = load_document(qti12_choice, "1.2")
        report = Analyzer().analyze(doc, source, target)
        assert report.has_errors()
        assert len(report.errors) == 1
        assert report.errors[0].fatal
        assert "is not supported" in report.errors[0].message
        assert report.incompatible_items == report.total_items == 1
        assert report.details == [] and report.warnings == []

    def test_family_mismatch(self, qti12_choice):
        doc = load_document(qti12_choice, "1.2")
        report = Analyzer().analyze(doc, "2.1", "3.0")
        assert report.has_errors()
        assert report.errors[0].message == "Document is QTI 1.2, not QTI 2.1"

    def test_unknown_version_raises(self, qti12_choice):
        doc = load_document(qti12_choice, "1.2")
        with pytest.raises(UnsupportedVersionError):
            Analyzer().analyze(doc, "1.2", "9.9")


class TestQti12To21Predictions:
    def test_clean_choice_item(self, qti12_choice):
        report = Analyzer(verbosity=3).analyze(load_document(qti12_choice, "1.2"), "1.2", "2.1")
        assert not report.has_errors()
        assert report.warnings == []
        assert (report.total_items, report.compatible_items, report.incompatible_items) == (1, 1, 0)
        descriptions = [d.description for d in report.details]
        assert "Convert shuffle attribute from yes/no to true/false" in descriptions
        assert "Convert continue attribute from yes/no to true/false" in descriptions
        continue_detail = next(d for d in report.details if "continue" in d.description)
        assert (continue_detail.old_value, continue_detail.new_value) == ('continue="no"', 'continue="false"')

    def test_mixed_assessment(self, qti12_mixed):
        report = Analyzer(verbosity=3).analyze(load_document(qti12_mixed, "1.2"), "1.2", "2.1")
        assert (report.total_items, report.compatible_items, report.incompatible_items) == (2, 0, 2)
        messages = _messages(report)
        assert "Score model not specified in QTI 1.2" in messages
        assert "Image type not specified" in messages
        assert "Audio/video material has no QTI 2.1 paragraph equivalent" in messages
        assert any("only inside nested" in m for m in messages)

        by_action = report.by_action()
        assert list(by_action) == [DetailAction.TRANSFORM, DetailAction.VALIDATE]
        targets = [d.new_value for d in by_action[DetailAction.TRANSFORM] if "Fill-in-blank" in d.description]
        assert targets == ["textEntryInteraction", "extendedTextInteraction"]
        assert any("default SCORE outcome" in d.description for d in report.details)

    def test_unknown_interaction_hint(self, qti12_choice):
        content = qti12_choice.replace(b"<fieldentry>choiceInteraction", b"<fieldentry>hotspotThing")
        report = Analyzer().analyze(load_document(content, "1.2"), "1.2", "2.1")
        assert "Interaction type 'hotspotThing' may need adjustment for QTI 2.1" in _messages(report)
        assert report.incompatible_items == 1

    @pytest.mark.parametrize(
        "raw, description, new_value",
        [
            ("no", "Convert shuffle attribute from yes/no to true/false", 'shuffle="false"'),
            ("Yes", "Unrecognized shuffle value becomes false", 'shuffle="false"'),
        ],
    )
    def test_shuffle_normalization_recorded(self, qti12_choice, raw, description, new_value):
        content = qti12_choice.replace(b'shuffle="yes"', f'shuffle="{raw}"'.encode())
        report = Analyzer(verbosity=3).analyze(load_document(content, "1.2"), "1.2", "2.1")
        detail = next(d for d in report.details if "shuffle" in d.description)
        assert detail.description == description
        assert (detail.old_value, detail.new_value) == (f'shuffle="{raw}"', new_value)

    def test_absent_shuffle_not_recorded(self, qti12_choice):
        content = qti12_choice.replace(b' shuffle="yes"', b"")
        report = Analyzer().analyze(load_document(content, "1.2"), "1.2", "2.1")
        assert not any("shuffle" in d.description for d in report.details)


class TestQti21To30Predictions:
    def test_item_renames_and_transforms(self, qti21_item):
        report = Analyzer(verbosity=3).analyze(load_document(qti21_item, "2.1"), "2.1", "3.0")
        renames = {(d.old_value, d.new_value) for d in report.details if d.action is DetailAction.RENAME}
        assert ("item", "qti-assessment-item") in renames
        assert ("itemBody", "qti-item-body") in renames
        assert ("choiceInteraction", "qti-choice-interaction") in renames
        assert ("simpleChoice", "qti-simple-choice") in renames
        assert ("responseDeclaration", "qti-response-declaration") in renames
        assert ("rubricBlock", "qti-rubric-block") in renames

        transforms = {(d.old_value, d.new_value) for d in report.details if d.action is DetailAction.TRANSFORM}
        assert ("pair", "directedPair") in transforms
        assert ("file", "uri") in transforms
        assert ("testConstructor", "test-constructor") in transforms
        assert ("choiceInteraction", "qti-choice-interaction") in transforms

        assert _messages(report) == ["HTML class attributes found in content"]
        assert report.incompatible_items == 1

    def test_assessment_layout_warning(self, qti21_assessment):
        report = Analyzer().analyze(load_document(qti21_assessment, "2.2.3"), "2.2", "3.0")
        assert report.total_items == 2
        assert report.compatible_items == 2
        assert "Assessment and section structure keeps the QTI 2.1 layout" in _messages(report)
        assessment_detail = next(d for d in report.details if d.element_path is None and d.item_id == "T1")
        assert assessment_detail.action is DetailAction.RENAME


class TestVerbosity:
    """Verbosity controls detail fields only, never which entries exist."""

    @pytest.mark.parametrize("verbosity", [0, 1, 2])
    def test_counts_independent_of_verbosity(self, qti12_mixed, verbosity):
        doc = load_document(qti12_mixed, "1.2")
        full = Analyzer(verbosity=3).analyze(doc, "1.2", "2.1")
        reduced = Analyzer(verbosity=verbosity).analyze(doc, "1.2", "2.1")
        assert len(reduced.details) == len(full.details)
        assert len(reduced.warnings) == len(full.warnings)
        assert len(reduced.errors) == len(full.errors)
        assert reduced.incompatible_items == full.incompatible_items
        assert [d.description for d in reduced.details] == [d.description for d in full.details]

    def test_paths_from_level_two(self, qti12_mixed):
        doc = load_document(qti12_mixed, "1.2")
        assert all(d.element_path is None for d in Analyzer(verbosity=1).analyze(doc, "1.2", "2.1").details)
        level2 = Analyzer(verbosity=2).analyze(doc, "1.2", "2.1")
        assert all(d.element_path for d in level2.details)
        assert all(d.old_value is None and d.new_value is None for d in level2.details)
        assert all(w.element_path for w in level2.warnings)

    def test_values_at_level_three(self, qti12_mixed):
        report = Analyzer(verbosity=3).analyze(load_document(qti12_mixed, "1.2"), "1.2", "2.1")
        assert all(d.old_value is not None and d.new_value is not None for d in report.details)


class TestSideEffects:
    def test_document_not_mutated(self, qti21_item):
        doc = load_document(qti21_item, "2.1")
        before = doc.model_dump()
        Analyzer(verbosity=3).analyze(doc, "2.1", "3.0")
        assert doc.model_dump() == before

    def test_repeatable(self, qti12_mixed):
        doc = load_document(qti12_mixed, "1.2")
        first = Analyzer(verbosity=3).analyze(doc, "1.2", "2.1")
        second = Analyzer(verbosity=3).analyze(doc, "1.2", "2.1")
        assert first == second


class TestReportModel:
    def test_by_action_first_seen_order(self):
        report = AnalysisReport(
            source_version="2.1",
            target_version="3.0",
            details=[
                MigrationDetail(action=DetailAction.VALIDATE, description="v"),
                MigrationDetail(action=DetailAction.RENAME, description="r1"),
                MigrationDetail(action=DetailAction.RENAME, description="r2"),
            ],
        )
        grouped = report.by_action()
        assert list(grouped) == [DetailAction.VALIDATE, DetailAction.RENAME]
        assert [d.description for d in grouped[DetailAction.RENAME]] == ["r1", "r2"]

    def test_non_fatal_error_does_not_block(self):
        report = AnalysisReport(
            source_version="1.2", target_version="2.1", errors=[AnalysisError(message="minor", fatal=False)]
        )
        assert not report.has_errors()
