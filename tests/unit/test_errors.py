"""Tests for the error taxonomy."""

from qtimigrator.errors import (
    QTIError,
    ErrorList,
    ErrorType,
    ParsingError,
    ValidationError,
    UnsupportedError,
    UnsupportedPathError,
    UnsupportedVersionError,
)


class TestQTIError:
    """Tests for QTIError and its subclasses."""

    def test_str_with_item(self):
        error = ValidationError("duplicate identifier", item_id="q1", element_path="item[@ident='q1']")
        assert str(error) == "[q1] Validation Error: duplicate identifier"
        assert error.element_path == "item[@ident='q1']"

    def test_str_without_item(self):
        assert str(ParsingError("bad bytes")) == "Parsing Error: bad bytes"

    def test_error_types(self):
        assert ParsingError("x").error_type is ErrorType.PARSING
        assert ValidationError("x").error_type is ErrorType.VALIDATION
        assert UnsupportedVersionError("9.9").error_type is ErrorType.UNSUPPORTED

    def test_unsupported_hierarchy(self):
        """Version and path errors are both Unsupported conditions."""
        assert isinstance(UnsupportedVersionError("9.9"), UnsupportedError)
        error = UnsupportedPathError("1.2", "3.0")
        assert isinstance(error, UnsupportedError)
        assert isinstance(error, QTIError)
        assert "1.2 to 3.0" in error.message

    def test_cause_is_chained(self):
        cause = ValueError("boom")
        error = ParsingError("wrapped", cause=cause)
        assert error.cause is cause
        assert error.__cause__ is cause


class TestErrorList:
    """Tests for ErrorList aggregation."""

    def test_empty(self):
        errors = ErrorList()
        assert not errors.has_errors()
        assert len(errors) == 0
        assert str(errors) == "no errors"

    def test_by_type(self):
        errors = ErrorList()
        errors.add(ValidationError("a"))
        errors.add(ParsingError("b"))
        errors.add(ValidationError("c"))
        assert errors.has_errors()
        assert [e.message for e in errors.by_type(ErrorType.VALIDATION)] == ["a", "c"]
        assert str(errors) == "3 errors occurred during processing"
