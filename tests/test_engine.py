"""Tests for the edit orchestrator and failure diagnostics."""

import pytest
from pydantic import ValidationError

from htmledit.config import EngineConfig
from htmledit.diagnostics import find_best_match_for_error, line_number, surrounding_lines
from htmledit.engine import apply_edit_operations
from htmledit.types import ApplyFailure, ApplyPartial, ApplySuccess, EditOperation

# ─────────────────────────────────────────────────────────────
# Orchestrator Tests
# ─────────────────────────────────────────────────────────────


class TestApplySuccess:
    """Test batches where every operation applies."""

    def test_exact_replacement(self):
        result = apply_edit_operations(
            "<h1>Title</h1><p>Body</p>",
            [EditOperation(search="Body", replace="Content")],
        )
        assert isinstance(result, ApplySuccess)
        assert result.ok
        assert result.document == "<h1>Title</h1><p>Content</p>"
        assert result.match_tiers == ["exact"]

    def test_whitespace_scenario(self):
        result = apply_edit_operations(
            "<p>Hello   World</p>",
            [{"search": "Hello World", "replace": "Hi there"}],
        )
        assert result.document == "<p>Hi there</p>"
        assert result.match_tiers == ["whitespace"]

    def test_fuzzy_scenario(self):
        result = apply_edit_operations(
            "<nav>Home</nav><p>Goodby</p>",
            [{"search": "Goodbye", "replace": "Bye"}],
        )
        assert result.document == "<nav>Home</nav><p>Bye</p>"
        assert result.match_tiers == ["fuzzy"]

    def test_whitespace_outside_span_untouched(self):
        doc = "<div>\n  a   b\nc\n</div>"
        result = apply_edit_operations(doc, [{"search": "a b c", "replace": "X"}])
        assert result.document == "<div>\n  X\n</div>"

    def test_order_dependence(self):
        result = apply_edit_operations(
            "<h1>Title</h1>",
            [
                {"search": "Title", "replace": "Welcome Home"},
                {"search": "Welcome Home", "replace": "Hello"},
            ],
        )
        assert isinstance(result, ApplySuccess)
        assert result.document == "<h1>Hello</h1>"
        assert result.match_tiers == ["exact", "exact"]

    def test_replace_all_with_expected_count(self):
        result = apply_edit_operations(
            "<li>x</li><li>x</li>",
            [{"search": "x", "replace": "y", "expectedReplacements": 2}],
        )
        assert result.document == "<li>y</li><li>y</li>"
        assert result.match_tiers == ["exact"]

    def test_ambiguous_match_takes_first(self):
        result = apply_edit_operations("ab ab", [{"search": "ab", "replace": "cd"}])
        assert result.document == "cd ab"

    def test_deletion(self):
        result = apply_edit_operations("<p>a</p><hr><p>b</p>", [{"search": "<hr>", "replace": ""}])
        assert result.document == "<p>a</p><p>b</p>"

    def test_fuzzy_boundary_applies(self):
        result = apply_edit_operations(
            "<p>abcXefghiXklmnoXqrst</p>",
            [{"search": "abcdefghijklmnopqrst", "replace": "REPLACED"}],
        )
        assert result.document == "<p>REPLACED</p>"
        assert result.match_tiers == ["fuzzy"]

    def test_fuzzy_missing_leading_char_keeps_markup(self):
        result = apply_edit_operations("<p>oodbye</p>", [{"search": "Goodbye", "replace": "Bye"}])
        assert isinstance(result, ApplySuccess)
        assert result.document == "<p>Bye</p>"
        assert result.match_tiers == ["fuzzy"]

    def test_empty_batch(self):
        result = apply_edit_operations("<p>a</p>", [])
        assert isinstance(result, ApplySuccess)
        assert result.document == "<p>a</p>"
        assert result.match_tiers == []


class TestApplyPartial:
    """Test batches where some operations fail."""

    def test_partial_continuation(self):
        result = apply_edit_operations(
            "<p>one</p><p>two</p>",
            [
                {"search": "one", "replace": "1"},
                {"search": "zzzzzzzz qqq", "replace": "x"},
                {"search": "two", "replace": "2"},
            ],
        )
        assert isinstance(result, ApplyPartial)
        assert result.document == "<p>1</p><p>2</p>"
        assert result.applied_count == 2
        assert result.failed_count == 1
        assert [f.index for f in result.failed_operations] == [1]
        assert "Edit operation 2 of 3 failed" in result.failed_operations[0].error
        assert result.match_tiers == ["exact", "exact"]
        assert result.error.startswith("Applied 2 of 3 edit operations; 1 failed")

    def test_empty_search_does_not_abort(self):
        result = apply_edit_operations(
            "<p>a</p>",
            [{"search": "", "replace": "x"}, {"search": "a", "replace": "b"}],
        )
        assert isinstance(result, ApplyPartial)
        assert result.document == "<p>b</p>"
        assert "search text is empty" in result.failed_operations[0].error


class TestApplyFailure:
    """Test batches where nothing applies."""

    def test_fuzzy_budget_exceeded(self):
        doc = "<header>keep</header>\n<p>abcXefghiXklmXoXqrst</p>"
        result = apply_edit_operations(doc, [{"search": "abcdefghijklmnopqrst", "replace": "R"}])
        assert isinstance(result, ApplyFailure)
        assert not result.ok
        assert result.document == doc
        assert result.best_match is not None
        assert result.best_match.similarity == 0.8
        assert result.best_match.line == 2
        assert "(best match 80% similar at line 2)" in result.error

    def test_empty_search(self):
        result = apply_edit_operations("<p>a</p>", [{"search": "", "replace": "x"}])
        assert isinstance(result, ApplyFailure)
        assert result.error == "Edit operation 1 of 1 failed: search text is empty"
        assert result.best_match is None

    def test_expected_count_mismatch(self):
        doc = "<li>x</li><li>x</li>"
        result = apply_edit_operations(
            doc, [EditOperation(search="x", replace="y", expected_replacements=3)]
        )
        assert isinstance(result, ApplyFailure)
        assert result.document == doc
        assert "expected 3 occurrences of search text, found 2" in result.error

    def test_no_diagnostic_below_floor(self):
        result = apply_edit_operations("abcdefgh", [{"search": "zzzzzzzzzz", "replace": "x"}])
        assert isinstance(result, ApplyFailure)
        assert result.best_match is None
        assert result.error == "Edit operation 1 of 1 failed: search text not found"

    def test_invalid_expected_count_raises(self):
        with pytest.raises(ValidationError):
            apply_edit_operations("x", [{"search": "x", "replace": "y", "expectedReplacements": 0}])


class TestRejectedOperations:
    """Test malformed operations are refused before the document is touched."""

    def test_missing_replace_raises(self):
        with pytest.raises(ValidationError):
            apply_edit_operations("<p>keep me</p>", [{"search": "keep me"}])

    def test_non_string_replace_raises(self):
        with pytest.raises(ValidationError):
            apply_edit_operations("<p>x</p>", [{"search": "x", "replace": 5}])

    def test_missing_replace_in_model(self):
        with pytest.raises(ValidationError):
            EditOperation(search="keep me")


class TestAutocorrect:
    """Test the optional looser fuzzy pass."""

    DOC = "<p>abcXefghiXklmXoXqrst</p>"
    OPS = [{"search": "abcdefghijklmnopqrst", "replace": "R"}]

    def test_disabled_by_default(self):
        assert isinstance(apply_edit_operations(self.DOC, self.OPS), ApplyFailure)

    def test_enabled_applies_as_fuzzy(self):
        config = EngineConfig(autocorrect_threshold=0.75)
        result = apply_edit_operations(self.DOC, self.OPS, config)
        assert result.document == "<p>R</p>"
        assert result.match_tiers == ["fuzzy"]

    def test_must_be_looser(self):
        with pytest.raises(ValidationError):
            EngineConfig(autocorrect_threshold=0.9)


# ─────────────────────────────────────────────────────────────
# Diagnostics Tests
# ─────────────────────────────────────────────────────────────


DOC = "line one\nline two\n<p>Hello Wrld</p>\nline four\nline five\nline six"


class TestFindBestMatch:
    """Test best-match diagnostics for failed operations."""

    def test_best_match_fields(self):
        best = find_best_match_for_error(DOC, "<p>Hello World</p>")
        assert best.text == "<p>Hello Wrld</p>"
        assert best.line == 3
        assert best.similarity == 0.94
        assert best.surrounding == "line one\nline two\n<p>Hello Wrld</p>\nline four\nline five"

    def test_idempotent_and_non_mutating(self):
        before = DOC
        first = find_best_match_for_error(DOC, "<p>Hello World</p>")
        second = find_best_match_for_error(DOC, "<p>Hello World</p>")
        assert first == second
        assert DOC == before

    def test_noise_is_dropped(self):
        assert find_best_match_for_error("abcdefgh", "zzzzzzzzzz") is None

    def test_empty_inputs(self):
        assert find_best_match_for_error("", "abc") is None
        assert find_best_match_for_error("abc", "") is None

    def test_text_is_truncated(self):
        long_line = "a" * 400
        best = find_best_match_for_error(long_line, "a" * 199 + "b")
        assert len(best.text) == 150
        assert len(best.surrounding) == 300

    def test_line_number(self):
        assert line_number("a\nb\nc", 0) == 1
        assert line_number("a\nb\nc", 4) == 3

    def test_surrounding_at_document_edges(self):
        assert surrounding_lines("only", 0, 4) == "only"
