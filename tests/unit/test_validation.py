"""Tests for the prompt validator."""

import pytest

from promptsmith.core.exceptions import ConfigurationError
from promptsmith.core.prompts.state import BuilderState, Example
from promptsmith.core.prompts.validation import (
    CONFLICTING_CONSTRAINTS,
    DUPLICATE_TOOL,
    EMPTY_CAPABILITIES,
    EMPTY_CONSTRAINTS,
    MISSING_IDENTITY,
    NO_MUST_CONSTRAINTS,
    TOOLS_WITHOUT_EXAMPLES,
    TOOLS_WITHOUT_GUARDRAILS,
    PromptValidator,
    ValidationIssue,
    ValidationResult,
    ValidatorConfig,
    create_validator,
    format_validation_result,
)
from promptsmith.core.tool_protocol import ToolSpec


def complete_state() -> BuilderState:
    """A state that triggers no findings."""
    state = BuilderState(identity="Support agent", guardrails_enabled=True)
    state.add_capabilities(["Answer questions"])
    state.add_constraint("must", "Be polite")
    state.tools.append(ToolSpec("lookup", "Look up an order"))
    state.add_examples([Example(user="Where is my order?", assistant="Let me check.")])
    return state


class TestPromptValidator:
    """Test cases for PromptValidator rule families."""

    def test_complete_state_is_clean(self):
        """Test a fully configured state has no issues."""
        result = create_validator().validate(complete_state())

        assert result.valid is True
        assert result.codes() == []

    def test_empty_state(self):
        """Test an empty state only warns."""
        result = PromptValidator().validate(BuilderState())

        assert result.valid is True
        assert [w.code for w in result.warnings] == [
            MISSING_IDENTITY,
            EMPTY_CAPABILITIES,
            EMPTY_CONSTRAINTS,
        ]
        assert result.errors == []
        assert result.info == []

    def test_whitespace_identity_is_missing(self):
        """Test a whitespace-only identity counts as missing."""
        state = complete_state()
        state.identity = "   \n"

        result = PromptValidator().validate(state)

        assert [w.code for w in result.warnings] == [MISSING_IDENTITY]
        assert result.warnings[0].message == "No identity set"

    def test_duplicate_tools_one_error_per_name(self):
        """Test each duplicated name is reported once, in first-repeat order."""
        state = complete_state()
        state.tools.extend(
            [
                ToolSpec("b", "B"),
                ToolSpec("b", "B again"),
                ToolSpec("lookup", "Duplicate lookup"),
                ToolSpec("b", "B a third time"),
            ]
        )

        result = PromptValidator().validate(state)

        assert result.valid is False
        assert [e.code for e in result.errors] == [DUPLICATE_TOOL, DUPLICATE_TOOL]
        assert result.errors[0].message == 'Duplicate tool name: "b"'
        assert result.errors[0].suggestion == (
            'Tool names must be unique. Rename one of the "b" tools.'
        )
        assert result.errors[1].message == 'Duplicate tool name: "lookup"'

    def test_tool_recommendations(self):
        """Test tools without examples or guardrails are flagged as info."""
        state = complete_state()
        state.examples.clear()
        state.guardrails_enabled = False

        result = PromptValidator().validate(state)

        assert result.valid is True
        assert [i.code for i in result.info] == [
            TOOLS_WITHOUT_EXAMPLES,
            TOOLS_WITHOUT_GUARDRAILS,
        ]

    def test_no_must_constraints(self):
        """Test constraints without a must rule produce info."""
        state = complete_state()
        state.constraints.clear()
        state.add_constraint("should", "Be brief")

        result = PromptValidator().validate(state)

        assert [i.code for i in result.info] == [NO_MUST_CONSTRAINTS]
        assert result.info[0].message == 'No "must" constraints defined'

    def test_conflicting_constraints(self):
        """Test the textual never-heuristic flags an overlapping must_not."""
        state = complete_state()
        state.add_constraint("must", "Never share passwords")
        state.add_constraint("must_not", "Do share passwords with admins")

        result = PromptValidator().validate(state)

        assert [w.code for w in result.warnings] == [CONFLICTING_CONSTRAINTS]
        assert result.warnings[0].message == "Potentially conflicting constraints detected"
        assert result.valid is True

    def test_conflict_requires_never(self):
        """Test a must rule without 'never' is never flagged."""
        state = complete_state()
        state.add_constraint("must", "Share passwords")
        state.add_constraint("must_not", "share passwords")

        result = PromptValidator().validate(state)

        assert CONFLICTING_CONSTRAINTS not in result.codes()

    def test_conflict_reported_once_per_must_rule(self):
        """Test several matching must_not rules yield one warning per must rule."""
        state = complete_state()
        state.add_constraint("must", "Never share passwords")
        state.add_constraint("must", "NEVER delete data")
        state.add_constraint("must_not", "Do share passwords")
        state.add_constraint("must_not", "Always share passwords")
        state.add_constraint("must_not", "Quietly delete data")

        result = PromptValidator().validate(state)

        assert result.codes().count(CONFLICTING_CONSTRAINTS) == 2

    def test_only_first_never_removed(self):
        """Test only the first occurrence of 'never' is removed."""
        state = complete_state()
        state.add_constraint("must", "never say never")
        state.add_constraint("must_not", "Always say never")
        state.add_constraint("must", "never say never again")
        state.add_constraint("must_not", "Always say hello")

        result = PromptValidator().validate(state)

        assert result.codes() == [CONFLICTING_CONSTRAINTS]

    def test_switches_disable_rule_families(self):
        """Test every rule family can be turned off."""
        state = BuilderState()
        state.tools.extend([ToolSpec("a", "A"), ToolSpec("a", "A")])
        state.add_constraint("must", "Never lie")
        state.add_constraint("must_not", "lie")

        config = ValidatorConfig(
            check_duplicate_tools=False,
            check_identity=False,
            check_empty_sections=False,
            check_recommendations=False,
            check_constraint_conflicts=False,
        )

        assert PromptValidator(config).validate(state).codes() == []

    def test_dict_config(self):
        """Test validators accept a dict of switches."""
        result = PromptValidator({"check_identity": False}).validate(BuilderState())

        assert MISSING_IDENTITY not in result.codes()
        assert EMPTY_CAPABILITIES in result.codes()


class TestValidatorConfig:
    """Tests for ValidatorConfig."""

    def test_defaults_all_on(self):
        """Test every switch defaults to True."""
        assert all(ValidatorConfig().to_dict().values())

    def test_updated(self):
        """Test overrides apply on top without touching the base config."""
        base = ValidatorConfig(check_identity=False)

        updated = base.updated({"check_recommendations": False})

        assert updated.check_identity is False
        assert updated.check_recommendations is False
        assert base.check_recommendations is True
        assert base.updated(None) == base

    def test_unknown_switch(self):
        """Test unknown switch names are rejected."""
        with pytest.raises(ConfigurationError, match="Unknown validator switch"):
            ValidatorConfig.from_dict({"check_everything": True})

    def test_non_boolean_switch(self):
        """Test switch values must be booleans."""
        with pytest.raises(ConfigurationError, match="must be a boolean"):
            ValidatorConfig(check_identity="yes")  # type: ignore


class TestFormatValidationResult:
    """Tests for the human-readable report."""

    def test_passed(self):
        """Test an empty result."""
        assert format_validation_result(ValidationResult()) == "✓ Validation passed"

    def test_grouped_report(self):
        """Test grouped listings with suggestions."""
        result = ValidationResult(
            errors=[ValidationIssue("error", "DUPLICATE_TOOL", 'Duplicate tool name: "a"', "Rename it")],
            warnings=[ValidationIssue("warning", "MISSING_IDENTITY", "No identity set")],
            info=[ValidationIssue("info", "NO_MUST_CONSTRAINTS", "No must", "Add one")],
        )

        assert format_validation_result(result) == (
            "✗ Validation failed\n"
            "\n"
            "Errors (1):\n"
            '  ✗ [DUPLICATE_TOOL] Duplicate tool name: "a"\n'
            "    → Rename it\n"
            "\n"
            "Warnings (1):\n"
            "  ⚠ [MISSING_IDENTITY] No identity set\n"
            "\n"
            "Info (1):\n"
            "  ℹ [NO_MUST_CONSTRAINTS] No must\n"
            "    → Add one"
        )

    def test_warnings_do_not_fail(self):
        """Test a result with only warnings still passes."""
        report = format_validation_result(PromptValidator().validate(BuilderState()))

        assert report.startswith("✓ Validation passed\n\nWarnings (3):\n")

    def test_result_to_dict(self):
        """Test the structured export of a result."""
        result = PromptValidator().validate(BuilderState(identity="x"))

        data = result.to_dict()

        assert data["valid"] is True
        assert data["warnings"][0]["code"] == EMPTY_CAPABILITIES
        assert "suggestion" in data["warnings"][0]
