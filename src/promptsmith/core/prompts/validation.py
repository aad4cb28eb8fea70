"""Rule-based validation of builder state.

The validator is stateless and independent of the renderers: it inspects a
``BuilderState`` and reports issues, it never blocks rendering. Only errors
make a result invalid; warnings and info are advisory.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Literal

from promptsmith.core.exceptions import ConfigurationError
from promptsmith.core.prompts.state import BuilderState

Severity = Literal["error", "warning", "info"]

# Issue codes
DUPLICATE_TOOL = "DUPLICATE_TOOL"
MISSING_IDENTITY = "MISSING_IDENTITY"
EMPTY_CAPABILITIES = "EMPTY_CAPABILITIES"
EMPTY_CONSTRAINTS = "EMPTY_CONSTRAINTS"
TOOLS_WITHOUT_EXAMPLES = "TOOLS_WITHOUT_EXAMPLES"
TOOLS_WITHOUT_GUARDRAILS = "TOOLS_WITHOUT_GUARDRAILS"
NO_MUST_CONSTRAINTS = "NO_MUST_CONSTRAINTS"
CONFLICTING_CONSTRAINTS = "CONFLICTING_CONSTRAINTS"


@dataclass
class ValidationIssue:
    """A single finding."""

    severity: Severity
    code: str
    message: str
    suggestion: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "severity": self.severity,
            "code": self.code,
            "message": self.message,
        }
        if self.suggestion:
            data["suggestion"] = self.suggestion
        return data


@dataclass
class ValidationResult:
    """Issues grouped by severity."""

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    info: list[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def codes(self) -> list[str]:
        """All issue codes, errors first."""
        return [issue.code for issue in (*self.errors, *self.warnings, *self.info)]

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
            "info": [issue.to_dict() for issue in self.info],
        }


@dataclass
class ValidatorConfig:
    """Independent on/off switches for each rule family."""

    check_duplicate_tools: bool = True
    check_identity: bool = True
    check_empty_sections: bool = True
    check_recommendations: bool = True
    check_constraint_conflicts: bool = True

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, bool):
                raise ConfigurationError(
                    f"{f.name} must be a boolean, got {type(value).__name__}",
                    key=f.name,
                    reason="not a boolean",
                )

    def updated(self, overrides: dict[str, bool] | None) -> "ValidatorConfig":
        """Return a copy with ``overrides`` applied on top."""
        data = self.to_dict()
        data.update(overrides or {})
        return ValidatorConfig.from_dict(data)

    def to_dict(self) -> dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ValidatorConfig":
        """Create config from a dict of switches.

        Raises:
            ConfigurationError: If a key is not a known switch
        """
        data = data or {}
        known = {f.name for f in fields(cls)}
        for key in data:
            if key not in known:
                raise ConfigurationError(
                    f"Unknown validator switch: {key}", key=key, reason="unknown switch"
                )
        return cls(**data)


class PromptValidator:
    """Inspects builder state and reports categorized issues."""

    def __init__(self, config: ValidatorConfig | dict[str, bool] | None = None) -> None:
        if not isinstance(config, ValidatorConfig):
            config = ValidatorConfig.from_dict(config)
        self.config = config

    def validate(self, state: BuilderState) -> ValidationResult:
        result = ValidationResult()

        if self.config.check_duplicate_tools:
            self._check_duplicate_tools(state, result.errors)
        if self.config.check_identity:
            self._check_identity(state, result.warnings)
        if self.config.check_empty_sections:
            self._check_empty_sections(state, result.warnings)
        if self.config.check_recommendations:
            self._check_recommendations(state, result.info)
        if self.config.check_constraint_conflicts:
            self._check_constraint_conflicts(state, result.warnings)

        return result

    def _check_duplicate_tools(self, state: BuilderState, errors: list[ValidationIssue]) -> None:
        seen: set[str] = set()
        duplicates: dict[str, None] = {}
        for tool in state.tools:
            if tool.name in seen:
                duplicates[tool.name] = None
            seen.add(tool.name)

        for name in duplicates:
            errors.append(
                ValidationIssue(
                    severity="error",
                    code=DUPLICATE_TOOL,
                    message=f'Duplicate tool name: "{name}"',
                    suggestion=f'Tool names must be unique. Rename one of the "{name}" tools.',
                )
            )

    def _check_identity(self, state: BuilderState, warnings: list[ValidationIssue]) -> None:
        if not state.identity.strip():
            warnings.append(
                ValidationIssue(
                    severity="warning",
                    code=MISSING_IDENTITY,
                    message="No identity set",
                    suggestion="Add an identity with .with_identity() to define the agent's role",
                )
            )

    def _check_empty_sections(self, state: BuilderState, warnings: list[ValidationIssue]) -> None:
        if not state.capabilities:
            warnings.append(
                ValidationIssue(
                    severity="warning",
                    code=EMPTY_CAPABILITIES,
                    message="No capabilities defined",
                    suggestion=(
                        "Add capabilities with .with_capability() or .with_capabilities() "
                        "to describe what the agent can do"
                    ),
                )
            )
        if not state.constraints:
            warnings.append(
                ValidationIssue(
                    severity="warning",
                    code=EMPTY_CONSTRAINTS,
                    message="No behavioral constraints defined",
                    suggestion="Add constraints with .with_constraint() to define behavioral guidelines",
                )
            )

    def _check_recommendations(self, state: BuilderState, info: list[ValidationIssue]) -> None:
        if state.tools and not state.examples:
            info.append(
                ValidationIssue(
                    severity="info",
                    code=TOOLS_WITHOUT_EXAMPLES,
                    message="Tools defined without usage examples",
                    suggestion="Add examples with .with_examples() to demonstrate proper tool usage",
                )
            )
        if state.tools and not state.guardrails_enabled:
            info.append(
                ValidationIssue(
                    severity="info",
                    code=TOOLS_WITHOUT_GUARDRAILS,
                    message="Tools defined without security guardrails",
                    suggestion=(
                        "Enable guardrails with .with_guardrails() to protect against prompt injection"
                    ),
                )
            )
        if state.constraints and not state.constraints_of("must"):
            info.append(
                ValidationIssue(
                    severity="info",
                    code=NO_MUST_CONSTRAINTS,
                    message='No "must" constraints defined',
                    suggestion=(
                        'Add critical requirements with .with_constraint("must", "...") '
                        "for essential behavioral rules"
                    ),
                )
            )

    def _check_constraint_conflicts(
        self, state: BuilderState, warnings: list[ValidationIssue]
    ) -> None:
        # Textual heuristic only: a "must ... never X" rule against a must_not
        # rule containing "X". At most one warning per must rule.
        musts = [c.rule.lower() for c in state.constraints_of("must")]
        must_nots = [c.rule.lower() for c in state.constraints_of("must_not")]

        for must in musts:
            if "never" not in must:
                continue
            needle = must.replace("never", "", 1)
            for must_not in must_nots:
                if needle in must_not:
                    warnings.append(
                        ValidationIssue(
                            severity="warning",
                            code=CONFLICTING_CONSTRAINTS,
                            message="Potentially conflicting constraints detected",
                            suggestion=(
                                "Review your must/must_not constraints to ensure "
                                "they don't contradict each other"
                            ),
                        )
                    )
                    break


def create_validator(config: ValidatorConfig | dict[str, bool] | None = None) -> PromptValidator:
    """Create a validator; every rule family is on unless switched off."""
    return PromptValidator(config)


_GROUPS = (
    ("errors", "Errors", "✗"),
    ("warnings", "Warnings", "⚠"),
    ("info", "Info", "ℹ"),
)


def format_validation_result(result: ValidationResult) -> str:
    """Render a result as a human-readable report.

    The first line is ``✓ Validation passed`` or ``✗ Validation failed``;
    each non-empty severity group follows after a blank line, with
    suggestions on an indented ``→`` line under their issue.
    """
    lines = ["✓ Validation passed" if result.valid else "✗ Validation failed"]

    for attr, title, marker in _GROUPS:
        issues: list[ValidationIssue] = getattr(result, attr)
        if not issues:
            continue
        lines.append("")
        lines.append(f"{title} ({len(issues)}):")
        for issue in issues:
            lines.append(f"  {marker} [{issue.code}] {issue.message}")
            if issue.suggestion:
                lines.append(f"    → {issue.suggestion}")

    return "\n".join(lines)
