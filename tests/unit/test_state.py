"""Tests for builder state value objects and copy/merge rules."""

import pytest

from promptsmith.core.exceptions import ToolCollisionError
from promptsmith.core.prompts.state import BuilderState, Constraint, Example, PromptFormat
from promptsmith.core.tool_protocol import ToolSpec


class TestPromptFormat:
    def test_parse(self):
        assert PromptFormat.parse("Markdown") is PromptFormat.MARKDOWN
        assert PromptFormat.parse(PromptFormat.TOON) is PromptFormat.TOON

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="expected one of: markdown, toon, compact"):
            PromptFormat.parse("yaml")


class TestConstraint:
    def test_invalid_type(self):
        with pytest.raises(ValueError, match="got 'maybe'"):
            Constraint("maybe", "Rule")

    def test_to_dict(self):
        assert Constraint("must", "Rule").to_dict() == {"type": "must", "rule": "Rule"}


class TestExample:
    def test_signature_in_canonical_order(self):
        example = Example(explanation="Why", assistant="A", user="U")
        assert example.signature == ("user", "assistant", "explanation")

    def test_is_empty(self):
        assert Example().is_empty
        assert Example(explanation="Only why").is_empty
        assert not Example(output="O").is_empty

    def test_dict_round_trip(self):
        example = Example(input="I", output="O")
        assert example.to_dict() == {"input": "I", "output": "O"}
        assert Example.from_dict(example.to_dict()) == example


class TestBuilderState:
    def test_copy_shares_no_containers(self):
        state = BuilderState(identity="A")
        state.add_capabilities(["Cap"])
        state.add_constraint("must", "Rule")
        state.add_examples([Example(user="U", assistant="A")])
        state.tools.append(ToolSpec("t", "T", {"type": "object"}))

        copied = state.copy()
        copied.capabilities.append("New")
        copied.constraints[0].rule = "Changed"
        copied.examples[0].user = "Changed"
        copied.tools[0].parameters["type"] = "string"

        assert state.capabilities == ["Cap"]
        assert state.constraints[0].rule == "Rule"
        assert state.examples[0].user == "U"
        assert state.tools[0].parameters == {"type": "object"}

    def test_merge_keeps_identity_and_format(self):
        target = BuilderState(identity="Target", format=PromptFormat.TOON)
        source = BuilderState(identity="Source", error_handling="Retry")

        target.merge(source)

        assert target.identity == "Target"
        assert target.format is PromptFormat.TOON
        assert target.error_handling == "Retry"

    def test_merge_collision_message(self):
        target = BuilderState(tools=[ToolSpec("x", "X")])
        source = BuilderState(tools=[ToolSpec("y", "Y"), ToolSpec("x", "Other")])

        with pytest.raises(ToolCollisionError) as exc_info:
            target.merge(source)

        assert str(exc_info.value) == (
            'Cannot merge: duplicate tool name "x". Tools with the same name must be unique.'
        )
        assert [t.name for t in target.tools] == ["x"]

    def test_from_dict_reapplies_insertion_rules(self):
        state = BuilderState.from_dict(
            {
                "capabilities": ["", "A"],
                "constraints": [{"type": "must", "rule": ""}, {"type": "should", "rule": "B"}],
                "examples": [{}, {"user": "U"}],
                "forbidden_topics": ["T", "T"],
                "format": "compact",
            }
        )

        assert state.capabilities == ["A"]
        assert [c.rule for c in state.constraints] == ["B"]
        assert len(state.examples) == 1
        assert state.forbidden_topics == ["T"]
        assert state.format is PromptFormat.COMPACT
        assert state.identity == ""

    def test_merge_with_itself_appends_one_copy(self):
        state = BuilderState(context="Ctx")
        state.add_constraint("must", "Rule")
        state.add_examples([Example(input="I", output="O")])

        state.merge(state)

        assert [c.rule for c in state.constraints] == ["Rule", "Rule"]
        assert len(state.examples) == 2
        assert state.context == "Ctx\n\nCtx"
