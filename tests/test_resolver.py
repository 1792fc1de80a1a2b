import pytest

from executor_agent.executor.resolver import (
    find_unresolved,
    parse_value,
    resolve_parameters,
    resolve_reference,
)
from executor_agent.executor.schemas import TemplateRef


@pytest.mark.parametrize(
    "value",
    [
        "Bob",
        42,
        None,
        True,
        {"nested": "{{createAuthor._id}}"},
        ["{{createAuthor._id}}"],
        "author is {{createAuthor._id}}",
        "{{createAuthor._id}} trailing",
        "{createAuthor._id}",
        "{{}}",
    ],
)
def test_non_template_values_pass_through(value):
    outputs = {"createAuthor": {"_id": "a1"}}
    assert resolve_parameters({"key": value}, outputs) == {"key": value}


def test_resolves_field_from_output_table():
    outputs = {"toolA": {"field": "X"}}
    assert resolve_parameters({"p": "{{toolA.field}}"}, outputs) == {"p": "X"}


def test_missing_tool_leaves_literal_template():
    assert resolve_parameters({"p": "{{toolA.field}}"}, {}) == {"p": "{{toolA.field}}"}


def test_missing_intermediate_field_resolves_to_none():
    outputs = {"createAuthor": {"_id": "a1"}}
    resolved = resolve_parameters(
        {"p": "{{createAuthor.profile.avatar}}", "q": "{{createAuthor.nope}}"},
        outputs,
    )
    assert resolved == {"p": None, "q": None}


def test_nested_path_and_list_index():
    outputs = {
        "listAuthors": [{"_id": "a1", "meta": {"rank": 3}}, {"_id": "a2"}],
    }
    resolved = resolve_parameters(
        {"first": "{{listAuthors.0._id}}", "rank": "{{listAuthors.0.meta.rank}}",
         "out_of_range": "{{listAuthors.5._id}}"},
        outputs,
    )
    assert resolved == {"first": "a1", "rank": 3, "out_of_range": None}


def test_reference_without_path_returns_whole_output():
    outputs = {"getBlog": {"_id": "b1", "title": "T"}}
    assert resolve_parameters({"blog": "{{getBlog}}"}, outputs) == {"blog": {"_id": "b1", "title": "T"}}


def test_resolving_twice_is_a_no_op():
    outputs = {"createAuthor": {"_id": "a1"}}
    once = resolve_parameters({"authorId": "{{createAuthor._id}}", "title": "T"}, outputs)
    twice = resolve_parameters(once, outputs)
    assert once == twice == {"authorId": "a1", "title": "T"}


def test_input_mapping_is_not_mutated():
    params = {"authorId": "{{createAuthor._id}}"}
    resolve_parameters(params, {"createAuthor": {"_id": "a1"}})
    assert params == {"authorId": "{{createAuthor._id}}"}


def test_parse_value_builds_tagged_reference():
    ref = parse_value("{{createAuthor._id}}")
    assert ref == TemplateRef(tool_name="createAuthor", path=("_id",))
    assert ref.literal == "{{createAuthor._id}}"
    assert parse_value("{{ createAuthor._id }}") == ref
    assert parse_value("plain") == "plain"


def test_resolve_reference_reports_absent_tool():
    ref = TemplateRef(tool_name="createBlog", path=("_id",))
    assert resolve_reference(ref, {}) == (False, None)
    assert resolve_reference(ref, {"createBlog": {"_id": "b1"}}) == (True, "b1")


def test_find_unresolved_lists_remaining_references():
    params = {"a": "{{createAuthor._id}}", "b": "done", "c": "{{createBlog._id}}"}
    refs = find_unresolved(params)
    assert [r.tool_name for r in refs] == ["createAuthor", "createBlog"]


def test_trailing_newline_is_not_a_reference():
    outputs = {"createAuthor": {"_id": "a1"}}
    assert parse_value("{{createAuthor._id}}\n") == "{{createAuthor._id}}\n"
    resolved = resolve_parameters({"authorId": "{{createAuthor._id}}\n"}, outputs)
    assert resolved == {"authorId": "{{createAuthor._id}}\n"}
