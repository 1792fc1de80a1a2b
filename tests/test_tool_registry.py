import threading
import time

import pytest

from executor_agent.tools.registry import ToolRegistry
from executor_agent.tools.schemas import ToolDefinition, ToolParameter, describe_tools


class SlowCatalogClient:
    server_url = "http://tools.test"

    def __init__(self, fail_times=0):
        self.calls = 0
        self.fail_times = fail_times

    def list_tools(self, category=None):
        self.calls += 1
        time.sleep(0.05)
        if self.calls <= self.fail_times:
            raise ConnectionError("tool server down")
        return [ToolDefinition(name="createAuthor", description="Create a new author")]

    def close(self):
        pass


def test_file_catalog_loads_blog_tools(registry):
    assert registry.initialized
    assert registry.count() == 18
    author = registry.find_tool("createAuthor")
    assert author.category == "author"
    assert author.parameters["name"].required is True
    assert author.parameters["bio"].required is False
    assert {t.name for t in registry.list_by_category("comment")} == {
        "createComment", "getComment", "deleteComment", "listCommentsByBlog",
    }
    assert registry.find_tool("nope") is None


def test_missing_file_gives_empty_catalog(tmp_path):
    reg = ToolRegistry(source="file", definitions_path=tmp_path / "absent.yaml")
    reg.ensure_initialized()
    assert reg.initialized
    assert reg.count() == 0


def test_custom_catalog_file(tmp_path):
    path = tmp_path / "tools.yaml"
    path.write_text(
        "tools:\n"
        "  - name: ping\n"
        "    description: Health probe\n"
        "  - description: entry without a name is skipped\n"
    )
    reg = ToolRegistry(source="file", definitions_path=path)
    reg.ensure_initialized()
    assert [t.name for t in reg.all_tools()] == ["ping"]


def test_concurrent_first_load_happens_once():
    client = SlowCatalogClient()
    reg = ToolRegistry(source="remote", client=client)

    threads = [threading.Thread(target=reg.ensure_initialized) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert client.calls == 1
    assert reg.has_tool("createAuthor")


def test_failed_remote_load_is_retried():
    client = SlowCatalogClient(fail_times=1)
    reg = ToolRegistry(source="remote", client=client)

    with pytest.raises(ConnectionError):
        reg.ensure_initialized()
    assert not reg.initialized

    reg.ensure_initialized()
    assert reg.initialized
    assert client.calls == 2


def test_unknown_source_rejected():
    with pytest.raises(ValueError, match="Unknown tool catalog source"):
        ToolRegistry(source="carrier-pigeon").ensure_initialized()


def test_clear_allows_reload(registry):
    registry.clear()
    assert registry.count() == 0
    assert not registry.initialized
    registry.ensure_initialized()
    assert registry.count() == 18


def test_summaries_list_required_parameters(registry):
    summaries = {s.name: s for s in registry.list_summaries(category="blog")}
    assert summaries["createBlog"].required_parameters == ["title", "content", "authorId"]
    assert summaries["listBlogs"].parameter_count == 0


def test_describe_renders_parameters():
    tool = ToolDefinition(
        name="createAuthor",
        description="Create a new author",
        parameters={
            "name": ToolParameter(type="string", required=True),
            "bio": ToolParameter(type="string"),
        },
    )
    text = describe_tools([tool])
    assert "createAuthor:" in text
    assert "Category: general" in text
    assert "  - name: string (required)" in text
    assert "  - bio: string (optional)" in text
