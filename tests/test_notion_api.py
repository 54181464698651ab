import asyncio
from types import SimpleNamespace

from notion_obsidian_sync.notion_api import NoteRecord, NotionAPI, ProjectRecord

PAGE_ID = "0123456789abcdef0123456789abcdef"
DASHED_ID = "01234567-89ab-cdef-0123-456789abcdef"


def note_page(**properties):
    return {
        "object": "page",
        "id": "n1",
        "created_time": "2025-05-14T08:00:00.000Z",
        "properties": {"Name": {"title": [{"plain_text": "Limits"}]}, **properties},
    }


class TestRecords:

    def test_note_record_fields(self):
        page = note_page(
            Type={"select": {"name": "Lecture"}},
            Tags={"multi_select": [{"name": "math"}, {"name": "exam"}]},
            Project={"relation": [{"id": "p1"}, {"id": "p2"}]},
        )

        assert NoteRecord.from_api_response(page) == NoteRecord(
            id="n1",
            title="Limits",
            type="Lecture",
            created="2025-05-14T08:00:00.000Z",
            tags=("math", "exam"),
            project_id="p1",
        )

    def test_note_record_placeholders(self):
        page = {"id": "n2", "properties": {"Name": {"title": []}, "Type": {"select": None}}}
        note = NoteRecord.from_api_response(page)

        assert note.title == "Untitled"
        assert note.type == "N/A"
        assert note.created == "N/A"
        assert note.tags == ()
        assert note.project_id is None

    def test_project_record(self):
        page = {"id": "p1", "properties": {"Name": {"title": [{"plain_text": "Calculus"}]}}}
        assert ProjectRecord.from_api_response(page) == ProjectRecord(id="p1", title="Calculus")


def fake_client(list_responses):
    calls = []
    responses = iter(list_responses)

    async def children_list(**kwargs):
        calls.append(("list", kwargs))
        return next(responses)

    async def children_append(**kwargs):
        calls.append(("append", kwargs))
        return {}

    client = SimpleNamespace(
        blocks=SimpleNamespace(
            children=SimpleNamespace(list=children_list, append=children_append),
        ),
    )
    return client, calls


def test_list_children_follows_cursor(config):
    client, calls = fake_client([
        {"results": [{"id": "b1"}], "has_more": True, "next_cursor": "c2"},
        {"results": [{"id": "b2"}], "has_more": False, "next_cursor": None},
    ])
    api = NotionAPI(config, client=client)

    children = asyncio.run(api.list_children(PAGE_ID))

    assert [child["id"] for child in children] == ["b1", "b2"]
    assert calls == [
        ("list", {"block_id": DASHED_ID}),
        ("list", {"block_id": DASHED_ID, "start_cursor": "c2"}),
    ]
    assert api.request_count == 2


def test_append_children_passes_payload(config):
    client, calls = fake_client([])
    api = NotionAPI(config, client=client)
    children = [{"object": "block", "type": "divider", "divider": {}}]

    asyncio.run(api.append_children("short-id", children))

    assert calls == [("append", {"block_id": "short-id", "children": children})]
