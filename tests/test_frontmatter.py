from notion_obsidian_sync.frontmatter import build_frontmatter, merge_note, parse_header, split_note
from notion_obsidian_sync.notion_api import NoteRecord

NOTE = NoteRecord(
    id="abc-123",
    title="Limits",
    type="Lecture",
    created="2025-05-14T08:00:00.000Z",
    tags=("math", "exam"),
    project_id="p-1",
)

FRONTMATTER = (
    "---\n"
    "type: Lecture\n"
    "created: 2025-05-14T08:00:00.000Z\n"
    "tags: math, exam\n"
    "project: Calculus [[Calculus]]\n"
    "notion_id: abc-123\n"
    "---\n"
)


def test_build_frontmatter_field_order():
    assert build_frontmatter(NOTE, "Calculus") == FRONTMATTER


def test_build_frontmatter_placeholders():
    header = build_frontmatter(NoteRecord(id="x", title="Bare"), "N/A")
    assert "type: N/A\n" in header
    assert "created: N/A\n" in header
    assert "tags: N/A\n" in header
    assert "project: N/A [[N/A]]\n" in header


class TestSplitNote:

    def test_header_and_body(self):
        fields, body = split_note(FRONTMATTER + "\nBody text\n")
        assert fields["notion_id"] == "abc-123"
        assert fields["created"] == "2025-05-14T08:00:00.000Z"
        assert body == "Body text"

    def test_no_header(self):
        fields, body = split_note("just text\n")
        assert fields is None
        assert body == "just text"

    def test_header_without_trailing_newline(self):
        fields, body = split_note("---\nnotion_id: x\n---")
        assert fields == {"notion_id": "x"}
        assert body == ""

    def test_parse_header_ignores_junk(self):
        assert parse_header("a: 1\nno colon here\n: empty key\nb:  two  ") == {"a": "1", "b": "two"}


class TestMergeNote:

    def test_new_file(self):
        assert merge_note(None, FRONTMATTER, "Hello\n") == FRONTMATTER + "Hello\n"

    def test_body_already_present(self):
        existing = FRONTMATTER + "Local intro\n\nHello\n\nLocal outro\n"
        assert merge_note(existing, FRONTMATTER, "  Hello  \n") == existing

    def test_empty_pull_leaves_file(self):
        existing = FRONTMATTER + "Local\n"
        assert merge_note(existing, FRONTMATTER, "") == existing

    def test_new_content_is_appended(self):
        existing = "---\nnotion_id: abc-123\ncustom: kept\n---\nLocal edits\n"
        merged = merge_note(existing, FRONTMATTER, "Remote text\n")

        assert merged == existing + "\nRemote text\n"
        assert merged.startswith(existing)

    def test_existing_header_is_not_regenerated(self):
        existing = "---\nnotion_id: abc-123\n---\n"
        merged = merge_note(existing, FRONTMATTER, "Remote")
        assert merged == "---\nnotion_id: abc-123\n---\n\nRemote\n"

    def test_dedup_only_looks_at_body(self):
        existing = "---\nnotion_id: abc-123\n---\nbody\n"
        merged = merge_note(existing, FRONTMATTER, "notion_id")
        assert merged.endswith("\n\nnotion_id\n")

    def test_empty_existing_file_is_treated_as_new(self):
        assert merge_note("", FRONTMATTER, "Hello") == FRONTMATTER + "Hello"
