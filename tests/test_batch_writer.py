import asyncio

import pytest

from notion_obsidian_sync.batch_writer import BatchAppendError, append_in_batches
from notion_obsidian_sync.blocks import plain_paragraph

from conftest import FakeNotionAPI


def make_blocks(count):
    return [plain_paragraph(f"line {i}") for i in range(count)]


def test_splits_into_ordered_batches():
    api = FakeNotionAPI()
    blocks = make_blocks(120)

    batches = asyncio.run(append_in_batches(api, "page-1", blocks, batch_size=50))

    assert batches == 3
    assert [len(children) for _, children in api.appended] == [50, 50, 20]
    sent = [child for _, children in api.appended for child in children]
    assert sent == [block.to_notion() for block in blocks]


def test_failure_stops_remaining_batches():
    api = FakeNotionAPI()
    api.fail_append_on = 2

    with pytest.raises(BatchAppendError) as excinfo:
        asyncio.run(append_in_batches(api, "page-1", make_blocks(120), batch_size=50))

    assert [call for call in api.calls if call[0] == "append"] == [
        ("append", "page-1", 50),
        ("append", "page-1", 50),
    ]
    assert excinfo.value.batch_number == 2
    assert excinfo.value.appended == 50
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_no_blocks_sends_nothing():
    api = FakeNotionAPI()
    assert asyncio.run(append_in_batches(api, "page-1", [])) == 0
    assert api.calls == []
