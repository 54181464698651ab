"""
Batched block appends.

Notion limits how many children a single append request may carry, so a
page body is written in consecutive batches. The first failing batch
stops the write; batches already appended stay on the page.
"""

import logging
from typing import Protocol, Sequence

from .blocks import Block
from .config import APPEND_BATCH_SIZE

logger = logging.getLogger(__name__)


class BlockAppender(Protocol):
    async def append_children(self, block_id: str, children: list[dict]) -> None:
        ...


class BatchAppendError(Exception):
    """An append batch failed after ``appended`` blocks were already written."""

    def __init__(self, block_id: str, batch_number: int, appended: int, cause: Exception):
        self.block_id = block_id
        self.batch_number = batch_number
        self.appended = appended
        super().__init__(
            f"Failed to append batch {batch_number} to {block_id} "
            f"({appended} block(s) already appended): {cause}"
        )


async def append_in_batches(
    api: BlockAppender,
    block_id: str,
    blocks: Sequence[Block],
    batch_size: int = APPEND_BATCH_SIZE,
) -> int:
    """
    Append blocks to a page in order, ``batch_size`` at a time.

    Args:
        api: Anything with an async ``append_children``.
        block_id: Target page or block.
        blocks: Blocks in reading order.
        batch_size: Maximum children per request.

    Returns:
        Number of batches sent.

    Raises:
        BatchAppendError: On the first failing batch. No later batch is sent.
    """
    batches = 0
    for start in range(0, len(blocks), batch_size):
        batch = blocks[start:start + batch_size]
        batches += 1
        try:
            await api.append_children(block_id, [block.to_notion() for block in batch])
        except Exception as e:
            logger.error("Failed to append batch %d to %s: %s", batches, block_id, e)
            raise BatchAppendError(block_id, batches, start, e) from e

        logger.info("Appended batch %d (%d blocks) to %s", batches, len(batch), block_id)

    return batches
