"""
Block listing pipeline.

Composes the walker, metadata fetch and a renderer: for every entry under the
prefix, optionally fetch and validate its meta.json, render it and write the
result to the output stream. The first failure aborts the walk.
"""
from __future__ import annotations

import logging
from typing import TextIO

from .errors import RenderFailed
from .meta import block_id, fetch_meta
from .render import Renderer
from .storage.base import Bucket
from .walker import Deadline, walk

__all__ = ["list_blocks"]

logger = logging.getLogger(__name__)


def list_blocks(bucket: Bucket, renderer: Renderer, *, prefix: str, deadline: Deadline, out: TextIO) -> int:
    """
    Print every block under ``prefix`` with ``renderer``.

    Args:
        bucket: Storage accessor
        renderer: Output renderer, selected before the walk
        prefix: Prefix to list, empty for the bucket root
        deadline: Time budget for the whole walk
        out: Output stream, written once per entry in listing order

    Returns:
        Number of blocks printed

    Raises:
        InspectError: The first failure encountered; output already written stays
    """
    def print_block(entry: str) -> None:
        # Rejects plain objects at the block level before anything is printed
        block_id(entry)
        meta = fetch_meta(bucket, entry, deadline) if renderer.needs_meta else None
        text = renderer.render(entry, meta)
        # A fetch may have used up the rest of the budget
        deadline.check("writing output", path=entry)
        try:
            out.write(text)
        except OSError as e:
            raise RenderFailed(f"write output: {e}") from e

    logger.debug(f"Listing blocks in {bucket.name} with {type(renderer).__name__}")
    count = walk(bucket, prefix, deadline, print_block)
    logger.info(f"Listed {count} blocks from {bucket.name}")
    return count
