"""End-to-end split pipeline: parse, partition, serialize.

Within one patch the stages run strictly in sequence. Independent patches
share nothing mutable, so split_patches() can run them on a thread pool
without locking.
"""

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from splitpr.patch.parser import parse_patch
from splitpr.patch.partition import PartitionStrategy, partition_labeled
from splitpr.patch.serializer import serialize

logger = logging.getLogger(__name__)


def split_patch(
    text: str, strategy: PartitionStrategy | None = None, verify: bool = True
) -> list[tuple[str, str]]:
    """Split one patch text into labelled standalone patch texts.

    Args:
        text: Complete unified diff text
        strategy: Grouping strategy (defaults to ByFile)
        verify: Re-parse every emitted group as a safety check

    Returns:
        List of (label, patch text) pairs in emission order.

    Raises:
        ParseError: If the text is not a valid patch.
        ConfigError: If the strategy cannot be applied.
        InternalInvariantViolation: On a bug in partitioning or serialization.
    """
    patch = parse_patch(text)
    groups = partition_labeled(patch, strategy)
    return [(group.label, serialize(group.patch, verify=verify)) for group in groups]


def split_patches(
    texts: Sequence[str],
    strategy: PartitionStrategy | None = None,
    verify: bool = True,
    max_workers: int | None = None,
) -> list[list[tuple[str, str]]]:
    """Split several independent patches in parallel.

    Results are returned in input order. If any input fails, the error of
    the earliest failing input is raised after the pool shuts down.
    """
    if len(texts) <= 1 or max_workers == 1:
        return [split_patch(text, strategy, verify) for text in texts]

    logger.debug("Splitting %d patches with max_workers=%s", len(texts), max_workers)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(split_patch, text, strategy, verify) for text in texts]
        return [future.result() for future in futures]
