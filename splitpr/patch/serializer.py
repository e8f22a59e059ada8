"""Serialization of partition groups back into patch text.

Each FileDiff is emitted as the exact text it was parsed from; nothing is
reformatted and no hunk header is recomputed, because splitting only
changes which files travel together. Every emitted group is therefore a
slice-by-file of the original input and applies with the same tools.
"""

import logging
from collections.abc import Sequence

from splitpr.patch.parser import parse_patch
from splitpr.patch.types import Patch
from splitpr.patch.validator import check_round_trip

logger = logging.getLogger(__name__)


def serialize(group: Patch, verify: bool = False) -> str:
    """Render one group as standalone patch text.

    Args:
        group: Patch (usually one partition group) to render
        verify: Re-parse the output and check it describes the same files

    Returns:
        The original text of every FileDiff in the group, concatenated in order.

    Raises:
        InternalInvariantViolation: If verify is set and the output does not
            re-parse to the same files.
    """
    text = "".join(fd.text for fd in group.files)
    if verify:
        check_round_trip(group, parse_patch(text, strict_end=False))
    return text


def serialize_all(groups: Sequence[Patch], verify: bool = False) -> list[str]:
    """Render every group; see serialize()."""
    blobs = [serialize(group, verify=verify) for group in groups]
    logger.debug("Serialized %d group(s)%s", len(blobs), " (verified)" if verify else "")
    return blobs
