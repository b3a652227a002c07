"""
Extraction of commit references from commit messages.

Recognized forms:
- ``Fixes: <hash> ("<title>")`` - an explicit fix tag
- ``<hash> ("<title>")`` anywhere in the message - a bare mention
- a ``Revert "<title>"`` subject paired with ``This reverts commit <hash>``
"""

import re
from typing import List, Optional

from ..models import CommitRecord, ReferenceMention, RefType

# Commit titles never contain '"', so the title group stops at the first one.
# Messages are flattened to a single line before matching, so a mention that
# wraps across lines leaves a space between hash and parenthesis.
COMMIT_REF_RE = re.compile(r'(Fixes: )?([0-9a-f]{8,}) ?\("([^"]+)"\)')
REVERT_HEADER_RE = re.compile(r'Revert "([^"]+)"')
REVERT_HASH_RE = re.compile(r"This reverts commit ([0-9a-f]+)")


def extract_revert(commit: CommitRecord) -> Optional[ReferenceMention]:
    """Return the REVERT mention of a revert commit, if it is one."""
    if commit.summary is None:
        return None
    header = REVERT_HEADER_RE.search(commit.summary)
    if header is None:
        return None
    reverted = REVERT_HASH_RE.search(commit.message)
    if reverted is None:
        return None
    return ReferenceMention(
        hash=reverted.group(1), title=header.group(1), ref_type=RefType.REVERT
    )


def extract_references(commit: CommitRecord) -> List[ReferenceMention]:
    """Extract every reference mention from a commit message.

    Mentions are returned in message order, followed by the revert mention.
    Duplicates are not removed.
    """
    flat_message = commit.message.replace("\n", " ")
    mentions = [
        ReferenceMention(
            hash=match.group(2),
            title=match.group(3),
            ref_type=RefType.FIX if match.group(1) else RefType.NOTE,
        )
        for match in COMMIT_REF_RE.finditer(flat_message)
    ]

    revert = extract_revert(commit)
    if revert is not None:
        mentions.append(revert)
    return mentions
