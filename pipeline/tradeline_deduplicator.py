"""Duplicate tradeline detection across and within bureaus.

Groups tradelines by fingerprint. The same account reported twice by one
bureau is an internal duplicate; the same account at several bureaus is a
cross-bureau duplicate. Both surface as a DuplicateGroup.

Account fingerprints keep only the trailing digits so a full number can
match its masked rendering. Two different full numbers sharing those
digits are split apart again before groups are emitted.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Sequence

from features.canonical_record import CanonicalRecord, DuplicateGroup, Tradeline
from schemas.source import SOURCE_ORDER, Bureau

logger = logging.getLogger(__name__)


def _split_conflicting_accounts(refs: List[Tradeline]) -> List[List[Tradeline]]:
    """Separate refs whose full account numbers disagree.

    Masked refs carry no full number and join the first full-number
    account seen in scan order.
    """
    keys = [ref.account_key for ref in refs if ref.account_key]
    distinct = list(dict.fromkeys(keys))
    if len(distinct) <= 1:
        return [refs]

    parts: Dict[str, List[Tradeline]] = {key: [] for key in distinct}
    for ref in refs:
        parts[ref.account_key or distinct[0]].append(ref)
    return list(parts.values())


def detect_duplicate_tradelines(
    records: Optional[Mapping[Bureau, Optional[CanonicalRecord]]],
    order: Sequence[Bureau] = SOURCE_ORDER,
) -> List[DuplicateGroup]:
    """Find tradelines sharing a fingerprint.

    Sources are scanned in `order`, tradelines in index order, so the
    suggested label (first ref's label) is deterministic.

    Args:
        records: Bureau -> canonical record (None for unavailable sources).
        order: Source iteration order.

    Returns:
        One DuplicateGroup per fingerprint (per full account number where
        those conflict) with two or more refs, in first-seen order. Empty
        if records is None or empty.
    """
    if not records:
        return []

    groups: Dict[str, List[Tradeline]] = defaultdict(list)
    for source in order:
        record = records.get(source)
        if record is None:
            continue
        for tradeline in record.tradelines:
            groups[tradeline.fingerprint].append(tradeline)

    duplicates = []
    for fp, refs in groups.items():
        for part in _split_conflicting_accounts(refs):
            if len(part) >= 2:
                duplicates.append(DuplicateGroup(fingerprint=fp, refs=tuple(part), suggested_label=part[0].display_label))

    if duplicates:
        logger.debug(f"Found {len(duplicates)} duplicate tradeline groups")
    return duplicates
