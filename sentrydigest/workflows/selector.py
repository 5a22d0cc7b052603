from collections import defaultdict
from typing import Dict, Iterable, List, Set, Tuple

from sentrydigest.models.items import NormalizedItem
from sentrydigest.models.sources import SelectionConfig

def select_items(pool: Iterable[NormalizedItem], selection: SelectionConfig) -> List[NormalizedItem]:
    """
    Pick the final list from the pool.

    Per-source minimums in `sourceMinItems` are served first, in declaration
    order, each with that source's newest items. The remaining slots up to
    `maxItems` are filled from the whole pool, newest first. Items sharing
    `(source_name, link)` appear once. The output is quota picks followed by
    fill picks and is not re-sorted afterwards.
    """
    # sorted() is stable, so equal timestamps keep their input order
    ordered = sorted(pool, key=lambda item: item.published_at, reverse=True)

    by_source: Dict[str, List[NormalizedItem]] = defaultdict(list)
    for item in ordered:
        by_source[item.source_name].append(item)

    cap = selection.max_items
    selected: List[NormalizedItem] = []
    used: Set[Tuple[str, str]] = set()

    for source, min_count in selection.source_min_items.items():
        taken = 0
        for item in by_source.get(source, []):
            if taken >= min_count or len(selected) >= cap:
                break
            if item.dedup_key in used:
                continue
            selected.append(item)
            used.add(item.dedup_key)
            taken += 1

    for item in ordered:
        if len(selected) >= cap:
            break
        if item.dedup_key in used:
            continue
        selected.append(item)
        used.add(item.dedup_key)

    return selected
