"""
Pool Quotas
===========

Group-quota top-K merge used by dual-pool retrieval.

Each pool is guaranteed a minimum number of slots; the remaining slots
go to the globally best candidates. The selection is independent of the
pool semantics and works on any ranked sequence with a group key.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, List, Mapping, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PoolQuotas:
    """
    Slot allocation for one dual-pool retrieval.

    `own` / `common` are the allocations that size the per-pool
    over-fetch; `own_minimum` / `common_minimum` are the slots each pool
    is guaranteed in the final selection.
    """
    own: int
    common: int
    own_minimum: int
    common_minimum: int

    @property
    def total(self) -> int:
        return self.own + self.common

    def fetch_limits(self, overfetch_factor: int = 2) -> Dict[str, int]:
        return {
            "own": self.own * overfetch_factor,
            "common": self.common * overfetch_factor,
        }


def compute_pool_quotas(top_k: int, own_ratio: float = 0.67) -> PoolQuotas:
    """
    Split `top_k` slots between the own pool and the common pool.

    With top_k >= 2 each pool reserves one slot and the remainder is
    split `own_ratio` / `1 - own_ratio`, rounding the own share up.
    With top_k < 2 everything goes to the own pool.

    Examples:
        compute_pool_quotas(6)  -> own=4, common=2
        compute_pool_quotas(4)  -> own=3, common=1
        compute_pool_quotas(1)  -> own=1, common=0
    """
    if top_k < 0:
        raise ValueError("top_k cannot be negative")

    if top_k >= 2:
        remaining = top_k - 2
        own_remaining = math.ceil(round(remaining * own_ratio, 9))
        common_remaining = remaining - own_remaining
        return PoolQuotas(
            own=1 + own_remaining,
            common=1 + common_remaining,
            own_minimum=1,
            common_minimum=1,
        )

    return PoolQuotas(own=top_k, common=0, own_minimum=top_k, common_minimum=0)


def select_with_quotas(
    ranked: Sequence[T],
    group_of: Callable[[T], Hashable],
    quotas: Mapping[Hashable, int],
    top_k: int,
) -> List[int]:
    """
    Pick up to `top_k` items from `ranked` honoring per-group quotas.

    Pass 1 walks `ranked` once and admits an item only while its group's
    quota is unmet. It stops only when every quota is met and `top_k`
    items are selected, never merely because `top_k` was reached.
    Pass 2 runs if fewer than `top_k` items were admitted and fills the
    remaining slots with the earliest items not yet selected, whatever
    their group.

    Args:
        ranked: Candidates, best first
        group_of: Maps a candidate to its group key
        quotas: Guaranteed slots per group (groups not listed get none)
        top_k: Maximum number of items to select

    Returns:
        Indices into `ranked`, in admission order
    """
    if top_k <= 0:
        return []

    counts = {group: 0 for group in quotas}
    selected: List[int] = []

    for i, item in enumerate(ranked):
        group = group_of(item)
        if counts.get(group, 0) < quotas.get(group, 0) and len(selected) < top_k:
            counts[group] += 1
            selected.append(i)

        quotas_met = all(counts[g] >= q for g, q in quotas.items())
        if quotas_met and len(selected) >= top_k:
            break

    if len(selected) < top_k:
        taken = set(selected)
        for i in range(len(ranked)):
            if len(selected) >= top_k:
                break
            if i not in taken:
                selected.append(i)

    return selected
