"""
Interval-shift rule for the job board's total order.

Jobs carry an ``order`` field that must always form the permutation 1..N.
Moving one job from ``from_order`` to ``to_order`` shifts every job strictly
between the two positions by one slot towards the vacated position, which keeps
the permutation intact in a single pass.
"""

from typing import Hashable, Mapping, TypeVar

K = TypeVar("K", bound=Hashable)


def shift_order(order: int, from_order: int, to_order: int) -> int:
    """Return the new order of a job that is *not* the one being moved."""
    if from_order < to_order and from_order < order <= to_order:
        return order - 1
    if from_order > to_order and to_order <= order < from_order:
        return order + 1
    return order


def shift_orders(
    orders: Mapping[K, int],
    moved_id: K,
    from_order: int,
    to_order: int,
) -> dict[K, int]:
    """
    Apply a move to an ``{id: order}`` mapping and return the new mapping.

    Args:
        orders: Current order of every job, keyed by job id
        moved_id: Id of the job being moved
        from_order: Order the moved job is leaving
        to_order: Order the moved job ends up at

    Returns:
        New ``{id: order}`` mapping; the input is left untouched

    Raises:
        KeyError: If ``moved_id`` is not present in ``orders``
    """
    if moved_id not in orders:
        raise KeyError(moved_id)

    shifted: dict[K, int] = {}
    for job_id, order in orders.items():
        if job_id == moved_id:
            shifted[job_id] = to_order
        else:
            shifted[job_id] = shift_order(order, from_order, to_order)
    return shifted


def is_contiguous(orders: Mapping[K, int] | list[int]) -> bool:
    """True when the order values are exactly 1..N with no gaps or duplicates."""
    values = list(orders.values()) if isinstance(orders, Mapping) else list(orders)
    return sorted(values) == list(range(1, len(values) + 1))


def move_index(items: list, from_index: int, to_index: int) -> list:
    """Array-move: return a copy of ``items`` with one element relocated."""
    moved = list(items)
    item = moved.pop(from_index)
    moved.insert(to_index, item)
    return moved
