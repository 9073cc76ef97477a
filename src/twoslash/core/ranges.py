from collections.abc import Callable, Sequence
from typing import Protocol, TypeVar

from twoslash.core.positions import PositionConverter
from twoslash.models import Position, Range, TwoslashNode


class _StartLength(Protocol):
    start: int
    length: int


_N = TypeVar("_N", bound=_StartLength)


def is_in_range(index: int, range_: Sequence[int]) -> bool:
    return range_[0] <= index <= range_[1]


def ranges_intersect(a: Sequence[int], b: Sequence[int]) -> bool:
    return is_in_range(a[0], b) or is_in_range(a[1], b) or is_in_range(b[0], a) or is_in_range(b[1], a)


def merge_ranges(ranges: Sequence[Range]) -> list[Range]:
    """Sort by start and coalesce overlapping or touching ranges."""
    merged: list[Range] = []
    for start, end in sorted(ranges, key=lambda r: r[0]):
        if merged and merged[-1][1] >= start:
            last_start, last_end = merged[-1]
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))
    return merged


def remove_code_ranges(
    code: str, removals: Sequence[Range], nodes: list[_N] | None = None
) -> tuple[str, list[Range], list[_N]]:
    """Cut ``removals`` out of ``code`` and shift ``nodes`` to match.

    Ranges are removed from the highest offset down so the offsets of the ranges
    still to be processed stay valid. Nodes are mutated in place: nodes overlapping
    a removed range get ``start = -1``, nodes after it move back by its length.
    Returns the new code, the merged ranges in removal order, and the nodes.
    """
    ranges = sorted(merge_ranges(removals), key=lambda r: r[0], reverse=True)
    nodes = nodes if nodes is not None else []

    output = code
    for start, end in ranges:
        removal_length = end - start
        output = output[:start] + output[end:]
        for node in nodes:
            if node.start + node.length <= start:
                continue
            if node.start < end:
                node.start = -1
            else:
                node.start -= removal_length

    return output, ranges, nodes


def resolve_node_positions(
    nodes: Sequence[TwoslashNode], index_to_position: str | Callable[[int], Position]
) -> list[TwoslashNode]:
    """Drop invalidated nodes, sort by ``(start, type)`` and fill in line/character."""
    if isinstance(index_to_position, str):
        index_to_position = PositionConverter(index_to_position).index_to_position

    resolved = sorted((n for n in nodes if n.start >= 0), key=lambda n: (n.start, n.type))
    for node in resolved:
        pos = index_to_position(node.start)
        node.line = pos.line
        node.character = pos.character
    return resolved
