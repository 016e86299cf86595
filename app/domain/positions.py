# app/domain/positions.py
"""
Позиции соседей внутри родителя (стеллажи в зоне, полки в стеллаже).

Позиции 1-based и при корректной работе образуют плотную последовательность
1..N среди неудалённых соседей. Функции здесь чистые: на вход снимок
соседей, прочитанный внутри той же единицы работы, на выход позиция для
узла и минимальный набор сдвигов ``{sibling_id: new_position}``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Sequence

Shifts = Dict[str, int]


@dataclass(frozen=True)
class Sibling:
    id: str
    position: int


@dataclass(frozen=True)
class Allocation:
    position: int
    shifts: Shifts = field(default_factory=dict)


def max_position(siblings: Iterable[Sibling]) -> int:
    return max((s.position or 0 for s in siblings), default=0)


def allocate(siblings: Sequence[Sibling], desired: Optional[int] = None) -> Allocation:
    """
    Append: desired не задан или <= 0 -> max + 1, никого не двигаем.
    Insert-at: desired > 0 -> узел встаёт на desired, все с position >= desired
    уезжают на +1. desired больше max + 1 принимается как есть (дырка допустима).
    """
    if desired is None or desired <= 0:
        return Allocation(position=max_position(siblings) + 1)

    shifts = {s.id: s.position + 1 for s in siblings if (s.position or 0) >= desired}
    return Allocation(position=desired, shifts=shifts)


def close_gap(
    siblings: Sequence[Sibling],
    removed_position: int,
    exclude_id: Optional[str] = None,
) -> Shifts:
    """Remove-gap: все соседи после удалённой позиции сдвигаются на -1."""
    return {
        s.id: s.position - 1
        for s in siblings
        if s.id != exclude_id and (s.position or 0) > removed_position
    }


def reposition(
    siblings: Sequence[Sibling],
    node_id: str,
    old_position: int,
    new_position: int,
) -> Shifts:
    """
    Смена позиции внутри того же родителя: сначала закрываем дырку на старом
    месте, затем раздвигаем соседей под новое. Результат: итоговая позиция
    каждого затронутого соседа (без самого узла).
    """
    others = [s for s in siblings if s.id != node_id]
    if old_position == new_position:
        return {}

    original = {s.id: s.position for s in others}
    after_gap = merge_shifts(original, close_gap(others, old_position))

    compacted = [Sibling(id=sid, position=pos) for sid, pos in after_gap.items()]
    final = merge_shifts(after_gap, allocate(compacted, new_position).shifts)

    return {sid: pos for sid, pos in final.items() if original[sid] != pos}


def merge_shifts(*parts: Shifts) -> Shifts:
    merged: Shifts = {}
    for part in parts:
        merged.update(part)
    return merged


def is_dense(positions: Iterable[int]) -> bool:
    ordered = sorted(positions)
    return ordered == list(range(1, len(ordered) + 1))
