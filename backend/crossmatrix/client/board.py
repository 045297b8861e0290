"""Client-side replica of the shared 20-cell board.

Every client applies the same action vocabulary to its own copy: the sender
optimistically, everyone else when the relay delivers it. Given the same
ordered actions the replicas end up identical. References to stack
positions that no longer exist are skipped rather than raised, so a race
with a concurrent mutation leaves the local copy untouched for that action.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from .cards import card_power

logger = logging.getLogger(__name__)

BOARD_CELLS = 20

PLACE_CARD = 'place_card'
MOVE_CARD = 'move_card'
MOVE_STACK = 'move_stack'
REMOVE_CARD = 'remove_card'
REMOVE_STACK = 'remove_stack'
ACTIONS = (PLACE_CARD, MOVE_CARD, MOVE_STACK, REMOVE_CARD, REMOVE_STACK)

Card = Dict[str, Any]
Stack = List[Card]


def _index(value, length: int) -> Optional[int]:
    """Coerce a wire index; None when it does not address an existing slot."""
    if isinstance(value, bool):
        return None
    try:
        idx = int(value)
    except (TypeError, ValueError):
        return None
    if 0 <= idx < length:
        return idx
    return None


class Board:
    def __init__(self, cells: int = BOARD_CELLS):
        self.size = cells
        self.cells: List[Stack] = [[] for _ in range(cells)]

    def __len__(self):
        return self.size

    def __getitem__(self, index: int) -> Stack:
        return self.cells[index]

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return self.cells == other.cells

    def is_empty(self, index: int) -> bool:
        return not self.cells[index]

    def top(self, index: int) -> Optional[Card]:
        stack = self.cells[index]
        return stack[-1] if stack else None

    def total_power(self, index: int) -> int:
        return sum(card_power(c) for c in self.cells[index])

    def snapshot(self) -> List[Stack]:
        return copy.deepcopy(self.cells)

    def replace(self, cells) -> None:
        """Adopt a snapshot received from another client wholesale."""
        stacks = [list(stack or []) for stack in (cells or [])]
        stacks = stacks[:self.size]
        stacks.extend([] for _ in range(self.size - len(stacks)))
        self.cells = copy.deepcopy(stacks)

    def clear(self) -> None:
        self.cells = [[] for _ in range(self.size)]

    def apply(self, action: str, payload: Optional[Dict[str, Any]]) -> bool:
        """Apply one relayed action. Returns False when it was skipped."""
        payload = payload or {}
        if action == PLACE_CARD:
            return self.place_card(payload.get('cellIndex'), payload.get('card'))
        if action == MOVE_CARD:
            return self.move_card(payload.get('fromIndex'), payload.get('fromCardIndex'), payload.get('toIndex'))
        if action == MOVE_STACK:
            return self.move_stack(payload.get('fromIndex'), payload.get('toIndex'))
        if action == REMOVE_CARD:
            return self.remove_card(payload.get('cellIndex'), payload.get('cardIndex'))
        if action == REMOVE_STACK:
            return self.remove_stack(payload.get('cellIndex'))
        logger.debug('ignoring unknown action %r', action)
        return False

    def place_card(self, cell_index, card) -> bool:
        cell = _index(cell_index, self.size)
        if cell is None or not isinstance(card, dict):
            return False
        self.cells[cell].append(card)
        return True

    def move_card(self, from_index, from_card_index, to_index) -> bool:
        src = _index(from_index, self.size)
        dst = _index(to_index, self.size)
        if src is None or dst is None:
            return False
        pos = _index(from_card_index, len(self.cells[src]))
        if pos is None:
            return False
        card = self.cells[src].pop(pos)
        self.cells[dst].append(card)
        return True

    def move_stack(self, from_index, to_index) -> bool:
        src = _index(from_index, self.size)
        dst = _index(to_index, self.size)
        if src is None or dst is None or not self.cells[src]:
            return False
        moved = self.cells[src]
        self.cells[src] = []
        self.cells[dst].extend(moved)
        return True

    def remove_card(self, cell_index, card_index) -> bool:
        cell = _index(cell_index, self.size)
        if cell is None:
            return False
        pos = _index(card_index, len(self.cells[cell]))
        if pos is None:
            return False
        del self.cells[cell][pos]
        return True

    def remove_stack(self, cell_index) -> bool:
        cell = _index(cell_index, self.size)
        if cell is None:
            return False
        self.cells[cell] = []
        return True
