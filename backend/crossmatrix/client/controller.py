import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from crossmatrix.services.rooms.registry import PLAYER

from .board import (
    Board,
    MOVE_CARD,
    MOVE_STACK,
    PLACE_CARD,
    REMOVE_CARD,
    REMOVE_STACK,
)
from .cards import CardTemplate

logger = logging.getLogger(__name__)

IDLE = 'idle'
CARD_SELECTED = 'card-selected'
MOVE_PENDING = 'move-pending'

SendAction = Callable[[str, Dict[str, Any]], None]


class MoveSource:
    def __init__(self, cell_index: int, card_index: Optional[int] = None):
        self.cell_index = cell_index
        self.card_index = card_index

    @property
    def is_group(self) -> bool:
        return self.card_index is None


class Inspection:
    """The stack view opened by tapping an occupied cell while idle."""

    def __init__(self, cell_index: int, cards: List[Dict[str, Any]]):
        self.cell_index = cell_index
        self.cards = cards


class BoardController:
    """Turns cell and deck taps into local board changes plus relay actions.

    Every accepted change goes through ``Board.apply`` first and is only
    sent when it applied, so the sender's replica and the relayed action
    never disagree.
    """

    def __init__(self, board: Board, role: str = PLAYER, deck: Iterable[CardTemplate] = (),
                 send_action: Optional[SendAction] = None):
        self.board = board
        self.role = role
        self.deck = tuple(deck)
        self.send_action = send_action
        self.selected_card: Optional[CardTemplate] = None
        self.move_source: Optional[MoveSource] = None
        self.inspection: Optional[Inspection] = None

    @property
    def read_only(self) -> bool:
        return self.role != PLAYER

    @property
    def state(self) -> str:
        if self.move_source is not None:
            return MOVE_PENDING
        if self.selected_card is not None:
            return CARD_SELECTED
        return IDLE

    def highlighted(self) -> bool:
        """Cells are highlighted while a tap on them would do something."""
        return not self.read_only and self.state != IDLE

    def reset(self) -> None:
        self.selected_card = None
        self.move_source = None
        self.inspection = None

    def _emit(self, action: str, payload: Dict[str, Any]) -> bool:
        if not self.board.apply(action, payload):
            logger.debug('local %s skipped: %r', action, payload)
            return False
        if self.send_action is not None:
            self.send_action(action, payload)
        return True

    def tap_deck_card(self, template: CardTemplate) -> None:
        if self.read_only:
            return
        if self.selected_card is not None and self.selected_card == template:
            self.selected_card = None
            return
        self.selected_card = template
        self.move_source = None

    def tap_cell(self, index: int) -> Optional[Inspection]:
        if self.read_only:
            return None

        if self.move_source is not None:
            source = self.move_source
            self.move_source = None
            if source.cell_index == index:
                return None
            if source.is_group:
                self._emit(MOVE_STACK, {'fromIndex': source.cell_index, 'toIndex': index})
            else:
                self._emit(MOVE_CARD, {
                    'fromIndex': source.cell_index,
                    'fromCardIndex': source.card_index,
                    'toIndex': index,
                })
            return None

        if self.selected_card is not None:
            # The deck is a template source; placing never consumes it
            card = self.selected_card.mint()
            self.selected_card = None
            self._emit(PLACE_CARD, {'cellIndex': index, 'card': card})
            return None

        if not self.board.is_empty(index):
            self.inspection = Inspection(index, list(self.board[index]))
            return self.inspection
        return None

    def close_inspection(self) -> None:
        self.inspection = None

    def start_move(self, cell_index: int, card_index: int) -> None:
        if self.read_only:
            return
        self.move_source = MoveSource(cell_index, card_index)
        self.selected_card = None
        self.inspection = None

    def start_group_move(self, cell_index: int) -> None:
        if self.read_only:
            return
        self.move_source = MoveSource(cell_index)
        self.selected_card = None
        self.inspection = None

    def dispose_card(self, cell_index: int, card_index: int) -> bool:
        if self.read_only:
            return False
        self.inspection = None
        return self._emit(REMOVE_CARD, {'cellIndex': cell_index, 'cardIndex': card_index})

    def dispose_stack(self, cell_index: int) -> bool:
        if self.read_only:
            return False
        self.inspection = None
        return self._emit(REMOVE_STACK, {'cellIndex': cell_index})
