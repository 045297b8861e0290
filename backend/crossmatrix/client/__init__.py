"""Client-resident half of a game room: board replica, tap controller,
media handshake and the Socket.IO session tying them together."""

from .board import Board, BOARD_CELLS
from .cards import CardTemplate, deck_from_selection
from .controller import BoardController
from .session import GameClient
from .signaling import PeerSession

__all__ = [
    'Board',
    'BOARD_CELLS',
    'BoardController',
    'CardTemplate',
    'GameClient',
    'PeerSession',
    'deck_from_selection',
]
