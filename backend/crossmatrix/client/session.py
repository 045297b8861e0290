import logging
from typing import Any, Callable, Dict, Iterable, Optional

import socketio

from crossmatrix.services.rooms.registry import PLAYER, ROLES

from .board import Board
from .cards import CardTemplate
from .controller import BoardController
from .signaling import PeerSession

logger = logging.getLogger(__name__)

Emit = Callable[[str, Any], None]


class GameClient:
    """One participant's view of a room.

    Holds the local board replica, the tap controller and, for players with
    a peer factory, the media handshake. Server events are dispatched to the
    ``on_<event>`` methods; ``bind`` wires them to a python-socketio client.
    """

    EVENTS = (
        'error_message',
        'room_update',
        'game_update',
        'request_state',
        'state_synced',
        'player_joined',
        'signal',
        'player_left',
    )

    def __init__(self, emit: Optional[Emit] = None, deck: Iterable[CardTemplate] = (),
                 peer_factory: Optional[Callable[[], Any]] = None,
                 on_change: Optional[Callable[['GameClient'], None]] = None):
        self.emit = emit
        self.room_id: Optional[str] = None
        self.role: Optional[str] = None
        self.room_status: Dict[str, int] = {}
        self.last_error: Optional[str] = None
        self.on_change = on_change
        self.board = Board()
        self.controller = BoardController(self.board, role=PLAYER, deck=deck,
                                          send_action=self.send_game_action)
        self.peer = PeerSession(peer_factory, self.send_signal) if peer_factory else None

    @classmethod
    def connect(cls, url: str, namespace: str = '/', **kwargs) -> 'GameClient':
        sio = socketio.Client()
        client = cls(**kwargs)
        client.bind(sio, namespace=namespace)
        sio.connect(url, namespaces=[namespace])
        return client

    def bind(self, sio, namespace: str = '/') -> None:
        self.emit = lambda event, data: sio.emit(event, data, namespace=namespace)
        for event in self.EVENTS:
            sio.on(event, getattr(self, f'on_{event}'), namespace=namespace)

    @property
    def deck(self):
        return self.controller.deck

    def select_deck(self, templates: Iterable[CardTemplate]) -> None:
        if self.room_id is not None:
            raise RuntimeError('The deck cannot change after joining a room')
        self.controller.deck = tuple(templates)

    def _send(self, event: str, data: Any) -> None:
        if self.emit is None:
            logger.warning('not connected, dropping %s', event)
            return
        self.emit(event, data)

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self)

    def join(self, room_id: str, role: str) -> None:
        if role not in ROLES:
            raise ValueError(f'Unknown role: {role}')
        if self.room_id == room_id:
            # The server keeps the first role for a connection's stay in a room
            if role != self.role:
                raise ValueError(f'Already in room {room_id} as {self.role}')
            self._send('join_room', {'roomId': room_id, 'role': role})
            return
        self.room_id = room_id
        self.role = role
        self.controller.role = role
        self.controller.reset()
        self.board.clear()
        self._send('join_room', {'roomId': room_id, 'role': role})
        self._changed()

    def leave(self) -> None:
        if self.room_id is not None:
            self._send('leave_room', {})
        self.reset()

    def reset(self) -> None:
        """Drop every piece of room state, the way a page reload would."""
        self.room_id = None
        self.role = None
        self.room_status = {}
        self.board.clear()
        self.controller.reset()
        self.controller.role = PLAYER
        if self.peer is not None:
            self.peer.close()
        self._changed()

    def send_game_action(self, action: str, payload: Dict[str, Any]) -> None:
        if self.role != PLAYER:
            return
        self._send('game_action', {'roomId': self.room_id, 'action': action, 'payload': payload})
        self._changed()

    def send_signal(self, signal_type: str, payload: Any) -> None:
        self._send('signal', {'roomId': self.room_id, 'type': signal_type, 'payload': payload})

    def on_error_message(self, message) -> None:
        logger.error('server error: %s', message)
        self.last_error = message
        # Give the seat back before wiping local state, as a page reload would
        self.leave()

    def on_room_update(self, data) -> None:
        if self.room_id is None:
            return
        self.room_status = dict(data or {})
        logger.info('room status: %s', self.room_status)

    def on_game_update(self, data) -> None:
        if self.room_id is None:
            return
        data = data or {}
        if self.board.apply(data.get('action'), data.get('payload')):
            self._changed()

    def on_request_state(self, data) -> None:
        if self.role != PLAYER:
            return
        self._send('sync_state', {
            'targetId': (data or {}).get('requesterId'),
            'state': {'board': self.board.snapshot()},
        })

    def on_state_synced(self, state) -> None:
        if self.room_id is None:
            return
        board = (state or {}).get('board')
        if board is None:
            return
        self.board.replace(board)
        self._changed()

    def on_player_joined(self, data) -> None:
        if self.role != PLAYER or self.peer is None:
            return
        logger.info('player %s joined, starting offer', (data or {}).get('newPlayerId'))
        self.peer.start_offer()

    def on_signal(self, data) -> None:
        if self.role != PLAYER or self.peer is None:
            return
        data = data or {}
        self.peer.handle_signal(data.get('type'), data.get('payload'))

    def on_player_left(self, player_id) -> None:
        logger.info('player left: %s', player_id)
        if self.peer is not None:
            self.peer.close()
