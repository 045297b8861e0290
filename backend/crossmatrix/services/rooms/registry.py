from typing import Dict, List, Optional

PLAYER = 'player'
SPECTATOR = 'spectator'
ROLES = (PLAYER, SPECTATOR)


class RoomError(Exception):
    """Base class for membership failures reported back to the joiner."""


class RoomFullError(RoomError):
    pass


class InvalidJoinError(RoomError):
    pass


class Room:
    def __init__(self, room_id: str):
        self.room_id = room_id
        self.players: List[str] = []
        self.spectators: List[str] = []

    @property
    def members(self) -> List[str]:
        return self.players + self.spectators

    def is_empty(self) -> bool:
        return not self.players and not self.spectators

    def to_dict(self):
        return {
            'playerCount': len(self.players),
            'spectatorCount': len(self.spectators),
        }


class JoinResult:
    """Outcome of an accepted join.

    ``sync_from`` is the connection asked for a board snapshot on behalf of
    the joiner, or None. ``notify_players`` lists players already seated who
    should start a media handshake with the newcomer.
    """

    def __init__(self, room: Room, sid: str, role: str, sync_from: Optional[str] = None,
                 notify_players: Optional[List[str]] = None, previous: Optional['LeaveResult'] = None):
        self.room = room
        self.sid = sid
        self.role = role
        self.sync_from = sync_from
        self.notify_players = notify_players or []
        self.previous = previous

    @property
    def status(self):
        return self.room.to_dict()


class LeaveResult:
    def __init__(self, room: Room, sid: str, role: str, swept: bool = False):
        self.room = room
        self.sid = sid
        self.role = role
        self.swept = swept

    @property
    def was_player(self) -> bool:
        return self.role == PLAYER

    @property
    def remaining(self) -> List[str]:
        return self.room.members

    @property
    def status(self):
        return self.room.to_dict()


class RoomRegistry:
    """In-memory room table for one server process.

    All mutations complete without yielding, so handlers running on a single
    event loop see each join/leave as atomic.
    """

    def __init__(self, max_players: int = 2, sweep_empty: bool = True, sync_late_players: bool = False):
        self.max_players = int(max_players)
        self.sweep_empty = bool(sweep_empty)
        self.sync_late_players = bool(sync_late_players)
        self._rooms: Dict[str, Room] = {}
        self._sid_to_room: Dict[str, str] = {}

    def __contains__(self, room_id) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def status(self, room_id: str):
        room = self._rooms.get(room_id)
        if room is None:
            return {'playerCount': 0, 'spectatorCount': 0}
        return room.to_dict()

    def room_of(self, sid: str) -> Optional[str]:
        return self._sid_to_room.get(sid)

    def role_of(self, sid: str) -> Optional[str]:
        room = self._rooms.get(self._sid_to_room.get(sid, ''))
        if room is None:
            return None
        if sid in room.players:
            return PLAYER
        if sid in room.spectators:
            return SPECTATOR
        return None

    def is_player_in(self, sid: str, room_id: str) -> bool:
        room = self._rooms.get(room_id)
        return room is not None and sid in room.players

    def players(self, room_id: str) -> List[str]:
        room = self._rooms.get(room_id)
        return list(room.players) if room else []

    def other_players(self, room_id: str, sid: str) -> List[str]:
        return [p for p in self.players(room_id) if p != sid]

    def join(self, room_id: str, sid: str, role: str) -> JoinResult:
        if role not in ROLES:
            raise InvalidJoinError(f'Unknown role: {role}')
        if not room_id:
            raise InvalidJoinError('roomId is required')

        room = self._rooms.get(room_id)
        if room is not None and self._sid_to_room.get(sid) == room_id and sid in room.members:
            # Role is fixed for a connection's stay in a room
            current = self.role_of(sid)
            if current != role:
                raise InvalidJoinError(f'Already in room {room_id} as {current}')
            return JoinResult(room, sid, current)

        if role == PLAYER and room is not None and len(room.players) >= self.max_players:
            raise RoomFullError('Room is full (max %d players)' % self.max_players)

        # One room per connection; joining elsewhere leaves the old room first
        previous = None
        if sid in self._sid_to_room:
            previous = self.leave(sid)

        if room is None:
            room = self._rooms.setdefault(room_id, Room(room_id))

        sync_from = None
        notify_players: List[str] = []
        if role == PLAYER:
            notify_players = list(room.players)
            if self.sync_late_players and room.players:
                sync_from = room.players[0]
            room.players.append(sid)
        else:
            if room.players:
                sync_from = room.players[0]
            room.spectators.append(sid)
        self._sid_to_room[sid] = room_id
        return JoinResult(room, sid, role, sync_from=sync_from, notify_players=notify_players, previous=previous)

    def leave(self, sid: str) -> Optional[LeaveResult]:
        room_id = self._sid_to_room.pop(sid, None)
        if room_id is None:
            return None
        room = self._rooms.get(room_id)
        if room is None:
            return None
        if sid in room.players:
            room.players.remove(sid)
            role = PLAYER
        elif sid in room.spectators:
            room.spectators.remove(sid)
            role = SPECTATOR
        else:
            return None
        swept = False
        if self.sweep_empty and room.is_empty():
            self._rooms.pop(room_id, None)
            swept = True
        return LeaveResult(room, sid, role, swept=swept)
