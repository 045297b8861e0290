"""Room domain services: membership bookkeeping and sync planning.

This package holds the in-memory room table and the rules around who may
join, who gets asked for a board snapshot and who is told about arrivals
and departures. Socket handlers import it and turn its results into
events, keeping transport concerns out of membership logic.
"""

from .registry import (
    PLAYER,
    SPECTATOR,
    ROLES,
    InvalidJoinError,
    JoinResult,
    LeaveResult,
    Room,
    RoomError,
    RoomFullError,
    RoomRegistry,
)

__all__ = [
    'PLAYER',
    'SPECTATOR',
    'ROLES',
    'InvalidJoinError',
    'JoinResult',
    'LeaveResult',
    'Room',
    'RoomError',
    'RoomFullError',
    'RoomRegistry',
]
