"""Offer/answer/candidate handshake for the player-to-player media channel.

The server only relays signals; this module keeps the per-client state
machine. The player already seated offers when a second player arrives,
the newcomer answers. Remote ICE candidates can show up before the remote
description is in place, so those are queued and applied in arrival order
once it is set. Negotiation failures are logged and never retried.

The peer connection itself is injected through ``peer_factory`` and must
provide ``create_offer``, ``create_answer``, ``set_local_description``,
``set_remote_description``, ``add_ice_candidate``, ``close`` and a
``remote_description`` attribute.
"""

import logging
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

IDLE = 'idle'
HAVE_LOCAL_OFFER = 'have-local-offer'
HAVE_REMOTE_OFFER = 'have-remote-offer'
CONNECTED = 'connected'

OFFER = 'offer'
ANSWER = 'answer'
CANDIDATE = 'candidate'

SendSignal = Callable[[str, Any], None]


class PeerSession:
    def __init__(self, peer_factory: Callable[[], Any], send_signal: SendSignal,
                 on_state_change: Optional[Callable[[str], None]] = None):
        self.peer_factory = peer_factory
        self.send_signal = send_signal
        self.on_state_change = on_state_change
        self.peer = None
        self.state = IDLE
        self.connection_state: Optional[str] = None
        self.pending_candidates: List[Any] = []
        self.last_error: Optional[Exception] = None

    def _set_state(self, state: str) -> None:
        if state != self.state:
            logger.info('signaling state %s -> %s', self.state, state)
            self.state = state

    def _ensure_peer(self):
        if self.peer is None:
            self.peer = self.peer_factory()
        return self.peer

    def _has_remote_description(self) -> bool:
        return self.peer is not None and bool(getattr(self.peer, 'remote_description', None))

    def start_offer(self) -> bool:
        """Called on the seated player when a second player joins."""
        try:
            peer = self._ensure_peer()
            offer = peer.create_offer()
            peer.set_local_description(offer)
        except Exception as exc:
            self._fail('creating offer', exc)
            return False
        self._set_state(HAVE_LOCAL_OFFER)
        self.send_signal(OFFER, offer)
        return True

    def handle_signal(self, signal_type: str, payload: Any) -> None:
        try:
            if signal_type == OFFER:
                self._accept_offer(payload)
            elif signal_type == ANSWER:
                self._accept_answer(payload)
            elif signal_type == CANDIDATE:
                self._accept_candidate(payload)
            else:
                logger.debug('ignoring signal type %r', signal_type)
        except Exception as exc:
            self._fail(f'handling {signal_type}', exc)

    def _accept_offer(self, offer) -> None:
        peer = self._ensure_peer()
        peer.set_remote_description(offer)
        self._set_state(HAVE_REMOTE_OFFER)
        answer = peer.create_answer()
        peer.set_local_description(answer)
        self.send_signal(ANSWER, answer)
        self.flush_candidates()
        self._set_state(CONNECTED)

    def _accept_answer(self, answer) -> None:
        if self.state != HAVE_LOCAL_OFFER:
            logger.warning('answer received in state %s', self.state)
        peer = self._ensure_peer()
        peer.set_remote_description(answer)
        self.flush_candidates()
        self._set_state(CONNECTED)

    def _accept_candidate(self, candidate) -> None:
        if self._has_remote_description():
            self.peer.add_ice_candidate(candidate)
            return
        logger.debug('queuing ICE candidate until a remote description is set')
        self.pending_candidates.append(candidate)

    def flush_candidates(self) -> int:
        queued, self.pending_candidates = self.pending_candidates, []
        applied = 0
        for candidate in queued:
            try:
                self.peer.add_ice_candidate(candidate)
                applied += 1
            except Exception as exc:
                logger.error('error adding queued ICE candidate: %s', exc)
        return applied

    def local_candidate(self, candidate) -> None:
        """Forward a candidate discovered by the local peer connection."""
        if candidate:
            self.send_signal(CANDIDATE, candidate)

    def connection_state_changed(self, state: str) -> None:
        self.connection_state = state
        logger.info('media connection state: %s', state)
        if self.on_state_change is not None:
            self.on_state_change(state)

    def close(self) -> None:
        if self.peer is not None:
            try:
                self.peer.close()
            except Exception as exc:
                logger.error('error closing peer connection: %s', exc)
        self.peer = None
        self.pending_candidates = []
        self.connection_state = None
        self._set_state(IDLE)

    def _fail(self, what: str, exc: Exception) -> None:
        self.last_error = exc
        logger.error('media negotiation failed while %s: %s', what, exc)
