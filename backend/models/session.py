"""
Voting session state and its mutators.

Every mutator is a coroutine holding ``Session.lock`` for the whole
read-decide-write, so a precondition check (e.g. "is this participant an
admin?") and the write it guards are never observed torn. Failed
preconditions never raise: they return a rejected ``MutationResult`` and the
next broadcast shows clients the unchanged state.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, Protocol

from .participant import ABSTAIN, ABSTAIN_TOKEN, NO_VOTE, Participant


class Connection(Protocol):
    """The write side of a client channel (a Starlette ``WebSocket`` fits)."""

    async def send_text(self, data: str) -> None: ...

    async def close(self, code: int = 1000) -> None: ...


class Rejection(str, Enum):
    UNKNOWN_PARTICIPANT = "unknown_participant"
    NOT_ADMIN = "not_admin"
    ADMIN_CANNOT_VOTE = "admin_cannot_vote"


@dataclass(frozen=True)
class MutationResult:
    applied: bool
    reason: Rejection | None = None


APPLIED = MutationResult(applied=True)


def _rejected(reason: Rejection) -> MutationResult:
    return MutationResult(applied=False, reason=reason)


@dataclass(frozen=True)
class VoteTally:
    participants: int
    active: int
    voted: int
    abstained: int
    average: float | None      # only reported once revealed


@dataclass(eq=False)
class Session:
    id: str
    participants: dict[str, Participant] = field(default_factory=dict)
    revealed: bool = False
    connections: dict[Connection, str] = field(default_factory=dict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    # -- helpers (caller holds the lock) ---------------------------------

    def _admin(self, participant_id: str) -> MutationResult | None:
        participant = self.participants.get(participant_id)
        if participant is None:
            return _rejected(Rejection.UNKNOWN_PARTICIPANT)
        if not participant.is_admin:
            return _rejected(Rejection.NOT_ADMIN)
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialized snapshot. Connections are never part of it."""
        return {
            "id": self.id,
            "participants": {pid: p.to_dict() for pid, p in self.participants.items()},
            "revealed": self.revealed,
        }

    def tally(self) -> VoteTally:
        people = list(self.participants.values())
        cards = [p.vote for p in people if p.vote > 0]
        average = None
        if self.revealed and cards:
            average = round(sum(cards) / len(cards), 1)
        return VoteTally(
            participants=len(people),
            active=sum(1 for p in people if p.is_active),
            voted=sum(1 for p in people if p.has_voted),
            abstained=sum(1 for p in people if p.abstained),
            average=average,
        )

    # -- mutators --------------------------------------------------------

    async def join(self, participant_id: str, name: str, is_admin: bool) -> MutationResult:
        async with self.lock:
            participant = self.participants.get(participant_id)
            if participant is None:
                self.participants[participant_id] = Participant(
                    id=participant_id, name=name, is_admin=is_admin
                )
            else:
                participant.name = name
                participant.is_admin = is_admin
                participant.is_active = True
            return APPLIED

    async def vote(self, participant_id: str, value: int | Literal["no-vote"]) -> MutationResult:
        async with self.lock:
            participant = self.participants.get(participant_id)
            if participant is None:
                return _rejected(Rejection.UNKNOWN_PARTICIPANT)
            if participant.is_admin:
                return _rejected(Rejection.ADMIN_CANNOT_VOTE)
            participant.vote = ABSTAIN if value == ABSTAIN_TOKEN else int(value)
            return APPLIED

    async def reveal(self, participant_id: str) -> MutationResult:
        async with self.lock:
            if (rejected := self._admin(participant_id)) is not None:
                return rejected
            self.revealed = True
            return APPLIED

    async def reset(self, participant_id: str) -> MutationResult:
        async with self.lock:
            if (rejected := self._admin(participant_id)) is not None:
                return rejected
            self.revealed = False
            for participant in self.participants.values():
                participant.vote = NO_VOTE
            return APPLIED

    async def remove(self, admin_id: str, target_id: str) -> MutationResult:
        """
        Delete ``target_id`` from the participants.

        Its connections stay registered until the peer closes: that client
        keeps receiving snapshots (which no longer list it) and its commands
        are rejected as coming from an unknown participant.
        """
        async with self.lock:
            if (rejected := self._admin(admin_id)) is not None:
                return rejected
            self.participants.pop(target_id, None)
            return APPLIED

    async def cleanup(self, participant_id: str) -> MutationResult:
        async with self.lock:
            if (rejected := self._admin(participant_id)) is not None:
                return rejected
            inactive = [pid for pid, p in self.participants.items() if not p.is_active]
            for pid in inactive:
                del self.participants[pid]
            return APPLIED

    async def change_name(self, participant_id: str, new_name: str) -> MutationResult:
        async with self.lock:
            participant = self.participants.get(participant_id)
            if participant is None:
                return _rejected(Rejection.UNKNOWN_PARTICIPANT)
            participant.name = new_name
            return APPLIED

    async def change_role(self, participant_id: str, is_admin: bool) -> MutationResult:
        async with self.lock:
            participant = self.participants.get(participant_id)
            if participant is None:
                return _rejected(Rejection.UNKNOWN_PARTICIPANT)
            participant.is_admin = is_admin
            return APPLIED

    async def register_connection(self, connection: Connection, participant_id: str) -> MutationResult:
        async with self.lock:
            self.connections[connection] = participant_id
            return APPLIED

    async def disconnect(
        self, participant_id: str, connection: Connection | None = None
    ) -> MutationResult:
        """
        Drop a connection and mark its participant inactive.

        The participant stays in the session (with its vote) until an admin
        runs ``cleanup`` or ``remove``. It is left active while another
        connection still maps to the same identity (e.g. a second tab).
        Without ``connection`` every connection of the identity is dropped.
        """
        async with self.lock:
            if connection is not None:
                self.connections.pop(connection, None)
            else:
                for conn in [c for c, pid in self.connections.items() if pid == participant_id]:
                    del self.connections[conn]

            participant = self.participants.get(participant_id)
            if participant is None:
                return _rejected(Rejection.UNKNOWN_PARTICIPANT)
            if participant_id not in self.connections.values():
                participant.is_active = False
            return APPLIED
