"""Per-connection control loop: join, read commands, dispatch, broadcast, clean up."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Protocol

from models.commands import (
    ChangeNameCommand,
    ChangeRoleCommand,
    CleanupCommand,
    Command,
    DecodeError,
    PingCommand,
    RemoveCommand,
    ResetCommand,
    RevealCommand,
    VoteCommand,
    decode_command,
)
from models.session import Connection, Session
from services.broadcaster import Broadcaster, close_quietly

logger = logging.getLogger(__name__)

DEFAULT_MAX_MESSAGE_BYTES = 1024
CLOSE_NORMAL = 1000
CLOSE_MESSAGE_TOO_BIG = 1009


class Channel(Connection, Protocol):
    """A duplex client channel. ``receive`` yields ASGI websocket messages."""

    async def receive(self) -> dict[str, Any]: ...


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    ACTIVE = "active"
    CLOSED = "closed"


class ConnectionHandler:
    """
    Drives one client connection through CONNECTING -> ACTIVE -> CLOSED.

    The handshake (parameter checks, accept) has already happened; ``run``
    starts by registering the participant. Whatever ends the read loop,
    cleanup (disconnect, farewell broadcast, close) runs exactly once.
    """

    def __init__(
        self,
        channel: Channel,
        session: Session,
        participant_id: str,
        name: str,
        *,
        is_admin: bool = False,
        broadcaster: Broadcaster | None = None,
        max_message_bytes: int = DEFAULT_MAX_MESSAGE_BYTES,
    ) -> None:
        self.channel = channel
        self.session = session
        self.participant_id = participant_id
        self.name = name
        self.is_admin = is_admin
        self.broadcaster = broadcaster or Broadcaster()
        self.max_message_bytes = max_message_bytes
        self.state = ConnectionState.CONNECTING
        self._close_code = CLOSE_NORMAL

    async def run(self) -> None:
        try:
            if await self._activate():
                await self._read_loop()
        finally:
            await self._close()

    async def _activate(self) -> bool:
        await self.session.join(self.participant_id, self.name, self.is_admin)
        await self.session.register_connection(self.channel, self.participant_id)
        self.state = ConnectionState.ACTIVE
        try:
            await self.broadcaster.send_snapshot(self.session, self.channel)
        except Exception as e:
            logger.warning(
                "[connection] Initial snapshot failed session_id=%r participant_id=%r: %r",
                self.session.id,
                self.participant_id,
                e,
            )
            return False
        await self.broadcaster.publish(self.session)
        return True

    async def _read_loop(self) -> None:
        while True:
            try:
                message = await self.channel.receive()
            except Exception as e:
                logger.info(
                    "[connection] Read failed session_id=%r participant_id=%r: %r",
                    self.session.id,
                    self.participant_id,
                    e,
                )
                return

            if message.get("type") == "websocket.disconnect":
                return

            text = message.get("text")
            if text is None:
                logger.warning(
                    "[connection] Ignoring non-text frame participant_id=%r", self.participant_id
                )
                continue

            if len(text.encode("utf-8")) > self.max_message_bytes:
                logger.warning(
                    "[connection] Frame over %d bytes, closing participant_id=%r",
                    self.max_message_bytes,
                    self.participant_id,
                )
                self._close_code = CLOSE_MESSAGE_TOO_BIG
                return

            command = decode_command(text)
            if isinstance(command, DecodeError):
                logger.warning(
                    "[connection] Dropping malformed message participant_id=%r: %s",
                    self.participant_id,
                    command.reason,
                )
                continue

            logger.debug(
                "[connection] Received %s from participant_id=%r", command.type, self.participant_id
            )
            if isinstance(command, PingCommand):
                if not await self._reply({"type": "pong"}):
                    return
                continue

            if not await self._dispatch(command):
                return
            await self.broadcaster.publish(self.session)

    async def _dispatch(self, command: Command) -> bool:
        """Apply a command to the session. False means the channel is gone."""
        session, pid = self.session, self.participant_id
        if isinstance(command, VoteCommand):
            await session.vote(pid, command.vote)
        elif isinstance(command, RevealCommand):
            await session.reveal(pid)
        elif isinstance(command, ResetCommand):
            await session.reset(pid)
        elif isinstance(command, RemoveCommand):
            await session.remove(pid, command.target_id)
        elif isinstance(command, CleanupCommand):
            await session.cleanup(pid)
        elif isinstance(command, ChangeNameCommand):
            result = await session.change_name(pid, command.new_name)
            if result.applied:
                self.name = command.new_name
                return await self._reply(
                    {"type": "nameChangeConfirmation", "newName": command.new_name}
                )
        elif isinstance(command, ChangeRoleCommand):
            result = await session.change_role(pid, command.new_role)
            if result.applied:
                self.is_admin = command.new_role
                logger.info(
                    "[connection] Role changed participant_id=%r admin=%s", pid, command.new_role
                )
                return await self._reply(
                    {"type": "roleChangeConfirmation", "newRole": command.new_role}
                )
        return True

    async def _reply(self, payload: dict[str, Any]) -> bool:
        try:
            await self.broadcaster.send_direct(self.session, self.channel, payload)
        except Exception as e:
            logger.info(
                "[connection] Direct write failed participant_id=%r: %r", self.participant_id, e
            )
            return False
        return True

    async def _close(self) -> None:
        if self.state is ConnectionState.CLOSED:
            return
        self.state = ConnectionState.CLOSED
        await self.session.disconnect(self.participant_id, self.channel)
        await self.broadcaster.publish(self.session)
        await close_quietly(self.channel, code=self._close_code)
        logger.info(
            "[connection] Closed session_id=%r participant_id=%r",
            self.session.id,
            self.participant_id,
        )
