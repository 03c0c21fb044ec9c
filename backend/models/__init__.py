from .commands import Command, DecodeError, decode_command
from .participant import ABSTAIN, ABSTAIN_TOKEN, NO_VOTE, Participant
from .session import Connection, MutationResult, Rejection, Session, VoteTally

__all__ = [
    "Participant",
    "NO_VOTE",
    "ABSTAIN",
    "ABSTAIN_TOKEN",
    "Session",
    "Connection",
    "MutationResult",
    "Rejection",
    "VoteTally",
    "Command",
    "DecodeError",
    "decode_command",
]
