"""
Inbound command envelope: ``{"type": <str>, ...fields}``.

Decoding is a pydantic discriminated union on ``type``; every required field
is validated up front so dispatch never has to second-guess a payload.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, TypeAdapter, ValidationError


class _Command(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class VoteCommand(_Command):
    type: Literal["vote"] = "vote"
    # strict: JSON booleans and numeric strings are not cards
    vote: Union[Literal["no-vote"], Annotated[StrictInt, Field(gt=0)]]


class RevealCommand(_Command):
    type: Literal["reveal"] = "reveal"


class ResetCommand(_Command):
    type: Literal["reset"] = "reset"


class RemoveCommand(_Command):
    type: Literal["remove"] = "remove"
    target_id: str = Field(alias="targetId")


class CleanupCommand(_Command):
    type: Literal["cleanup"] = "cleanup"


class ChangeNameCommand(_Command):
    type: Literal["changeName"] = "changeName"
    new_name: str = Field(alias="newName", min_length=1)


class ChangeRoleCommand(_Command):
    type: Literal["changeRole"] = "changeRole"
    new_role: bool = Field(alias="newRole")


class PingCommand(_Command):
    type: Literal["ping"] = "ping"


Command = Annotated[
    Union[
        VoteCommand,
        RevealCommand,
        ResetCommand,
        RemoveCommand,
        CleanupCommand,
        ChangeNameCommand,
        ChangeRoleCommand,
        PingCommand,
    ],
    Field(discriminator="type"),
]

_command_adapter: TypeAdapter[Command] = TypeAdapter(Command)


@dataclass(frozen=True)
class DecodeError:
    reason: str


def decode_command(raw: str | bytes) -> Command | DecodeError:
    """Decode one inbound frame. Never raises on bad input."""
    try:
        return _command_adapter.validate_json(raw)
    except ValidationError as e:
        # a union field fails once per branch; report every branch
        reasons = [
            f"{'.'.join(str(part) for part in err['loc']) or 'payload'}: {err['msg']}"
            for err in e.errors()
        ]
        return DecodeError(reason="; ".join(reasons) or str(e))
