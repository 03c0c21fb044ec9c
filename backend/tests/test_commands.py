from __future__ import annotations

import json

import pytest

from models.commands import (
    ChangeNameCommand,
    ChangeRoleCommand,
    CleanupCommand,
    DecodeError,
    PingCommand,
    RemoveCommand,
    ResetCommand,
    RevealCommand,
    VoteCommand,
    decode_command,
)


@pytest.mark.parametrize(
    ("payload", "expected_type"),
    [
        ({"type": "reveal"}, RevealCommand),
        ({"type": "reset"}, ResetCommand),
        ({"type": "cleanup"}, CleanupCommand),
        ({"type": "ping"}, PingCommand),
    ],
)
def test_decodes_field_less_commands(payload, expected_type) -> None:
    assert isinstance(decode_command(json.dumps(payload)), expected_type)


def test_decodes_vote_values() -> None:
    # the web client sends its name along with the vote; extra fields are ignored
    command = decode_command('{"type": "vote", "vote": 8, "name": "Bob"}')
    assert isinstance(command, VoteCommand)
    assert command.vote == 8

    abstain = decode_command('{"type": "vote", "vote": "no-vote"}')
    assert isinstance(abstain, VoteCommand)
    assert abstain.vote == "no-vote"


def test_decodes_aliased_fields() -> None:
    remove = decode_command('{"type": "remove", "targetId": "p-2"}')
    assert isinstance(remove, RemoveCommand)
    assert remove.target_id == "p-2"

    rename = decode_command('{"type": "changeName", "newName": "Zed"}')
    assert isinstance(rename, ChangeNameCommand)
    assert rename.new_name == "Zed"

    role = decode_command('{"type": "changeRole", "newRole": true}')
    assert isinstance(role, ChangeRoleCommand)
    assert role.new_role is True


def test_accepts_bytes() -> None:
    assert isinstance(decode_command(b'{"type": "ping"}'), PingCommand)


@pytest.mark.parametrize(
    "raw",
    [
        "not json at all",
        "[]",
        "{}",
        '{"type": "dance"}',
        '{"type": "vote"}',
        '{"type": "vote", "vote": "seven"}',
        '{"type": "vote", "vote": 0}',
        '{"type": "vote", "vote": -3}',
        '{"type": "vote", "vote": true}',
        '{"type": "vote", "vote": "5"}',
        '{"type": "vote", "vote": 2.5}',
        '{"type": "remove"}',
        '{"type": "remove", "targetId": 42}',
        '{"type": "changeName", "newName": ""}',
        '{"type": "changeRole", "newRole": "maybe"}',
    ],
)
def test_bad_payloads_become_decode_errors(raw: str) -> None:
    result = decode_command(raw)
    assert isinstance(result, DecodeError)
    assert result.reason


def test_union_failure_reports_every_branch() -> None:
    result = decode_command('{"type": "vote", "vote": 2.5}')
    assert isinstance(result, DecodeError)
    assert "no-vote" in result.reason
    assert "integer" in result.reason
