from dataclasses import dataclass
from typing import Any

NO_VOTE = 0                    # not voted yet
ABSTAIN = -1                   # explicitly declined to vote
ABSTAIN_TOKEN = "no-vote"      # wire spelling of ABSTAIN


@dataclass
class Participant:
    id: str
    name: str
    is_admin: bool = False
    is_active: bool = True
    vote: int = NO_VOTE        # NO_VOTE | ABSTAIN | positive card value

    @property
    def has_voted(self) -> bool:
        return self.vote != NO_VOTE

    @property
    def abstained(self) -> bool:
        return self.vote == ABSTAIN

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "vote": self.vote,
            "isAdmin": self.is_admin,
            "isActive": self.is_active,
        }
