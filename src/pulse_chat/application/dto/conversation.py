from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class CreateGroupDTO:
    name: str
    participant_ids: list[str] = field(default_factory=list)
