from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Literal, Optional, Union

OperationKind = Literal["append", "replace", "delete"]

OPERATION_KINDS = ("append", "replace", "delete")
DESTRUCTIVE_KINDS = ("replace", "delete")


@dataclass
class Operation:
    file: str                        # target identity, used for diff headers
    heading_path: List[str]          # outermost first
    kind: OperationKind
    block_index: int = 0
    content: Optional[str] = None    # append|replace only
    fingerprint: Optional[str] = None

    @property
    def is_destructive(self) -> bool:
        return self.kind in DESTRUCTIVE_KINDS

    @property
    def heading(self) -> str:
        return " ".join(self.heading_path)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Applied:
    new_text: str
    diff: str
    is_noop: bool = False
    status: str = field(default="applied", init=False)

    def as_planned(self) -> "Planned":
        return Planned(diff=self.diff, is_noop=self.is_noop)


@dataclass
class Planned:
    diff: str
    is_noop: bool = False
    status: str = field(default="planned", init=False)


MutationResult = Union[Applied, Planned]
