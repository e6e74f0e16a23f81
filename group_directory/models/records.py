"""
Plain value types passed between the store, the cache and callers.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict


@dataclass(frozen=True)
class GroupRecord:
    """A group as the directory sees it: immutable gid plus display name."""
    gid: str
    display_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GroupRecord':
        return cls(gid=str(data["gid"]), display_name=str(data.get("display_name") or ""))
