from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional


@dataclass(frozen=True)
class CandidateLink:
    label: str
    href: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.label, "link": self.href}

    @classmethod
    def from_dict(cls, data: Dict) -> "CandidateLink":
        return cls(label=str(data.get("name") or ""), href=str(data.get("link") or ""))


@dataclass
class MatchRecord:
    """One listed match and its broadcast feeds, in on-page order."""

    category: str
    display_name: str
    scheduled_time: str
    links: List[CandidateLink] = field(default_factory=list)
    fetched_at: Optional[datetime] = None

    def to_dict(self) -> Dict:
        # Keys follow the cache.json layout written by earlier releases
        data = {
            "type": self.category,
            "teams": self.display_name,
            "time": self.scheduled_time,
            "links": [link.to_dict() for link in self.links],
        }
        if self.fetched_at is not None:
            data["fetched_at"] = self.fetched_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "MatchRecord":
        teams = data.get("teams")
        if not isinstance(teams, str) or not teams.strip():
            raise ValueError("match record without a display name")
        links = data.get("links") or []
        if not isinstance(links, list):
            raise ValueError("links must be a list")
        fetched_at = data.get("fetched_at")
        return cls(
            category=str(data.get("type") or ""),
            display_name=teams,
            scheduled_time=str(data.get("time") or ""),
            links=[CandidateLink.from_dict(link) for link in links if isinstance(link, dict)],
            fetched_at=datetime.fromisoformat(fetched_at) if fetched_at else None,
        )
