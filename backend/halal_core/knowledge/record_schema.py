"""
Strict contract for one knowledge base record (schema v2).
Every field is structured so evaluation stays deterministic.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

SCHEMA_VERSION = 2
DEFAULT_RULING_KEY = "default"


class Status(str, Enum):
    HALAL = "halal"
    HARAM = "haram"
    CONDITIONAL = "conditional"
    QUESTIONABLE = "questionable"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Optional[str], fallback: Optional["Status"] = None) -> "Status":
        """Lenient parse for data files: case-insensitive, unknown values -> fallback (or UNKNOWN)."""
        if isinstance(value, Status):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return fallback or cls.UNKNOWN


@dataclass(frozen=True)
class IngredientRecord:
    id: str
    display_name: str
    status: Status = Status.UNKNOWN
    aliases: tuple[str, ...] = ()
    # "is made from / contains" edges, in priority order. May contain cycles.
    derived_from: tuple[str, ...] = ()
    # school key (hanafi, shafii, maliki, hanbali) or "default" -> status
    rulings: dict[str, Status] = field(default_factory=dict)
    alternatives: tuple[str, ...] = ()
    confidence_impact: int = 0
    references: tuple[str, ...] = ()
    notes: str = ""
    eli5: str = ""
    category: str = ""
    conversion_ratio: str = "1:1"

    def ruling_for(self, school: Optional[str]) -> Status:
        """School-specific ruling, else the default ruling, else the record status."""
        if school and school in self.rulings:
            return self.rulings[school]
        return self.default_ruling

    @property
    def default_ruling(self) -> Status:
        return self.rulings.get(DEFAULT_RULING_KEY, self.status)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "status": self.status.value,
            "aliases": list(self.aliases),
            "derived_from": list(self.derived_from),
            "rulings": {k: v.value for k, v in self.rulings.items()},
            "alternatives": list(self.alternatives),
            "confidence_impact": self.confidence_impact,
            "references": list(self.references),
            "notes": self.notes,
            "eli5": self.eli5,
            "category": self.category,
            "conversion_ratio": self.conversion_ratio,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "IngredientRecord":
        status = Status.parse(d.get("status"))
        rulings = {
            str(k).lower(): Status.parse(v, fallback=status)
            for k, v in (d.get("rulings") or {}).items()
        }
        return cls(
            id=d["id"],
            display_name=d.get("display_name") or d["id"].replace("_", " ").title(),
            status=status,
            aliases=tuple(d.get("aliases", []) or []),
            derived_from=tuple(d.get("derived_from", []) or []),
            rulings=rulings,
            alternatives=tuple(d.get("alternatives", []) or []),
            confidence_impact=int(d.get("confidence_impact", 0) or 0),
            references=tuple(d.get("references", []) or []),
            notes=d.get("notes", "") or "",
            eli5=d.get("eli5", "") or "",
            category=d.get("category", "") or "",
            conversion_ratio=d.get("conversion_ratio", "1:1") or "1:1",
        )
