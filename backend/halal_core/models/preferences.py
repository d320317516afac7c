"""
User policy selection: strictness level and school of thought (madhab).
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from halal_core.config import get_default_madhab, get_default_strictness
from halal_core.normalization.normalizer import normalize_school_key

NO_PREFERENCE = "no-preference"


class Strictness(str, Enum):
    STRICT = "strict"
    STANDARD = "standard"
    FLEXIBLE = "flexible"

    @classmethod
    def parse(cls, value: Any) -> "Strictness":
        if isinstance(value, Strictness):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.STANDARD


@dataclass(frozen=True)
class Preferences:
    strictness: Strictness = Strictness.STANDARD
    madhab: str = NO_PREFERENCE

    def to_dict(self) -> dict:
        return {"strictness": self.strictness.value, "madhab": self.madhab}

    @classmethod
    def from_dict(cls, d: Optional[dict]) -> "Preferences":
        """
        Accepts both call shapes used by consumers:
        {strictness, madhab} for lookups and {strictnessLevel, schoolOfThought} for recipes.
        Missing values fall back to the configured defaults.
        """
        d = d or {}
        strictness = (
            d.get("strictness") or d.get("strictnessLevel") or d.get("strictness_level")
            or get_default_strictness()
        )
        madhab = (
            d.get("madhab") or d.get("schoolOfThought") or d.get("school_of_thought")
            or get_default_madhab()
        )
        return cls(
            strictness=Strictness.parse(strictness),
            madhab=normalize_school_key(str(madhab)) or NO_PREFERENCE,
        )

    @classmethod
    def coerce(cls, value: Union["Preferences", dict, None]) -> "Preferences":
        if isinstance(value, Preferences):
            return value
        return cls.from_dict(value)
