"""Data model for a schedule period (Pydantic v2)."""

import re

from pydantic import BaseModel, ConfigDict

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class Period(BaseModel):
    """A named block of the daily schedule, e.g. "Morning First Period".

    sheet_name is the stable key; display_name is for humans only.
    """
    model_config = ConfigDict(frozen=True)

    sheet_name: str
    display_name: str

    @classmethod
    def from_sheet_name(cls, sheet_name: str, display_name: str = "") -> "Period":
        """Build a period; splits CamelCase when no display name is given."""
        if not display_name.strip():
            display_name = _CAMEL_BOUNDARY.sub(" ", sheet_name)
        return cls(sheet_name=sheet_name, display_name=display_name.strip())

    def __str__(self) -> str:
        return self.display_name
