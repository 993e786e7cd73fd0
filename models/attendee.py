"""Data model for an attendee from the roster sheet (Pydantic v2)."""

from pydantic import BaseModel


class Attendee(BaseModel):
    """One registered person, keyed by class_selection_id."""

    class_selection_id: str       # "SEL001" or fallback "AliceJohnson"
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    age: str = ""                 # as exported, not validated

    @property
    def full_name(self) -> str:
        """First and last name; the selection id when both are blank."""
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.class_selection_id
