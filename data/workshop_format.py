"""Parser for workshop cells: "Workshop Name (Leader Name)"."""

from typing import NamedTuple, Optional


class WorkshopListing(NamedTuple):
    name: str
    leader: str

    @property
    def is_valid(self) -> bool:
        return bool(self.name.strip())


_EMPTY = WorkshopListing("", "")


def parse_workshop_cell(value: Optional[str]) -> WorkshopListing:
    """Split a cell into workshop name and leader.

    The leader is the text inside the last "(...)" that closes the cell, so
    "Knots (Basic) (Jane Doe)" → ("Knots (Basic)", "Jane Doe"). Co-leaders
    ("Jane Doe and John Smith") stay one string.

    Malformed cells:
      - no parentheses at all → (whole text, "")
      - parentheses without a well-formed suffix → ("", "")
    """
    if value is None:
        return _EMPTY
    text = value.strip()
    if not text:
        return _EMPTY
    if "(" not in text and ")" not in text:
        return WorkshopListing(text, "")
    if not text.endswith(")"):
        return _EMPTY
    open_idx = _matching_open(text)
    if open_idx < 0:
        return _EMPTY
    name = text[:open_idx].strip()
    leader = text[open_idx + 1:-1].strip()
    if not name:
        return _EMPTY
    return WorkshopListing(name, leader)


def _matching_open(text: str) -> int:
    """Index of the "(" that pairs with the final ")", or -1."""
    depth = 0
    for idx in range(len(text) - 1, -1, -1):
        if text[idx] == ")":
            depth += 1
        elif text[idx] == "(":
            depth -= 1
            if depth == 0:
                return idx
    return -1


def get_workshop_name(value: Optional[str]) -> str:
    return parse_workshop_cell(value).name


def get_leader_name(value: Optional[str]) -> str:
    return parse_workshop_cell(value).leader
