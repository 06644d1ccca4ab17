"""Data models for the expense tracker ledger."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Union

__all__ = [
    "ADDING",
    "Adding",
    "Editing",
    "ExpenseInput",
    "ExpenseRecord",
    "FilterCriteria",
    "IncomeInput",
    "IncomeRecord",
    "InputMode",
    "format_amount",
]


def format_amount(amount: Decimal) -> str:
    """Render an amount without padding, so 12.5 stays "12.5" and 20 stays "20".

    Fixed-point formatting is exact and ignores the decimal context, so very
    large or very precise amounts never overflow it.
    """
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@dataclass(frozen=True)
class ExpenseRecord:
    id: int
    amount: Decimal
    category: str
    date: date

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the expense to JSON-friendly natives."""
        return {
            "id": self.id,
            "amount": format_amount(self.amount),
            "category": self.category,
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExpenseRecord":
        """Hydrate an expense; amounts may be stored as strings or numbers."""
        return cls(
            id=int(data["id"]),
            amount=Decimal(str(data["amount"])),
            category=str(data["category"]),
            date=date.fromisoformat(data["date"]),
        )


@dataclass(frozen=True)
class IncomeRecord:
    id: int
    amount: Decimal
    date: date

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "amount": format_amount(self.amount),
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IncomeRecord":
        return cls(
            id=int(data["id"]),
            amount=Decimal(str(data["amount"])),
            date=date.fromisoformat(data["date"]),
        )


@dataclass(frozen=True)
class FilterCriteria:
    """Category/date narrowing of the visible expense list. ``None`` means no filter."""

    category: Optional[str] = None
    date: Optional[date] = None

    @property
    def is_empty(self) -> bool:
        return not self.category and self.date is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category or "",
            "date": self.date.isoformat() if self.date else "",
        }


@dataclass(frozen=True)
class Adding:
    """Default input mode: the expense form creates new records."""

    name = "adding"

    def to_dict(self) -> Dict[str, Any]:
        return {"mode": self.name}


@dataclass(frozen=True)
class Editing:
    """The expense form holds the fields of an existing record pending update."""

    target_id: int
    name = "editing"

    def to_dict(self) -> Dict[str, Any]:
        return {"mode": self.name, "target_id": self.target_id}


InputMode = Union[Adding, Editing]

ADDING = Adding()


@dataclass
class ExpenseInput:
    """Raw text typed into the expense form."""

    amount: str = ""
    category: str = ""
    date: str = ""

    def clear(self) -> None:
        self.amount = ""
        self.category = ""
        self.date = ""

    def to_dict(self) -> Dict[str, str]:
        return {"amount": self.amount, "category": self.category, "date": self.date}


@dataclass
class IncomeInput:
    """Raw text typed into the income form."""

    amount: str = ""
    date: str = ""

    def clear(self) -> None:
        self.amount = ""
        self.date = ""

    def to_dict(self) -> Dict[str, str]:
        return {"amount": self.amount, "date": self.date}
