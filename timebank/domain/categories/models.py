"""Domain model for service categories."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(slots=True)
class Category:
    id: int
    name: str
    earn_rate: Decimal
    description: Optional[str] = None
    icon: Optional[str] = None


# (name, description, earn rate, icon)
DEFAULT_CATEGORIES: tuple[tuple[str, str, Decimal, str], ...] = (
    ("Transportation", "Rides, errands, deliveries", Decimal("1.00"), "car"),
    ("Childcare", "Babysitting, tutoring children", Decimal("1.00"), "baby"),
    ("Home Repair", "Fixing, building, maintenance", Decimal("1.20"), "wrench"),
    ("Gardening", "Yard work, landscaping", Decimal("1.00"), "flower"),
    ("Tech Support", "Computer help, tech issues", Decimal("1.50"), "laptop"),
    ("Cooking/Food", "Meal prep, food sharing", Decimal("1.00"), "food"),
    ("Administrative", "Paperwork, organizing", Decimal("1.00"), "clipboard"),
    ("Health/Wellness", "Fitness, care, support", Decimal("1.30"), "heart"),
    ("Education", "Teaching, tutoring, training", Decimal("1.40"), "book"),
    ("Other", "Miscellaneous services", Decimal("1.00"), "star"),
)
