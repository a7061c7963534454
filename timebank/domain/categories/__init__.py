"""Category lookup exports"""

from .exceptions import CategoryNotFoundError
from .models import DEFAULT_CATEGORIES, Category
from .service import CategoryService

__all__ = [
    "Category",
    "CategoryNotFoundError",
    "CategoryService",
    "DEFAULT_CATEGORIES",
]
