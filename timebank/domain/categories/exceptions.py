"""Category lookup exceptions."""

from timebank.core.errors import ErrorKind, TimeBankError


class CategoryNotFoundError(TimeBankError):
    """Raised when a claim names a category that does not exist."""

    def __init__(self, category_id: int) -> None:
        super().__init__(
            f"Category {category_id} not found",
            "CATEGORY_NOT_FOUND",
            ErrorKind.NOT_FOUND,
        )
        self.category_id = category_id
