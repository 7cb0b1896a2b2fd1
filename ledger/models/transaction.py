"""
Transaction Models for Personal Ledger

A transaction is one income or expense entry owned by a user.

DESIGN DECISION: Types and categories are IntEnums because the
transaction file stores their ordinals, not their names. The model does
not check that a category belongs to its type; the validation layer
does that at input time, and files are loaded as they are.

Transactions are frozen. Editing one means building a replacement.
"""

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - ordinals are persisted, do not reorder
# =============================================================================

class TransactionType(IntEnum):
    """Direction of money flow."""
    INCOME = 0
    EXPENSE = 1

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


class TransactionCategory(IntEnum):
    """
    Transaction categories.

    SALARY, CASH and GIFT are income categories.
    FOOD through OTHER are expense categories.
    """
    SALARY = 0
    CASH = 1
    GIFT = 2
    FOOD = 3
    CLOTHES = 4
    TRANSPORTATION = 5
    ENTERTAINMENT = 6
    COMMUNICATION = 7
    OTHER = 8

    @property
    def display_name(self) -> str:
        return self.name.capitalize()


INCOME_CATEGORIES = (
    TransactionCategory.SALARY,
    TransactionCategory.CASH,
    TransactionCategory.GIFT,
)

EXPENSE_CATEGORIES = (
    TransactionCategory.FOOD,
    TransactionCategory.CLOTHES,
    TransactionCategory.TRANSPORTATION,
    TransactionCategory.ENTERTAINMENT,
    TransactionCategory.COMMUNICATION,
    TransactionCategory.OTHER,
)


# Column widths for tabular display: type, date, category, amount
_COLUMN_WIDTHS = (10, 15, 20, 15)

TABLE_HEADER = (
    "    "
    f"{'Type':<10}{'Date':<15}{'Category':<20}{'Amount':<15}Description"
)


class DateFormatError(ValueError):
    """Date text is not in DD/MM/YYYY form."""
    pass


# =============================================================================
# TRANSACTION
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense entry.

    The date is kept as the DD/MM/YYYY text it was entered or stored as.
    It is only interpreted when a sort key is needed.
    """
    model_config = ConfigDict(frozen=True)

    username: str = Field(
        default="",
        description="Owning user; empty in single-user files"
    )
    type: TransactionType = Field(
        ...,
        description="Income or expense"
    )
    date: str = Field(
        ...,
        description="Date as DD/MM/YYYY text"
    )
    category: TransactionCategory = Field(
        ...,
        description="Transaction category"
    )
    description: str = Field(
        default="",
        description="Free-text description"
    )
    amount: float = Field(
        ...,
        description="Signed amount"
    )

    def date_key(self) -> str:
        """
        Get the date as a YYYYMMDD string for chronological comparison.

        Raises:
            DateFormatError: If the date is not exactly DD/MM/YYYY
        """
        text = self.date
        if len(text) != 10 or text[2] != "/" or text[5] != "/":
            raise DateFormatError(f"Expected DD/MM/YYYY, got {text!r}")

        day, month, year = text[0:2], text[3:5], text[6:10]
        if not (day.isdecimal() and month.isdecimal() and year.isdecimal()):
            raise DateFormatError(f"Non-numeric date component in {text!r}")

        return f"{int(year):04d}{int(month):02d}{int(day):02d}"

    def format_row(self) -> str:
        """Render as a fixed-width row matching TABLE_HEADER."""
        type_w, date_w, category_w, amount_w = _COLUMN_WIDTHS
        return (
            f"{self.type.display_name:<{type_w}}"
            f"{self.date:<{date_w}}"
            f"{self.category.display_name:<{category_w}}"
            f"{self.amount:<{amount_w}.2f}"
            f"{self.description}"
        )
