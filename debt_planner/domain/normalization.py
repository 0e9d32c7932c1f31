"""Coerce raw imported rows (CSV, spreadsheets, forms) into validated Debt records"""

import uuid
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, Optional

from debt_planner.domain.exceptions import InvalidInputError
from debt_planner.domain.models import Debt
from debt_planner.utils.money import dollars_to_cents

FALSE_WORDS = {"no", "n", "false", "0", "off"}
DEFAULT_DEBT_NAME = "Imported Debt"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, bool):
        raise InvalidInputError(f"{field_name}: expected a number, got {value!r}")
    if isinstance(value, float):
        value = repr(value)  # avoid binary float expansion
    if isinstance(value, str):
        value = value.strip().replace("$", "").replace(",", "").rstrip("%").strip()
    try:
        number = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidInputError(f"{field_name}: {value!r} is not a number")
    if not number.is_finite():
        raise InvalidInputError(f"{field_name}: {value!r} is not a number")
    return number


def parse_money(value: Any, field_name: str = "amount") -> int:
    """Dollar amount (number or text like "$1,234.56") to cents"""
    if _is_blank(value):
        raise InvalidInputError(f"{field_name} is required")
    dollars = _to_decimal(value, field_name)
    if dollars < 0:
        raise InvalidInputError(f"{field_name} must be non-negative")
    return dollars_to_cents(dollars)


def parse_apr(value: Any) -> Decimal:
    """APR percent; "18.99%" and 18.99 both mean 18.99 percent"""
    if _is_blank(value):
        raise InvalidInputError("apr is required")
    apr = _to_decimal(value, "apr")
    if apr < 0:
        raise InvalidInputError("apr must be non-negative")
    return apr


def parse_include(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() not in FALSE_WORDS


def _parse_due_day(value: Any) -> Optional[int]:
    if _is_blank(value):
        return None
    day = _to_decimal(value, "due_day")
    if day != day.to_integral_value() or not 1 <= day <= 28:
        raise InvalidInputError(f"due_day must be a whole day between 1 and 28, got {value!r}")
    return int(day)


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in row:
            return row[key]
    return None


def _optional_text(value: Any) -> Optional[str]:
    if _is_blank(value):
        return None
    return str(value).strip()


def normalize_debt(row: Mapping[str, Any]) -> Debt:
    """Build a Debt from a raw row, accepting camelCase or snake_case keys"""
    debt_id = _optional_text(row.get("id")) or uuid.uuid4().hex
    name = _optional_text(row.get("name")) or DEFAULT_DEBT_NAME

    return Debt(
        id=debt_id,
        name=name,
        balance_cents=parse_money(row.get("balance"), "balance"),
        apr=parse_apr(row.get("apr")),
        min_payment_cents=parse_money(
            _first(row, "min_payment", "minPayment", "minimum_payment"), "min_payment"
        ),
        due_day=_parse_due_day(_first(row, "due_day", "dueDay")),
        include=parse_include(_first(row, "include", "included")),
        category=_optional_text(row.get("category")),
        notes=_optional_text(row.get("notes")),
    )


def normalize_debts(rows: Iterable[Mapping[str, Any]]) -> List[Debt]:
    """Normalize every row; errors name the 1-based row that failed"""
    debts = []
    for row_number, row in enumerate(rows, start=1):
        try:
            debts.append(normalize_debt(row))
        except InvalidInputError as e:
            raise InvalidInputError(f"Row {row_number}: {e}") from e
    return debts
