import datetime
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation

from balance_projections.utils.logical_date import LogicalDate


def read_date(value: str | datetime.date | LogicalDate) -> LogicalDate:
    return LogicalDate.parse(value)


def read_optional_date(value: str | datetime.date | LogicalDate | None) -> LogicalDate | None:
    if value is None or value == "":
        return None
    return read_date(value)


def read_decimal(value: str | int | float | Decimal) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert {value} to decimal")
    if isinstance(value, float):
        # 0.1 becomes Decimal("0.1"), not its binary expansion
        value = repr(value)
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Cannot convert {value} to decimal") from e
    if not result.is_finite():
        raise ValueError(f"Cannot convert {value} to decimal")
    return result


def read_int_set(value: int | Iterable[int] | None) -> frozenset[int] | None:
    """Selectors may be given as a single integer or a collection of integers."""
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return frozenset([value])
    if isinstance(value, str | bool) or not isinstance(value, Iterable):
        raise ValueError(f"Cannot convert {value!r} to a set of integers")
    result = set()
    for item in value:
        if not isinstance(item, int) or isinstance(item, bool):
            raise ValueError(f"Cannot convert {item!r} to an integer selector")
        result.add(item)
    return frozenset(result)


def strip_identifier(identifier: str | None) -> str | None:
    if identifier is None:
        return None
    else:
        return (
            identifier.strip()
            .lower()
            .replace("_", "")
            .replace(" ", "")
            .replace("-", "")
            .replace("/", "")
            .replace("\\", "")
        )
