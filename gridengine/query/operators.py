"""
Comparison operators and their compilation into predicates.

The legal operator set is a pure function of a field's semantic type. A
compiled criterion is a predicate over the field's value; the composer pairs
it with the field's accessor.

Raw values arrive as text from the UI. Values that cannot be parsed for the
field's type do not fail the query: the criterion is skipped and a warning is
logged.
"""

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple, Union

from gridengine.catalog.schemas import FieldDefinition, FieldType, OperatorOption
from gridengine.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

Predicate = Callable[[Any], bool]


class ComparisonOperator(str, Enum):
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    IS_EMPTY = "isEmpty"
    IS_NOT_EMPTY = "isNotEmpty"
    GREATER_THAN = "gt"
    GREATER_THAN_OR_EQUAL = "gte"
    LESS_THAN = "lt"
    LESS_THAN_OR_EQUAL = "lte"
    BETWEEN = "between"
    IS_NULL = "isNull"
    IS_NOT_NULL = "isNotNull"
    AFTER = "after"
    AFTER_OR_EQUAL = "afterOrEqual"
    BEFORE = "before"
    BEFORE_OR_EQUAL = "beforeOrEqual"
    LAST_N_DAYS = "lastNDays"
    NEXT_N_DAYS = "nextNDays"
    IS_TRUE = "isTrue"
    IS_FALSE = "isFalse"


Op = ComparisonOperator

_NUMERIC_OPERATORS = (
    Op.EQUALS,
    Op.NOT_EQUALS,
    Op.GREATER_THAN,
    Op.GREATER_THAN_OR_EQUAL,
    Op.LESS_THAN,
    Op.LESS_THAN_OR_EQUAL,
    Op.BETWEEN,
    Op.IS_NULL,
    Op.IS_NOT_NULL,
)

# Ordered as presented in filter-builder dropdowns
OPERATORS_BY_TYPE: Dict[FieldType, Tuple[ComparisonOperator, ...]] = {
    FieldType.STRING: (
        Op.CONTAINS,
        Op.NOT_CONTAINS,
        Op.STARTS_WITH,
        Op.ENDS_WITH,
        Op.EQUALS,
        Op.NOT_EQUALS,
        Op.IS_EMPTY,
        Op.IS_NOT_EMPTY,
    ),
    FieldType.NUMBER: _NUMERIC_OPERATORS,
    FieldType.DECIMAL: _NUMERIC_OPERATORS,
    FieldType.DATE: (
        Op.EQUALS,
        Op.NOT_EQUALS,
        Op.AFTER,
        Op.AFTER_OR_EQUAL,
        Op.BEFORE,
        Op.BEFORE_OR_EQUAL,
        Op.BETWEEN,
        Op.LAST_N_DAYS,
        Op.NEXT_N_DAYS,
        Op.IS_NULL,
        Op.IS_NOT_NULL,
    ),
    FieldType.BOOLEAN: (Op.IS_TRUE, Op.IS_FALSE, Op.IS_NULL),
}

DESCRIPTIONS: Dict[ComparisonOperator, str] = {
    Op.CONTAINS: "Contains",
    Op.NOT_CONTAINS: "Does Not Contain",
    Op.STARTS_WITH: "Starts With",
    Op.ENDS_WITH: "Ends With",
    Op.EQUALS: "Equals",
    Op.NOT_EQUALS: "Not Equals",
    Op.IS_EMPTY: "Is Empty",
    Op.IS_NOT_EMPTY: "Is Not Empty",
    Op.GREATER_THAN: "Greater Than",
    Op.GREATER_THAN_OR_EQUAL: "Greater Than or Equal",
    Op.LESS_THAN: "Less Than",
    Op.LESS_THAN_OR_EQUAL: "Less Than or Equal",
    Op.BETWEEN: "Between",
    Op.IS_NULL: "Is Null",
    Op.IS_NOT_NULL: "Is Not Null",
    Op.AFTER: "After",
    Op.AFTER_OR_EQUAL: "On or After",
    Op.BEFORE: "Before",
    Op.BEFORE_OR_EQUAL: "On or Before",
    Op.LAST_N_DAYS: "In the Last N Days",
    Op.NEXT_N_DAYS: "In the Next N Days",
    Op.IS_TRUE: "Is True",
    Op.IS_FALSE: "Is False",
}

VALUELESS_OPERATORS: FrozenSet[ComparisonOperator] = frozenset(
    {Op.IS_EMPTY, Op.IS_NOT_EMPTY, Op.IS_NULL, Op.IS_NOT_NULL, Op.IS_TRUE, Op.IS_FALSE}
)


def legal_operators(field_type: FieldType) -> FrozenSet[ComparisonOperator]:
    return frozenset(OPERATORS_BY_TYPE[FieldType(field_type)])


def requires_value(operator: Union[ComparisonOperator, str]) -> bool:
    return parse_operator(operator) not in VALUELESS_OPERATORS


def operator_options(field_type: FieldType) -> List[OperatorOption]:
    return [
        OperatorOption(value=op.value, description=DESCRIPTIONS[op], requires_value=op not in VALUELESS_OPERATORS)
        for op in OPERATORS_BY_TYPE[FieldType(field_type)]
    ]


def parse_operator(operator: Union[ComparisonOperator, str]) -> ComparisonOperator:
    if isinstance(operator, ComparisonOperator):
        return operator
    try:
        return ComparisonOperator(operator)
    except ValueError:
        raise ValidationError(f"Unknown comparison operator: {operator}", operator=operator) from None


def resolve_operator(field: FieldDefinition, operator: Union[ComparisonOperator, str]) -> ComparisonOperator:
    """Parse ``operator`` and check it is legal for the field's type."""
    op = parse_operator(operator)
    if op not in legal_operators(field.field_type):
        raise ValidationError(
            f"Operator {op.value} is not valid for {field.field_type.value} field {field.field_name}",
            field=field.field_name,
            operator=op.value,
        )
    return op


# ===== VALUE PARSING =====


def _is_blank(raw: Any) -> bool:
    return raw is None or (isinstance(raw, str) and not raw.strip())


def _split_range(raw: Any) -> Optional[Tuple[Any, Any]]:
    if isinstance(raw, (list, tuple)):
        return (raw[0], raw[1]) if len(raw) == 2 else None
    if isinstance(raw, str):
        parts = raw.split(",")
        return (parts[0], parts[1]) if len(parts) == 2 else None
    return None


def _parse_number(raw: Any, field_type: FieldType) -> Union[int, Decimal]:
    text = str(raw).strip()
    if field_type == FieldType.NUMBER:
        return int(text)
    value = Decimal(text)
    if not value.is_finite():
        raise InvalidOperation(text)
    return value


def _parse_date(raw: Any) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = str(raw).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        return datetime.fromisoformat(text).date()


def _numeric_value(value: Any) -> Any:
    if isinstance(value, float):
        return Decimal(str(value))
    return value


def _date_value(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return _parse_date(value)
    except ValueError:
        return None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _skip(field: FieldDefinition, op: ComparisonOperator, raw: Any, reason: str) -> None:
    logger.warning(
        f"Skipping filter {field.module}.{field.field_name} {op.value} {raw!r}: {reason}"
    )


# ===== COMPILATION =====


def compile_criterion(
    field: FieldDefinition,
    operator: Union[ComparisonOperator, str],
    raw_value: Any,
    today: Optional[date] = None,
) -> Optional[Predicate]:
    """Compile one criterion into a predicate over the field's value.

    Returns ``None`` when the criterion should be skipped: a blank value for an
    operator that needs one, or a value that does not parse for the field's
    type. Unknown or illegal operators raise ``ValidationError``.
    """
    op = resolve_operator(field, operator)
    field_type = FieldType(field.field_type)

    if op == Op.IS_NULL:
        return lambda v: v is None
    if op == Op.IS_NOT_NULL:
        return lambda v: v is not None

    if field_type == FieldType.STRING:
        return _compile_string(op, raw_value)
    if field_type == FieldType.BOOLEAN:
        return _compile_boolean(op)
    if _is_blank(raw_value):
        return None
    if field_type == FieldType.DATE:
        return _compile_date(field, op, raw_value, today or date.today())
    return _compile_number(field, op, raw_value)


def _compile_string(op: ComparisonOperator, raw: Any) -> Optional[Predicate]:
    if op == Op.IS_EMPTY:
        return lambda v: not _text(v).strip()
    if op == Op.IS_NOT_EMPTY:
        return lambda v: bool(_text(v).strip())
    if _is_blank(raw):
        return None

    needle = str(raw).strip().casefold()
    if op == Op.CONTAINS:
        return lambda v: needle in _text(v).casefold()
    if op == Op.NOT_CONTAINS:
        return lambda v: needle not in _text(v).casefold()
    if op == Op.STARTS_WITH:
        return lambda v: _text(v).casefold().startswith(needle)
    if op == Op.ENDS_WITH:
        return lambda v: _text(v).casefold().endswith(needle)
    if op == Op.EQUALS:
        return lambda v: _text(v).casefold() == needle
    return lambda v: _text(v).casefold() != needle


def _compile_boolean(op: ComparisonOperator) -> Predicate:
    if op == Op.IS_TRUE:
        return lambda v: v is not None and bool(v)
    return lambda v: v is not None and not bool(v)


def _compile_number(field: FieldDefinition, op: ComparisonOperator, raw: Any) -> Optional[Predicate]:
    field_type = FieldType(field.field_type)
    try:
        if op == Op.BETWEEN:
            bounds = _split_range(raw)
            if bounds is None:
                _skip(field, op, raw, "expected a two-element range")
                return None
            low, high = (_parse_number(b, field_type) for b in bounds)
            return lambda v: v is not None and low <= _numeric_value(v) <= high
        target = _parse_number(raw, field_type)
    except (ValueError, ArithmeticError):
        _skip(field, op, raw, f"not a valid {field_type.value}")
        return None

    comparisons: Dict[ComparisonOperator, Callable[[Any], bool]] = {
        Op.EQUALS: lambda v: v == target,
        Op.NOT_EQUALS: lambda v: v != target,
        Op.GREATER_THAN: lambda v: v > target,
        Op.GREATER_THAN_OR_EQUAL: lambda v: v >= target,
        Op.LESS_THAN: lambda v: v < target,
        Op.LESS_THAN_OR_EQUAL: lambda v: v <= target,
    }
    compare = comparisons[op]
    return lambda v: v is not None and compare(_numeric_value(v))


def _compile_date(
    field: FieldDefinition, op: ComparisonOperator, raw: Any, today: date
) -> Optional[Predicate]:
    if op in (Op.LAST_N_DAYS, Op.NEXT_N_DAYS):
        try:
            days = int(str(raw).strip())
        except ValueError:
            _skip(field, op, raw, "expected a whole number of days")
            return None
        if days < 0:
            _skip(field, op, raw, "number of days cannot be negative")
            return None
        if op == Op.LAST_N_DAYS:
            low, high = today - timedelta(days=days), today
        else:
            low, high = today, today + timedelta(days=days)
        return _date_range(low, high)

    try:
        if op == Op.BETWEEN:
            bounds = _split_range(raw)
            if bounds is None:
                _skip(field, op, raw, "expected a two-element range")
                return None
            low, high = (_parse_date(b) for b in bounds)
            return _date_range(low, high)
        target = _parse_date(raw)
    except (TypeError, ValueError):
        _skip(field, op, raw, "not a valid ISO date")
        return None

    comparisons: Dict[ComparisonOperator, Callable[[date], bool]] = {
        Op.EQUALS: lambda d: d == target,
        Op.NOT_EQUALS: lambda d: d != target,
        Op.AFTER: lambda d: d > target,
        Op.AFTER_OR_EQUAL: lambda d: d >= target,
        Op.BEFORE: lambda d: d < target,
        Op.BEFORE_OR_EQUAL: lambda d: d <= target,
    }
    compare = comparisons[op]

    def predicate(value: Any) -> bool:
        d = _date_value(value)
        return d is not None and compare(d)

    return predicate


def _date_range(low: date, high: date) -> Predicate:
    def predicate(value: Any) -> bool:
        d = _date_value(value)
        return d is not None and low <= d <= high

    return predicate
