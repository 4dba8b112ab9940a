"""Turns a loose expense description into the body Splitser's expenses API expects."""

from datetime import date, datetime
from decimal import Decimal, DecimalException, InvalidOperation, ROUND_HALF_UP, localcontext
from numbers import Number
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import dateparser

from errors import ExpenseValidationError
from models import ExpenseRequest

CURRENCY = "EUR"
DEFAULT_CATEGORY_ID = 999999999
NEVER_RECURRING = {
    "execute_at": "21:14:50+02:00",
    "frequency": "never",
    "reminder_offset": "remind_never",
}

DateResolver = Callable[[str, datetime], date]


def resolve_date(description: Optional[str], now: datetime) -> date:
    """Resolve a natural-language date relative to ``now``, preferring future readings"""
    if not description or not description.strip():
        raise ExpenseValidationError(
            ExpenseValidationError.UNPARSEABLE_DATE, f"Could not parse date: {description}"
        )
    parsed = dateparser.parse(
        description,
        settings={"PREFER_DATES_FROM": "future", "RELATIVE_BASE": now},
    )
    if parsed is None:
        raise ExpenseValidationError(
            ExpenseValidationError.UNPARSEABLE_DATE, f"Could not parse date: {description}"
        )
    return parsed.date()


def to_minor_units(amount: Any) -> int:
    """
    Convert an amount in major units (euros) to integer cents.

    Numbers go through their string form so that 0.1 is read as "0.1" and not
    as its binary approximation. Half cents round away from zero.
    """
    if isinstance(amount, bool) or not isinstance(amount, (str, Number)):
        raise ExpenseValidationError(ExpenseValidationError.INVALID_AMOUNT, f"Invalid amount: {amount}")
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise ExpenseValidationError(ExpenseValidationError.INVALID_AMOUNT, f"Invalid amount: {amount}")
    if not value.is_finite():
        raise ExpenseValidationError(ExpenseValidationError.INVALID_AMOUNT, f"Invalid amount: {amount}")
    try:
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, len(value.as_tuple().digits) + 3)
            cents = value.scaleb(2).to_integral_value(rounding=ROUND_HALF_UP)
    except DecimalException:
        raise ExpenseValidationError(ExpenseValidationError.INVALID_AMOUNT, f"Invalid amount: {amount}")
    return int(cents)


def _is_member_id(value: Any) -> bool:
    return isinstance(value, (str, int)) and not isinstance(value, bool)


def resolve_split(split_between: Optional[Sequence[Any]], default_split: Tuple[Any, Any]) -> Tuple[Any, Any]:
    """Use the caller's pair only when it names exactly two members"""
    if (
        isinstance(split_between, (list, tuple))
        and len(split_between) == 2
        and all(_is_member_id(m) for m in split_between)
    ):
        return split_between[0], split_between[1]
    return default_split[0], default_split[1]


def share_entry(member_id: Any, cents: int) -> Dict[str, Any]:
    return {
        "id": member_id,
        "member_id": member_id,
        "meta": {"type": "factor", "multiplier": 1},
        "source_amount": {"fractional": cents, "currency": CURRENCY},
    }


def default_split_shares(total_cents: int, members: Tuple[Any, Any]) -> List[Dict[str, Any]]:
    """Split 50/50; the first member takes the odd cent"""
    first, second = members
    part, remainder = divmod(total_cents, 2)
    return [
        share_entry(first, part + remainder),
        share_entry(second, part),
    ]


class ExpensePayloadBuilder:
    def __init__(self, default_split: Tuple[Any, Any], date_resolver: DateResolver = resolve_date):
        self.default_split = tuple(default_split)
        self.date_resolver = date_resolver

    def build(self, expense: ExpenseRequest, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Build the Splitser expense body.

        Raises ExpenseValidationError for unparseable dates or amounts. Nothing
        here touches the network.
        """
        now = now or datetime.now()
        payed_on = self.date_resolver(expense.date_description, now)
        cents = to_minor_units(expense.amount)

        if expense.shares:
            shares = expense.shares
        else:
            members = resolve_split(expense.split_between, self.default_split)
            shares = default_split_shares(cents, members)

        body: Dict[str, Any] = {
            "category": {"id": expense.category_id or DEFAULT_CATEGORY_ID, "category_source": "auto"},
            "name": expense.description,
        }
        if expense.payer_id is not None:
            body["payed_by_id"] = expense.payer_id
        body.update({
            "payed_on": payed_on.isoformat(),
            "source_amount": {"fractional": cents, "currency": CURRENCY},
            "amount": {"fractional": cents, "currency": CURRENCY},
            "exchange_rate": 1,
            "shares_attributes": shares,
            "recurring_task": dict(NEVER_RECURRING),
        })
        return {"expense": body}


def build_expense_payload(
    expense: ExpenseRequest,
    default_split: Tuple[Any, Any],
    *,
    now: Optional[datetime] = None,
    date_resolver: DateResolver = resolve_date,
) -> Dict[str, Any]:
    return ExpensePayloadBuilder(default_split, date_resolver).build(expense, now=now)
