"""Payback plan engine - payback dates, schedules, statistics and amount splits"""

from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Tuple

from mca_servicing.domain.models import (
    DistributionPriority,
    FundingBalance,
    PaybackFrequency,
    PaybackStatus,
    PaybackTerms,
    PlanStatistics,
    ScheduledPayback,
)
from mca_servicing.utils.date_utils import (
    add_months,
    clamp_day,
    days_in_month,
    roll_past_holidays,
    weekday_index,
)

PENDING_STATUSES = (PaybackStatus.SUBMITTED, PaybackStatus.PROCESSING)
SETTLED_STATUSES = (PaybackStatus.SUCCEED, PaybackStatus.BOUNCED, PaybackStatus.DISPUTED)


def round_cents(numerator: float, denominator: float = 1) -> int:
    """Half-up rounding of numerator / denominator to whole cents"""
    value = Decimal(str(numerator)) / Decimal(str(denominator))
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_term_length(
    frequency: Optional[PaybackFrequency],
    payday_list: Optional[List[int]],
    payback_count: Optional[int],
) -> Optional[float]:
    """
    Term length in months.

    - DAILY: payback_count / paydays per week / 4
    - WEEKLY: payback_count / 4
    - MONTHLY: payback_count
    """
    if not payback_count or not frequency:
        return None
    if frequency == PaybackFrequency.DAILY:
        return payback_count / len(payday_list) / 4 if payday_list else None
    if frequency == PaybackFrequency.WEEKLY:
        return payback_count / 4
    if frequency == PaybackFrequency.MONTHLY:
        return float(payback_count)
    return None


def _next_payday_on_or_after(terms: PaybackTerms, start: date) -> date:
    paydays = terms.payday_list

    if terms.frequency == PaybackFrequency.DAILY:
        start_day = weekday_index(start)
        payday = next((day for day in paydays if day >= start_day), paydays[0])
        return start + timedelta(days=(payday - start_day + 7) % 7)

    if terms.frequency == PaybackFrequency.WEEKLY:
        start_day = weekday_index(start)
        return start + timedelta(days=(paydays[0] - start_day + 7) % 7)

    selector = paydays[0]
    month_start = start.replace(day=1)
    if start.day > selector:
        month_start = add_months(month_start, 1)
    return clamp_day(month_start.year, month_start.month, selector)


def calculate_nth_payback_date(terms: PaybackTerms, start: Optional[date], n: int) -> Optional[date]:
    """
    Date of the nth payday on or after start.

    Each payday is found from the day after the previous one. With
    avoid_holiday, paydays falling on a holiday or weekend roll forward.
    """
    if not start or not n or n <= 0 or not terms.frequency or not terms.payday_list:
        return None

    payback_date = start
    for _ in range(n):
        payback_date = _next_payday_on_or_after(terms, start)
        if terms.avoid_holiday:
            payback_date = roll_past_holidays(payback_date, skip_weekends=True)
        start = payback_date + timedelta(days=1)

    return payback_date


def calculate_scheduled_payback_date(terms: PaybackTerms, from_date: Optional[date], n: int) -> Optional[date]:
    """
    Date of the nth payback when from_date is the first one.

    Used to advance next_payback_date after a payback is generated (n=2) and
    to project end dates from a start or next payback date.
    """
    if not from_date or not n or n <= 0 or not terms.frequency or not terms.payday_list:
        return None

    if n == 1:
        return roll_past_holidays(from_date) if terms.avoid_holiday else from_date

    remaining = n - 1
    paydays = terms.payday_list

    if terms.frequency == PaybackFrequency.DAILY:
        payback_date = from_date
        while remaining:
            payback_date += timedelta(days=1)
            if weekday_index(payback_date) in paydays:
                remaining -= 1
    elif terms.frequency == PaybackFrequency.WEEKLY:
        days_to_add = (paydays[0] - weekday_index(from_date)) % 7 or 7
        payback_date = from_date + timedelta(days=days_to_add + (remaining - 1) * 7)
    else:
        selector = paydays[0]
        # Compare against the payday as it fell in from_date's month (clamped)
        current_payday = min(selector, days_in_month(from_date.year, from_date.month))
        months = remaining if current_payday <= from_date.day else remaining - 1
        target_month = add_months(from_date.replace(day=1), months)
        payback_date = clamp_day(target_month.year, target_month.month, selector)

    if terms.avoid_holiday:
        payback_date = roll_past_holidays(payback_date)
    return payback_date


def calculate_scheduled_end_date(
    terms: PaybackTerms, start_date: Optional[date], payback_count: Optional[int]
) -> Optional[date]:
    """Date of the last payback counted from the plan's start date"""
    if not payback_count:
        return None
    return calculate_scheduled_payback_date(terms, start_date, payback_count)


def calculate_expected_end_date(
    terms: PaybackTerms, next_payback_date: Optional[date], remaining_count: Optional[int]
) -> Optional[date]:
    """Date of the last payback counted from the next outstanding one"""
    if not remaining_count or remaining_count <= 0:
        return None
    return calculate_scheduled_payback_date(terms, next_payback_date, remaining_count)


def generate_payback_list(
    terms: PaybackTerms,
    start_date: Optional[date],
    total_amount_cents: int,
    payback_count: int,
    next_payback_amount_cents: Optional[int] = None,
) -> List[ScheduledPayback]:
    """
    Project every payback of a plan.

    Each amount is the remaining total divided by the remaining count, so
    rounding drift is absorbed as the schedule progresses and the list sums
    to total_amount_cents.
    """
    if not start_date or not total_amount_cents or not payback_count or not terms.frequency or not terms.payday_list:
        return []

    remaining_amount = total_amount_cents
    remaining_count = payback_count
    amount = next_payback_amount_cents or round_cents(remaining_amount, remaining_count)
    if not amount:
        return []

    paybacks = []
    search_from = start_date
    while remaining_count > 0:
        due_date = calculate_nth_payback_date(terms, search_from, 1)
        paybacks.append(ScheduledPayback(due_date=due_date, amount_cents=amount))

        remaining_amount -= amount
        remaining_count -= 1
        if remaining_count:
            amount = round_cents(remaining_amount, remaining_count)
        search_from = due_date + timedelta(days=1)

    return paybacks


def calculate_plan_statistics(
    terms: PaybackTerms,
    total_amount_cents: int,
    payback_count: Optional[int],
    start_date: Optional[date],
    next_payback_date: Optional[date],
    paybacks: Iterable[Tuple[PaybackStatus, int]],
) -> PlanStatistics:
    """
    Aggregate a plan's paybacks into progress figures.

    Args:
        paybacks: (status, payback_amount_cents) of every payback in the plan
    """
    counts = {status: 0 for status in PaybackStatus}
    amounts = {status: 0 for status in PaybackStatus}
    for status, amount_cents in paybacks:
        status = PaybackStatus(status)
        counts[status] += 1
        amounts[status] += amount_cents or 0

    paid_amount = amounts[PaybackStatus.SUCCEED]
    pending_amount = sum(amounts[s] for s in PENDING_STATUSES)
    pending_count = sum(counts[s] for s in PENDING_STATUSES)
    remaining_balance = (total_amount_cents or 0) - paid_amount - pending_amount
    remaining_count = (payback_count or 0) - counts[PaybackStatus.SUCCEED] - pending_count

    # Success rate only over paybacks that reached a final outcome
    settled = sum(counts[s] for s in SETTLED_STATUSES)
    succeed_rate = counts[PaybackStatus.SUCCEED] / settled if settled > 0 else 0.0

    next_amount = round_cents(remaining_balance, remaining_count) if remaining_count > 0 else 0

    return PlanStatistics(
        counts={s.value: c for s, c in counts.items()},
        amounts_cents={s.value: a for s, a in amounts.items()},
        paid_amount_cents=paid_amount,
        pending_amount_cents=pending_amount,
        pending_count=pending_count,
        remaining_balance_cents=remaining_balance,
        remaining_count=remaining_count,
        succeed_rate=succeed_rate,
        next_payback_amount_cents=next_amount,
        term_length=calculate_term_length(terms.frequency, terms.payday_list, payback_count),
        scheduled_end_date=calculate_scheduled_end_date(terms, start_date, payback_count),
        expected_end_date=calculate_expected_end_date(terms, next_payback_date, remaining_count),
    )


def split_payback_amount(
    amount_cents: int,
    priority: DistributionPriority,
    balance: FundingBalance,
) -> Tuple[int, int]:
    """
    Split a payback between the funded balance and residual fees.

    - FUND: pay down the funded balance, then fees; any excess stays on the
      funded side
    - FEE: pay down residual fees, then the funded balance; any excess stays
      on the fee side
    - BOTH: pro rata by payback amount vs residual fee amount

    Returns: (funded_amount_cents, fee_amount_cents)
    """
    remaining_payback = balance.remaining_payback_amount_cents
    remaining_fee = balance.remaining_fee_amount_cents

    if priority == DistributionPriority.FUND:
        if remaining_fee <= 0:
            return amount_cents, 0
        funded = min(amount_cents, max(remaining_payback, 0))
        fee = min(amount_cents - funded, remaining_fee)
        return amount_cents - fee, fee

    if priority == DistributionPriority.FEE:
        if remaining_payback <= 0:
            return 0, amount_cents
        fee = min(amount_cents, max(remaining_fee, 0))
        funded = min(amount_cents - fee, remaining_payback)
        return funded, amount_cents - funded

    total = balance.payback_amount_cents + balance.residual_fee_amount_cents
    if total <= 0:
        return amount_cents, 0
    funded = round_cents(amount_cents * balance.payback_amount_cents, total)
    return funded, amount_cents - funded
