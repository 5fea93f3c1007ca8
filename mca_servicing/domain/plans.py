"""Payback plan lifecycle rules applied before a plan is stored or generates paybacks"""

from datetime import date
from typing import Any, Dict, List, Optional

from mca_servicing.domain.exceptions import InvalidPaybackPlanError, PlanNotActiveError
from mca_servicing.domain.models import PaybackPlanStatus
from mca_servicing.domain.schedule import get_next_payback_date, normalize_payday_list, parse_frequency


def prepare_new_plan(fields: Dict[str, Any], today: Optional[date] = None) -> Dict[str, Any]:
    """
    Validate and complete the fields of a new payback plan.

    - payday_list is required and stored sorted ascending
    - next_payback_date defaults to the schedule calculator's next payday

    Raises:
        InvalidPaybackPlanError: On a missing/unusable frequency or payday list
    """
    prepared = dict(fields)

    frequency = parse_frequency(prepared.get("frequency"))
    if frequency is None:
        raise InvalidPaybackPlanError("Frequency is required")

    payday_list = normalize_payday_list(frequency, prepared.get("payday_list"))
    if not payday_list:
        raise InvalidPaybackPlanError("Payday list is required")

    prepared["frequency"] = frequency.value
    prepared["payday_list"] = payday_list
    prepared.setdefault("status", PaybackPlanStatus.ACTIVE.value)

    if not prepared.get("next_payback_date") and prepared["status"] == PaybackPlanStatus.ACTIVE.value:
        next_date = get_next_payback_date(prepared.get("start_date"), frequency, payday_list, today=today)
        prepared["next_payback_date"] = date.fromisoformat(next_date) if next_date else None

    return prepared


def prepare_plan_update(
    current_frequency: str,
    current_payday_list: Optional[List[int]],
    fields: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Normalize a partial plan update.

    A new frequency or payday list is checked against the other one (patched
    or stored), so selectors stay in range for the plan's frequency. Pausing
    or stopping a plan clears its next payback date.

    Raises:
        InvalidPaybackPlanError: When no usable payday remains
    """
    prepared = dict(fields)

    frequency = parse_frequency(prepared.get("frequency") or current_frequency)
    if frequency is None:
        raise InvalidPaybackPlanError("Frequency is required")
    if "frequency" in prepared:
        prepared["frequency"] = frequency.value

    if "frequency" in prepared or "payday_list" in prepared:
        requested = prepared.get("payday_list", current_payday_list)
        payday_list = normalize_payday_list(frequency, requested)
        if not payday_list:
            raise InvalidPaybackPlanError("Payday list is required")
        prepared["payday_list"] = payday_list

    if prepared.get("status") in (PaybackPlanStatus.PAUSED.value, PaybackPlanStatus.STOPPED.value):
        prepared["next_payback_date"] = None

    return prepared


def ensure_can_generate(status: str, next_payback_date: Optional[date]) -> None:
    """Raises PlanNotActiveError unless the plan is ACTIVE with a next payback date"""
    if status != PaybackPlanStatus.ACTIVE.value or not next_payback_date:
        raise PlanNotActiveError("Payback plan is not active or next payback date is not set")
