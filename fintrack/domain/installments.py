"""Installment plan generation for card purchases split across monthly invoices"""

import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional

from fintrack.domain.exceptions import ValidationError
from fintrack.domain.models import InstallmentPlan, Purchase
from fintrack.domain.money import split_evenly, to_positive_money
from fintrack.utils.date_utils import add_months


def installment_dates(purchase_date: date, num_installments: int) -> List[date]:
    """
    Monthly leg dates, each computed from the origin date and clamped.

    Example:
        2024-01-31 x 3 → [2024-01-31, 2024-02-29, 2024-03-31]
    """
    return [add_months(purchase_date, i) for i in range(num_installments)]


def generate_installment_plan(
    total: Decimal,
    num_installments: int,
    purchase_date: date,
    card_id: Optional[str] = None,
    description: str = "",
    plan_id: Optional[str] = None,
) -> InstallmentPlan:
    """
    Build an installment plan with all of its legs.

    Requirements:
    - At least 2 installments
    - One leg per calendar month starting on the purchase date
    - Leftover cents from the split go to the first leg, so legs sum to the total

    Example:
        100.00 x 3 on 2025-03-01 → 33.34 (03-01), 33.33 (04-01), 33.33 (05-01)
    """
    total = to_positive_money(total, "total")
    if num_installments < 2:
        raise ValidationError(f"An installment plan needs at least 2 installments, got {num_installments}")

    plan_id = plan_id or str(uuid.uuid4())
    amounts = split_evenly(total, num_installments)
    dates = installment_dates(purchase_date, num_installments)

    legs = [
        Purchase(
            id=str(uuid.uuid4()),
            amount=amount,
            transaction_date=leg_date,
            card_id=card_id,
            description=description,
            plan_id=plan_id,
            installment_index=index,
            installment_count=num_installments,
        )
        for index, (amount, leg_date) in enumerate(zip(amounts, dates), start=1)
    ]

    return InstallmentPlan(
        id=plan_id,
        total=total,
        installment_count=num_installments,
        purchase_date=purchase_date,
        card_id=card_id,
        description=description,
        legs=legs,
    )
