"""Loan payment flow and payoff projections."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Mapping, Optional

from sqlmodel import Session

from ..errors import InvalidAmount
from ..infra.repositories.loan import SQLModelLoanRepository
from ..logging_config import get_logger
from ..models.loan import Loan, LoanPayment
from ..models.wallet import TransactionType
from ..money import CENT, ZERO, MoneyLike, non_negative_money, positive_money, to_money
from ..timeutils import add_months, clamp_day
from .common import detach, load_owned, require_user, validate_day_of_month
from .ledger import WalletLedger

logger = get_logger("loans")

ENTITY = "loan"
LOAN_CATEGORY = "Loan"
EDITABLE_FIELDS = frozenset(
    {"name", "lender", "interest_rate", "monthly_payment", "due_day", "estimated_end_date"}
)

# Upper bound on open-ended projections.
MAX_PROJECTION_MONTHS = 600


@dataclass(slots=True)
class PaymentSplit:
    """How one payment divides between interest and principal."""

    interest: Decimal
    principal: Decimal


@dataclass(slots=True)
class PaymentProjection:
    """Represents a single projected payment for a loan."""

    due_date: date
    payment: Decimal
    principal: Decimal
    interest: Decimal
    remaining_balance: Decimal


def monthly_interest(balance: Decimal, annual_rate: Optional[Decimal]) -> Decimal:
    """Interest accrued on *balance* over one month at *annual_rate* percent."""

    if not annual_rate:
        return ZERO
    monthly_rate = Decimal(annual_rate) / Decimal(12) / Decimal(100)
    return (Decimal(balance) * monthly_rate).quantize(CENT, rounding=ROUND_HALF_UP)


def split_payment(
    amount: Decimal, balance: Decimal, annual_rate: Optional[Decimal]
) -> PaymentSplit:
    """Split *amount* into interest first, then principal.

    A payment that does not cover the month's interest is all interest.
    """

    interest_due = monthly_interest(balance, annual_rate)
    if amount <= interest_due:
        return PaymentSplit(interest=amount, principal=ZERO)
    return PaymentSplit(interest=interest_due, principal=amount - interest_due)


def _initial_due_date(*, today: date, due_day: int) -> date:
    """Return the first due date on or after *today*."""

    candidate = clamp_day(today.year, today.month, due_day)
    if candidate < today:
        following = add_months(today.replace(day=1), 1)
        candidate = clamp_day(following.year, following.month, due_day)
    return candidate


def _advance_due_date(current: date, due_day: int) -> date:
    """Return the due date for the following month."""

    following = add_months(current.replace(day=1), 1)
    return clamp_day(following.year, following.month, due_day)


def project_payoff(
    loan: Loan, months: Optional[int] = None, today: Optional[date] = None
) -> list[PaymentProjection]:
    """Project the remaining balance month by month at ``monthly_payment``.

    When ``months`` is ``None`` the projection runs until the balance reaches
    zero. A loan with no monthly payment, or one whose payment never exceeds
    the interest, yields an empty projection since it would never pay off.
    """

    balance = to_money(loan.current_balance)
    payment = to_money(loan.monthly_payment or 0)
    if balance <= 0 or payment <= 0:
        return []
    if months is not None and months <= 0:
        return []
    if payment <= monthly_interest(balance, loan.interest_rate):
        return []

    limit = MAX_PROJECTION_MONTHS if months is None else months
    next_due = _initial_due_date(today=today or date.today(), due_day=loan.due_day)
    schedule: list[PaymentProjection] = []

    while balance > 0 and len(schedule) < limit:
        interest = monthly_interest(balance, loan.interest_rate)
        paid = min(payment, balance + interest)
        principal = paid - interest
        balance = balance - principal

        schedule.append(
            PaymentProjection(
                due_date=next_due,
                payment=paid,
                principal=principal,
                interest=interest,
                remaining_balance=balance,
            )
        )
        next_due = _advance_due_date(next_due, loan.due_day)

    return schedule


def payoff_date(projection: list[PaymentProjection]) -> Optional[date]:
    """Due date of the final payment, or ``None`` if the projection never clears."""

    if projection and projection[-1].remaining_balance <= 0:
        return projection[-1].due_date
    return None


class LoanService:
    """Loans and the payments that pay them down from the wallet."""

    def __init__(self, session_factory: Callable[[], Session], ledger: WalletLedger):
        self.session_factory = session_factory
        self.ledger = ledger
        self.repo = SQLModelLoanRepository(session_factory)

    def create(
        self,
        name: str,
        initial_principal: MoneyLike,
        *,
        user_id: Optional[int],
        monthly_payment: MoneyLike = 0,
        interest_rate: Optional[MoneyLike] = None,
        due_day: int = 1,
        start_date: Optional[date] = None,
        lender: str = "",
    ) -> Loan:
        uid = require_user(user_id)
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValueError("Loan name is required")

        principal = positive_money(initial_principal, field="initial_principal")
        rate = None
        if interest_rate is not None:
            rate = Decimal(str(interest_rate))
            if rate < 0:
                raise InvalidAmount(f"interest_rate cannot be negative, got {rate}")

        now = self.ledger.now()
        loan = Loan(
            user_id=uid,
            name=cleaned,
            lender=lender,
            initial_principal=principal,
            current_balance=principal,
            interest_rate=rate,
            monthly_payment=non_negative_money(monthly_payment, field="monthly_payment"),
            due_day=validate_day_of_month(due_day),
            start_date=start_date or now.date(),
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        loan.estimated_end_date = payoff_date(project_payoff(loan, today=loan.start_date))
        return self.repo.create(loan, user_id=uid)

    def get(self, loan_id: int, *, user_id: Optional[int]) -> Loan:
        uid = require_user(user_id)
        with self.session_factory() as session:
            loan = load_owned(session, Loan, loan_id, user_id=uid, entity=ENTITY)
            session.expunge(loan)
            return loan

    def list_active(self, *, user_id: Optional[int]) -> list[Loan]:
        return self.repo.list_active(user_id=require_user(user_id))

    def list_all(self, *, user_id: Optional[int]) -> list[Loan]:
        return self.repo.list_all(user_id=require_user(user_id))

    def total_balance(self, *, user_id: Optional[int]) -> Decimal:
        return self.repo.get_total_balance(user_id=require_user(user_id))

    def payment_history(self, loan_id: int, *, user_id: Optional[int]) -> list[LoanPayment]:
        uid = require_user(user_id)
        with self.session_factory() as session:
            load_owned(session, Loan, loan_id, user_id=uid, entity=ENTITY)
        return self.repo.list_payments(loan_id, user_id=uid)

    def make_payment(
        self,
        loan_id: int,
        amount: MoneyLike,
        *,
        user_id: Optional[int],
        allow_negative_balance: bool = False,
    ) -> LoanPayment:
        """Pay *amount* toward a loan.

        Interest is covered first. The wallet debit, the balance reduction and
        the history row commit together.
        """

        uid = require_user(user_id)
        with self.session_factory() as session:
            loan = load_owned(session, Loan, loan_id, user_id=uid, entity=ENTITY)
            value = positive_money(amount)
            balance = to_money(loan.current_balance)
            split = split_payment(value, balance, loan.interest_rate)

            txn = self.ledger.post(
                session,
                user_id=uid,
                amount=-value,
                type=TransactionType.LOAN_PAYMENT,
                description=f"Loan Payment - {loan.name}",
                category=LOAN_CATEGORY,
                related_entity_type=ENTITY,
                related_entity_id=loan.id,
                allow_negative=allow_negative_balance,
            )

            now = self.ledger.now()
            loan.current_balance = balance - split.principal
            loan.updated_at = now
            if loan.current_balance <= 0:
                loan.is_active = False
            session.add(loan)

            payment = LoanPayment(
                user_id=uid,
                loan_id=loan.id,
                transaction_id=txn.id,
                date=now,
                amount=value,
                principal_paid=split.principal,
                interest_paid=split.interest,
            )
            session.add(payment)
            session.commit()
            detach(session, payment)

        logger.info(
            "Loan payment applied",
            extra={
                "user_id": uid,
                "loan_id": loan_id,
                "amount": str(value),
                "principal": str(split.principal),
                "interest": str(split.interest),
                "paid_off": not loan.is_active,
            },
        )
        return payment

    def update(
        self, loan_id: int, patch: Mapping[str, Any], *, user_id: Optional[int]
    ) -> Loan:
        """Edit descriptive fields; balances only move through payments."""

        uid = require_user(user_id)
        unknown = set(patch) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        with self.session_factory() as session:
            loan = load_owned(session, Loan, loan_id, user_id=uid, entity=ENTITY)
            for field, value in patch.items():
                if field == "name":
                    value = (value or "").strip()
                    if not value:
                        raise ValueError("Loan name is required")
                elif field == "monthly_payment":
                    value = non_negative_money(value, field="monthly_payment")
                elif field == "due_day":
                    value = validate_day_of_month(value)
                elif field == "interest_rate" and value is not None:
                    value = Decimal(str(value))
                    if value < 0:
                        raise InvalidAmount(f"interest_rate cannot be negative, got {value}")
                setattr(loan, field, value)
            loan.updated_at = self.ledger.now()
            session.add(loan)
            session.commit()
            detach(session, loan)
            return loan

    def project_payoff(
        self,
        loan_id: int,
        *,
        user_id: Optional[int],
        months: Optional[int] = None,
        today: Optional[date] = None,
    ) -> list[PaymentProjection]:
        return project_payoff(self.get(loan_id, user_id=user_id), months=months, today=today)

    def refresh_estimated_end_date(
        self, loan_id: int, *, user_id: Optional[int], today: Optional[date] = None
    ) -> Loan:
        """Store the last projected due date, or ``None`` if it never pays off."""

        uid = require_user(user_id)
        with self.session_factory() as session:
            loan = load_owned(session, Loan, loan_id, user_id=uid, entity=ENTITY)
            loan.estimated_end_date = payoff_date(
                project_payoff(loan, today=today or self.ledger.now().date())
            )
            loan.updated_at = self.ledger.now()
            session.add(loan)
            session.commit()
            detach(session, loan)
            return loan


__all__ = [
    "LoanService",
    "PaymentProjection",
    "PaymentSplit",
    "monthly_interest",
    "payoff_date",
    "project_payoff",
    "split_payment",
]
