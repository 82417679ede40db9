"""Recurring income sources and the manual processing pass that credits them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional

from sqlmodel import Session

from ..infra.repositories.recurring_income import SQLModelRecurringIncomeRepository
from ..logging_config import get_logger
from ..models.recurring_income import RecurringIncome
from ..models.wallet import TransactionType
from ..money import MoneyLike, positive_money
from .common import detach, load_owned, require_user
from .ledger import WalletLedger
from .schedule import RecurringSchedule, following_occurrence, next_occurrence

logger = get_logger("recurring_income")

ENTITY = "recurring_income"
DEFAULT_CATEGORY = "Uncategorized"
SCHEDULE_FIELDS = frozenset({"schedule_type", "day_of_week", "day_of_month", "custom_pattern"})
EDITABLE_FIELDS = SCHEDULE_FIELDS | {
    "name",
    "amount",
    "category",
    "description",
    "start_date",
    "end_date",
    "is_active",
}


@dataclass(slots=True)
class ProcessingFailure:
    income_id: int
    name: str
    error: str


@dataclass(slots=True)
class ProcessingReport:
    """Outcome of one ``process_due`` pass."""

    as_of: date
    processed: int = 0
    credited: Decimal = Decimal("0.00")
    deactivated: list[int] = field(default_factory=list)
    failures: list[ProcessingFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class RecurringIncomeService:
    """Manage recurring incomes and credit them to the wallet when due."""

    def __init__(self, session_factory: Callable[[], Session], ledger: WalletLedger):
        self.session_factory = session_factory
        self.ledger = ledger
        self.repo = SQLModelRecurringIncomeRepository(session_factory)

    def create(
        self,
        name: str,
        amount: MoneyLike,
        schedule: RecurringSchedule,
        *,
        user_id: Optional[int],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        category: str = DEFAULT_CATEGORY,
        description: Optional[str] = None,
    ) -> RecurringIncome:
        uid = require_user(user_id)
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValueError("Income name is required")

        schedule.validate()
        now = self.ledger.now()
        start = start_date or now.date()
        if end_date is not None and end_date < start:
            raise ValueError("end_date cannot be before start_date")

        income = RecurringIncome(
            user_id=uid,
            name=cleaned,
            amount=positive_money(amount),
            category=category or DEFAULT_CATEGORY,
            description=description,
            schedule_type=schedule.type,
            day_of_week=schedule.day_of_week,
            day_of_month=schedule.day_of_month,
            custom_pattern=schedule.custom_pattern,
            start_date=start,
            end_date=end_date,
            next_scheduled_date=next_occurrence(schedule, start),
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        created = self.repo.create(income, user_id=uid)
        logger.info(
            "Recurring income created",
            extra={
                "user_id": uid,
                "income_id": created.id,
                "schedule": schedule.type,
                "next_scheduled_date": created.next_scheduled_date.isoformat(),
            },
        )
        return created

    def get(self, income_id: int, *, user_id: Optional[int]) -> RecurringIncome:
        uid = require_user(user_id)
        with self.session_factory() as session:
            income = load_owned(session, RecurringIncome, income_id, user_id=uid, entity=ENTITY)
            session.expunge(income)
            return income

    def list_active(self, *, user_id: Optional[int]) -> list[RecurringIncome]:
        return self.repo.list_active(user_id=require_user(user_id))

    def update(
        self, income_id: int, patch: Mapping[str, Any], *, user_id: Optional[int]
    ) -> RecurringIncome:
        """Edit an income; a schedule or start date change reschedules it."""

        uid = require_user(user_id)
        unknown = set(patch) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        with self.session_factory() as session:
            income = load_owned(session, RecurringIncome, income_id, user_id=uid, entity=ENTITY)
            pending_from = income.next_scheduled_date
            for key, value in patch.items():
                if key == "amount":
                    value = positive_money(value)
                elif key == "name":
                    value = (value or "").strip()
                    if not value:
                        raise ValueError("Income name is required")
                setattr(income, key, value)

            if income.end_date is not None and income.end_date < income.start_date:
                raise ValueError("end_date cannot be before start_date")

            if SCHEDULE_FIELDS & set(patch) or "start_date" in patch:
                schedule = RecurringSchedule.from_income(income).validate()
                # Occurrences before pending_from are already credited.
                anchor = income.start_date
                if income.last_processed is not None:
                    anchor = max(anchor, pending_from)
                income.next_scheduled_date = next_occurrence(schedule, anchor)

            income.updated_at = self.ledger.now()
            session.add(income)
            session.commit()
            detach(session, income)
            return income

    def delete(self, income_id: int, *, user_id: Optional[int]) -> None:
        uid = require_user(user_id)
        with self.session_factory() as session:
            income = load_owned(session, RecurringIncome, income_id, user_id=uid, entity=ENTITY)
            session.delete(income)
            session.commit()
        logger.info("Recurring income deleted", extra={"user_id": uid, "income_id": income_id})

    def process_due(
        self, *, user_id: Optional[int], as_of: Optional[date] = None
    ) -> ProcessingReport:
        """Credit every occurrence scheduled on or before *as_of*.

        Each income runs in its own unit of work. A failure is logged and
        reported while the remaining incomes still run.
        """

        uid = require_user(user_id)
        cutoff = as_of or self.ledger.now().date()
        report = ProcessingReport(as_of=cutoff)

        for income in self.repo.list_due(cutoff, user_id=uid):
            try:
                credited, count, deactivated = self._process_one(income.id, uid, cutoff)
            except Exception as exc:
                logger.exception(
                    "Failed to process recurring income",
                    extra={"user_id": uid, "income_id": income.id},
                )
                report.failures.append(
                    ProcessingFailure(income_id=income.id, name=income.name, error=str(exc))
                )
                continue
            report.processed += count
            report.credited += credited
            if deactivated:
                report.deactivated.append(income.id)

        logger.info(
            "Recurring income pass complete",
            extra={
                "user_id": uid,
                "as_of": cutoff.isoformat(),
                "processed": report.processed,
                "credited": str(report.credited),
                "failures": len(report.failures),
            },
        )
        return report

    def _process_one(
        self, income_id: int, user_id: int, cutoff: date
    ) -> tuple[Decimal, int, bool]:
        with self.session_factory() as session:
            income = load_owned(session, RecurringIncome, income_id, user_id=user_id, entity=ENTITY)
            schedule = RecurringSchedule.from_income(income).validate()

            credited = Decimal("0.00")
            count = 0
            scheduled = income.next_scheduled_date
            while scheduled <= cutoff:
                if income.end_date is not None and scheduled > income.end_date:
                    break
                self.ledger.post(
                    session,
                    user_id=user_id,
                    amount=income.amount,
                    type=TransactionType.INCOME,
                    description=income.description or income.name,
                    category=income.category or DEFAULT_CATEGORY,
                    related_entity_type=ENTITY,
                    related_entity_id=income.id,
                )
                credited += income.amount
                count += 1
                scheduled = following_occurrence(schedule, scheduled)

            now = self.ledger.now()
            income.next_scheduled_date = scheduled
            if count:
                income.last_processed = now
            deactivated = income.end_date is not None and scheduled > income.end_date
            if deactivated:
                income.is_active = False
            income.updated_at = now
            session.add(income)
            session.commit()

        return credited, count, deactivated


__all__ = [
    "DEFAULT_CATEGORY",
    "ProcessingFailure",
    "ProcessingReport",
    "RecurringIncomeService",
]
