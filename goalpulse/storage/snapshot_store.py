"""
Snapshot-backed time-series store.

Ingests one input Snapshot into per-domain, per-day Records:

- discipline: total_score and category.<name> scores per logged day
  (last write wins on duplicates)
- career: applications, tier1, interviews and offers counted per day
- trading: trades, pnl and wins summed per day
- health: workouts and duration per day, plus body_fat_pct / weight_kg
  from body metrics (last measurement of the day wins)
- finance: a single record dated as_of from financialData

Each raw row is validated on its own. Rows that fail validation are skipped
and counted per domain; a bad row never rejects the snapshot.
"""

from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

import structlog
from pydantic import BaseModel, ValidationError

from goalpulse.models.enums import Domain
from goalpulse.models.records import (
    BodyMetricEntry,
    DailyScoreEntry,
    FinancialData,
    JobApplicationEntry,
    Record,
    Snapshot,
    TradeEntry,
    WorkoutEntry,
)
from goalpulse.utils.logging import log_event

from .base import TimeSeriesStore

logger = structlog.get_logger()

Clock = Callable[[], datetime]

# Discipline category scores are stored as "category.<name>" fields
CATEGORY_PREFIX = "category."


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _validate_rows(
    rows: list[Any], model: type[BaseModel]
) -> tuple[list[Any], int]:
    """Validate raw rows one by one, returning (valid entries, skipped count)."""
    valid = []
    skipped = 0
    for row in rows:
        try:
            valid.append(model.model_validate(row))
        except ValidationError:
            skipped += 1
    return valid, skipped


class SnapshotStore(TimeSeriesStore):
    """
    In-memory, read-only store built from a single snapshot.

    Attributes:
        financials: Validated financialData (empty when absent or invalid)
        skipped_records: Malformed rows skipped per domain
        entry_counts: Valid raw rows ingested per domain

    Example:
        >>> store = SnapshotStore.from_snapshot(snapshot)
        >>> store.query(Domain.DISCIPLINE)[-1].get("total_score")
        8.0
    """

    def __init__(
        self,
        records: dict[Domain, tuple[Record, ...]],
        as_of: date,
        financials: Optional[FinancialData] = None,
        skipped_records: Optional[dict[str, int]] = None,
        entry_counts: Optional[dict[str, int]] = None,
    ):
        self._records = {domain: records.get(domain, ()) for domain in Domain}
        self._as_of = as_of
        self.financials = financials or FinancialData()
        self.skipped_records = skipped_records or {}
        self.entry_counts = entry_counts or {}

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot, clock: Clock = utc_now) -> "SnapshotStore":
        """
        Build a store from an input snapshot.

        as_of is snapshot.as_of when given, otherwise the latest record date,
        otherwise today's date from the clock.

        Args:
            snapshot: Validated input snapshot
            clock: Fallback clock for empty snapshots

        Returns:
            SnapshotStore over the snapshot's records
        """
        skipped: dict[str, int] = {}

        scores, skipped[Domain.DISCIPLINE.value] = _validate_rows(
            snapshot.daily_scores, DailyScoreEntry
        )
        applications, skipped[Domain.CAREER.value] = _validate_rows(
            snapshot.job_applications, JobApplicationEntry
        )
        trades, skipped[Domain.TRADING.value] = _validate_rows(
            snapshot.trading_journal, TradeEntry
        )
        workouts, skipped_workouts = _validate_rows(snapshot.workouts, WorkoutEntry)
        body_metrics, skipped_body = _validate_rows(snapshot.body_metrics, BodyMetricEntry)
        skipped[Domain.HEALTH.value] = skipped_workouts + skipped_body

        financials = FinancialData()
        skipped[Domain.FINANCE.value] = 0
        if snapshot.financial_data is not None:
            try:
                financials = FinancialData.model_validate(snapshot.financial_data)
            except ValidationError:
                skipped[Domain.FINANCE.value] = 1

        discipline = cls._rollup_discipline(scores)
        records: dict[Domain, tuple[Record, ...]] = {
            Domain.DISCIPLINE: discipline,
            Domain.CAREER: cls._rollup_career(applications),
            Domain.TRADING: cls._rollup_trading(trades),
            Domain.HEALTH: cls._rollup_health(workouts, body_metrics),
        }

        as_of = snapshot.as_of
        if as_of is None:
            dates = [series[-1].date for series in records.values() if series]
            as_of = max(dates) if dates else clock().date()

        finance_values = {
            field: value
            for field, value in financials.model_dump().items()
            if value is not None
        }
        records[Domain.FINANCE] = (
            (Record(date=as_of, domain=Domain.FINANCE, values=finance_values),)
            if finance_values
            else ()
        )

        skipped = {domain: n for domain, n in skipped.items() if n}
        if skipped:
            log_event(
                logger,
                "warning",
                "snapshot_rows_skipped",
                skipped=skipped,
                total=sum(skipped.values()),
            )

        logger.info(
            "snapshot_ingested",
            as_of=as_of.isoformat(),
            record_counts={domain.value: len(series) for domain, series in records.items()},
        )

        return cls(
            records=records,
            as_of=as_of,
            financials=financials,
            skipped_records=skipped,
            entry_counts={
                Domain.DISCIPLINE.value: len(scores),
                Domain.CAREER.value: len(applications),
                Domain.TRADING.value: len(trades),
                Domain.HEALTH.value: len(workouts) + len(body_metrics),
            },
        )

    # =========================================================================
    # TimeSeriesStore interface
    # =========================================================================

    @property
    def as_of(self) -> date:
        return self._as_of

    def query(self, domain: Domain, since: Optional[date] = None) -> tuple[Record, ...]:
        records = self._records[domain]
        if since is None:
            return records
        return tuple(record for record in records if record.date >= since)

    def first_date(self, domain: Domain) -> Optional[date]:
        records = self._records[domain]
        return records[0].date if records else None

    # =========================================================================
    # Rollups
    # =========================================================================

    @staticmethod
    def _rollup_discipline(
        entries: list[DailyScoreEntry],
    ) -> tuple[Record, ...]:
        by_day: dict[date, DailyScoreEntry] = {}
        for entry in entries:
            by_day[entry.date] = entry

        return tuple(
            Record(
                date=day,
                domain=Domain.DISCIPLINE,
                values={
                    "total_score": by_day[day].total_score,
                    **{
                        f"{CATEGORY_PREFIX}{category}": score
                        for category, score in by_day[day].scores.items()
                    },
                },
            )
            for day in sorted(by_day)
        )

    @staticmethod
    def _rollup_career(entries: list[JobApplicationEntry]) -> tuple[Record, ...]:
        by_day: dict[date, dict[str, float]] = defaultdict(
            lambda: {"applications": 0.0, "tier1": 0.0, "interviews": 0.0, "offers": 0.0}
        )
        for entry in entries:
            day = by_day[entry.date]
            day["applications"] += 1
            day["tier1"] += 1 if entry.is_tier1 else 0
            day["interviews"] += 1 if entry.reached_interview else 0
            day["offers"] += 1 if entry.is_offer else 0

        return tuple(
            Record(date=day, domain=Domain.CAREER, values=by_day[day])
            for day in sorted(by_day)
        )

    @staticmethod
    def _rollup_trading(entries: list[TradeEntry]) -> tuple[Record, ...]:
        by_day: dict[date, dict[str, float]] = defaultdict(
            lambda: {"trades": 0.0, "pnl": 0.0, "wins": 0.0}
        )
        for entry in entries:
            day = by_day[entry.date]
            day["trades"] += 1
            day["pnl"] += entry.pnl
            day["wins"] += 1 if entry.pnl > 0 else 0

        return tuple(
            Record(date=day, domain=Domain.TRADING, values=by_day[day])
            for day in sorted(by_day)
        )

    @staticmethod
    def _rollup_health(
        workouts: list[WorkoutEntry], body_metrics: list[BodyMetricEntry]
    ) -> tuple[Record, ...]:
        by_day: dict[date, dict[str, float]] = defaultdict(
            lambda: {"workouts": 0.0, "duration": 0.0}
        )
        for entry in workouts:
            day = by_day[entry.date]
            day["workouts"] += 1
            day["duration"] += entry.duration
        for entry in body_metrics:
            day = by_day[entry.date]
            if entry.body_fat_pct is not None:
                day["body_fat_pct"] = entry.body_fat_pct
            if entry.weight_kg is not None:
                day["weight_kg"] = entry.weight_kg

        return tuple(
            Record(date=day, domain=Domain.HEALTH, values=by_day[day])
            for day in sorted(by_day)
        )
