"""
Abstract time-series store interface for the evaluation engine.

The engine reads dated records through this interface only, so the
snapshot-backed store used for evaluations can be swapped for another
source without touching aggregation, scoring or detection code.

Contract:
- query() returns records ascending by date, as a fresh immutable tuple on
  every call (restartable iteration).
- No two records in a domain share a date.
- Querying a domain with no records returns an empty tuple, never raises.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from goalpulse.models.enums import Domain
from goalpulse.models.records import Record


class TimeSeriesStore(ABC):
    """
    Abstract base class for dated record stores.

    Implementations are read-only views: the engine never mutates records.
    """

    @property
    @abstractmethod
    def as_of(self) -> date:
        """
        The evaluation's "now".

        Windows end at this date (inclusive).
        """
        pass

    @abstractmethod
    def query(self, domain: Domain, since: Optional[date] = None) -> tuple[Record, ...]:
        """
        Read records for one domain.

        Args:
            domain: Domain to read
            since: Only records dated on or after this day (None = all)

        Returns:
            Records ascending by date; empty tuple when there are none
        """
        pass

    @abstractmethod
    def first_date(self, domain: Domain) -> Optional[date]:
        """
        Date tracking of a domain started.

        Returns:
            Earliest record date, or None for an empty domain
        """
        pass

    def latest(self, domain: Domain) -> Optional[Record]:
        """Most recent record in a domain, or None."""
        records = self.query(domain)
        return records[-1] if records else None

    def count(self, domain: Domain) -> int:
        """Number of records (distinct days) in a domain."""
        return len(self.query(domain))
