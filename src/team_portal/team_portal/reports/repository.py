from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol, Sequence

from ..core.enums import ReportKind
from .model import Report


class ReportRepository(Protocol):
    def create(self, report: Report) -> Report:
        raise NotImplementedError

    def get_by_id(self, kind: ReportKind, report_id: str) -> Optional[Report]:
        raise NotImplementedError

    def list(
        self,
        kind: ReportKind,
        *,
        team_ids: Optional[Iterable[str]] = None,
        owner_id: Optional[str] = None,
        team_id: Optional[str] = None,
        employee_id: Optional[str] = None,
        period: Optional[Any] = None,
    ) -> Sequence[Report]:
        """Newest first.

        ``team_ids``/``owner_id`` define visibility (team in ``team_ids`` OR
        written by ``owner_id``; no restriction when ``team_ids`` is None).
        ``team_id``, ``employee_id`` and ``period`` narrow the result further.
        """

        raise NotImplementedError

    def update(self, kind: ReportKind, report_id: str, changes: dict) -> Optional[Report]:
        raise NotImplementedError

    def delete(self, kind: ReportKind, report_id: str) -> bool:
        raise NotImplementedError

    def count_for_team(self, team_id: str) -> int:
        """Weekly and monthly reports together."""

        raise NotImplementedError
