"""Sprint overview metrics computed from a dashboard."""

from collections.abc import Iterable
from dataclasses import dataclass

from agile_board.columns import Column, map_to_column
from agile_board.models import BugStatus, Dashboard


@dataclass(frozen=True)
class OverviewSummary:
    """Counters rendered on the overview page."""

    to_do: int = 0
    in_progress: int = 0
    completed: int = 0
    total_bugs: int = 0
    resolved_bugs: int = 0
    total_story_points: int = 0
    completed_story_points: int = 0
    high_priority: int = 0
    medium_priority: int = 0
    low_priority: int = 0
    simulated: bool = False

    @property
    def total_pbis(self) -> int:
        return self.to_do + self.in_progress + self.completed

    @property
    def completion_percentage(self) -> int:
        if self.total_pbis == 0:
            return 0
        return round(self.completed / self.total_pbis * 100)


def priority_band(priority: int) -> str:
    """Lower numbers are more urgent: 1 and below is high, up to 3 is medium."""
    if priority <= 1:
        return "high"
    if priority <= 3:
        return "medium"
    return "low"


def summarize(dashboard: Dashboard) -> OverviewSummary:
    """Summarize a dashboard. Soft-deleted items are not counted."""
    pbis = [p for p in dashboard.product_backlog_items if not p.is_deleted]
    bugs = [b for b in dashboard.bugs if not b.is_deleted]

    columns = {column: 0 for column in Column}
    for pbi in pbis:
        columns[map_to_column(pbi.state)] += 1

    bands = {"high": 0, "medium": 0, "low": 0}
    for priority in [p.priority for p in pbis] + [b.priority for b in bugs]:
        bands[priority_band(priority)] += 1

    return OverviewSummary(
        to_do=columns[Column.TO_DO],
        in_progress=columns[Column.IN_PROGRESS],
        completed=columns[Column.DONE],
        total_bugs=len(bugs),
        resolved_bugs=sum(1 for b in bugs if b.status in (BugStatus.RESOLVED, BugStatus.CLOSED)),
        total_story_points=sum(p.story_point for p in pbis),
        completed_story_points=sum(p.story_point for p in pbis if map_to_column(p.state) is Column.DONE),
        high_priority=bands["high"],
        medium_priority=bands["medium"],
        low_priority=bands["low"],
        simulated=dashboard.simulated,
    )


def average_velocity(completed_points: Iterable[int]) -> int:
    """Rounded mean of completed story points per sprint; 0 without sprints."""
    points = list(completed_points)
    if not points:
        return 0
    return round(sum(points) / len(points))
