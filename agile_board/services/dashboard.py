"""Dashboard service."""

from typing import Any

import structlog

from agile_board.client import GatewayClient
from agile_board.errors import ServiceError
from agile_board.models import Dashboard
from agile_board.service import UNEXPECTED_RESPONSE_MESSAGE, as_list, as_object, convert
from agile_board.services.bug import bug_from_json
from agile_board.services.pbi import pbi_from_json

logger = structlog.get_logger()


def dashboard_from_json(data: Any) -> Dashboard:
    """Convert a gateway dashboard object into a Dashboard."""
    data = as_object(data or {})
    return Dashboard(
        product_backlog_items=[convert(pbi_from_json, p) for p in as_list(data.get("productBacklogItems"))],
        bugs=[convert(bug_from_json, b) for b in as_list(data.get("bugs"))],
    )


class DashboardService:
    """Client for the read-only dashboard endpoints.

    Failures always propagate; substituting demo data is the job of the
    simulated data source, chosen at configuration time.
    """

    def __init__(self, client: GatewayClient) -> None:
        self.client = client

    def get_by_sprint(self, sprint_id: str) -> Dashboard:
        logger.info("Fetching dashboard for sprint", sprint_id=sprint_id)
        data = self.client.get(f"/dashboard/sprint/{sprint_id}", error_message="Failed to fetch sprint dashboard")
        return dashboard_from_json(data)

    def get_by_user(self, user_id: str) -> Dashboard:
        logger.info("Fetching dashboard for user", user_id=user_id)
        data = self.client.get(f"/dashboard/user/{user_id}", error_message="Failed to fetch user dashboard")
        return dashboard_from_json(data)

    def get_recent(self, team_id: str, limit: int = 5) -> Dashboard:
        """Fetch the most recently changed items of a team."""
        logger.info("Fetching recent items", team_id=team_id, limit=limit)
        data = self.client.get(
            f"/teams/{team_id}/dashboard/recent", params={"limit": limit}, error_message="Failed to fetch recent items"
        )
        return dashboard_from_json(data)

    def get_summary_metrics(self, team_id: str) -> dict[str, int]:
        """Fetch server-side counters: totalPBIs, completedPBIs, totalBugs, resolvedBugs."""
        logger.info("Fetching dashboard metrics", team_id=team_id)
        data = as_object(
            self.client.get(f"/teams/{team_id}/dashboard/metrics", error_message="Failed to fetch dashboard metrics")
        )
        keys = ("totalPBIs", "completedPBIs", "totalBugs", "resolvedBugs")
        try:
            return {key: int(data.get(key) or 0) for key in keys}
        except (ValueError, TypeError) as e:
            raise ServiceError(UNEXPECTED_RESPONSE_MESSAGE) from e
