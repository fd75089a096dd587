"""Where boards get their work items: the live gateway or a simulated store."""

import copy
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime

import structlog

from agile_board.client import DEFAULT_TIMEOUT, GatewayClient
from agile_board.config import Config
from agile_board.errors import EntityNotFoundError
from agile_board.models import Bug, BugStatus, Dashboard, PbiState, ProductBacklogItem
from agile_board.services import BugService, DashboardService, PbiService

logger = structlog.get_logger()

LIVE = "live"
SIMULATED = "simulated"


class DataSource(ABC):
    """Abstract provider of PBIs and bugs for boards and dashboards."""

    simulated: bool = False

    @abstractmethod
    def load_work_items(
        self, sprint_id: str | None = None, user_id: str | None = None
    ) -> tuple[list[ProductBacklogItem], list[Bug]]:
        """Load the PBIs and bugs of a sprint, a user, or everything."""
        pass

    @abstractmethod
    def update_pbi_state(self, pbi_id: str, state: PbiState) -> None:
        """Persist a new PBI state."""
        pass

    @abstractmethod
    def update_bug_status(self, bug_id: str, status: BugStatus) -> None:
        """Persist a new bug status."""
        pass

    @abstractmethod
    def get_dashboard(self, sprint_id: str | None = None, user_id: str | None = None) -> Dashboard:
        """Return the dashboard aggregate of a sprint or user."""
        pass


class LiveDataSource(DataSource):
    """Data source backed by the gateway. Failures always propagate."""

    simulated = False

    def __init__(self, pbis: PbiService, bugs: BugService, dashboards: DashboardService) -> None:
        self.pbis = pbis
        self.bugs = bugs
        self.dashboards = dashboards

    @classmethod
    def from_client(cls, client: GatewayClient) -> "LiveDataSource":
        return cls(PbiService(client), BugService(client), DashboardService(client))

    def load_work_items(
        self, sprint_id: str | None = None, user_id: str | None = None
    ) -> tuple[list[ProductBacklogItem], list[Bug]]:
        logger.info("Loading work items", sprint_id=sprint_id, user_id=user_id, simulated=False)
        if sprint_id:
            dashboard = self.dashboards.get_by_sprint(sprint_id)
            return dashboard.product_backlog_items, dashboard.bugs
        if user_id:
            return self.pbis.get_by_user(user_id), self.bugs.get_by_user(user_id)
        return self.pbis.get_all(), self.bugs.get_all()

    def update_pbi_state(self, pbi_id: str, state: PbiState) -> None:
        self.pbis.update_state(pbi_id, state)

    def update_bug_status(self, bug_id: str, status: BugStatus) -> None:
        self.bugs.update_status(bug_id, status)

    def get_dashboard(self, sprint_id: str | None = None, user_id: str | None = None) -> Dashboard:
        if sprint_id:
            return self.dashboards.get_by_sprint(sprint_id)
        if user_id:
            return self.dashboards.get_by_user(user_id)
        pbis, bugs = self.load_work_items()
        return Dashboard(product_backlog_items=pbis, bugs=bugs)


def demo_work_items() -> tuple[list[ProductBacklogItem], list[Bug]]:
    """Fixed demo set used when no backend is available."""
    pbis = [
        ProductBacklogItem(
            id="1",
            sprint_id="sprint-1",
            area_id="area-1",
            feature_id="feature-1",
            assigned_user_id="user-1",
            description="Implement dashboard overview",
            functional_description="Show sprint progress and team velocity",
            priority=1,
            state=PbiState.ACTIVE,
            story_point=5,
            business_value=8,
            due_date=datetime(2023, 12, 25),
            started_date=datetime(2023, 12, 10),
            tag_ids=frozenset({"ui", "dashboard"}),
        ),
        ProductBacklogItem(
            id="2",
            sprint_id="sprint-1",
            area_id="area-1",
            feature_id="feature-2",
            assigned_user_id="user-2",
            description="Add filtering to dashboard",
            functional_description="Allow users to filter by date range and status",
            priority=2,
            state=PbiState.NEW,
            story_point=3,
            business_value=5,
            due_date=datetime(2023, 12, 30),
            tag_ids=frozenset({"dashboard", "filters"}),
        ),
    ]
    bugs = [
        Bug(
            id="101",
            sprint_id="sprint-1",
            area_id="area-1",
            feature_id="feature-1",
            assigned_user_id="user-3",
            description="Dashboard chart not rendering correctly",
            functional_description="Velocity chart shows incorrect data points",
            priority=1,
            status=BugStatus.ACTIVE,
            story_point=2,
            business_value=7,
            due_date=datetime(2023, 12, 20),
            started_date=datetime(2023, 12, 15),
            tag_ids=frozenset({"dashboard", "bug", "chart"}),
        ),
    ]
    return pbis, bugs


class SimulatedDataSource(DataSource):
    """In-memory data source for demos and offline use.

    Everything it returns is marked simulated; it is never mixed with
    gateway data.
    """

    simulated = True

    def __init__(
        self, pbis: list[ProductBacklogItem] | None = None, bugs: list[Bug] | None = None
    ) -> None:
        if pbis is None and bugs is None:
            pbis, bugs = demo_work_items()
        self._pbis: dict[str, ProductBacklogItem] = {p.id: p for p in pbis or []}
        self._bugs: dict[str, Bug] = {b.id: b for b in bugs or []}
        logger.info("Simulated data source initialized", pbis=len(self._pbis), bugs=len(self._bugs))

    def load_work_items(
        self, sprint_id: str | None = None, user_id: str | None = None
    ) -> tuple[list[ProductBacklogItem], list[Bug]]:
        logger.info("Loading work items", sprint_id=sprint_id, user_id=user_id, simulated=True)
        pbis = list(self._pbis.values())
        bugs = list(self._bugs.values())
        if sprint_id:
            pbis = [p for p in pbis if p.sprint_id == sprint_id]
            bugs = [b for b in bugs if b.sprint_id == sprint_id]
        if user_id:
            pbis = [p for p in pbis if p.assigned_user_id == user_id]
            bugs = [b for b in bugs if b.assigned_user_id == user_id]
        # Callers mutate what they load; hand out copies.
        return copy.deepcopy(pbis), copy.deepcopy(bugs)

    def update_pbi_state(self, pbi_id: str, state: PbiState) -> None:
        if pbi_id not in self._pbis:
            raise EntityNotFoundError()
        logger.info("Updating PBI state", entity_id=pbi_id, state=state.value, simulated=True)
        self._pbis[pbi_id] = replace(self._pbis[pbi_id], state=state)

    def update_bug_status(self, bug_id: str, status: BugStatus) -> None:
        if bug_id not in self._bugs:
            raise EntityNotFoundError()
        logger.info("Updating bug status", entity_id=bug_id, status=status.value, simulated=True)
        self._bugs[bug_id] = replace(self._bugs[bug_id], status=status)

    def get_dashboard(self, sprint_id: str | None = None, user_id: str | None = None) -> Dashboard:
        pbis, bugs = self.load_work_items(sprint_id=sprint_id, user_id=user_id)
        return Dashboard(product_backlog_items=pbis, bugs=bugs, simulated=True)


def create_data_source(config: Config, client: GatewayClient | None = None) -> DataSource:
    """Build the data source selected by the ``data_source`` configuration key.

    The choice is made once; a live source never falls back to simulated data.
    """
    source_type = config.get("data_source", LIVE)

    if source_type == SIMULATED:
        logger.info("Using simulated data source")
        return SimulatedDataSource()
    elif source_type == LIVE:
        if client is None:
            client = GatewayClient(
                base_url=config.gateway_url(),
                timeout=float(config.get("gateway.timeout") or DEFAULT_TIMEOUT),
            )
        logger.info("Using live data source", base_url=client.base_url)
        return LiveDataSource.from_client(client)
    else:
        raise ValueError(f"Unknown data source: {source_type}. Use '{LIVE}' or '{SIMULATED}'")
