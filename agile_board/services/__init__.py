"""Remote service clients, one per gateway resource."""

from agile_board.services.bug import BugService
from agile_board.services.dashboard import DashboardService
from agile_board.services.epic import EpicService
from agile_board.services.feature import FeatureService
from agile_board.services.organization import ProjectService, TeamService, UserService
from agile_board.services.pbi import PbiService
from agile_board.services.sprint import SprintService

__all__ = [
    "BugService",
    "DashboardService",
    "EpicService",
    "FeatureService",
    "PbiService",
    "ProjectService",
    "SprintService",
    "TeamService",
    "UserService",
]
