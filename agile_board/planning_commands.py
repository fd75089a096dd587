"""Sprint, project and team commands for agile board CLI."""

from datetime import datetime, timedelta

from cyclopts import App

from agile_board.errors import ScopeNotSelectedError, ServiceError
from agile_board.models import Project, Sprint, SprintState, Team
from agile_board.services import ProjectService, SprintService, TeamService

sprint_app = App(name="sprint", help="List and create sprints of the selected team")
project_app = App(name="project", help="Create projects")
team_app = App(name="team", help="Create teams in the selected project")

DEFAULT_SPRINT_DAYS = 14


def require_live() -> bool:
    """Return False, after saying so, when the simulated data source is configured."""
    from agile_board.cli import get_data_source

    if get_data_source().simulated:
        print("This command needs a live gateway. Switch with:\n  agile-board config set data_source live")
        return False
    return True


def parse_date(value: str) -> datetime:
    """Parse an ISO date such as 2024-05-01."""
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValueError(f"Invalid date: '{value}'. Use YYYY-MM-DD") from None


@sprint_app.command(name="list")
def list_sprints() -> None:
    """List the sprints of the selected team."""
    from agile_board.cli import get_client, get_notifier, require_team

    team_id = require_team()
    if team_id is None or not require_live():
        return

    try:
        team_sprints = SprintService(get_client()).get_by_team(team_id)
    except ServiceError as e:
        get_notifier().error(e.message)
        return

    print(f"Found {len(team_sprints)} sprint(s):\n")
    for sprint in team_sprints:
        dates = ""
        if sprint.start_date and sprint.end_date:
            dates = f" {sprint.start_date.date()} - {sprint.end_date.date()}"
        print(f"{sprint.id}: {sprint.name} [{sprint.state.value.lower()}]{dates}")
        if sprint.goal:
            print(f"  Goal: {sprint.goal}")


@sprint_app.command(name="create")
def create_sprint(
    name: str,
    goal: str = "",
    start: str | None = None,
    end: str | None = None,
    state: str = "PLANNED",
) -> None:
    """Create a sprint for the selected team.

    Args:
        name: Sprint name
        goal: Sprint goal
        start: Start date (YYYY-MM-DD), today when omitted
        end: End date (YYYY-MM-DD), two weeks after the start when omitted
        state: PLANNED, ACTIVE, COMPLETED or CANCELLED
    """
    from agile_board.cli import get_client, get_notifier, get_session

    try:
        session = get_session()
        team_id = session.require_team()
        project_id = session.require_project()
    except ScopeNotSelectedError as e:
        print(e)
        return
    if not require_live():
        return

    if not name.strip():
        print("Sprint name is required")
        return
    try:
        start_date = parse_date(start) if start else datetime.combine(datetime.now().date(), datetime.min.time())
        end_date = parse_date(end) if end else start_date + timedelta(days=DEFAULT_SPRINT_DAYS)
        sprint_state = SprintState.parse(state)
    except ValueError as e:
        print(e)
        return
    if start_date > end_date:
        print("Start date cannot be after end date")
        return

    sprint = Sprint(
        id="",
        name=name.strip(),
        goal=goal,
        state=sprint_state,
        start_date=start_date,
        end_date=end_date,
        project_id=project_id,
        team_id=team_id,
    )
    notifier = get_notifier()
    try:
        created = SprintService(get_client()).create(sprint)
    except ServiceError as e:
        notifier.error(f"Failed to create sprint: {e.message}")
        return
    notifier.success(f"Sprint created{f': {created.id}' if created else ''}")


@project_app.command(name="create")
def create_project(name: str, description: str = "", select: bool = True) -> None:
    """Create a project.

    Args:
        name: Project name
        description: Project description
        select: Select the new project when the gateway returns its ID
    """
    from agile_board.cli import get_client, get_notifier, get_session

    if not require_live():
        return
    if not name.strip():
        print("Project name is required")
        return

    notifier = get_notifier()
    try:
        created = ProjectService(get_client()).create(Project(id="", name=name.strip(), description=description))
    except ServiceError as e:
        notifier.error(f"Failed to create project: {e.message}")
        return

    notifier.success(f"Project created{f': {created.id}' if created else ''}")
    if created and select:
        get_session().select_project(created.id)
        print(f"Selected project {created.id}")


@team_app.command(name="create")
def create_team(name: str, description: str = "", select: bool = True) -> None:
    """Create a team in the selected project.

    Args:
        name: Team name
        description: Team description
        select: Select the new team when the gateway returns its ID
    """
    from agile_board.cli import get_client, get_notifier, get_session

    session = get_session()
    try:
        project_id = session.require_project()
    except ScopeNotSelectedError as e:
        print(e)
        return
    if not require_live():
        return
    if not name.strip():
        print("Team name is required")
        return

    notifier = get_notifier()
    team = Team(id="", name=name.strip(), description=description, project_id=project_id)
    try:
        created = TeamService(get_client()).create(team)
    except ServiceError as e:
        notifier.error(f"Failed to create team: {e.message}")
        return

    notifier.success(f"Team created{f': {created.id}' if created else ''}")
    if created and select:
        session.select_team(created.id, created.name, project_id)
        print(f"Selected team {created.name or created.id}")
