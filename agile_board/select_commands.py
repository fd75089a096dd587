"""Project and team selection commands for agile board CLI."""

from cyclopts import App

from agile_board.errors import ScopeNotSelectedError, ServiceError

select_app = App(name="select", help="Select the project and team that commands work on")


@select_app.command
def projects() -> None:
    """List the projects that can be selected."""
    from agile_board.cli import get_client, get_notifier
    from agile_board.services import ProjectService

    try:
        items = [p for p in ProjectService(get_client()).get_all() if not p.is_deleted]
    except ServiceError as e:
        get_notifier().error(e.message)
        return

    print(f"Found {len(items)} project(s):\n")
    for project in items:
        print(f"{project.id}: {project.name}")


@select_app.command
def teams() -> None:
    """List the teams of the selected project."""
    from agile_board.cli import get_client, get_notifier, get_session
    from agile_board.services import TeamService

    try:
        project_id = get_session().require_project()
    except ScopeNotSelectedError as e:
        print(e)
        return

    try:
        items = [t for t in TeamService(get_client()).get_by_project(project_id) if not t.is_deleted]
    except ServiceError as e:
        get_notifier().error(e.message)
        return

    print(f"Found {len(items)} team(s) in project {project_id}:\n")
    for team in items:
        print(f"{team.id}: {team.name}")


@select_app.command
def project(project_id: str) -> None:
    """Select a project."""
    from agile_board.cli import get_session

    get_session().select_project(project_id)
    print(f"Selected project {project_id}")


@select_app.command
def team(team_id: str, name: str | None = None) -> None:
    """Select a team.

    Args:
        team_id: Team ID
        name: Team name; fetched from the gateway together with its project when omitted
    """
    from agile_board.cli import get_client, get_notifier, get_session
    from agile_board.services import TeamService

    session = get_session()
    project_id = session.project_id
    if name is None:
        try:
            selected = TeamService(get_client()).get_by_id(team_id)
        except ServiceError as e:
            get_notifier().error(e.message)
            return
        name = selected.name
        project_id = selected.project_id or project_id

    session.select_team(team_id, name, project_id)
    print(f"Selected team {name or team_id}")


@select_app.command
def show() -> None:
    """Show the current selection."""
    from agile_board.cli import get_session

    session = get_session()
    print(f"Project: {session.project_id or '(none)'}")
    if session.team_id:
        print(f"Team: {session.team_name or session.team_id} ({session.team_id})")
    else:
        print("Team: (none)")


@select_app.command
def clear() -> None:
    """Clear the current selection."""
    from agile_board.cli import get_session

    get_session().clear()
    print("Selection cleared")
