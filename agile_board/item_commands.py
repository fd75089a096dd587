"""PBI and bug commands for agile board CLI."""

from dataclasses import replace
from enum import Enum
from typing import TypeVar

from cyclopts import App

from agile_board.errors import ServiceError
from agile_board.models import Bug, BugStatus, PbiState, ProductBacklogItem

pbi_app = App(name="pbi", help="Manage product backlog items")
bug_app = App(name="bug", help="Manage bugs")

E = TypeVar("E", bound=Enum)


def parse_state(enum_type: type[E], value: str) -> E:
    """Parse a state name given on the command line.

    Raises:
        ValueError: If the name is not a member of enum_type
    """
    try:
        return enum_type(value)
    except ValueError:
        valid = [member.value for member in enum_type]
        raise ValueError(f"Unknown state: '{value}'. Valid states: {valid}") from None


def parse_tags(tags: str) -> frozenset[str]:
    """Parse a comma separated tag list."""
    return frozenset(tag.strip() for tag in tags.split(",") if tag.strip())


def _print_pbi(pbi: ProductBacklogItem) -> None:
    print(f"PBI: {pbi.id}")
    print(f"Description: {pbi.description}")
    if pbi.functional_description:
        print(f"Functional: {pbi.functional_description}")
    if pbi.technical_description:
        print(f"Technical: {pbi.technical_description}")
    print(f"State: {pbi.state.value if pbi.state else 'NEW'}")
    print(f"Priority: {pbi.priority}  Story points: {pbi.story_point}  Business value: {pbi.business_value}")
    if pbi.sprint_id:
        print(f"Sprint: {pbi.sprint_id}")
    if pbi.assigned_user_id:
        print(f"Assignee: {pbi.assigned_user_id}")
    if pbi.tag_ids:
        print(f"Tags: {', '.join(sorted(pbi.tag_ids))}")


def _print_bug(bug: Bug) -> None:
    print(f"Bug: {bug.id}")
    print(f"Description: {bug.description}")
    print(f"Status: {bug.status.value if bug.status else 'NEW'}")
    print(f"Priority: {bug.priority}  Story points: {bug.story_point}  Business value: {bug.business_value}")
    if bug.is_no_bug:
        print("Marked as not a bug")
    if bug.assigned_user_id:
        print(f"Assignee: {bug.assigned_user_id}")
    if bug.tag_ids:
        print(f"Tags: {', '.join(sorted(bug.tag_ids))}")


@pbi_app.command(name="list")
def list_pbis(user: str | None = None, feature: str | None = None, state: str | None = None) -> None:
    """List product backlog items.

    Args:
        user: Only PBIs assigned to this user
        feature: Only PBIs of this feature
        state: Only PBIs in this state (NEW, ACTIVE, RESOLVED, CLOSED)
    """
    from agile_board.cli import get_client, get_notifier
    from agile_board.services import PbiService

    try:
        pbi_state = parse_state(PbiState, state) if state else None
    except ValueError as e:
        print(e)
        return

    service = PbiService(get_client())
    try:
        if user:
            pbis = service.get_by_user(user)
        elif feature:
            pbis = service.get_by_feature(feature)
        elif pbi_state:
            pbis = service.get_by_state(pbi_state)
        else:
            pbis = service.get_all()
    except ServiceError as e:
        get_notifier().error(f"Failed to load PBIs: {e.message}")
        return

    pbis = [pbi for pbi in pbis if not pbi.is_deleted]
    print(f"Found {len(pbis)} PBI(s):\n")
    for pbi in sorted(pbis, key=lambda p: p.priority):
        state_name = pbi.state.value if pbi.state else "NEW"
        print(f"{pbi.id}: {pbi.description} [{state_name}, priority {pbi.priority}, {pbi.story_point} pt]")


@pbi_app.command
def show(pbi_id: str) -> None:
    """Show a product backlog item."""
    from agile_board.cli import get_client, get_notifier
    from agile_board.services import PbiService

    try:
        pbi = PbiService(get_client()).get_by_id(pbi_id)
    except ServiceError as e:
        get_notifier().error(e.message)
        return
    _print_pbi(pbi)


@pbi_app.command
def create(
    description: str,
    priority: int = 0,
    story_points: int = 0,
    business_value: int = 0,
    sprint: str | None = None,
    feature: str | None = None,
    assignee: str | None = None,
    tags: str = "",
) -> None:
    """Create a product backlog item in the NEW state."""
    from agile_board.backlog import Backlog
    from agile_board.cli import get_client, get_notifier
    from agile_board.events import EventBus
    from agile_board.services import PbiService

    backlog = Backlog(PbiService(get_client()), EventBus(), get_notifier())
    pbi = ProductBacklogItem(
        id="",
        description=description,
        priority=priority,
        story_point=story_points,
        business_value=business_value,
        sprint_id=sprint,
        feature_id=feature,
        assigned_user_id=assignee,
        tag_ids=parse_tags(tags),
    )
    try:
        backlog.create(pbi)
    except ServiceError:
        return
    finally:
        backlog.close()


@pbi_app.command
def update(
    pbi_id: str,
    description: str | None = None,
    priority: int | None = None,
    story_points: int | None = None,
    state: str | None = None,
    tags: str | None = None,
) -> None:
    """Update fields of a product backlog item.

    A full update can set any state, including CLOSED.
    """
    from agile_board.backlog import Backlog
    from agile_board.cli import get_client, get_notifier
    from agile_board.events import EventBus
    from agile_board.services import PbiService

    changes: dict = {}
    if state is not None:
        try:
            changes["state"] = parse_state(PbiState, state)
        except ValueError as e:
            print(e)
            return

    service = PbiService(get_client())
    notifier = get_notifier()
    try:
        pbi = service.get_by_id(pbi_id)
    except ServiceError as e:
        notifier.error(e.message)
        return

    if description is not None:
        changes["description"] = description
    if priority is not None:
        changes["priority"] = priority
    if story_points is not None:
        changes["story_point"] = story_points
    if tags is not None:
        changes["tag_ids"] = parse_tags(tags)

    backlog = Backlog(service, EventBus(), notifier)
    try:
        backlog.update(replace(pbi, **changes))
    except ServiceError:
        return
    finally:
        backlog.close()


@pbi_app.command
def delete(*pbi_ids: str) -> None:
    """Delete one or more product backlog items."""
    from agile_board.cli import get_client, get_notifier
    from agile_board.services import PbiService

    service = PbiService(get_client())
    notifier = get_notifier()
    deleted = 0
    for pbi_id in pbi_ids:
        try:
            service.delete(pbi_id)
            deleted += 1
        except ServiceError as e:
            notifier.error(f"Failed to delete PBI {pbi_id}: {e.message}")
    print(f"Deleted {deleted} PBI(s)")


@bug_app.command(name="list")
def list_bugs(user: str | None = None, feature: str | None = None) -> None:
    """List bugs.

    Args:
        user: Only bugs assigned to this user
        feature: Only bugs of this feature
    """
    from agile_board.cli import get_client, get_notifier
    from agile_board.services import BugService

    service = BugService(get_client())
    try:
        if user:
            bugs = service.get_by_user(user)
        elif feature:
            bugs = service.get_by_feature(feature)
        else:
            bugs = service.get_all()
    except ServiceError as e:
        get_notifier().error(f"Failed to load bugs: {e.message}")
        return

    bugs = [bug for bug in bugs if not bug.is_deleted]
    print(f"Found {len(bugs)} bug(s):\n")
    for bug in sorted(bugs, key=lambda b: b.priority):
        status = bug.status.value if bug.status else "NEW"
        print(f"{bug.id}: {bug.description} [{status}, priority {bug.priority}]")


@bug_app.command(name="show")
def show_bug(bug_id: str) -> None:
    """Show a bug."""
    from agile_board.cli import get_client, get_notifier
    from agile_board.services import BugService

    try:
        bug = BugService(get_client()).get_by_id(bug_id)
    except ServiceError as e:
        get_notifier().error(e.message)
        return
    _print_bug(bug)


@bug_app.command(name="create")
def create_bug(
    description: str,
    priority: int = 0,
    story_points: int = 0,
    sprint: str | None = None,
    feature: str | None = None,
    assignee: str | None = None,
    tags: str = "",
) -> None:
    """Report a bug in the NEW status."""
    from agile_board.cli import get_client, get_notifier
    from agile_board.services import BugService

    notifier = get_notifier()
    bug = Bug(
        id="",
        description=description,
        priority=priority,
        story_point=story_points,
        status=BugStatus.NEW,
        sprint_id=sprint,
        feature_id=feature,
        assigned_user_id=assignee,
        tag_ids=parse_tags(tags),
    )
    try:
        created = BugService(get_client()).create(bug)
    except ServiceError as e:
        notifier.error(f"Failed to create bug: {e.message}")
        return
    notifier.success(f"Bug created{f': {created.id}' if created else ''}")


@bug_app.command(name="update")
def update_bug(
    bug_id: str,
    description: str | None = None,
    priority: int | None = None,
    story_points: int | None = None,
    status: str | None = None,
    tags: str | None = None,
    no_bug: bool | None = None,
) -> None:
    """Update fields of a bug.

    Args:
        bug_id: Bug ID
        description: New description
        priority: New priority
        story_points: New story point estimate
        status: New status (NEW, ACTIVE, RESOLVED, CLOSED)
        tags: Comma separated tag IDs, replacing the current tags
        no_bug: Mark the report as not a bug
    """
    from agile_board.cli import get_client, get_notifier
    from agile_board.services import BugService

    changes: dict = {}
    if status is not None:
        try:
            changes["status"] = parse_state(BugStatus, status)
        except ValueError as e:
            print(e)
            return

    service = BugService(get_client())
    notifier = get_notifier()
    try:
        bug = service.get_by_id(bug_id)
    except ServiceError as e:
        notifier.error(e.message)
        return

    if description is not None:
        changes["description"] = description
    if priority is not None:
        changes["priority"] = priority
    if story_points is not None:
        changes["story_point"] = story_points
    if tags is not None:
        changes["tag_ids"] = parse_tags(tags)
    if no_bug is not None:
        changes["is_no_bug"] = no_bug

    try:
        service.update(replace(bug, **changes))
    except ServiceError as e:
        notifier.error(f"Failed to update bug: {e.message}")
        return
    notifier.success("Bug updated")


@bug_app.command(name="delete")
def delete_bugs(*bug_ids: str) -> None:
    """Delete one or more bugs."""
    from agile_board.cli import get_client, get_notifier
    from agile_board.services import BugService

    service = BugService(get_client())
    notifier = get_notifier()
    deleted = 0
    for bug_id in bug_ids:
        try:
            service.delete(bug_id)
            deleted += 1
        except ServiceError as e:
            notifier.error(f"Failed to delete bug {bug_id}: {e.message}")
    print(f"Deleted {deleted} bug(s)")
