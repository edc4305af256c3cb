"""티켓(Case) 커맨드

- list / view / create / update
- activities: 연결된 커뮤니케이션 이력 + 코멘트
- comment: 코멘트 등록 (멘션 지원)
"""
from typing import Optional

import click

from itx_cli.client import ItxClient
from itx_cli.commands.common import AliasedGroup, exits_on_error, fail, require_client, run_async
from itx_cli.core.errors import ItxError, TicketNotFoundError
from itx_cli.core.formatting import (
    activity_contact,
    activity_type_label,
    call_agent,
    call_duration_seconds,
    direction_arrow,
    format_duration,
    format_iso,
    format_local,
    format_local_date,
    member_name,
    person_name,
    ref_name,
    role_label,
)
from itx_cli.core.models import Activity, Comment, Role, TicketActivities, User
from itx_cli.output import Column, print_info, print_json, print_line, print_success, print_table
from itx_cli.services.activities import ActivityAggregator
from itx_cli.store import resolve_alias
from itx_cli.utils.html import html_to_text

# 멘션 구분자 (zero-width no-break space)
MENTION_MARK = "\ufeff"


@click.group("ticket", cls=AliasedGroup)
def ticket_group() -> None:
    """Manage tickets (cases)"""


@ticket_group.command("list", aliases=["ls"])
@click.option("-l", "--limit", default=25, show_default=True, help="Maximum number of tickets to return")
@click.option("-o", "--offset", default=0, show_default=True, help="Offset for pagination")
@click.option("--json", "as_json", is_flag=True, help="Output raw JSON")
@exits_on_error
def ticket_list(limit: int, offset: int, as_json: bool) -> None:
    """List tickets (itx ticket list --limit 10)"""
    client = require_client()
    tickets = run_async(client.list_tickets(limit=limit, offset=offset))

    if as_json:
        print_json([t.to_payload() for t in tickets])
        return

    print_info(f"Showing {len(tickets)} tickets")
    print_table(
        [
            {
                "id": t.seq_no,
                "subject": t.description or "",
                "status": ref_name(t.ems_status),
                "created": format_local_date(t.creation_ts),
            }
            for t in tickets
        ],
        [
            Column("id", "ID", 10),
            Column("subject", "Subject", 40),
            Column("status", "Status", 15),
            Column("created", "Created", 12),
        ],
    )


@ticket_group.command("view", aliases=["get"])
@click.argument("seq_no", metavar="ID", type=int)
@click.option("--json", "as_json", is_flag=True, help="Output raw JSON")
@exits_on_error
def ticket_view(seq_no: int, as_json: bool) -> None:
    """View ticket details (itx ticket view 43146)"""
    client = require_client()
    ticket = run_async(client.fetch_ticket(seq_no, include_members=True))
    if ticket is None:
        raise TicketNotFoundError(seq_no)

    if as_json:
        print_json(ticket.to_payload())
        return

    print_line(f"ID:        #{ticket.seq_no}")
    print_line(f"Subject:   {ticket.description or ''}")
    print_line(f"Status:    {ref_name(ticket.ems_status)}")
    print_line(f"Priority:  {ref_name(ticket.priority)}")
    print_line(f"Category:  {ref_name(ticket.category)}")
    print_line(f"Created:   {format_iso(ticket.creation_ts)}")
    print_line(f"Modified:  {format_iso(ticket.update_ts)}")

    if ticket.members:
        print_line()
        print_line("Members:")
        for m in ticket.members:
            external = " (external)" if m.anon else ""
            print_line(f"  - {member_name(m)} [{role_label(m.role)}]{external}")


@ticket_group.command("create")
@click.argument("subject_arg", metavar="[SUBJECT]", required=False)
@click.option("-s", "--subject", help="Ticket subject (alternative to positional)")
@click.option("--json", "as_json", is_flag=True, help="Output raw JSON")
@exits_on_error
def ticket_create(subject_arg: Optional[str], subject: Optional[str], as_json: bool) -> None:
    """Create a new ticket (itx ticket create 'Bug in login')"""
    subject = subject_arg or subject
    if not subject:
        fail("Subject is required. Provide as argument or with -s/--subject.")

    client = require_client()
    ticket = run_async(client.create_ticket(subject))

    if as_json:
        print_json(ticket.to_payload())
        return

    print_success(f"Ticket created: #{ticket.seq_no}")


@ticket_group.command("update")
@click.argument("seq_no", metavar="ID", type=int)
@click.option("-s", "--subject", help="New subject")
@click.option("--status", help="New status")
@click.option("--category", help="New category")
@click.option("--assignee", help="Assign to user (email or alias)")
@click.option("--json", "as_json", is_flag=True, help="Output raw JSON")
@exits_on_error
def ticket_update(
    seq_no: int,
    subject: Optional[str],
    status: Optional[str],
    category: Optional[str],
    assignee: Optional[str],
    as_json: bool,
) -> None:
    """Update a ticket (itx ticket update 43146 --status resolved)"""
    fields: dict = {}
    if subject:
        fields["description"] = subject
    if status:
        fields["status"] = status
    if category:
        fields["category"] = category
    if assignee:
        fields["members"] = [
            {"role": int(Role.ASSIGNED_USER), "name": resolve_alias(assignee)}
        ]

    if not fields:
        fail("Provide at least one field to update (--subject, --status, --category, --assignee).")

    client = require_client()
    result = run_async(client.update_ticket(seq_no, fields))

    if as_json:
        print_json(result)
        return

    print_success(f"Ticket #{seq_no} updated.")


@ticket_group.command("activities", aliases=["act"])
@click.argument("seq_no", metavar="ID", type=int)
@click.option("--json", "as_json", is_flag=True, help="Output raw JSON")
@exits_on_error
def ticket_activities(seq_no: int, as_json: bool) -> None:
    """List activities on a ticket (itx ticket activities 43146)"""
    client = require_client()
    result = run_async(ActivityAggregator(client).aggregate(seq_no))

    if as_json:
        print_json(result.to_payload())
        return

    render_activities(result)


def render_activities(result: TicketActivities) -> None:
    """활동 + 코멘트 보고서"""
    if not result.activities and not result.comments:
        print_info("No activities or comments.")
        return

    if result.activities:
        print_info(f"{len(result.activities)} activities:")
        for activity in result.activities:
            _render_activity(activity)

    if result.comments:
        print_info(f"{len(result.comments)} comments:")
        for comment in result.comments:
            _render_comment(comment)


def _render_activity(act: Activity) -> None:
    label = activity_type_label(act.type_id)
    arrow = direction_arrow(act.direction)
    print_line(f"--- [{label} {arrow}] {format_local(act.creation_ts)} ---")

    if act.is_email:
        sender = person_name(act.sender)
        print_line(f"From:    {act.from_mail or ''}{f' ({sender})' if sender else ''}")
        print_line(f"To:      {act.to_mail or ''}")
        print_line(f"Subject: {act.subject or ''}")
        if act.email_body:
            print_line()
            print_line(act.email_body)
    elif act.is_call:
        agent = call_agent(act)
        contact = activity_contact(act)
        print_line(f"From:     {act.src_number or ''}{f' ({member_name(agent)})' if agent else ''}")
        print_line(f"To:       {act.dst_number or ''}{f' ({member_name(contact)})' if contact else ''}")

        duration = call_duration_seconds(act)
        if duration is not None:
            print_line(f"Duration: {format_duration(duration)}")
        if act.recordings:
            print_line(f"Recordings: {len(act.recordings)}")
    else:
        contact = activity_contact(act)
        if contact:
            print_line(f"Contact: {member_name(contact)}")
        if act.description:
            print_line(f"Note: {act.description}")

    if act.core_file_references:
        names = ", ".join(f.name or f"file#{f.cfre_id}" for f in act.core_file_references)
        print_line(f"Attachments: {names}")

    print_line()


def _render_comment(comment: Comment) -> None:
    author = person_name(comment.creator) if comment.creator else "(unknown)"
    print_line(f"  [{format_local(comment.creation_ts)}] {author}:")
    print_line(f"    {html_to_text(comment.text or '')}")
    print_line()


@ticket_group.command("comment")
@click.argument("seq_no", metavar="ID", type=int)
@click.argument("message_arg", metavar="[MESSAGE]", required=False)
@click.option("-m", "--message", help="Comment text (alternative to positional)")
@click.option("--mention", "mentions", multiple=True, help="Mention users by alias or email (repeatable)")
@click.option("--json", "as_json", is_flag=True, help="Output raw JSON")
@exits_on_error
def ticket_comment(
    seq_no: int,
    message_arg: Optional[str],
    message: Optional[str],
    mentions: tuple[str, ...],
    as_json: bool,
) -> None:
    """Add a comment to a ticket (itx ticket comment 43146 'Looking into it')"""
    message = message_arg or message
    if not message:
        fail("Message is required. Provide as argument or with -m/--message.")

    client = require_client()
    response = run_async(_add_comment(client, seq_no, message, list(mentions)))

    if as_json:
        print_json(response)
        return

    print_success(f"Comment added to ticket #{seq_no}.")


async def _add_comment(client: ItxClient, seq_no: int, message: str, mentions: list[str]):
    ticket = await client.fetch_ticket(seq_no)
    if ticket is None:
        raise TicketNotFoundError(seq_no)

    prefix = ""
    tags: list[dict] = []

    if mentions:
        users = await client.search_users()
        for mention in mentions:
            user = find_user(users, resolve_alias(mention))
            if not user:
                raise ItxError(f"User not found for: {mention}")

            display_name = f"@{user.first_name} {user.last_name}"
            # "<p>" 3자 + 앞선 멘션 + 선행 구분자 1자
            tags.append({
                "startIndex": 3 + len(prefix) + 1,
                "length": len(display_name),
                "type": "user",
                "data": str(user.user_id),
            })
            prefix += f"{MENTION_MARK}{display_name}{MENTION_MARK} "

    text = f"<p>{prefix}{message}</p>"
    return await client.add_activity_text(ticket.eact_id, text, tags or None)


def find_user(users: list[User], email_or_name: str) -> Optional[User]:
    """이메일 일치 우선, 그다음 전체/이름/성 일치 (대소문자 무시)"""
    lower = email_or_name.lower()
    for u in users:
        if u.email and u.email.lower() == lower:
            return u

    for u in users:
        first = (u.first_name or "").lower()
        last = (u.last_name or "").lower()
        if f"{first} {last}" == lower or (first and first == lower) or (last and last == lower):
            return u
    return None
