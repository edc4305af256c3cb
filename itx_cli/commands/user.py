"""사용자 커맨드"""
import click

from itx_cli.commands.common import AliasedGroup, exits_on_error, require_client, run_async
from itx_cli.core.formatting import person_name
from itx_cli.output import Column, print_info, print_json, print_table


@click.group("user", cls=AliasedGroup)
def user_group() -> None:
    """Manage users"""


@user_group.command("list", aliases=["ls"])
@click.option("--json", "as_json", is_flag=True, help="Output raw JSON")
@exits_on_error
def user_list(as_json: bool) -> None:
    """List all users"""
    client = require_client()
    users = run_async(client.search_users())

    if as_json:
        print_json([u.to_payload() for u in users])
        return

    print_info(f"{len(users)} users")
    print_table(
        [
            {
                "userId": u.user_id,
                "name": person_name(u),
                "email": u.email or "",
                "active": "Yes" if u.active else "No",
            }
            for u in users
        ],
        [
            Column("userId", "ID", 10),
            Column("name", "Name", 25),
            Column("email", "Email", 30),
            Column("active", "Active", 8),
        ],
    )
