"""사용자 별칭 커맨드 (dave → dave@company.com)"""
import click

from itx_cli.commands.common import AliasedGroup
from itx_cli.output import print_error, print_info, print_line, print_success
from itx_cli.store import get_aliases, remove_alias, set_alias


@click.group("alias", cls=AliasedGroup)
def alias_group() -> None:
    """Manage user aliases (e.g. dave → dave@company.com)"""


@alias_group.command("set")
@click.argument("name")
@click.argument("value")
def alias_set(name: str, value: str) -> None:
    """Create or update an alias"""
    set_alias(name, value)
    print_success(f"Alias set: {name} → {value}")


@alias_group.command("list", aliases=["ls"])
def alias_list() -> None:
    """List all aliases"""
    aliases = get_aliases()
    if not aliases:
        print_info("No aliases configured.")
        return
    for name, value in aliases.items():
        print_line(f"  {name} → {value}")


@alias_group.command("remove", aliases=["rm"])
@click.argument("name")
def alias_remove(name: str) -> None:
    """Remove an alias"""
    if remove_alias(name):
        print_success(f"Alias removed: {name}")
    else:
        print_error(f"Alias not found: {name}")
