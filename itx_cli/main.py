"""CLI 진입점 (itx)"""
import click

from itx_cli import __version__
from itx_cli.commands.alias import alias_group
from itx_cli.commands.common import AliasedGroup
from itx_cli.commands.config import config_group, login
from itx_cli.commands.ticket import ticket_group
from itx_cli.commands.user import user_group
from itx_cli.utils.logger import setup_logging


@click.group(cls=AliasedGroup)
@click.version_option(__version__, prog_name="itx")
@click.option("--debug", is_flag=True, help="Write request and failure logs to stderr")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """CLI for the ITX Portal API"""
    setup_logging("debug" if debug else None)
    ctx.ensure_object(dict)


# ===== 커맨드 등록 =====

cli.add_command(login)
cli.add_command(config_group)
cli.add_command(ticket_group)
cli.add_command(user_group)
cli.add_command(alias_group)

cli.add_alias("t", "ticket")
cli.add_alias("u", "user")
cli.add_alias("a", "alias")


if __name__ == "__main__":
    cli()
