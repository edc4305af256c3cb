"""로그인 및 설정 커맨드"""
from typing import Optional
from urllib.parse import parse_qs

import click

from itx_cli.commands.alias import alias_group
from itx_cli.commands.common import AliasedGroup, exits_on_error, fail, require_client, run_async
from itx_cli.config import get_settings
from itx_cli.output import print_info, print_json, print_line, print_success
from itx_cli.store import clear_config, get_config, get_config_path, get_store, set_config


def parse_api_key(text: str) -> Optional[dict[str, str]]:
    """
    ITX API 키 문자열 해석

    `?tokenv2=...&rcntrl=...&ccntrl=...` (앞의 ?는 선택)

    Returns:
        {"tokenv2", "rcntrl", "ccntrl"} 또는 None (tokenv2 없음)
    """
    query = text.strip()
    if query.startswith("?"):
        query = query[1:]
    params = parse_qs(query, keep_blank_values=True)

    tokenv2 = (params.get("tokenv2") or [""])[0]
    if not tokenv2:
        return None
    return {
        "tokenv2": tokenv2,
        "rcntrl": (params.get("rcntrl") or [""])[0],
        "ccntrl": (params.get("ccntrl") or [""])[0],
    }


def mask(value: str, reveal: bool = False) -> str:
    """토큰 마스킹 (앞 8자 ... 뒤 4자)"""
    if reveal or not value:
        return value or "(not set)"
    return f"{value[:8]}...{value[-4:]}"


@click.command("login")
@exits_on_error
def login() -> None:
    """Log in with your ITX API key"""
    api_key = click.prompt(
        "Paste API key (?tokenv2=...&rcntrl=...&ccntrl=...)",
        default="",
        show_default=False,
    )
    parsed = parse_api_key(api_key)
    if not parsed:
        fail("Invalid API key. Expected format: ?tokenv2=...&rcntrl=...&ccntrl=...")

    set_config(sso_endpoint=get_settings().default_sso_endpoint, **parsed)
    print_success("Logged in.")


@click.group("config", cls=AliasedGroup)
def config_group() -> None:
    """Manage ITX CLI configuration"""


@config_group.command("set")
@click.option("--sso-endpoint", required=True, help="SSO cluster endpoint (e.g. https://sso.itxuc.com)")
@click.option("--tokenv2", required=True, help="Authentication token (tokenv2)")
@click.option("--rcntrl", default="", help="rcntrl header value")
@click.option("--ccntrl", default="", help="ccntrl header value")
@exits_on_error
def config_set(sso_endpoint: str, tokenv2: str, rcntrl: str, ccntrl: str) -> None:
    """Configure API credentials"""
    set_config(
        sso_endpoint=sso_endpoint,
        tokenv2=tokenv2,
        rcntrl=rcntrl,
        ccntrl=ccntrl,
    )
    print_success("Configuration saved.")
    print_info(f"Config file: {get_config_path()}")


@config_group.command("show")
@click.option("--reveal", is_flag=True, help="Show full token values")
@exits_on_error
def config_show(reveal: bool) -> None:
    """Show current configuration"""
    c = get_config()

    print_line(f"SSO Endpoint:    {c.sso_endpoint or '(not set)'}")
    print_line(f"Active Endpoint: {c.active_endpoint or '(not resolved)'}")
    print_line(f"tokenv2:         {mask(c.tokenv2, reveal)}")
    print_line(f"rcntrl:          {mask(c.rcntrl, reveal)}")
    print_line(f"ccntrl:          {mask(c.ccntrl, reveal)}")
    print_line(f"Encrypted:       {'yes' if get_store().is_encrypted() else 'no'}")
    print_line()
    print_line(f"Config file: {get_config_path()}")


@config_group.command("clear")
def config_clear() -> None:
    """Remove all stored configuration"""
    clear_config()
    print_success("Configuration cleared.")


@config_group.command("test")
@exits_on_error
def config_test() -> None:
    """Test connectivity by resolving the active endpoint and fetching the active user"""
    client = require_client()

    async def _test() -> None:
        print_info("Resolving active endpoint...")
        endpoint = await client.resolve_endpoint()
        print_success(f"Active endpoint: {endpoint}")

        print_info("Fetching active user...")
        user = await client.get_active_user()
        print_success("Connection successful. Active user:")
        print_json(user)

    run_async(_test())


config_group.add_command(alias_group)
