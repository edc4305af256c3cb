"""커맨드 공통 유틸리티"""
import asyncio
import functools
import sys
from typing import Any, Callable, Coroutine, Iterable, Optional, TypeVar

import click

from itx_cli.client import ItxClient
from itx_cli.core.errors import ItxError
from itx_cli.output import print_error
from itx_cli.store import is_configured
from itx_cli.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

NOT_CONFIGURED = 'Not configured. Run "itx login" first.'


class AliasedGroup(click.Group):
    """짧은 별칭(ls, rm, t ...)을 지원하는 click 그룹"""

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.aliases: dict[str, str] = {}

    def add_alias(self, alias: str, name: str) -> None:
        self.aliases[alias] = name

    def command(self, *args: Any, aliases: Iterable[str] = (), **kwargs: Any) -> Callable:
        decorator = super().command(*args, **kwargs)

        def wrapper(f: Callable) -> click.Command:
            cmd = decorator(f)
            for alias in aliases:
                self.add_alias(alias, cmd.name)
            return cmd

        return wrapper

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        return super().get_command(ctx, self.aliases.get(cmd_name, cmd_name))

    def resolve_command(self, ctx: click.Context, args: list[str]):
        # 별칭 대신 정식 이름으로 보고
        _, cmd, rest = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, rest


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


def fail(message: str) -> None:
    """오류 출력 후 종료 코드 1"""
    print_error(message)
    sys.exit(1)


def require_client() -> ItxClient:
    """설정 확인 후 API 클라이언트 생성"""
    if not is_configured():
        fail(NOT_CONFIGURED)
    ctx = click.get_current_context()
    transport = (ctx.find_root().obj or {}).get("transport")
    return ItxClient(transport=transport)


def exits_on_error(f: Callable) -> Callable:
    """ItxError를 한 줄 오류 메시지 + 종료 코드 1로 변환"""

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except ItxError as e:
            logger.debug("Command failed", command=f.__name__, error=str(e))
            fail(str(e))

    return wrapper
