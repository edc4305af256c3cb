"""CLI 진단 로그 (structlog → stderr)

stdout은 명령 출력(--json 포함) 전용이다. 사용자에게 보일 오류는 커맨드가
`Error: ...` 한 줄로 출력하므로, 로그는 기본 warning 수준에서 조용하고
`itx --debug` 또는 ITX_LOG_LEVEL=debug 일 때만 요청/실패 내역이 보인다.
"""
import logging
import sys
from typing import Optional

import structlog

from itx_cli.config import get_settings


def _renderer(level_name: str):
    # 사람이 보는 디버그 출력, 그 외에는 한 줄 JSON
    if level_name == "debug":
        return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    return structlog.processors.JSONRenderer()


def setup_logging(level: Optional[str] = None) -> None:
    """
    명령 실행 단위 로깅 설정

    Args:
        level: 로그 레벨 이름 (없으면 Settings.log_level)
    """
    level_name = (level or get_settings().log_level).lower()
    log_level = getattr(logging, level_name.upper(), logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            _renderer(level_name),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # 현재 stderr에 바인딩. 같은 프로세스에서 재설정될 수 있어 캐시하지 않음
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    # httpx 등 서드파티 로거
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)


def get_logger(name: str = __name__) -> structlog.BoundLogger:
    return structlog.get_logger(name)
