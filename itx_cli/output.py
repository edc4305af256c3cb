"""터미널 출력 (rich)"""
import json
from dataclasses import dataclass
from typing import Any, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

console = Console(highlight=False, soft_wrap=True)
error_console = Console(stderr=True, highlight=False, soft_wrap=True)


@dataclass
class Column:
    """테이블 컬럼"""
    key: str
    label: str
    width: Optional[int] = None


def print_table(rows: list[dict[str, Any]], columns: list[Column]) -> None:
    """고정 폭 테이블 출력 (긴 값은 말줄임표)"""
    if not rows:
        console.print(Text("No results.", style="dim"))
        return

    table = Table(box=None, header_style="bold", show_edge=False, pad_edge=False)
    for col in columns:
        table.add_column(
            col.label,
            width=col.width,
            max_width=None if col.width else 50,
            no_wrap=True,
            overflow="ellipsis",
        )
    for row in rows:
        table.add_row(*(Text(_cell(row.get(col.key))) for col in columns))

    console.print(table)


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def print_json(data: Any) -> None:
    """들여쓰기된 JSON (색상 없음, 파이프 가능)"""
    console.print(
        Text(json.dumps(data, indent=2, ensure_ascii=False)),
        soft_wrap=True,
    )


def print_error(message: str) -> None:
    error_console.print(Text(f"Error: {message}", style="red"))


def print_success(message: str) -> None:
    console.print(Text(message, style="green"))


def print_info(message: str) -> None:
    console.print(Text(message, style="blue"))


def print_line(message: str = "") -> None:
    """서식 없는 본문 줄"""
    console.print(Text(message))
