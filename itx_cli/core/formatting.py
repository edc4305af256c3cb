"""표시용 파생 값

- 다국어 이름, 멤버 표시 이름, 역할 라벨
- 통화 상담원/연락처, 통화 시간
- 활동 타입 라벨, 방향 화살표, 타임스탬프 해석
"""
import math
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from itx_cli.core.models import (
    Activity,
    ActivityType,
    Direction,
    LocalizedName,
    Member,
    NamedRef,
    PersonName,
    Role,
    Timestamp,
)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_DATETIME = TypeAdapter(datetime)

ACTIVITY_TYPE_LABELS = {
    ActivityType.CHAT: "Chat",
    ActivityType.CALL: "Call",
    ActivityType.NOTE: "Note",
    ActivityType.EMAIL: "Email",
    ActivityType.FB_CHAT: "FB Chat",
    ActivityType.WECHAT: "WeChat",
    ActivityType.SMS: "SMS",
    ActivityType.SCREEN_SHARE: "Screen Share",
    ActivityType.IG_CHAT: "IG Chat",
    ActivityType.WHATSAPP: "WhatsApp",
}

ROLE_LABELS = {
    Role.ASSIGNED_USER: "Assigned",
    Role.CASE_FOLLOWER: "Follower",
    Role.CONTACT_PERSON: "Contact",
}


def parse_timestamp(value: Optional[Timestamp]) -> Optional[datetime]:
    """
    API 타임스탬프 해석

    문자열은 pydantic datetime 검증으로 해석한다
    (Z / ±HH:MM / ±HHMM 오프셋, 자릿수가 다른 소수 초).

    Args:
        value: ISO-8601 문자열 또는 epoch 밀리초

    Returns:
        timezone-aware datetime, 해석 불가 시 None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    text = value.strip()
    if not text:
        return None
    try:
        parsed = _DATETIME.validate_python(text)
    except ValidationError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_key(value: Optional[Timestamp]) -> datetime:
    """정렬 키 (없거나 해석 불가하면 epoch)"""
    return parse_timestamp(value) or EPOCH


def format_local(value: Optional[Timestamp]) -> str:
    """로컬 시간대 날짜/시간 문자열"""
    parsed = parse_timestamp(value)
    return parsed.astimezone().strftime("%Y-%m-%d %H:%M:%S") if parsed else ""


def format_local_date(value: Optional[Timestamp]) -> str:
    parsed = parse_timestamp(value)
    return parsed.astimezone().strftime("%Y-%m-%d") if parsed else ""


def format_iso(value: Optional[Timestamp]) -> str:
    """UTC ISO-8601 (밀리초, Z 접미사)"""
    parsed = parse_timestamp(value)
    if not parsed:
        return ""
    return parsed.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def translate_name(name: Optional[LocalizedName]) -> str:
    """영어 번역 우선, 없으면 defaultText"""
    if not name:
        return ""
    translations: dict[str, Any] = name.translations or {}
    english = translations.get("en")
    if isinstance(english, dict) and english.get("translatedText") is not None:
        return str(english["translatedText"])
    return name.default_text or ""


def ref_name(ref: Optional[NamedRef]) -> str:
    return translate_name(ref.name) if ref else ""


def person_name(person: Optional[PersonName]) -> str:
    if not person:
        return ""
    return " ".join(part for part in (person.first_name, person.last_name) if part)


def member_name(member: Member) -> str:
    """사용자 → 외부 엔티티 → name 필드 순으로 표시 이름 결정"""
    user_name = person_name(member.user)
    if user_name:
        return user_name
    entity = member.entity_extension.entity if member.entity_extension else None
    if entity and (entity.name1 or entity.name2):
        return " ".join(part for part in (entity.name1, entity.name2) if part)
    return member.name if member.name is not None else "(unknown)"


def role_label(role: Optional[int]) -> str:
    try:
        return ROLE_LABELS[Role(role)]
    except (ValueError, KeyError):
        return f"Role {role}"


def activity_type_label(type_id: Optional[int]) -> str:
    try:
        return ACTIVITY_TYPE_LABELS[ActivityType(type_id)]
    except (ValueError, KeyError):
        return "Activity"


def direction_arrow(direction: Optional[int]) -> str:
    if direction == Direction.OUTBOUND:
        return "->"
    if direction == Direction.INBOUND:
        return "<-"
    return ""


def call_agent(activity: Activity) -> Optional[Member]:
    """통화 상담원: 내부(anon=false) + 역할 0"""
    return next(
        (m for m in activity.members if not m.anon and m.role == Role.AGENT),
        None,
    )


def activity_contact(activity: Activity) -> Optional[Member]:
    """연락처: 외부(anon=true) 참여자"""
    return next((m for m in activity.members if m.anon), None)


def call_duration_seconds(activity: Activity) -> Optional[int]:
    """종료-시작 차이 (초, 반올림). 시각이 없으면 None"""
    if not activity.start_ts or not activity.end_ts:
        return None
    start = parse_timestamp(activity.start_ts)
    end = parse_timestamp(activity.end_ts)
    if start is None or end is None:
        return None
    return math.floor((end - start).total_seconds() + 0.5)


def format_duration(seconds: int) -> str:
    """`Xm Ys` (분이 있을 때) 또는 `Ys`

    음수(종료가 시작보다 이름)는 분 없이 부호 있는 초로 표시한다.
    """
    minutes = seconds // 60
    # 나머지 부호는 seconds를 따름 (-5 → -5s)
    secs = int(math.fmod(seconds, 60))
    return f"{minutes}m {secs}s" if minutes > 0 else f"{secs}s"
