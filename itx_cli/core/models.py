"""ITX API 데이터 모델

API 페이로드(camelCase, 느슨한 JSON)를 게이트웨이 경계에서 검증한다.
알 수 없는 키는 보존하여 --json 출력이 원본 형태를 유지한다.
"""
from enum import IntEnum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# ISO-8601 문자열 또는 epoch 밀리초
Timestamp = Union[str, int, float]


class Role(IntEnum):
    """멤버 역할"""
    AGENT = 0
    ASSIGNED_USER = 1
    CASE_FOLLOWER = 2
    CONTACT_PERSON = 20


class LinkType(IntEnum):
    """활동 링크 타입"""
    CONVERSATION = 13
    CASE = 14


class ActivityType(IntEnum):
    """활동 타입 ID (eatyId)"""
    CHAT = 2
    CALL = 4
    NOTE = 8
    EMAIL = 11
    FB_CHAT = 13
    WECHAT = 14
    TICKET = 15
    SMS = 17
    EMAIL_CONVERSATION = 21
    SCREEN_SHARE = 24
    IG_CHAT = 27
    WHATSAPP = 29


class Direction(IntEnum):
    """활동 방향"""
    OUTBOUND = 1
    INBOUND = 2


# 링크 검색 방향
LINK_DIRECTION_FROM = "FROM"


class ApiModel(BaseModel):
    """API 레코드 공통 베이스"""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """원본 API 형태(camelCase, 받은 키만)로 직렬화"""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class LocalizedName(ApiModel):
    """다국어 이름"""
    translations: Optional[dict[str, Any]] = None
    default_text: Optional[str] = Field(default=None, alias="defaultText")


class NamedRef(ApiModel):
    """상태/우선순위/카테고리"""
    name: Optional[LocalizedName] = None


class PersonName(ApiModel):
    """사용자 이름 (user / creator / sender)"""
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")


class EntityName(ApiModel):
    """외부 엔티티 이름"""
    name1: Optional[str] = None
    name2: Optional[str] = None


class EntityExtension(ApiModel):
    entity: Optional[EntityName] = None


class Member(ApiModel):
    """티켓/활동 참여자"""
    role: Optional[int] = None
    anon: Optional[bool] = None
    name: Optional[str] = None
    user: Optional[PersonName] = None
    entity_extension: Optional[EntityExtension] = Field(default=None, alias="entityExtension")


class ActivityRef(ApiModel):
    eact_id: Optional[int] = Field(default=None, alias="eactId")


class Link(ApiModel):
    """활동 간 방향성 링크"""
    type: Optional[int] = None
    source: Optional[ActivityRef] = Field(default=None, alias="from")
    target: Optional[ActivityRef] = Field(default=None, alias="to")


class ActivityTypeRef(ApiModel):
    eaty_id: Optional[int] = Field(default=None, alias="eatyId")


class FileReference(ApiModel):
    """첨부파일 참조"""
    cfre_id: Optional[int] = Field(default=None, alias="cfreId")
    type: Optional[int] = None
    name: Optional[str] = None


class Comment(ApiModel):
    """티켓 코멘트 (activity text)"""
    creation_ts: Optional[Timestamp] = Field(default=None, alias="creationTs")
    creator: Optional[PersonName] = None
    text: Optional[str] = None


class Activity(ApiModel):
    """커뮤니케이션 이벤트 (이메일, 통화, 채팅 등)"""
    eact_id: Optional[int] = Field(default=None, alias="eactId")
    activity_type: Optional[ActivityTypeRef] = Field(default=None, alias="activityType")
    direction: Optional[int] = None
    creation_ts: Optional[Timestamp] = Field(default=None, alias="creationTs")
    description: Optional[str] = None
    members: list[Member] = Field(default_factory=list)
    core_file_references: list[FileReference] = Field(
        default_factory=list, alias="coreFileReferences"
    )

    # Email
    from_mail: Optional[str] = Field(default=None, alias="fromMail")
    to_mail: Optional[str] = Field(default=None, alias="toMail")
    subject: Optional[str] = None
    sender: Optional[PersonName] = None

    # Call
    src_number: Optional[str] = Field(default=None, alias="srcNumber")
    dst_number: Optional[str] = Field(default=None, alias="dstNumber")
    start_ts: Optional[Timestamp] = Field(default=None, alias="startTs")
    end_ts: Optional[Timestamp] = Field(default=None, alias="endTs")
    recordings: Optional[list[Any]] = None

    # 집계 시 추가되는 정규화된 이메일 본문
    email_body: Optional[str] = Field(default=None, alias="_emailBody")

    @property
    def type_id(self) -> Optional[int]:
        return self.activity_type.eaty_id if self.activity_type else None

    @property
    def is_email(self) -> bool:
        return self.type_id == ActivityType.EMAIL

    @property
    def is_call(self) -> bool:
        return self.type_id == ActivityType.CALL

    @property
    def is_email_conversation(self) -> bool:
        return self.type_id == ActivityType.EMAIL_CONVERSATION


class Ticket(ApiModel):
    """티켓 (Case)"""
    eact_id: Optional[int] = Field(default=None, alias="eactId")
    seq_no: Optional[int] = Field(default=None, alias="seqNo")
    description: Optional[str] = None
    ems_status: Optional[NamedRef] = Field(default=None, alias="emsStatus")
    priority: Optional[NamedRef] = None
    category: Optional[NamedRef] = None
    creation_ts: Optional[Timestamp] = Field(default=None, alias="creationTs")
    update_ts: Optional[Timestamp] = Field(default=None, alias="updateTs")
    members: list[Member] = Field(default_factory=list)
    texts: list[Comment] = Field(default_factory=list)
    links: list[Link] = Field(default_factory=list)


class User(PersonName):
    """ITX 사용자"""
    user_id: Optional[int] = Field(default=None, alias="userId")
    email: Optional[str] = None
    active: Optional[int] = None


class TicketActivities(BaseModel):
    """티켓 활동 집계 결과"""
    activities: list[Activity] = Field(default_factory=list)
    comments: list[Comment] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "activities": [a.to_payload() for a in self.activities],
            "comments": [c.to_payload() for c in self.comments],
        }
