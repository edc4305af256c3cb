"""ITX CLI 예외 계층

- 필수 조회 체인(티켓/링크/활동/대화 확장) 실패는 그대로 전파
- 이메일 본문 조회 실패는 이메일 단위로 흡수
"""
from typing import Optional


class ItxError(Exception):
    """ITX CLI 기본 예외"""


class ConfigurationError(ItxError):
    """저장 설정을 읽거나 해석할 수 없음"""


class NotAuthenticatedError(ItxError):
    """저장된 인증 토큰 없음"""

    def __init__(self, message: str = 'Not authenticated. Run "itx login" to configure credentials.'):
        super().__init__(message)


class TicketNotFoundError(ItxError):
    """요청한 티켓 번호(seqNo)에 해당하는 레코드 없음"""

    def __init__(self, seq_no: int):
        self.seq_no = seq_no
        super().__init__(f"Ticket #{seq_no} not found.")


class UpstreamError(ItxError):
    """API 비정상 응답 또는 전송 실패"""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class EmailBodyUnavailable(ItxError):
    """개별 이메일 본문 조회 실패 (집계 중 흡수됨)"""

    def __init__(self, eact_id: int, reason: str = ""):
        self.eact_id = eact_id
        self.reason = reason
        super().__init__(f"Email content unavailable for activity {eact_id}: {reason}")
