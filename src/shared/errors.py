from enum import Enum
from typing import Optional

from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    SOURCE_REFS_REQUIRED = "SOURCE_REFS_REQUIRED"
    RULE_NOT_FOUND = "RULE_NOT_FOUND"
    RULE_VERSION_NOT_FOUND = "RULE_VERSION_NOT_FOUND"
    VERSION_CONFLICT = "VERSION_CONFLICT"
    NO_APPROVED_RULES = "NO_APPROVED_RULES"
    SNAPSHOT_NOT_FOUND = "SNAPSHOT_NOT_FOUND"
    JURISDICTION_MISMATCH = "JURISDICTION_MISMATCH"
    CHANGE_CANDIDATE_NOT_FOUND = "CHANGE_CANDIDATE_NOT_FOUND"
    REVIEW_TASK_NOT_FOUND = "REVIEW_TASK_NOT_FOUND"
    REVIEW_TASK_ALREADY_DECIDED = "REVIEW_TASK_ALREADY_DECIDED"
    FORBIDDEN_ROLE = "FORBIDDEN_ROLE"
    NOT_READY = "NOT_READY"


STATUS_BY_CODE = {
    ErrorCode.SOURCE_REFS_REQUIRED: 422,
    ErrorCode.RULE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.RULE_VERSION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.VERSION_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.NO_APPROVED_RULES: status.HTTP_409_CONFLICT,
    ErrorCode.SNAPSHOT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.JURISDICTION_MISMATCH: status.HTTP_409_CONFLICT,
    ErrorCode.CHANGE_CANDIDATE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.REVIEW_TASK_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.REVIEW_TASK_ALREADY_DECIDED: status.HTTP_409_CONFLICT,
    ErrorCode.FORBIDDEN_ROLE: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_READY: status.HTTP_409_CONFLICT,
}


class KnowledgeBaseError(ValueError):
    """A named, caller-visible precondition failure.

    Services raise these before any write becomes visible; routers translate
    them with ``to_http_exception``. None of them are retried automatically.
    """

    def __init__(self, code: ErrorCode, message: Optional[str] = None):
        self.code = code
        self.message = message or code.value
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_CODE.get(self.code, status.HTTP_400_BAD_REQUEST)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={"code": self.code.value, "message": self.message},
        )
