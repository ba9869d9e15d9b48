import warnings

import pytest

from src.shared.errors import ErrorCode, KnowledgeBaseError


@pytest.mark.parametrize("code,expected", [
    (ErrorCode.SOURCE_REFS_REQUIRED, 422),
    (ErrorCode.RULE_NOT_FOUND, 404),
    (ErrorCode.FORBIDDEN_ROLE, 403),
    (ErrorCode.NOT_READY, 409),
])
def test_error_code_status(code, expected):
    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        exc = KnowledgeBaseError(code, "boom").to_http_exception()

    assert exc.status_code == expected
    assert exc.detail == {"code": code.value, "message": "boom"}


def test_message_defaults_to_code():
    assert KnowledgeBaseError(ErrorCode.NOT_READY).message == "NOT_READY"
