"""Translation of channel errors into HTTP responses."""

from __future__ import annotations

from fastapi import HTTPException, status

from ..domain.errors import ChannelError, ErrorCode

_STATUS_BY_CODE = {
    ErrorCode.NOT_AUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorCode.CHANNEL_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CHANNEL_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCode.CHANNEL_CLOSED: status.HTTP_409_CONFLICT,
    ErrorCode.DISPUTE_PERIOD: status.HTTP_409_CONFLICT,
    ErrorCode.CONCURRENT_UPDATE: status.HTTP_409_CONFLICT,
}


def to_http_exception(error: ChannelError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_CODE.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail={"code": error.code.value, "message": error.message},
    )
