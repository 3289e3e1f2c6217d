"""
Pydantic base models shared by the API responses.

Every endpoint answers with the same envelope:
- success: {"success": true, "data": ..., "message": ...}
- failure: {"success": false, "error": {"message": ..., "statusCode": ...}}
"""

from pydantic import BaseModel
from typing import Any, Optional


class ErrorDetail(BaseModel):
    message: str
    statusCode: int


class BaseResponse(BaseModel):
    success: bool = True
    data: Optional[Any] = None
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail


def success_response(data: Any, message: str) -> dict:
    return BaseResponse(data=data, message=message).model_dump()


def error_response(message: str, status_code: int) -> dict:
    return ErrorResponse(error=ErrorDetail(message=message, statusCode=status_code)).model_dump()
