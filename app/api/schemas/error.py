from typing import Any

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """
    Details of an application error, as produced by RelayException
    """

    type: str
    loc: list[str]
    message: str
    context: Any | None = None


class ErrorResponseModel(BaseModel):
    """
    Standard error response model for OpenAPI documentation
    """

    detail: list[ErrorDetail]
