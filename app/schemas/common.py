from pydantic import BaseModel


class ErrorDetail(BaseModel):
    code: str
    message: str


class StatusResponse(BaseModel):
    status: str
