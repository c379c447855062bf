from pydantic import BaseModel


class UploadResponse(BaseModel):
    # Public URL of the original variant; sized variants insert `-<size>` before `.png`
    url: str


class ErrorResponse(BaseModel):
    error: str
    detail: str
