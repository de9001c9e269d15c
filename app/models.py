from typing import Optional

from pydantic import BaseModel, StrictStr


class AskRequest(BaseModel):
    question: Optional[StrictStr] = None


class AskResponse(BaseModel):
    answer: str


class ErrorResponse(BaseModel):
    error: str
