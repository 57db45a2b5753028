from typing import Any, List, Optional
from pydantic import BaseModel, Field


# Widget payloads are loosely typed; values are coerced to text in the router.
class AskRequest(BaseModel):
    question: Optional[Any] = ""
    course: Optional[Any] = None
    mode: Optional[Any] = "default"


class AskResponse(BaseModel):
    answer: str
    citations: List[Any] = Field(default_factory=list)


class HealthResponse(BaseModel):
    ok: bool = True
