from pydantic import BaseModel, Field
from typing import Any, List, Optional

class BatchItemError(BaseModel):
    index: int
    item: Any
    error: str
    code: str

class OperationResult(BaseModel):
    success: bool
    data: Any = None
    error: Optional[str] = None
    code: Optional[str] = None
    errors: List[BatchItemError] = Field(default_factory=list)

    @classmethod
    def ok(cls, data: Any = None) -> "OperationResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, code: str, error: str, errors: Optional[List[BatchItemError]] = None) -> "OperationResult":
        return cls(success=False, code=code, error=error, errors=errors or [])
