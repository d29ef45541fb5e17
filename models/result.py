"""
Tagged result of an API call: either success with data, or failure with an error.
"""

from dataclasses import dataclass
from typing import Any, Optional

from models.errors import ApiError, TalentFlowError


@dataclass
class ApiResult:
    success: bool
    data: Any = None
    error: Optional[TalentFlowError] = None
    status_code: int = 200

    @classmethod
    def ok(cls, data: Any = None, status_code: int = 200) -> "ApiResult":
        return cls(success=True, data=data, status_code=status_code)

    @classmethod
    def fail(cls, error: TalentFlowError) -> "ApiResult":
        status_code = error.status_code if isinstance(error, ApiError) else 0
        return cls(success=False, error=error, status_code=status_code)

    @property
    def message(self) -> str:
        return str(self.error) if self.error else ""
