"""
Shared API response schemas.
"""
from typing import Any, List, Optional, Union

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of 400/404/500 responses raised from quiz errors."""

    detail: Union[str, List[Any]]
    message: Optional[str] = None
