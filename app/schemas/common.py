"""
Shared Pydantic v2 schemas reused across multiple modules.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """JSON error envelope documented on the export endpoints.

    Matches the body FastAPI emits for ``HTTPException``.

    Attributes:
        detail: Short, user-safe description of the failure.
    """

    detail: str = Field(..., description="Descripción del error, apta para el usuario final.")
