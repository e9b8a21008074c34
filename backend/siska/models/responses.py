"""
Response models for API endpoints.
"""
from pydantic import BaseModel, Field


class ChatResponse(BaseModel):
    """Rendered answer returned to the frontend."""
    response_text: str = Field(..., alias="responseText")

    model_config = {"populate_by_name": True}
