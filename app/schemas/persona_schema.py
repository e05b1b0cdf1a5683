from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PersonaRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    instructions: str = Field(..., min_length=1)

    @field_validator("name", "instructions")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class PersonaResponse(BaseModel):
    id: str
    name: str
    instructions: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
