from pydantic import BaseModel


class ModelInfo(BaseModel):
    id: str
    name: str


class ModelListResponse(BaseModel):
    data: list[ModelInfo]
