from pydantic import BaseModel, Field


class StoredImage(BaseModel):
    id: str = Field(min_length=1)
    size_bytes: int = Field(ge=0)
