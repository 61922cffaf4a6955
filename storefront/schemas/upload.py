from pydantic import BaseModel


class UploadResponse(BaseModel):
    success: int = 1
    image_url: str
