from pydantic import BaseModel, ConfigDict, Field


class ImageUrlRequest(BaseModel):
    """Request body for uploading an image from a remote URL."""

    image_url: str | None = Field(default=None, alias="imageUrl")

    model_config = ConfigDict(populate_by_name=True)


class UploadResult(BaseModel):
    success: bool = True
    url: str  # Relative public path, e.g. /uploads/blogs/1700000000000-photo.png


class UploadErrorBody(BaseModel):
    error: str
    details: str | None = None
