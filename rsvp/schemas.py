from pydantic import BaseModel, ConfigDict, Field


class Photo(BaseModel):
    """A guest photo as stored in the photo list (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    url: str
    filename: str | None = None
    guest_name: str = Field(alias="guestName")
    event_type: str = Field(alias="eventType")
    uploaded_at: str = Field(alias="uploadedAt")
    size: int
    mimetype: str

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class PhotoListResponse(BaseModel):
    success: bool = True
    photos: list[Photo]
    count: int


class PhotoUploadResponse(BaseModel):
    success: bool = True
    message: str
    photo: Photo


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ClearPhotosResponse(MessageResponse):
    deleted_count: int = Field(serialization_alias="deletedCount")


class LoginRequest(BaseModel):
    password: str
