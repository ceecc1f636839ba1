from pydantic import BaseModel, Field


class Entry(BaseModel):
    """
    Represents a single ROM file found by a station scan.
    Entries are never edited after the scan that created them.
    """
    name: str = Field(..., description="Display name (extension stripped, underscores as spaces)")
    filename: str = Field(..., description="File name on disk")
    path: str = Field(..., description="Absolute path to the ROM file")
    station_id: int = Field(..., ge=0, description="Owning station slot")
    size: int = Field(0, description="File size in bytes")
    date: int = Field(0, description="Last modification timestamp of the file")
    has_preview: bool = Field(False, description="A preview image was found next to the collection")
    preview_path: str = Field("", description="Path to that preview image")

    class Config:
        frozen = True
        extra = "ignore"
