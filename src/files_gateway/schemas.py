####################################
# --- Request/response schemas --- #
####################################

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_LIST_OBJECTS_PREFIX = ""


class ObjectMetadata(BaseModel):
    """Optional descriptive metadata stored alongside an object."""
    title: Optional[str] = Field(None, description="Human readable title.")
    description: Optional[str] = Field(None, description="Free-form description.")

    def to_store(self) -> Dict[str, str]:
        return self.model_dump(exclude_none=True)

    @classmethod
    def from_store(cls, metadata: Optional[Dict[str, str]]) -> "ObjectMetadata":
        metadata = metadata or {}
        return cls(title=metadata.get("title"), description=metadata.get("description"))


class ObjectDescriptor(BaseModel):
    """Metadata of a stored object."""
    path: str = Field(
        description="Full object path; `/` separates the virtual hierarchy.",
        json_schema_extra={"example": "myfolder/img.jpg"},
    )
    size: int = Field(ge=0, description="Stored size of the object in bytes.")
    title: Optional[str] = Field(None, description="Title supplied at upload, if any.")
    description: Optional[str] = Field(None, description="Description supplied at upload, if any.")
    url: str = Field(
        description="Retrieval locator for the object's bytes.",
        json_schema_extra={"example": "http://localhost:8000/v1/objects/myfolder/img.jpg"},
    )

    @property
    def segments(self) -> Tuple[str, ...]:
        return tuple(self.path.split("/"))

    @property
    def filename(self) -> str:
        return self.segments[-1]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "path": "myfolder/img.jpg",
                "size": 25816,
                "title": "Holiday picture",
                "description": None,
                "url": "http://localhost:8000/v1/objects/myfolder/img.jpg",
            }
        }
    )


class ListObjectsQueryParams(BaseModel):
    """Query parameters for `GET /v1/objects`."""
    prefix: str = Field(
        DEFAULT_LIST_OBJECTS_PREFIX,
        description="Only list objects whose path starts with this prefix.",
    )
    recursive: bool = Field(
        True,
        description="List the whole hierarchy below the prefix, or only its first level.",
    )


class ListObjectsResponse(BaseModel):
    """Response model for `GET /v1/objects`."""
    objects: List[ObjectDescriptor]
    count: int = Field(description="Number of objects returned")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "objects": [
                    {
                        "path": "myfolder/img.jpg",
                        "size": 25816,
                        "title": None,
                        "description": None,
                        "url": "http://localhost:8000/v1/objects/myfolder/img.jpg",
                    }
                ],
                "count": 1,
            }
        }
    )


class HealthResponse(BaseModel):
    """Response model for `GET /health`."""
    status: str
    deployment_mode: str
    components: Dict[str, str]
    ready: bool
