"""
Attachment references.

Uploading and deleting files is done by an AttachmentStore owned by the
caller. Drivers only consume the FileReference it hands back, inside an
``input_file`` content part.
"""

from abc import ABC, abstractmethod
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class FileReference(BaseModel):
    """Opaque handle to content already uploaded to a provider."""

    model_config = ConfigDict(frozen=True)

    file_id: str = Field(..., description="Provider file id")
    provider: str = Field(..., description="Provider the file was uploaded to")
    mime_type: Optional[str] = Field(default=None, description="MIME type of the uploaded content")
    uri: Optional[str] = Field(default=None, description="Download URI, for providers that address files by URI")


class AttachmentStore(ABC):
    """Uploads and deletes binary content for use in chat requests."""

    @abstractmethod
    async def upload(self, content: Union[str, bytes], mime_type: str) -> FileReference:
        """Upload a file path or raw bytes and return its reference."""
        pass

    @abstractmethod
    async def delete(self, reference: FileReference) -> None:
        pass
