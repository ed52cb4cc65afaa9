"""
PackSync - Manifest Model

Pydantic models for the server manifest document served at
/servermanifest.json.

Author: PackSync Project
"""

from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class FileDescriptor(BaseModel):
    """One file published by the server, identified by its file name."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file_name: str = Field(alias="fileName", min_length=1)
    checksum: str = Field(min_length=1)
    owner_module_id: str = Field(alias="rootModId")


class Manifest(BaseModel):
    """
    Ordered list of files that defines the target state of the output directory.

    Wire format:
        {"forgeVersion": "...", "files": [{"fileName": ..., "checksum": ..., "rootModId": ...}]}
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    forge_version: Optional[str] = Field(default=None, alias="forgeVersion")
    files: Tuple[FileDescriptor, ...] = ()

    @classmethod
    def load(cls, data: Union[str, bytes]) -> "Manifest":
        """
        Parse a manifest document.

        Args:
            data: JSON text or raw bytes of the manifest

        Returns:
            Parsed Manifest

        Raises:
            pydantic.ValidationError: If the document is not a valid manifest
        """
        return cls.model_validate_json(data)

    def to_json(self) -> str:
        """Serialize using the wire field names."""
        return self.model_dump_json(by_alias=True, exclude_none=True)

    def find(self, file_name: str) -> Optional[FileDescriptor]:
        """Return the descriptor for file_name, or None if it is not published."""
        for descriptor in self.files:
            if descriptor.file_name == file_name:
                return descriptor
        return None
