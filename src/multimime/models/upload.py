"""Upload probe and reconciliation data models."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Extension -> ordered MIME types; index 0 is the primary (registered) type
ExtensionMimeSet = Dict[str, List[str]]


class FileTypeInfo(BaseModel):
    """Result of the host's single-MIME filename lookup."""

    model_config = ConfigDict(frozen=True)

    ext: Optional[str] = Field(None, description="Matched extension, or None")
    type: Optional[str] = Field(None, description="Default MIME type for the extension, or None")


class UploadProbe(BaseModel):
    """One upload attempt under evaluation."""

    filename: str = Field(..., description="Client-supplied file name")
    extension_hint: Optional[str] = Field(
        None, description="Best-guess extension from the filename, before sniffing"
    )
    default_type: Optional[str] = Field(
        None, description="MIME type the host associates with extension_hint"
    )
    sniffed_type: str = Field("", description="MIME type determined from file content")
    already_resolved: bool = Field(
        False, description="True if an earlier stage already determined a type"
    )


class ReconciliationResult(BaseModel):
    """
    Outcome of a reconciliation.

    Absent extension and MIME type mean "no decision": the caller keeps
    whatever fallback or rejection policy it already applies. Files are
    never renamed, so ``filename_correction_needed`` stays False.
    """

    model_config = ConfigDict(frozen=True)

    extension: Optional[str] = None
    mime_type: Optional[str] = None
    filename_correction_needed: bool = False

    @classmethod
    def empty(cls) -> "ReconciliationResult":
        """Return the "no decision" result."""
        return cls()

    @property
    def matched(self) -> bool:
        """True when both an extension and a MIME type were decided."""
        return bool(self.extension and self.mime_type)
