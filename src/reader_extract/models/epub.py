"""Data models for EPUB package structure."""

from pydantic import BaseModel, ConfigDict, Field


class ContainerMetadata(BaseModel):
    """Resolved contents of META-INF/container.xml."""

    model_config = ConfigDict(frozen=True)

    opf_path: str


class PackageDocument(BaseModel):
    """Manifest and spine recovered from the OPF package document."""

    manifest: dict[str, str] = Field(default_factory=dict)  # item id -> href
    spine: list[str] = Field(default_factory=list)  # ordered idrefs

    def resolve(self, idref: str) -> str | None:
        """Return the manifest href for a spine idref, if declared."""
        return self.manifest.get(idref)
