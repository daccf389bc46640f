"""Request and response models for the import and sync operations."""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class ImportRequest(BaseModel):
    """Request for the import endpoint."""

    source_path: str = Field(
        ..., alias="sourcePath", description="Root of the Auto-Claude installation"
    )
    dry_run: bool = Field(False, alias="dryRun", description="Validate only")

    class Config:
        populate_by_name = True


class ImportCounts(BaseModel):
    """Entity counts per kind for an import or its preview."""

    agent_configs: int = Field(0, alias="agentConfigs")
    prompts: int = 0
    model_profiles: int = Field(0, alias="modelProfiles")
    project_config: int = Field(0, alias="projectConfig")

    class Config:
        populate_by_name = True
        protected_namespaces = ()


class ImportResult(BaseModel):
    """Outcome of a completed import (or dry-run)."""

    success: bool = True
    dry_run: bool = Field(False, alias="dryRun")
    imported: Optional[ImportCounts] = None
    preview: Optional[ImportCounts] = None
    created: int = 0
    updated: int = 0
    warnings: List[str] = Field(default_factory=list)
    duration_ms: float = Field(0.0, alias="durationMs")

    class Config:
        populate_by_name = True


class SyncRequest(BaseModel):
    """Request for the sync endpoint."""

    target_path: Optional[str] = Field(
        None, alias="targetPath", description="Auto-Claude installation to write to"
    )
    project_id: Optional[str] = Field(
        None, alias="projectId", description="Project whose model profile is used"
    )
    dry_run: bool = Field(False, alias="dryRun", description="List files only")

    class Config:
        populate_by_name = True


class SyncResult(BaseModel):
    """Outcome of a sync run. Partial write failures are listed in errors."""

    success: bool
    dry_run: bool = Field(False, alias="dryRun")
    target_path: str = Field(..., alias="targetPath")
    written_count: int = Field(0, alias="writtenCount")
    files_written: List[str] = Field(default_factory=list, alias="filesWritten")
    errors: List[str] = Field(default_factory=list)
    duration_ms: float = Field(0.0, alias="durationMs")

    class Config:
        populate_by_name = True


class ComponentResponse(BaseModel):
    """A stored component as returned by the CRUD endpoints."""

    id: str
    type: str
    name: str
    description: str
    config: Dict
    enabled: bool
    tags: str = ""
