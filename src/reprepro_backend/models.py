"""Data models for archive listings."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class Archive(BaseModel):
    """One independently managed reprepro repository under the base path."""

    name: str
    path: Path


class PackageRecord(BaseModel):
    """A single package entry from ``reprepro list``."""

    model_config = ConfigDict(frozen=True)

    codename: str
    architecture: str
    package: str
    version: str


PackageIndex = dict[str, list[PackageRecord]]
