"""Pydantic configuration model with YAML loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from seoforge.models import Tier

_DEFAULT_CONFIG_NAME = "seoforge.yaml"


class ScanConfig(BaseModel):
    """Which files make up the document corpus."""

    path: Path = Path("resources/views")
    patterns: list[str] = Field(default_factory=lambda: ["*.blade.php"])
    exclude: list[str] = Field(
        default_factory=lambda: ["vendor/**", "mail/**", "errors/**"]
    )
    ignore_components: bool = True


class ComplianceConfig(BaseModel):
    """Audit defaults."""

    default_level: Tier = Tier.AAA


class FixConfig(BaseModel):
    """Fix and backup settings."""

    create_backups: bool = True
    backup_path: Path = Path("storage/app/seo-backups")
    language: str = "en"
    alt_text: str = Field(default="Image", pattern=r"\S")
    site_url: str = ""


class OutputConfig(BaseModel):
    """Report settings."""

    report_format: Literal["json", "markdown"] = "markdown"


class BatchConfig(BaseModel):
    """Batch driver settings."""

    workers: int = Field(default=4, ge=1)


class SEOForgeConfig(BaseModel):
    """Top-level configuration for SEOForge."""

    scan: ScanConfig = Field(default_factory=ScanConfig)
    compliance: ComplianceConfig = Field(default_factory=ComplianceConfig)
    fixes: FixConfig = Field(default_factory=FixConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)

    @classmethod
    def load(cls, path: Path | None = None) -> SEOForgeConfig:
        """Load config from a YAML file.

        Search order when *path* is None:
          1. ./seoforge.yaml
          2. ~/.config/seoforge/seoforge.yaml

        Returns default config if no file is found.
        """
        if path is not None:
            return cls._from_yaml(path)

        candidates = [
            Path.cwd() / _DEFAULT_CONFIG_NAME,
            Path.home() / ".config" / "seoforge" / _DEFAULT_CONFIG_NAME,
        ]
        for candidate in candidates:
            if candidate.is_file():
                return cls._from_yaml(candidate)

        return cls()

    @classmethod
    def _from_yaml(cls, path: Path) -> SEOForgeConfig:
        raw: dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return cls.model_validate(raw)
