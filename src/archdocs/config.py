"""Application configuration defaults."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_MAPPING_NAME = "arch-docs.yaml"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8010


@dataclass(slots=True)
class AppConfig:
    docs_root: Path
    mapping_path: Path | None = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    def resolve_mapping_path(self, base_dir: Path | None = None) -> Path:
        """Explicit mapping path (relative to base_dir), else ``<docs_root>/arch-docs.yaml``."""
        if self.mapping_path is None:
            return Path(self.docs_root) / DEFAULT_MAPPING_NAME
        if Path(self.mapping_path).is_absolute() or base_dir is None:
            return Path(self.mapping_path)
        return base_dir / self.mapping_path
