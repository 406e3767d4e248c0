"""Config storage for saved network configurations."""

import json
from pathlib import Path
from typing import Optional

from api.settings import settings
from infra.planning.config import NetworkConfig


class ConfigStore:
    """Store network configurations as JSON files."""

    def __init__(self, config_dir: Optional[str] = None):
        self.config_dir = Path(config_dir or settings.config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def _get_path(self, slug: str, environment: str) -> Path:
        return self.config_dir / f"{slug}-{environment}.json"

    def save(self, slug: str, environment: str, config: NetworkConfig) -> None:
        """Save network configuration."""
        path = self._get_path(slug, environment)
        data = {
            "slug": slug,
            "environment": environment,
            "config": config.model_dump(mode="json"),
        }
        with open(path, "w") as f:
            json.dump(data, f, indent=2)

    def get(self, slug: str, environment: str) -> Optional[NetworkConfig]:
        """Get network configuration."""
        path = self._get_path(slug, environment)
        if not path.exists():
            return None

        with open(path) as f:
            data = json.load(f)
            return NetworkConfig.model_validate(data.get("config", {}))

    def delete(self, slug: str, environment: str) -> bool:
        """Delete network configuration."""
        path = self._get_path(slug, environment)
        if not path.exists():
            return False
        path.unlink()
        return True


# Global instance
config_store = ConfigStore()


def get_config_store() -> ConfigStore:
    """FastAPI dependency returning the config store."""
    return config_store
