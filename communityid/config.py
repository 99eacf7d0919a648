"""Deployment settings for Community ID computation.

Settings are optional: the compute entry points take the seed directly.
They exist so a deployment can keep its seed and preferred rendering in
one place, typically a YAML file such as::

    community_id:
      seed: 1
      encoding: hex
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from communityid.digest import CommunityId, validate_seed
from communityid.flow import Flow
from communityid.utils.errors import ConfigurationError, InvalidSeedError
from communityid.utils.logger import get_logger

logger = get_logger(__name__)

CONFIG_SECTION = "community_id"
ENCODINGS = ("base64", "hex")


@dataclass(frozen=True)
class Settings:
    """Seed and rendering used by a deployment."""
    seed: int = 0
    encoding: str = "base64"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], source: Path | str = "<mapping>") -> Settings:
        """
        Build settings from a plain mapping.

        Args:
            data: Mapping with optional "seed" and "encoding" keys
            source: Label used in error messages

        Returns:
            Validated Settings

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        if not isinstance(data, Mapping):
            raise ConfigurationError(source, f"expected a mapping, got {type(data).__name__}")

        unknown = set(data) - {"seed", "encoding"}
        if unknown:
            raise ConfigurationError(source, f"unknown keys: {', '.join(sorted(map(str, unknown)))}")

        seed = data.get("seed", 0)
        try:
            seed = validate_seed(seed)
        except InvalidSeedError as e:
            raise ConfigurationError(source, e.message) from e

        encoding = data.get("encoding", "base64")
        if encoding not in ENCODINGS:
            raise ConfigurationError(
                source, f"encoding must be one of {', '.join(ENCODINGS)}, got {encoding!r}"
            )

        return cls(seed=seed, encoding=encoding)

    def compute(self, flow: Flow) -> CommunityId:
        return flow.community_id_v1(self.seed)

    def render(self, community_id: CommunityId) -> str:
        """Render a CommunityId in the configured encoding."""
        if self.encoding == "hex":
            return community_id.hexdigest()
        return community_id.base64()


def load_settings(path: Path | str) -> Settings:
    """
    Load settings from the ``community_id`` section of a YAML file.

    A file without that section yields default settings.

    Args:
        path: Path to the YAML file

    Returns:
        Validated Settings

    Raises:
        ConfigurationError: If the file cannot be read or parsed, or holds invalid values
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(path, f"cannot read file ({e})") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(path, f"invalid YAML ({e})") from e

    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ConfigurationError(path, "top level must be a mapping")

    section = document.get(CONFIG_SECTION)
    if section is None:
        logger.info(f"No '{CONFIG_SECTION}' section in {path}, using defaults")
        return Settings()

    settings = Settings.from_mapping(section, source=path)
    logger.debug(f"Loaded settings from {path}: seed={settings.seed}, encoding={settings.encoding}")
    return settings
