"""
JSON configuration for hull3d.

Lookup order for ``.hull3d.json`` (first found wins):
1. Explicit path (CLI ``--config``)
2. Directory of the input point file
3. Current working directory
4. User's home directory

Built-in defaults apply when no file is found.

Example .hull3d.json:
{
    "hull": {
        "tolerance": 1e-9,
        "check_output": false
    },
    "logging": {
        "level": "DEBUG",
        "json_file": "hull3d.log.json"
    },
    "output": {
        "format": "stl",
        "suffix": "_hull"
    }
}
"""

import json
import logging
import math
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".hull3d.json"

# Signed plane distance at or below which a point counts as on the surface.
PLANE_DIST_TOL = 1e-9

OUTPUT_FORMATS = ("stl", "npy", "txt")


@dataclass
class HullSettings:
    """Hull construction settings."""
    tolerance: float = PLANE_DIST_TOL
    check_output: bool = False  # run validate_hull on every result


@dataclass
class LoggingSettings:
    """Logging settings used by the CLI and batch runner."""
    level: str = "INFO"
    json_file: Optional[str] = None
    use_colors: bool = True

    @property
    def level_value(self) -> int:
        value = logging.getLevelName(self.level.upper())
        return value if isinstance(value, int) else logging.INFO


@dataclass
class OutputSettings:
    """Hull file output settings."""
    format: str = "stl"
    suffix: str = "_hull"
    output_dir: str = ""


@dataclass
class HullConfig:
    """Complete hull3d configuration."""
    hull: HullSettings = field(default_factory=HullSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    output: OutputSettings = field(default_factory=OutputSettings)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.to_json())
        logger.info("Configuration saved to %s", path)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HullConfig':
        """Build a config from a dict; unknown sections and keys are ignored.

        Raises:
            ValueError: on a non-finite or non-positive tolerance or unknown output format
        """
        config = cls()
        for section in fields(cls):
            values = data.get(section.name)
            if not isinstance(values, dict):
                continue
            target = getattr(config, section.name)
            for key, value in values.items():
                if hasattr(target, key):
                    setattr(target, key, value)

        config.hull.tolerance = float(config.hull.tolerance)
        if not math.isfinite(config.hull.tolerance) or config.hull.tolerance <= 0:
            raise ValueError(
                f"hull.tolerance must be a finite positive number, got {config.hull.tolerance}"
            )
        if config.output.format not in OUTPUT_FORMATS:
            raise ValueError(
                f"output.format must be one of {OUTPUT_FORMATS}, got {config.output.format!r}"
            )
        return config

    @classmethod
    def from_json(cls, json_str: str) -> 'HullConfig':
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'HullConfig':
        """Load configuration from a JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file is not valid JSON
        """
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        logger.info("Configuration loaded from %s", path)
        return cls.from_dict(data)


def find_config_file(
    input_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """Locate a config file following the lookup order above."""
    if explicit_config:
        explicit = Path(explicit_config)
        if explicit.exists():
            return explicit
        logger.warning("Explicit config not found: %s", explicit)

    candidates = []
    if input_path:
        candidates.append(Path(input_path).parent / CONFIG_FILENAME)
    candidates.append(Path.cwd() / CONFIG_FILENAME)
    candidates.append(Path.home() / CONFIG_FILENAME)

    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def load_config(
    input_path: Optional[Union[str, Path]] = None,
    explicit_config: Optional[Union[str, Path]] = None,
) -> HullConfig:
    """Load the applicable config file, falling back to defaults.

    A file that cannot be read or parsed is logged and ignored.
    """
    config_path = find_config_file(input_path, explicit_config)

    if config_path:
        try:
            return HullConfig.load(config_path)
        except (json.JSONDecodeError, OSError, ValueError) as e:
            logger.error("Failed to load config %s: %s", config_path, e)

    return HullConfig()


def merge_configs(base: HullConfig, override: HullConfig) -> HullConfig:
    """Overlay the non-default values of ``override`` onto ``base``."""
    merged = HullConfig.from_dict(base.to_dict())
    defaults = HullConfig()

    for section in fields(HullConfig):
        default_section = asdict(getattr(defaults, section.name))
        target = getattr(merged, section.name)
        for key, value in asdict(getattr(override, section.name)).items():
            if value != default_section[key]:
                setattr(target, key, value)

    return merged
