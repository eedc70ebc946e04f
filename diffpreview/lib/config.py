"""
Configuration loader for diffpreview.

Loads the optional user config (config.yaml) and returns an immutable
PreviewConfig. If no config file exists, returns platform defaults.
"""

import logging
import os
import shlex
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import yaml

from diffpreview.errors import ConfigError
from diffpreview.lib import validate
from diffpreview.lib.constants import (
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_RETENTION_HOURS,
    DEFAULT_REVISION,
    LAYOUT_FLAT,
    MELD_VIEWER,
    WINMERGE_VIEWER,
)

logger = logging.getLogger(__name__)


def default_viewer(platform: str = sys.platform) -> str:
    """Viewer template used when the config doesn't name one."""
    if platform.startswith("win"):
        return WINMERGE_VIEWER
    return MELD_VIEWER


@dataclass(frozen=True)
class PreviewConfig:
    """Settings for one run. Built once, passed explicitly."""
    viewer: str
    revision: str = DEFAULT_REVISION
    retention_hours: float = DEFAULT_RETENTION_HOURS
    layout: str = LAYOUT_FLAT
    include_untracked: bool = False
    scratch_root: Optional[Path] = None  # Parent of diff-preview/ instead of TEMP/TMP/TMPDIR


def default_config_path(environ: Mapping[str, str] = os.environ) -> Path:
    """$XDG_CONFIG_HOME/diffpreview/config.yaml, or ~/.config/... if unset."""
    base = environ.get("XDG_CONFIG_HOME")
    config_home = Path(base) if base else Path.home() / ".config"
    return config_home / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def load_config(
    path: Optional[Path] = None,
    environ: Mapping[str, str] = os.environ,
) -> PreviewConfig:
    """Load config.yaml and return PreviewConfig.

    An explicit path must exist. The default path is optional.

    Raises:
        ConfigError: if the file can't be read, parsed, or fails validation
    """
    if path is None:
        path = default_config_path(environ)
        if not path.exists():
            logger.debug("No config at %s, using defaults", path)
            return PreviewConfig(viewer=default_viewer())
    elif not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e

    if data is None:
        data = {}
    validate.validate(data, "config")
    logger.debug("Loaded config from %s: %s", path, data)

    viewer = data.get("viewer", default_viewer())
    try:
        shlex.split(viewer)
    except ValueError as e:
        raise ConfigError(f"Can't parse viewer command {viewer!r}: {e}") from e
    for placeholder in ("{before}", "{after}"):
        if placeholder not in viewer:
            raise ConfigError(f"viewer command must contain {placeholder}: {viewer}")

    scratch_root = data.get("scratch_root")
    return PreviewConfig(
        viewer=viewer,
        revision=data.get("revision", DEFAULT_REVISION),
        retention_hours=data.get("retention_hours", DEFAULT_RETENTION_HOURS),
        layout=data.get("layout", LAYOUT_FLAT),
        include_untracked=data.get("include_untracked", False),
        scratch_root=Path(scratch_root).expanduser() if scratch_root else None,
    )
