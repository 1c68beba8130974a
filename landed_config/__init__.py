"""
landed_config -- single public entrypoint for landed-cost configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Services receive the returned
    ``LandedCostConfig``; they never read YAML themselves.

Architecture position:
    Configuration.  Sits above ``landed_kernel`` and below
    ``landed_modules``.  The kernel MUST NEVER import from here.

Failure modes:
    - ``FileNotFoundError`` -- the requested file does not exist.
    - ``ValueError`` -- invalid configuration values.

Every successful call emits a ``CONFIG_TRACE`` log entry carrying the
config id, version, path and checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from landed_config.loader import load_config
from landed_config.schema import LandedCostConfig

_logger = logging.getLogger("landed_kernel.config")

_DEFAULT_CONFIG_FILE = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(path: Path | str | None = None) -> LandedCostConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: Override path to a YAML configuration file.
            Defaults to landed_config/sets/default.yaml.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If configuration validation fails.
    """
    config_path = Path(path) if path is not None else _DEFAULT_CONFIG_FILE
    config = load_config(config_path)

    _logger.info(
        "CONFIG_TRACE",
        extra={
            "trace_type": "CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "config_path": str(config_path),
            "checksum": config.checksum,
        },
    )
    return config


__all__ = ["LandedCostConfig", "get_active_config"]
