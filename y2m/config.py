"""
User configuration for y2m.

The configuration file (``~/.y2m``) is a shell-style ``KEY="value"`` file, so it
can still be sourced by a shell. It is parsed with python-dotenv and created
from a commented template on first use.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import dotenv_values
from platformdirs import user_cache_dir

from .exceptions import ConfigError
from .schemas import ORGANIZATIONS, Organization

logger = logging.getLogger(__name__)

CONFIG_FILE = Path("~/.y2m")
FAVORITES_KEY = "Y2MFAV"

CONFIG_TEMPLATE = """\
# y2m configuration file, sourced as shell variables.
#
# Favorite modules, processed by the FAV keyword, e.g.
#   y2m clone FAV
#   y2m checkout SLE-15-SP5 FAV
# Separate module names with spaces.
#Y2MFAV="core network storage-ng"
"""


def ensure_config_file(path: Path) -> None:
    """Create the configuration file from the template if it does not exist."""
    if path.exists():
        return

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(CONFIG_TEMPLATE)
    except OSError as e:
        raise ConfigError(f"Cannot create configuration file {path}: {e}")

    logger.info(f"Created configuration template {path}")


def parse_favorites(value: Optional[str]) -> List[str]:
    """Split a whitespace-separated favorites value, keeping order and dropping repeats."""
    favorites: List[str] = []
    for name in (value or "").split():
        if name not in favorites:
            favorites.append(name)
    return favorites


@dataclass
class Settings:
    """Process-wide state loaded once at startup and passed explicitly."""
    config_file: Path
    cache_dir: Path
    work_dir: Path
    favorites: List[str] = field(default_factory=list)
    github_token: Optional[str] = None
    organizations: Tuple[Organization, ...] = ORGANIZATIONS

    @classmethod
    def load(
        cls,
        config_file: Optional[Path] = None,
        cache_dir: Optional[Path] = None,
        work_dir: Optional[Path] = None,
    ) -> "Settings":
        """Load settings from the configuration file and the environment.

        Args:
            config_file: Configuration file (default: ~/.y2m)
            cache_dir: Listing cache directory (default: the user cache dir)
            work_dir: Directory holding the module checkouts (default: cwd)

        Returns:
            Settings instance

        Raises:
            ConfigError: If the configuration file cannot be created or read
        """
        config_file = Path(config_file or CONFIG_FILE).expanduser()
        ensure_config_file(config_file)

        try:
            values = dotenv_values(config_file)
        except OSError as e:
            raise ConfigError(f"Cannot read configuration file {config_file}: {e}")

        favorites = parse_favorites(values.get(FAVORITES_KEY))
        logger.debug(f"Loaded {len(favorites)} favorite(s) from {config_file}")

        return cls(
            config_file=config_file,
            cache_dir=Path(cache_dir or user_cache_dir("y2m")).expanduser(),
            work_dir=Path(work_dir or Path.cwd()).expanduser(),
            favorites=favorites,
            github_token=os.getenv("GITHUB_TOKEN") or None,
        )
