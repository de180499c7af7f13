"""Configuration management"""

import logging
import os
from typing import Any, Dict, List, Optional

import yaml

from airlift.core.env import EnvManager
from airlift.core.naming import NAMING_SCHEMES, UNDERSCORE
from airlift.exceptions import ConfigError
from airlift.runtime.docker import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


class Config:
    """Configuration manager for airlift

    The file is YAML; JSON documents such as ``{"images": [...]}`` are read
    the same way.
    """

    def __init__(self, config_file: str, env_files: Optional[List[str]] = None):
        """Load configuration from file

        Args:
            config_file: Path to configuration file
            env_files: List of environment files to load

        Raises:
            ConfigError: If the file is missing, unreadable or malformed
        """
        self.config_file = config_file
        self.data: Dict[str, Any] = {}
        self.env_manager = EnvManager()
        self.env_files = env_files or []

        if self.env_files:
            self.env_manager.load_files(self.env_files)

        self.load()

    def load(self) -> None:
        """Load configuration from file and apply environment variable expansion"""
        try:
            with open(self.config_file, "r") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError:
            logger.error(f"Configuration file not found: {self.config_file}")
            raise ConfigError(f"Configuration file not found: {self.config_file}")
        except OSError as e:
            logger.error(f"Failed to read configuration file: {e}")
            raise ConfigError(f"Cannot read configuration file {self.config_file}: {e}")
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse configuration file: {e}")
            raise ConfigError(f"Cannot parse configuration file {self.config_file}: {e}")

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration must be a mapping: {self.config_file}")

        self.data = data
        logger.info(f"Loaded configuration from {self.config_file}")

        self._load_env_config()
        self.data = EnvManager.expand(self.data, self.env_manager.env)

    def _load_env_config(self) -> None:
        """Load variables from the env_from and env properties"""
        env_from_paths = self.data.get("env_from", [])
        if isinstance(env_from_paths, str):
            env_from_paths = [env_from_paths]
        self.env_manager.load_files(env_from_paths)

        env_direct = self.data.get("env", {})
        if isinstance(env_direct, list):
            env_direct = dict(item.split("=", 1) for item in env_direct if "=" in item)

        if env_direct:
            self.env_manager.env.update({key: str(value) for key, value in env_direct.items()})
            logger.debug(f"Loaded {len(env_direct)} direct environment variables")

    def _load_images_from_files(self) -> List[str]:
        """Read whitespace separated references from images_from files"""
        images: List[str] = []

        paths = self.data.get("images_from", [])
        if isinstance(paths, str):
            paths = [paths]

        base_dir = os.path.dirname(os.path.abspath(self.config_file))
        for file_path in paths:
            file_path = os.path.join(base_dir, os.path.expanduser(file_path))
            try:
                with open(file_path, "r") as f:
                    raw_images = f.read().split()
            except OSError as e:
                raise ConfigError(f"Cannot read images file {file_path}: {e}")

            logger.info(f"Loaded {len(raw_images)} images from {file_path}")
            images.extend(raw_images)

        return images

    @property
    def images(self) -> List[str]:
        """Image references in configuration order

        Returns:
            List of image references, images before images_from entries
        """
        direct = self.data.get("images", [])
        if isinstance(direct, str):
            direct = [direct]
        if not isinstance(direct, list):
            raise ConfigError("'images' must be a list of image references")

        images = [str(image).strip() for image in direct if image is not None]
        images.extend(self._load_images_from_files())
        images = [image for image in images if image]

        if not images:
            logger.warning("No images specified in configuration")

        return images

    @property
    def runtime_config(self) -> Dict[str, Any]:
        """Runtime section with defaults applied

        Returns:
            Dict with 'type' and an 'options' dict whose 'timeout' is an int

        Raises:
            ConfigError: If the section or its options are not mappings, or
                the timeout is not a positive integer
        """
        runtime = self.data.get("runtime") or {}
        if not isinstance(runtime, dict):
            raise ConfigError("'runtime' must be a mapping")

        options = runtime.get("options") or {}
        if not isinstance(options, dict):
            raise ConfigError("'runtime.options' must be a mapping")

        timeout = options.get("timeout", DEFAULT_TIMEOUT)
        if isinstance(timeout, str) and timeout.strip().isdigit():
            timeout = int(timeout)
        if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
            raise ConfigError(f"'runtime.options.timeout' must be a positive integer: {timeout!r}")

        return {
            "type": runtime.get("type") or "docker",
            "options": dict(options, timeout=timeout),
        }

    @property
    def output_dir(self) -> Optional[str]:
        return self.data.get("output_dir")

    @property
    def registry_url(self) -> Optional[str]:
        return self.data.get("registry_url")

    @property
    def archive_naming(self) -> str:
        return self.data.get("archive_naming", UNDERSCORE)

    def validate(self) -> bool:
        """Validate configuration

        Returns:
            True if configuration is valid
        """
        try:
            images = self.images
        except ConfigError as e:
            logger.error(str(e))
            return False

        if not images:
            logger.error("No images specified")
            return False

        if self.archive_naming not in NAMING_SCHEMES:
            logger.error(f"Unknown archive naming scheme: {self.archive_naming}")
            return False

        try:
            runtime_type = self.runtime_config["type"]
        except ConfigError as e:
            logger.error(str(e))
            return False

        if runtime_type != "docker":
            logger.error(f"Unsupported runtime type: {runtime_type}")
            return False

        return True
