"""Environment variables for configuration expansion"""

import logging
import os
import re
from typing import Any, Dict, List

from airlift.exceptions import ConfigError

logger = logging.getLogger(__name__)

_BRACED = re.compile(r"\$\{([^}]+)\}")
_BARE = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")


class EnvManager:
    """Holds variables from the system environment and .env files"""

    def __init__(self):
        self.env: Dict[str, str] = dict(os.environ)

    def load_file(self, file_path: str) -> Dict[str, str]:
        """Load KEY=VALUE pairs from a .env file

        Blank lines and lines starting with '#' are ignored, a single pair of
        surrounding quotes is removed from values. A missing file only logs a
        warning.

        Args:
            file_path: Path to .env file

        Returns:
            Dictionary of loaded variables
        """
        file_path = os.path.expanduser(file_path)
        variables: Dict[str, str] = {}

        if not os.path.exists(file_path):
            logger.warning(f"Environment file not found: {file_path}")
            return variables

        try:
            with open(file_path, "r") as f:
                lines = f.readlines()
        except OSError as e:
            raise ConfigError(f"Failed to read environment file {file_path}: {e}")

        for line_num, line in enumerate(lines, 1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                logger.warning(f"Invalid line in {file_path}:{line_num}: {line}")
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip()

            if len(value) >= 2 and value[0] in ('"', "'") and value[-1] == value[0]:
                value = value[1:-1]

            variables[key] = value

        logger.info(f"Loaded {len(variables)} variables from {file_path}")
        return variables

    def load_files(self, file_paths: List[str]) -> None:
        """Load several .env files into this manager, later files win"""
        for file_path in file_paths:
            self.env.update(self.load_file(file_path))

    @staticmethod
    def expand_value(value: str, variables: Dict[str, str]) -> str:
        """Expand $VAR, ${VAR}, ${VAR:-default} and ${VAR:?message}

        Unknown plain variables are left untouched.

        Raises:
            ConfigError: If a ${VAR:?message} variable is not set
        """

        def replace_braced(match):
            expr = match.group(1)

            if ":-" in expr:
                name, default = expr.split(":-", 1)
                return variables.get(name.strip(), default)

            if ":?" in expr:
                name, message = expr.split(":?", 1)
                name = name.strip()
                if name not in variables:
                    raise ConfigError(f"Required variable not set: {name} ({message})")
                return variables[name]

            return variables.get(expr.strip(), match.group(0))

        value = _BRACED.sub(replace_braced, value)
        return _BARE.sub(lambda m: variables.get(m.group(1), m.group(0)), value)

    @classmethod
    def expand(cls, data: Any, variables: Dict[str, str]) -> Any:
        """Recursively expand variables in strings inside dicts and lists"""
        if isinstance(data, str):
            return cls.expand_value(data, variables)
        if isinstance(data, dict):
            return {key: cls.expand(value, variables) for key, value in data.items()}
        if isinstance(data, list):
            return [cls.expand(item, variables) for item in data]
        return data
