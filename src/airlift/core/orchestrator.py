"""Main orchestration logic"""

import logging
from typing import List, Optional

from airlift.core.config import Config
from airlift.core.exporter import Exporter
from airlift.core.importer import Importer
from airlift.core.naming import NAMING_SCHEMES
from airlift.core.results import StageSummary
from airlift.exceptions import AirliftError, ConfigError
from airlift.runtime.base import BaseRuntime
from airlift.runtime.docker import DEFAULT_TIMEOUT, DockerRuntime

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "images.yaml"
DEFAULT_OUTPUT_DIR = "images"
DEFAULT_REGISTRY_URL = "http://localhost:5000"


class Orchestrator:
    """Runs the export stage, then the import stage

    A fatal error in a stage stops the run. Failures of single images are
    logged, kept in ``summaries`` and never change the result of ``run``.
    """

    def __init__(self, config_file: Optional[str] = None,
                 output_dir: Optional[str] = None, registry_url: Optional[str] = None,
                 skip_export: bool = False, skip_import: bool = False,
                 naming: Optional[str] = None, runtime: Optional[BaseRuntime] = None,
                 env_files: Optional[List[str]] = None):
        """Initialize orchestrator

        Args:
            config_file: Path to configuration file listing the images; export
                falls back to images.yaml, import only reads a file given here
            output_dir: Archive directory, overrides the config value
            registry_url: Target registry URL, overrides the config value
            skip_export: Do not pull and save images
            skip_import: Do not load and push archives
            naming: Archive naming scheme, overrides the config value
            runtime: Container runtime; built from the config when omitted
            env_files: Environment files used for config expansion
        """
        self.config_file = config_file
        self.output_dir = output_dir
        self.registry_url = registry_url
        self.skip_export = skip_export
        self.skip_import = skip_import
        self.naming = naming
        self.runtime = runtime
        self.env_files = env_files
        self.config: Optional[Config] = None
        self.summaries: List[StageSummary] = []
        self.error: Optional[AirliftError] = None

    def _load_config(self) -> None:
        """Load the config file; an import-only run needs one only when named"""
        if not self.skip_export:
            self.config = Config(self.config_file or DEFAULT_CONFIG_FILE, env_files=self.env_files)
        elif self.config_file:
            self.config = Config(self.config_file, env_files=self.env_files)

    def _setting(self, explicit: Optional[str], name: str, default: str) -> str:
        if explicit:
            return explicit
        if self.config is not None and getattr(self.config, name):
            return getattr(self.config, name)
        return default

    def _init_runtime(self) -> None:
        """Initialize container runtime

        Raises:
            ConfigError: If the runtime type is not supported
            RuntimeUnavailableError: If the runtime command cannot be run
        """
        if self.runtime is not None:
            return

        if self.config is not None:
            runtime_config = self.config.runtime_config
        else:
            runtime_config = {"type": "docker", "options": {"timeout": DEFAULT_TIMEOUT}}

        runtime_type = runtime_config["type"]
        if runtime_type != "docker":
            raise ConfigError(f"Unsupported runtime type: {runtime_type}")

        options = runtime_config["options"]
        self.runtime = DockerRuntime(
            docker_cmd=options.get("cmd") or "docker",
            timeout=options["timeout"],
        )
        logger.info("Initialized Docker runtime")

    def _export(self, output_dir: str, naming: str) -> None:
        exporter = Exporter(self.runtime, output_dir, naming=naming)
        self.summaries.append(exporter.run(self.config.images))

    def _import(self, archive_dir: str, registry_url: str) -> None:
        importer = Importer(self.runtime, archive_dir, registry_url)
        self.summaries.append(importer.run())

    def run(self) -> bool:
        """Execute the enabled stages

        Returns:
            False on a fatal error, True otherwise
        """
        if self.skip_export and self.skip_import:
            logger.warning("Both export and import are skipped, nothing to do")
            return True

        logger.info("=" * 60)
        logger.info("Starting airlift")
        logger.info("=" * 60)

        try:
            self._load_config()

            output_dir = self._setting(self.output_dir, "output_dir", DEFAULT_OUTPUT_DIR)
            registry_url = self._setting(self.registry_url, "registry_url", DEFAULT_REGISTRY_URL)
            naming = self._setting(self.naming, "archive_naming", NAMING_SCHEMES[0])
            if naming not in NAMING_SCHEMES:
                raise ConfigError(f"Unknown archive naming scheme: {naming}")

            self._init_runtime()

            if not self.skip_export:
                self._export(output_dir, naming)

            if not self.skip_import:
                self._import(output_dir, registry_url)

        except AirliftError as e:
            logger.error(f"Fatal: {e}")
            self.error = e
            return False

        logger.info("=" * 60)
        for summary in self.summaries:
            logger.info(str(summary))
        logger.info("=" * 60)
        return True
