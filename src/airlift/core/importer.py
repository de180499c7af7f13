"""Load archives, retag and push them to the target registry"""

import logging
import os
from typing import List
from urllib.parse import urlparse

from airlift.core.naming import ARCHIVE_SUFFIX, decode_archive_name
from airlift.core.results import StageSummary
from airlift.exceptions import ArchiveDirectoryError, ConfigError, InvalidArchiveNameError
from airlift.runtime.base import BaseRuntime

logger = logging.getLogger(__name__)


def parse_registry_host(registry_url: str) -> str:
    """Strip scheme, credentials and path from a registry URL

    Args:
        registry_url: Registry URL (e.g., http://localhost:5000)

    Returns:
        host[:port] part of the URL
    """
    registry_url = registry_url.strip()
    if "://" in registry_url:
        parsed = urlparse(registry_url)
    else:
        parsed = urlparse("//" + registry_url)
    try:
        port = parsed.port
    except ValueError:
        raise ConfigError(f"Registry URL has an invalid port: {registry_url!r}")

    host = parsed.hostname
    if not host:
        raise ConfigError(f"Registry URL has no host: {registry_url!r}")

    if ":" in host:
        host = f"[{host}]"
    if port is not None:
        host = f"{host}:{port}"
    return host


class Importer:
    """Imports archive files into an offline registry"""

    def __init__(self, runtime: BaseRuntime, archive_dir: str, registry_url: str):
        """Initialize importer

        Args:
            runtime: Container runtime used to load, tag, push and remove images
            archive_dir: Directory containing archives
            registry_url: Target registry URL
        """
        self.runtime = runtime
        self.archive_dir = archive_dir
        self.registry_url = registry_url
        self.registry_host = parse_registry_host(registry_url)

    def find_archives(self) -> List[str]:
        """List archive files, sorted by filename

        Raises:
            ArchiveDirectoryError: If the archive directory does not exist
        """
        if not os.path.isdir(self.archive_dir):
            raise ArchiveDirectoryError(f"Archive directory not found: {self.archive_dir}")

        return sorted(
            name
            for name in os.listdir(self.archive_dir)
            if name.endswith(ARCHIVE_SUFFIX)
            and os.path.isfile(os.path.join(self.archive_dir, name))
        )

    def _cleanup(self, target: str, source_image: str) -> None:
        if not self.runtime.remove_image(target):
            logger.warning(f"Could not remove local image {target}")

        containers = self.runtime.list_containers(source_image)
        if containers is None:
            logger.warning(f"Could not list containers of {source_image}, keeping image")
        elif containers:
            logger.info(f"Keeping {source_image}: used by container(s) {', '.join(containers)}")
        elif not self.runtime.remove_image(source_image):
            logger.warning(f"Could not remove local image {source_image}")

    def import_archive(self, filename: str, summary: StageSummary) -> None:
        """Load, tag, push and clean up one archive, recording the outcome in summary"""
        path = os.path.join(self.archive_dir, filename)

        try:
            archive = decode_archive_name(filename)
        except InvalidArchiveNameError as e:
            logger.error(f"Skipping {filename}: {e}")
            summary.fail(filename, "decode", str(e))
            return

        if not self.runtime.load_image(path):
            logger.error(f"Failed to load {path}, skipping")
            summary.fail(filename, "load", "load failed")
            return

        target = archive.target(self.registry_host)
        if not self.runtime.tag_image(archive.source_image, target):
            logger.error(f"Failed to tag {archive.source_image} as {target}, skipping")
            summary.fail(filename, "tag", "tag failed")
            return

        if not self.runtime.push_image(target):
            logger.error(f"Failed to push {target}, skipping")
            summary.fail(filename, "push", "push failed")
            return

        self._cleanup(target, archive.source_image)

        logger.info(f"Imported {filename} -> {target}")
        summary.succeed(filename, "push", target)

    def run(self) -> StageSummary:
        """Import every archive in the archive directory

        Returns:
            StageSummary with one result per archive

        Raises:
            ArchiveDirectoryError: If the archive directory does not exist
        """
        archives = self.find_archives()
        summary = StageSummary("import")

        if not archives:
            logger.warning(f"No {ARCHIVE_SUFFIX} archives found in {self.archive_dir}")
            return summary

        logger.info(f"Importing {len(archives)} archive(s) into {self.registry_host}")

        for index, filename in enumerate(archives, 1):
            logger.info(f"[{index}/{len(archives)}] {filename}")
            self.import_archive(filename, summary)

        if summary.failed:
            logger.warning(f"Import finished with failures: {summary}")
        else:
            logger.info(f"Import finished: {summary}")

        return summary
