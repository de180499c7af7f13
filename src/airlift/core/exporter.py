"""Pull images and save each one to its own archive"""

import logging
import os
from typing import Sequence

from airlift.core.naming import UNDERSCORE, ImageReference, encode_archive_name
from airlift.core.results import StageSummary
from airlift.exceptions import ArchiveDirectoryError, ConfigError, InvalidReferenceError
from airlift.runtime.base import BaseRuntime

logger = logging.getLogger(__name__)


class Exporter:
    """Exports images from the source registries to archive files"""

    def __init__(self, runtime: BaseRuntime, output_dir: str, naming: str = UNDERSCORE):
        """Initialize exporter

        Args:
            runtime: Container runtime used to pull and save images
            output_dir: Directory archives are written to
            naming: Archive naming scheme
        """
        self.runtime = runtime
        self.output_dir = output_dir
        self.naming = naming

    def _ensure_output_dir(self) -> None:
        if os.path.isdir(self.output_dir):
            return
        if os.path.exists(self.output_dir):
            raise ArchiveDirectoryError(f"Output path is not a directory: {self.output_dir}")

        try:
            os.makedirs(self.output_dir, exist_ok=True)
        except OSError as e:
            raise ArchiveDirectoryError(f"Cannot create output directory {self.output_dir}: {e}")
        logger.info(f"Created output directory: {self.output_dir}")

    def export_image(self, image: str, summary: StageSummary) -> None:
        """Pull one image and save it, recording the outcome in summary"""
        try:
            reference = ImageReference.parse(image)
        except InvalidReferenceError as e:
            logger.error(f"Skipping invalid image reference {image!r}: {e}")
            summary.fail(image, "parse", str(e))
            return

        if not self.runtime.pull_image(str(reference)):
            logger.error(f"Failed to pull {reference}, skipping")
            summary.fail(image, "pull", "pull failed")
            return

        archive = os.path.join(self.output_dir, encode_archive_name(reference, self.naming))
        if not self.runtime.save_image(str(reference), archive):
            logger.error(f"Failed to save {reference} to {archive}, skipping")
            summary.fail(image, "save", "save failed")
            return

        logger.info(f"Exported {reference} -> {archive}")
        summary.succeed(image, "save", archive)

    def run(self, images: Sequence[str]) -> StageSummary:
        """Export every image in order

        Args:
            images: Ordered image references

        Returns:
            StageSummary with one result per image

        Raises:
            ConfigError: If there are no images
            ArchiveDirectoryError: If the output directory cannot be created
        """
        if not images:
            raise ConfigError("No images to export")

        self._ensure_output_dir()

        summary = StageSummary("export")
        logger.info(f"Exporting {len(images)} image(s) to {self.output_dir}")

        for index, image in enumerate(images, 1):
            logger.info(f"[{index}/{len(images)}] {image}")
            self.export_image(image, summary)

        if summary.failed:
            logger.warning(f"Export finished with failures: {summary}")
        else:
            logger.info(f"Export finished: {summary}")

        return summary
