"""Docker container runtime implementation"""

import subprocess
import logging
from typing import List, Optional

from airlift.exceptions import RuntimeUnavailableError

from .base import BaseRuntime

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 600


class DockerRuntime(BaseRuntime):
    """Docker container runtime (any docker-compatible CLI, e.g. podman)"""

    def __init__(self, docker_cmd: str = "docker", timeout: int = DEFAULT_TIMEOUT):
        """Initialize Docker runtime

        Args:
            docker_cmd: Docker command to use (default: 'docker')
            timeout: Seconds to wait for each runtime command
        """
        self.docker_cmd = docker_cmd
        self.timeout = timeout
        self._verify_docker()

    def _verify_docker(self) -> None:
        """Verify docker is available"""
        try:
            subprocess.run(
                [self.docker_cmd, "version"],
                capture_output=True,
                check=True,
                timeout=30,
            )
            logger.info(f"Container runtime verified: {self.docker_cmd}")
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
            logger.error(f"{self.docker_cmd} is not available or not working: {e}")
            raise RuntimeUnavailableError(f"Container runtime unavailable: {e}")

    def _run(self, args: List[str], action: str) -> Optional[subprocess.CompletedProcess]:
        """Run a runtime command

        Args:
            args: Arguments after the runtime command
            action: Short description for log messages

        Returns:
            CompletedProcess on exit code 0, None otherwise
        """
        cmd = [self.docker_cmd] + args
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.error(f"Timeout while trying to {action}")
            return None
        except OSError as e:
            logger.error(f"Error trying to {action}: {e}")
            return None

        if result.returncode != 0:
            logger.error(f"Failed to {action}: {result.stderr.strip()}")
            return None

        return result

    def pull_image(self, image_name: str) -> bool:
        logger.info(f"Pulling image: {image_name}")
        if self._run(["pull", image_name], f"pull {image_name}") is None:
            return False
        logger.info(f"Successfully pulled: {image_name}")
        return True

    def save_image(self, image_name: str, output_tar: str) -> bool:
        logger.info(f"Saving {image_name} to {output_tar}")
        if self._run(["save", "-o", output_tar, image_name], f"save {image_name}") is None:
            return False
        logger.info(f"Successfully saved {image_name} to {output_tar}")
        return True

    def load_image(self, tar_file: str) -> bool:
        logger.info(f"Loading images from {tar_file}")
        result = self._run(["load", "-i", tar_file], f"load {tar_file}")
        if result is None:
            return False
        if result.stdout:
            logger.debug(f"Load output: {result.stdout.strip()}")
        logger.info(f"Successfully loaded images from {tar_file}")
        return True

    def tag_image(self, source: str, target: str) -> bool:
        logger.info(f"Tagging {source} as {target}")
        return self._run(["tag", source, target], f"tag {source} as {target}") is not None

    def push_image(self, image_name: str) -> bool:
        logger.info(f"Pushing image: {image_name}")
        if self._run(["push", image_name], f"push {image_name}") is None:
            return False
        logger.info(f"Successfully pushed: {image_name}")
        return True

    def remove_image(self, image_name: str) -> bool:
        logger.debug(f"Removing local image: {image_name}")
        return self._run(["rmi", image_name], f"remove {image_name}") is not None

    def list_containers(self, ancestor: str) -> Optional[List[str]]:
        result = self._run(
            ["ps", "-a", "-q", "--filter", f"ancestor={ancestor}"],
            f"list containers of {ancestor}",
        )
        if result is None:
            return None
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]
