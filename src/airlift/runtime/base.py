"""Abstract base class for container runtimes"""

from abc import ABC, abstractmethod
from typing import List, Optional


class BaseRuntime(ABC):
    """Abstract base for container runtime implementations

    Each method wraps one external runtime operation. Failures are reported
    through the return value, never raised, so a batch can move on to the
    next image.
    """

    @abstractmethod
    def pull_image(self, image_name: str) -> bool:
        """Pull an image from registry

        Args:
            image_name: Full image reference (e.g., nginx:latest)

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    def save_image(self, image_name: str, output_tar: str) -> bool:
        """Save an image to a tar file

        Args:
            image_name: Image to save
            output_tar: Path to output tar file

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    def load_image(self, tar_file: str) -> bool:
        """Load images from a tar file

        Args:
            tar_file: Path to tar file containing images

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    def tag_image(self, source: str, target: str) -> bool:
        """Add a new name to a local image

        Args:
            source: Existing local image reference
            target: New image reference

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    def push_image(self, image_name: str) -> bool:
        """Push an image to its registry

        Args:
            image_name: Full image reference including registry host

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    def remove_image(self, image_name: str) -> bool:
        """Remove an image from the local image store

        Args:
            image_name: Image reference to remove

        Returns:
            True if successful, False otherwise
        """
        pass

    @abstractmethod
    def list_containers(self, ancestor: str) -> Optional[List[str]]:
        """List running and stopped containers created from an image

        Args:
            ancestor: Image reference used as ancestor filter

        Returns:
            List of container IDs, or None if the query failed
        """
        pass
