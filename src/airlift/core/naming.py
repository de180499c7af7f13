"""Image reference parsing and archive filename encoding

Two naming schemes are supported:

``underscore``
    ``registry.example.com/team/app:1.0`` -> ``registry.example.com____team__app@1.0.tar``.
    The first segment of a reference with two or more ``/`` is marked with
    ``____`` and dropped again on decode, so the registry host cannot be
    recovered from the filename alone.

``percent``
    ``registry.example.com/team/app:1.0`` -> ``registry.example.com%2Fteam%2Fapp%3A1.0.tar``.
    Lossless: the full reference is percent-encoded. On import the first
    segment is dropped only when it looks like a registry host (contains "."
    or ":", or is "localhost"), so "myorg/team/app:1" is pushed as
    "myorg/team/app:1" here but as "team/app:1" with ``underscore``.

Both are read by :func:`decode_archive_name`; ``%`` never appears in a valid
image reference, which is how the schemes are told apart.
"""

import logging
import os
from dataclasses import dataclass
from typing import List, Optional, Union
from urllib.parse import quote, unquote

from airlift.exceptions import InvalidArchiveNameError, InvalidReferenceError

logger = logging.getLogger(__name__)

DEFAULT_TAG = "latest"
ARCHIVE_SUFFIX = ".tar"

HOST_MARKER = "____"
PATH_SEPARATOR = "__"
TAG_SEPARATOR = "@"

UNDERSCORE = "underscore"
PERCENT = "percent"
NAMING_SCHEMES = (UNDERSCORE, PERCENT)


@dataclass(frozen=True)
class ImageReference:
    """A parsed ``[host[:port]/]path/name[:tag]`` image reference"""

    name: str
    tag: Optional[str] = None

    @classmethod
    def parse(cls, reference: str) -> "ImageReference":
        """Parse a reference string

        Args:
            reference: Image reference (e.g., registry.example.com/team/app:1.0)

        Returns:
            ImageReference instance

        Raises:
            InvalidReferenceError: If the reference is empty, has a digest or
                contains empty path segments
        """
        if not isinstance(reference, str):
            raise InvalidReferenceError(f"Image reference must be a string: {reference!r}")

        reference = reference.strip()
        if not reference:
            raise InvalidReferenceError("Empty image reference")
        if any(ch.isspace() for ch in reference):
            raise InvalidReferenceError(f"Image reference contains whitespace: {reference}")
        if "@" in reference:
            raise InvalidReferenceError(f"Digest references are not supported: {reference}")
        if "%" in reference:
            raise InvalidReferenceError(f"Invalid character '%' in image reference: {reference}")

        name, tag = reference, None
        last_segment = reference.rsplit("/", 1)[-1]
        if ":" in last_segment:
            name, tag = reference.rsplit(":", 1)
            if not tag:
                raise InvalidReferenceError(f"Empty tag in image reference: {reference}")

        if any(not segment for segment in name.split("/")):
            raise InvalidReferenceError(f"Empty path segment in image reference: {reference}")

        return cls(name=name, tag=tag)

    @property
    def segments(self) -> List[str]:
        return self.name.split("/")

    @property
    def effective_tag(self) -> str:
        return self.tag or DEFAULT_TAG

    @property
    def registry_host(self) -> Optional[str]:
        """Registry host, if the first segment looks like one"""
        segments = self.segments
        if len(segments) < 2:
            return None
        first = segments[0]
        if "." in first or ":" in first or first == "localhost":
            return first
        return None

    @property
    def repository(self) -> str:
        """Repository path without the registry host"""
        if self.registry_host is None:
            return self.name
        return self.name.split("/", 1)[1]

    def __str__(self) -> str:
        if self.tag is None:
            return self.name
        return f"{self.name}:{self.tag}"


@dataclass(frozen=True)
class ArchiveName:
    """What an archive filename tells the importer"""

    image_name: str
    tag: str
    # name the runtime restores the image under on load
    source_image: str

    def target(self, registry_host: str) -> str:
        """Reference to tag and push the image as

        Args:
            registry_host: Registry host[:port] without scheme

        Returns:
            Full target reference
        """
        return f"{registry_host}/{self.image_name}:{self.tag}"


def _as_reference(reference: Union[str, ImageReference]) -> ImageReference:
    if isinstance(reference, ImageReference):
        return reference
    return ImageReference.parse(reference)


def encode_underscore(reference: ImageReference) -> str:
    segments = reference.segments
    if len(segments) > 2:
        stem = segments[0] + HOST_MARKER + PATH_SEPARATOR.join(segments[1:])
    else:
        stem = PATH_SEPARATOR.join(segments)

    if reference.tag is not None:
        stem += TAG_SEPARATOR + reference.tag

    return stem + ARCHIVE_SUFFIX


def encode_percent(reference: ImageReference) -> str:
    return quote(str(reference), safe="") + ARCHIVE_SUFFIX


def encode_archive_name(reference: Union[str, ImageReference], scheme: str = UNDERSCORE) -> str:
    """Derive the archive filename for an image reference

    Args:
        reference: Image reference string or parsed reference
        scheme: Naming scheme ('underscore' or 'percent')

    Returns:
        Filesystem-safe archive filename ending in .tar
    """
    reference = _as_reference(reference)

    if scheme == UNDERSCORE:
        return encode_underscore(reference)
    if scheme == PERCENT:
        return encode_percent(reference)

    raise ValueError(f"Unknown naming scheme: {scheme}")


def _archive_stem(filename: str) -> str:
    filename = os.path.basename(filename)
    if not filename.endswith(ARCHIVE_SUFFIX):
        raise InvalidArchiveNameError(f"Not a {ARCHIVE_SUFFIX} archive: {filename}")

    stem = filename[: -len(ARCHIVE_SUFFIX)]
    if not stem:
        raise InvalidArchiveNameError(f"Empty archive name: {filename}")
    return stem


def decode_underscore(stem: str) -> ArchiveName:
    if TAG_SEPARATOR in stem:
        base, tag = stem.rsplit(TAG_SEPARATOR, 1)
    else:
        base, tag = stem, DEFAULT_TAG

    if not base or not tag:
        raise InvalidArchiveNameError(f"Cannot decode archive name: {stem}{ARCHIVE_SUFFIX}")

    image_name = base
    if HOST_MARKER in base:
        image_name = base.split(HOST_MARKER, 1)[1]
    image_name = image_name.replace(PATH_SEPARATOR, "/")

    # Full original reference, host included
    source_image = (
        stem.replace(HOST_MARKER, "/")
        .replace(PATH_SEPARATOR, "/")
        .replace(TAG_SEPARATOR, ":")
    )

    if not image_name:
        raise InvalidArchiveNameError(f"Cannot decode archive name: {stem}{ARCHIVE_SUFFIX}")

    return ArchiveName(image_name=image_name, tag=tag, source_image=source_image)


def decode_percent(stem: str) -> ArchiveName:
    """Decode a percent-encoded name; only a host-like first segment is dropped"""
    try:
        reference = ImageReference.parse(unquote(stem))
    except InvalidReferenceError as e:
        raise InvalidArchiveNameError(f"Cannot decode archive name {stem}{ARCHIVE_SUFFIX}: {e}")

    return ArchiveName(
        image_name=reference.repository,
        tag=reference.effective_tag,
        source_image=str(reference),
    )


def decode_archive_name(filename: str) -> ArchiveName:
    """Recover image name, tag and source image from an archive filename

    Args:
        filename: Archive filename or path

    Returns:
        ArchiveName instance

    Raises:
        InvalidArchiveNameError: If the filename is not a decodable archive name
    """
    stem = _archive_stem(filename)

    if "%" in stem:
        decoded = decode_percent(stem)
    else:
        decoded = decode_underscore(stem)

    logger.debug(f"Decoded {filename} -> {decoded}")
    return decoded
