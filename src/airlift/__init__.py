"""Move container images into offline registries through archive files"""

__version__ = "0.1.0"
