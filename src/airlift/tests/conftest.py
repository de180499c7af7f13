"""Pytest configuration and shared fixtures"""

import json
import os
import tempfile
from typing import Dict, List, Optional, Set

import pytest
import yaml

from airlift.runtime.base import BaseRuntime


class FakeRuntime(BaseRuntime):
    """Records runtime calls; save_image writes a small archive file"""

    def __init__(self, fail: Optional[Dict[str, Set[str]]] = None,
                 containers: Optional[Dict[str, Optional[List[str]]]] = None):
        self.calls = []
        self.fail = fail or {}
        self.containers = containers or {}

    def _record(self, op: str, *args) -> bool:
        self.calls.append((op,) + args)
        return args[0] not in self.fail.get(op, set())

    def ops(self, op: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == op]

    def pull_image(self, image_name):
        return self._record("pull", image_name)

    def save_image(self, image_name, output_tar):
        ok = self._record("save", image_name, output_tar)
        if ok:
            with open(output_tar, "wb") as f:
                f.write(b"archive")
        return ok

    def load_image(self, tar_file):
        return self._record("load", os.path.basename(tar_file))

    def tag_image(self, source, target):
        return self._record("tag", source, target)

    def push_image(self, image_name):
        return self._record("push", image_name)

    def remove_image(self, image_name):
        return self._record("rmi", image_name)

    def list_containers(self, ancestor):
        self.calls.append(("ps", ancestor))
        return self.containers.get(ancestor, [])


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def fake_runtime():
    return FakeRuntime()


@pytest.fixture
def make_runtime():
    """Factory for fake runtimes with failures or containers"""
    return FakeRuntime


@pytest.fixture
def archive_dir(temp_dir):
    path = os.path.join(temp_dir, "archives")
    os.makedirs(path)
    return path


@pytest.fixture
def make_archives(archive_dir):
    """Create empty archive files with the given names"""

    def _make(*names):
        for name in names:
            with open(os.path.join(archive_dir, name), "wb") as f:
                f.write(b"archive")
        return archive_dir

    return _make


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing"""
    return {
        "images": [
            "nginx:1.25",
            "library/redis:7",
            "registry.example.com/team/app:1.0",
        ],
        "registry_url": "http://registry.local:5000",
        "runtime": {
            "type": "docker",
            "options": {"cmd": "docker", "timeout": 60},
        },
    }


@pytest.fixture
def write_config(temp_dir):
    """Write config data as YAML (default) or JSON and return the path"""

    def _write(data, name="config.yaml", as_json=False):
        path = os.path.join(temp_dir, name)
        with open(path, "w") as f:
            if as_json:
                json.dump(data, f)
            else:
                yaml.dump(data, f)
        return path

    return _write
