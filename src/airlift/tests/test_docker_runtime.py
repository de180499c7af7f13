"""Tests for DockerRuntime subprocess calls"""

import subprocess
from unittest.mock import patch

import pytest

from airlift.exceptions import RuntimeUnavailableError
from airlift.runtime.docker import DockerRuntime


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def mock_run():
    with patch("airlift.runtime.docker.subprocess.run") as run:
        run.return_value = completed()
        yield run


@pytest.fixture
def runtime(mock_run):
    docker = DockerRuntime(docker_cmd="podman", timeout=42)
    mock_run.reset_mock()
    return docker


class TestDockerRuntimeInit:
    """Test runtime verification"""

    def test_verifies_binary(self, mock_run):
        DockerRuntime()
        assert mock_run.call_args[0][0] == ["docker", "version"]

    def test_missing_binary(self, mock_run):
        mock_run.side_effect = FileNotFoundError("docker")
        with pytest.raises(RuntimeUnavailableError):
            DockerRuntime()

    def test_failing_binary(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(1, ["docker", "version"])
        with pytest.raises(RuntimeUnavailableError):
            DockerRuntime()


class TestDockerRuntimeCommands:
    """Test the command line of each operation"""

    @pytest.mark.parametrize("method,args,expected", [
        ("pull_image", ("nginx:1.25",), ["podman", "pull", "nginx:1.25"]),
        ("save_image", ("nginx:1.25", "/out/nginx@1.25.tar"),
         ["podman", "save", "-o", "/out/nginx@1.25.tar", "nginx:1.25"]),
        ("load_image", ("/out/nginx@1.25.tar",), ["podman", "load", "-i", "/out/nginx@1.25.tar"]),
        ("tag_image", ("nginx:1.25", "reg:5000/nginx:1.25"),
         ["podman", "tag", "nginx:1.25", "reg:5000/nginx:1.25"]),
        ("push_image", ("reg:5000/nginx:1.25",), ["podman", "push", "reg:5000/nginx:1.25"]),
        ("remove_image", ("nginx:1.25",), ["podman", "rmi", "nginx:1.25"]),
    ])
    def test_success(self, runtime, mock_run, method, args, expected):
        assert getattr(runtime, method)(*args) is True
        assert mock_run.call_args[0][0] == expected
        assert mock_run.call_args[1]["timeout"] == 42

    def test_non_zero_exit(self, runtime, mock_run, caplog):
        mock_run.return_value = completed(returncode=1, stderr="manifest unknown\n")

        assert runtime.pull_image("nginx:nope") is False
        assert "manifest unknown" in caplog.text

    def test_timeout(self, runtime, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="podman push", timeout=42)
        assert runtime.push_image("reg/nginx") is False

    def test_os_error(self, runtime, mock_run):
        mock_run.side_effect = OSError("exec format error")
        assert runtime.load_image("/out/a.tar") is False


class TestDockerRuntimeListContainers:
    """Test ancestor container query"""

    def test_parses_ids(self, runtime, mock_run):
        mock_run.return_value = completed(stdout="abc123\n\ndef456\n")

        assert runtime.list_containers("nginx:1.25") == ["abc123", "def456"]
        assert mock_run.call_args[0][0] == [
            "podman", "ps", "-a", "-q", "--filter", "ancestor=nginx:1.25",
        ]

    def test_no_containers(self, runtime, mock_run):
        assert runtime.list_containers("nginx:1.25") == []

    def test_query_failure(self, runtime, mock_run):
        mock_run.return_value = completed(returncode=1, stderr="daemon down")
        assert runtime.list_containers("nginx:1.25") is None
