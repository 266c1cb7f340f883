"""Tests for kernel spec lookup."""

import json

import pytest

from nbframe import FileAccessError, MalformedDocumentError
from nbframe.parsing.kernels import KernelSpecLookup, default_kernel_dirs


def _install(directory, name, **spec):
    kernel_dir = directory / name
    kernel_dir.mkdir(parents=True)
    data = {"argv": ["python", "-m", "ipykernel", "-f", "{connection_file}"], "language": "python"}
    data.update(spec)
    (kernel_dir / "kernel.json").write_text(json.dumps(data), encoding="utf-8")


@pytest.fixture
def kernel_dirs(tmp_path):
    user = tmp_path / "user" / "kernels"
    system = tmp_path / "system" / "kernels"
    user.mkdir(parents=True)
    system.mkdir(parents=True)
    return user, system


class TestKernelSpecLookup:
    """Tests for KernelSpecLookup class."""

    def test_find_kernel(self, kernel_dirs):
        user, system = kernel_dirs
        _install(system, "python3", display_name="Python 3")

        spec = KernelSpecLookup([user, system]).find("python3")

        assert spec.display_name == "Python 3"
        assert spec.language == "python"
        assert str(spec) == "Python 3"

    def test_defaults(self, kernel_dirs):
        user, _ = kernel_dirs
        _install(user, "python3", display_name="Python 3")

        spec = KernelSpecLookup([user]).find("python3")

        assert spec.interrupt_mode == "signal"
        assert spec.env == {}
        assert spec.metadata is None

    def test_optional_fields(self, kernel_dirs):
        user, _ = kernel_dirs
        _install(
            user,
            "ir",
            display_name="R",
            language="R",
            interrupt_mode="message",
            env={"R_LIBS": "/opt/r"},
            metadata={"debugger": False},
        )

        spec = KernelSpecLookup([user]).find("ir")

        assert spec.interrupt_mode == "message"
        assert spec.env == {"R_LIBS": "/opt/r"}

    def test_user_directory_wins(self, kernel_dirs):
        user, system = kernel_dirs
        _install(system, "python3", display_name="System Python")
        _install(user, "python3", display_name="User Python")

        spec = KernelSpecLookup([user, system]).find("python3")

        assert spec.display_name == "User Python"

    def test_missing_kernel(self, kernel_dirs):
        with pytest.raises(FileAccessError, match="not found"):
            KernelSpecLookup(kernel_dirs).find("julia")

    def test_malformed_kernel_spec(self, kernel_dirs):
        user, _ = kernel_dirs
        _install(user, "broken", display_name="Broken", interrupt_mode="poke")

        with pytest.raises(MalformedDocumentError, match="interrupt_mode"):
            KernelSpecLookup([user]).find("broken")

    def test_invalid_json(self, kernel_dirs):
        user, _ = kernel_dirs
        (user / "bad").mkdir()
        (user / "bad" / "kernel.json").write_text("{", encoding="utf-8")

        with pytest.raises(MalformedDocumentError):
            KernelSpecLookup([user]).find("bad")

    def test_list_kernels(self, kernel_dirs, tmp_path):
        user, system = kernel_dirs
        _install(user, "python3", display_name="Python 3")
        _install(user, "bash", display_name="Bash")
        _install(system, "ir", display_name="R")
        (user / "stray-file.txt").write_text("not a kernel", encoding="utf-8")
        missing = tmp_path / "missing" / "kernels"

        listing = KernelSpecLookup([user, system, missing]).list_kernels()

        assert list(listing) == [user, system, missing]
        assert [(name, spec.display_name) for name, spec in listing[user]] == [
            ("bash", "Bash"),
            ("python3", "Python 3"),
        ]
        assert [name for name, _ in listing[system]] == ["ir"]
        assert listing[missing] == []

    def test_default_directories(self):
        dirs = default_kernel_dirs()

        assert dirs
        assert all(d.name == "kernels" for d in dirs)
        assert len(dirs) == len(set(dirs))
