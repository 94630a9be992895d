"""
Shared pytest fixtures: fake command execution and binary lookup.
"""
import shutil
import subprocess
from typing import Callable, Dict, List, Optional, Tuple

import pytest


class FakeRun:
    """
    Stand-in for subprocess.run that records calls and answers from a table
    """

    def __init__(self):
        self.calls: List[List[str]] = []
        self.inputs: List[Optional[bytes]] = []
        self.results: Dict[Tuple[str, ...], Tuple[int, bytes, Optional[BaseException]]] = {}
        self.responder: Optional[Callable[[List[str]], Tuple[int, bytes]]] = None

    def on(self, args: List[str], returncode: int = 0, output: bytes = b"",
           raises: Optional[BaseException] = None) -> None:
        self.results[tuple(args)] = (returncode, output, raises)

    def __call__(self, args, input=None, stdout=None, stderr=None, timeout=None, **kwargs):
        self.calls.append(list(args))
        self.inputs.append(input)

        if self.responder is not None:
            returncode, output = self.responder(list(args))
        else:
            returncode, output, raises = self.results.get(tuple(args), (0, b"", None))
            if raises is not None:
                raise raises
        return subprocess.CompletedProcess(args, returncode, stdout=output)


@pytest.fixture
def fake_run(monkeypatch):
    fake = FakeRun()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


@pytest.fixture
def installed(monkeypatch):
    """Set of binary names shutil.which() should find"""
    binaries = set()
    monkeypatch.setattr(shutil, "which", lambda name: f"/usr/sbin/{name}" if name in binaries else None)
    return binaries


@pytest.fixture
def resolv_conf(tmp_path):
    """Factory writing a resolver file and returning its path"""
    path = tmp_path / "resolv.conf"

    def write(content: str) -> str:
        path.write_text(content)
        return str(path)

    return write
