"""Shared fixtures: temporary git repositories and an in-memory remote host"""

import posixpath
import re
import shlex
import subprocess
import tarfile
from pathlib import Path
from typing import Dict, List, Optional, Set

import pytest

from git_ssh_deploy.api.exceptions import TransferError, TransportError
from git_ssh_deploy.models import EnvironmentConfig
from git_ssh_deploy.remote.base import CommandResult, RemoteExecutor


REMOTE_ROOT = "/var/www/html"


class GitRepoHelper:
    """Drive a throwaway git repository from tests"""

    def __init__(self, root: Path):
        self.root = root
        self.git("init", "-q")
        self.git("config", "user.name", "Test User")
        self.git("config", "user.email", "test@example.com")
        self.git("config", "commit.gpgsign", "false")

    def git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.root,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    def write(self, path: str, content: str = "content\n") -> None:
        target = self.root / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)

    def remove(self, path: str) -> None:
        self.git("rm", "-q", path)

    def move(self, old: str, new: str) -> None:
        (self.root / new).parent.mkdir(parents=True, exist_ok=True)
        self.git("mv", old, new)

    def commit(self, message: str = "commit") -> str:
        self.git("add", "-A")
        self.git("commit", "-q", "-m", message)
        return self.head()

    def head(self) -> str:
        return self.git("rev-parse", "HEAD").strip()


class FakeRemoteHost(RemoteExecutor):
    """In-memory stand-in for one SSH host

    Understands exactly the commands RemoteCommandBuilder produces; any
    other command is treated as a hook and answered from ``hook_results``.
    """

    def __init__(self, root: str = REMOTE_ROOT):
        self.root = root
        self.files: Dict[str, str] = {}
        self.dirs: Set[str] = set()
        self.readonly: Set[str] = set()
        self.archives: Dict[str, List[str]] = {}
        self.commands: List[str] = []
        self.copies: List[str] = []
        self.hook_results: Dict[str, CommandResult] = {}
        self.reachable = True
        self.fail_copy = False
        self.fail_marker_write = False
        self.fail_remove: Set[str] = set()
        self.add_dir(root)

    # Test setup helpers

    def add_dir(self, path: str) -> None:
        while path not in ("", "/"):
            self.dirs.add(path)
            path = posixpath.dirname(path)

    def add_file(self, path: str, content: str = "") -> None:
        self.files[path] = content
        self.add_dir(posixpath.dirname(path))

    def is_empty_dir(self, path: str) -> bool:
        prefix = path.rstrip("/") + "/"
        return not any(p.startswith(prefix) for p in list(self.files) + list(self.dirs))

    # RemoteExecutor

    def run(self, command: str) -> CommandResult:
        self.commands.append(command)
        if not self.reachable:
            raise TransportError("ssh: connect to host example.com port 22: Connection refused")

        if command.startswith("if [ -d "):
            return self._prune_dir(command)

        results = [self._run_simple(part) for part in command.split(" && ")]
        for result in results:
            if not result.ok:
                return result
        return results[-1]

    def copy_file(self, local_path: Path, remote_path: str) -> None:
        self.copies.append(remote_path)
        if self.fail_copy:
            raise TransferError("Could not upload archive to remote server: Permission denied")
        with tarfile.open(local_path, "r:gz") as tar:
            self.archives[remote_path] = tar.getnames()
        self.files[remote_path] = "<archive>"

    # Command interpretation

    def _prune_dir(self, command: str) -> CommandResult:
        directory = shlex.split(re.match(r"if \[ -d (\S+) \]", command).group(1))[0]
        if directory in self.dirs and self.is_empty_dir(directory):
            self.dirs.discard(directory)
            return CommandResult(0)
        return CommandResult(2)

    def _run_simple(self, command: str) -> CommandResult:
        args = shlex.split(command)
        name = args[0]

        if name == "echo":
            return CommandResult(0, " ".join(args[1:]) + "\n")

        if name == "test":
            path = args[2]
            if args[1] == "-d":
                return CommandResult(0 if path in self.dirs else 1)
            return CommandResult(0 if path in self.dirs and path not in self.readonly else 1)

        if name == "cat":
            if args[1] in self.files:
                return CommandResult(0, self.files[args[1]])
            return CommandResult(1, "", f"cat: {args[1]}: No such file or directory")

        if name == "printf":
            if self.fail_marker_write:
                return CommandResult(0)
            self.add_file(args[4], args[2] + "\n")
            return CommandResult(0)

        if name == "rm":
            force = args[1] == "-f"
            path = args[-1]
            if path in self.fail_remove:
                return CommandResult(1, "", f"rm: cannot remove '{path}': Permission denied")
            if path in self.files:
                del self.files[path]
                return CommandResult(0)
            return CommandResult(0 if force else 1)

        if name == "tar":
            archive, destination = args[2], args[4]
            if archive not in self.archives:
                return CommandResult(2, "", "tar: Cannot open: No such file or directory")
            for member in self.archives[archive]:
                self.add_file(posixpath.join(destination, member), "extracted")
            return CommandResult(0)

        return self.hook_results.get(command, CommandResult(0, f"ran {command}\n"))

    # Assertions

    def mutating_commands(self) -> List[str]:
        readonly = ("echo ", "test ", "cat ")
        return [c for c in self.commands if not c.startswith(readonly)]

    @property
    def marker(self) -> Optional[str]:
        return self.files.get(posixpath.join(self.root, ".git-ssh-deploy-state-commit-id.log"))


@pytest.fixture
def git_repo(tmp_path):
    """Empty git repository with an identity configured"""
    root = tmp_path / "repo"
    root.mkdir()
    return GitRepoHelper(root)


@pytest.fixture
def remote():
    """In-memory remote host with an existing, writable remote directory"""
    return FakeRemoteHost()


@pytest.fixture
def environment():
    """Valid environment pointing at the fake remote root"""
    return EnvironmentConfig(
        name="production",
        host="example.com",
        user="deploy",
        port="22",
        remote_directory=REMOTE_ROOT,
    )
