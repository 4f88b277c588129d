"""Wrappers around the external tools the pipeline drives: git, dotnet, kiota and the fixer."""

import json
import logging
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence, Union
from urllib.parse import urlsplit, urlunsplit

from .document import to_json

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ToolError(Exception):
    """An external command exited with a non-zero status."""

    def __init__(self, command: str, returncode: int, stderr: str = ""):
        message = f"Command failed with exit code {returncode}: {command}"
        if stderr:
            message += f"\n{stderr.strip()}"
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


def _redact(text: str, secrets: Sequence[str]) -> str:
    for secret in secrets:
        if secret:
            text = text.replace(secret, "***")
    return text


def run_process(
    args: Sequence[str],
    cwd: Optional[PathLike] = None,
    check: bool = True,
    secrets: Sequence[str] = (),
) -> subprocess.CompletedProcess:
    """Run a command to completion, capturing its output."""
    command = _redact(shlex.join(str(a) for a in args), secrets)
    logger.info("Running: %s", command)

    result = subprocess.run([str(a) for a in args], capture_output=True, text=True, cwd=cwd)

    if result.stdout:
        logger.debug(_redact(result.stdout, secrets))
    if check and result.returncode != 0:
        raise ToolError(command, result.returncode, _redact(result.stderr or "", secrets))
    return result


def authenticated_url(url: str, token: str) -> str:
    """Embed a token as the credentials of an https remote URL."""
    parts = urlsplit(url)
    if parts.scheme != "https":
        raise ValueError(f"Only https remotes can carry a token: {url}")
    host = parts.hostname or ""
    if parts.port:
        host += f":{parts.port}"
    return urlunsplit((parts.scheme, f"x-access-token:{token}@{host}", parts.path, parts.query, parts.fragment))


class GitClient:
    def __init__(self, executable: str = "git"):
        self.executable = executable

    def clone_to_temp_directory(self, url: str) -> Path:
        directory = Path(tempfile.mkdtemp(prefix="openapi-client-runner-"))
        run_process([self.executable, "clone", "--depth", "1", url, str(directory)])
        logger.info("Cloned %s into %s", url, directory)
        return directory

    def commit_and_push(self, repo_dir: PathLike, message: str, token: str, author_name: str, author_email: str) -> bool:
        """Commit every change in ``repo_dir`` and push it; False when there was nothing to commit."""
        git = self.executable
        status = run_process([git, "status", "--porcelain"], cwd=repo_dir)
        if not status.stdout.strip():
            logger.info("No changes to commit in %s", repo_dir)
            return False

        run_process([git, "add", "--all"], cwd=repo_dir)
        run_process(
            [git, "-c", f"user.name={author_name}", "-c", f"user.email={author_email}", "commit", "-m", message],
            cwd=repo_dir,
        )

        remote = run_process([git, "remote", "get-url", "origin"], cwd=repo_dir).stdout.strip()
        run_process([git, "push", authenticated_url(remote, token), "HEAD"], cwd=repo_dir, secrets=[token])
        logger.info("Pushed changes from %s", repo_dir)
        return True


class DotnetClient:
    def __init__(self, executable: str = "dotnet"):
        self.executable = executable

    def update_global_tool(self, package: str) -> None:
        run_process([self.executable, "tool", "update", "--global", package])

    def restore(self, project: PathLike) -> bool:
        result = run_process([self.executable, "restore", str(project)], check=False)
        if result.returncode != 0:
            logger.error("Restore failed for %s:\n%s", project, result.stdout + result.stderr)
        return result.returncode == 0

    def build(self, project: PathLike, configuration: str = "Release", restore: bool = False) -> bool:
        args = [self.executable, "build", str(project), "--configuration", configuration]
        if not restore:
            args.append("--no-restore")

        result = run_process(args, check=False)
        if result.returncode != 0:
            logger.error("Build failed for %s:\n%s", project, result.stdout + result.stderr)
        return result.returncode == 0


class KiotaGenerator:
    def __init__(self, executable: str = "kiota", language: str = "CSharp"):
        self.executable = executable
        self.language = language

    def generate(self, spec_path: PathLike, client_name: str, namespace: str, output_dir: PathLike) -> None:
        run_process([
            self.executable, "generate",
            "-l", self.language,
            "-d", str(spec_path),
            "-c", client_name,
            "-n", namespace,
            "-o", str(output_dir),
            "--exclude-backward-compatible",
        ])
        logger.info("Generated %s client into %s", client_name, output_dir)


class OpenApiFixer:
    """Repairs a merged document.

    With a command configured, ``{input}`` and ``{output}`` in each argument
    are filled in and the command is run. Without one the JSON is parsed and
    written back in the standard layout.
    """

    def __init__(self, command: Optional[List[str]] = None):
        self.command = command

    def fix(self, input_path: PathLike, output_path: PathLike) -> None:
        if self.command:
            args = [part.format(input=input_path, output=output_path) for part in self.command]
            run_process(args)
        else:
            document = json.loads(Path(input_path).read_text(encoding="utf-8"))
            Path(output_path).write_text(to_json(document), encoding="utf-8")

        logger.info("Fixed %s -> %s", input_path, output_path)
