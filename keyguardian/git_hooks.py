"""
Git Integration Module

Discovers the files staged for commit and installs the hook stubs that run
KeyGuardian before commits and pushes.
"""

import logging
import os
import stat
from pathlib import Path
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

DEFAULT_HOOKS = ("pre-commit", "pre-push")

HOOK_COMMANDS = {
    "pre-commit": "keyguardian scan --staged",
    "pre-push": "keyguardian scan --all",
}

HOOK_TEMPLATE = """#!/bin/sh
# KeyGuardian {hook} hook
{command}
"""


class GitError(RuntimeError):
    """Git is unavailable or the operation failed"""


def open_repository(root: Optional[str] = None):
    """Open the repository containing root (the working directory by default)"""
    # Imported lazily: GitPython refuses to import without a git executable
    try:
        from git import InvalidGitRepositoryError, NoSuchPathError, Repo
    except ImportError as e:
        raise GitError(f"Git is not available: {e}") from e

    path = root or os.getcwd()
    try:
        return Repo(path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise GitError(f"Not a git repository: {path}") from e


def repository_root(root: Optional[str] = None) -> str:
    """Top-level working tree directory of the repository containing root"""
    repo = open_repository(root)
    if repo.working_tree_dir is None:
        raise GitError(f"Repository has no working tree: {repo.git_dir}")
    return os.path.abspath(repo.working_tree_dir)


def get_staged_files(root: Optional[str] = None) -> List[str]:
    """
    List the files added, copied, modified or renamed in the index

    Args:
        root: Any path inside the repository

    Returns:
        Absolute paths of staged files that exist in the working tree

    Raises:
        GitError: If the repository cannot be opened or git fails
    """
    repo = open_repository(root)
    from git import GitCommandError

    try:
        output = repo.git.diff("--cached", "--name-only", "--diff-filter=ACMR", "-z")
    except GitCommandError as e:
        raise GitError(f"Could not list staged files: {e}") from e

    working_dir = repo.working_tree_dir
    files = [os.path.join(working_dir, name) for name in output.split("\0") if name.strip()]
    staged = [path for path in files if os.path.isfile(path)]
    logger.debug(f"Found {len(staged)} staged files")
    return staged


def hooks_directory(repo) -> Path:
    """The hooks directory, honouring core.hooksPath"""
    with repo.config_reader() as reader:
        configured = reader.get_value("core", "hooksPath", default="")
    if configured:
        hooks_path = Path(os.path.expanduser(str(configured)))
        if not hooks_path.is_absolute():
            hooks_path = Path(repo.working_tree_dir) / hooks_path
        return hooks_path
    return Path(repo.git_dir) / "hooks"


def install_hooks(
    root: Optional[str] = None,
    hooks: Sequence[str] = DEFAULT_HOOKS,
    command: Optional[str] = None,
) -> List[Path]:
    """
    Write executable hook stubs into the repository

    Args:
        root: Any path inside the repository
        hooks: Hook names to install
        command: Command the hooks run; defaults per hook

    Returns:
        Paths of the written hook files

    Raises:
        GitError: If the repository cannot be opened or a hook cannot be written
    """
    repo = open_repository(root)
    hooks_dir = hooks_directory(repo)

    installed = []
    try:
        hooks_dir.mkdir(parents=True, exist_ok=True)
        for hook in hooks:
            hook_path = hooks_dir / hook
            hook_command = command or HOOK_COMMANDS.get(hook, "keyguardian scan --all")
            hook_path.write_text(HOOK_TEMPLATE.format(hook=hook, command=hook_command))
            mode = hook_path.stat().st_mode
            hook_path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
            logger.info(f"Installed {hook} hook at {hook_path}")
            installed.append(hook_path)
    except OSError as e:
        raise GitError(f"Failed to install git hooks: {e}") from e

    return installed
