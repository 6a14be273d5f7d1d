"""Local repository store: clone, pull and checkout of module directories."""

import logging
import shutil
from pathlib import Path
from typing import List

import git

from y2m.schemas import ModuleStatus, ResolvedModule

logger = logging.getLogger(__name__)

SSH_URL = "git@github.com:{org}/{repo}.git"
READ_ONLY_URL = "https://github.com/{org}/{repo}.git"


def remote_url(module: ResolvedModule, read_only: bool = False) -> str:
    """Build the clone URL of a module for the SSH or read-only scheme."""
    template = READ_ONLY_URL if read_only else SSH_URL
    return template.format(org=module.organization.name, repo=module.full_name)


class RepositoryManager:
    """Manages the module checkouts below one work directory."""

    CLONE_DEPTH = 1
    FETCH_REFSPEC = "+refs/heads/*:refs/remotes/origin/*"

    def __init__(self, work_dir: Path):
        """Initialize repository manager with the directory holding the checkouts."""
        self.work_dir = Path(work_dir)

    def module_dir(self, module: str) -> Path:
        return self.work_dir / module

    def exists(self, module: str) -> bool:
        """Whether the module is checked out locally."""
        return self.module_dir(module).is_dir()

    def local_modules(self) -> List[str]:
        """List checked-out modules: every non-hidden subdirectory, sorted by name."""
        if not self.work_dir.is_dir():
            return []
        return sorted(
            path.name
            for path in self.work_dir.iterdir()
            if path.is_dir() and not path.name.startswith(".")
        )

    @staticmethod
    def _top_level_entries(directory: Path) -> List[Path]:
        if not directory.is_dir():
            return []
        return [path for path in directory.iterdir() if not path.name.startswith(".")]

    def clone_module(self, module: ResolvedModule, read_only: bool = False) -> ModuleStatus:
        """Clone a module, shallow first, then convert it to a full clone.

        A module whose shallow clone holds a single top-level entry has been
        removed upstream (only a README pointing elsewhere is left); its
        directory is deleted, whatever the clone exit status was.

        Args:
            module: Resolved module to clone
            read_only: Use the read-only URL instead of SSH

        Returns:
            DONE, REMOVED, or FAILED when git reported an error
        """
        target = self.module_dir(module.module)
        url = remote_url(module, read_only)
        logger.info(f"Cloning {url} into {target}")

        created = not target.exists()
        clone_error = None
        try:
            repo = git.Repo.clone_from(url, target, depth=self.CLONE_DEPTH)
        except git.GitCommandError as e:
            clone_error = e

        if created and len(self._top_level_entries(target)) == 1:
            logger.info(f"{module.module} was removed upstream, discarding the clone")
            shutil.rmtree(target)
            return ModuleStatus.REMOVED

        if clone_error is not None:
            logger.warning(f"Failed to clone {url}: {clone_error}")
            if created and target.is_dir():
                shutil.rmtree(target)
            return ModuleStatus.FAILED

        try:
            # Track all branches, then drop the depth limit
            repo.git.config("remote.origin.fetch", self.FETCH_REFSPEC)
            repo.remotes.origin.fetch()
            repo.git.pull("--unshallow")
        except git.GitCommandError as e:
            logger.warning(f"Failed to convert {module.module} to a full clone: {e}")
            return ModuleStatus.FAILED

        return ModuleStatus.DONE

    def pull_module(self, module: str) -> ModuleStatus:
        """Update an existing checkout from its origin."""
        try:
            repo = git.Repo(self.module_dir(module))
            repo.git.pull()
        except (git.GitCommandError, git.InvalidGitRepositoryError) as e:
            logger.warning(f"Failed to pull {module}: {e}")
            return ModuleStatus.FAILED
        return ModuleStatus.DONE

    def checkout_module(self, module: str, ref: str) -> ModuleStatus:
        """Switch an existing checkout to a branch or tag."""
        try:
            repo = git.Repo(self.module_dir(module))
            repo.git.checkout(ref)
        except (git.GitCommandError, git.InvalidGitRepositoryError) as e:
            logger.warning(f"Failed to check out {ref} in {module}: {e}")
            return ModuleStatus.FAILED
        return ModuleStatus.DONE
