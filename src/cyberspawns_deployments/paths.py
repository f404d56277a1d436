"""Hardhat project layout for cyberspawns-deployments library."""

from pathlib import Path
from typing import NamedTuple, Optional, Union

HARDHAT_CONFIG_FILES = ("hardhat.config.js", "hardhat.config.ts", "hardhat.config.cjs")


class ArtifactPaths(NamedTuple):
    """Where `hardhat compile` writes its output."""

    artifacts: Path  # artifacts/<source>/<Name>.json
    build_info: Path  # artifacts/build-info/<id>.json

    @classmethod
    def under(cls, artifacts_dir: Union[Path, str]) -> "ArtifactPaths":
        artifacts_dir = Path(artifacts_dir)
        return cls(artifacts_dir, artifacts_dir / "build-info")


def find_project_root(start: Optional[Union[Path, str]] = None) -> Path:
    """
    Locate the Hardhat project a command runs in.

    Walks up from start to the nearest directory holding a hardhat.config
    file, as `npx hardhat` does.

    Args:
        start: Directory to search from (defaults to cwd)

    Returns:
        Project directory, or start itself when no config file is found
    """
    start = Path.cwd() if start is None else Path(start).absolute()

    for directory in (start, *start.parents):
        if any((directory / name).is_file() for name in HARDHAT_CONFIG_FILES):
            return directory
    return start


def get_artifact_paths(project_root: Optional[Union[Path, str]] = None) -> ArtifactPaths:
    """
    Get the compile output directories of a Hardhat project.

    Args:
        project_root: Hardhat project directory (defaults to the project
                      containing cwd)
    """
    if project_root is None:
        project_root = find_project_root()
    else:
        project_root = Path(project_root).absolute()

    return ArtifactPaths.under(project_root / "artifacts")
