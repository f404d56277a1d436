"""Hardhat compile artifact loading for cyberspawns-deployments library."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .exceptions import ContractNotFoundError, DefectiveArtifactError
from .types import ContractArtifact

logger = logging.getLogger(__name__)

ARTIFACT_FORMAT = "hh-sol-artifact-1"


def _is_artifact_file(path: Path, artifacts_dir: Path) -> bool:
    """
    Decide whether a JSON file under artifacts/ is a contract artifact.

    Excludes debug files (*.dbg.json) and everything under build-info/.
    """
    if path.name.endswith(".dbg.json"):
        return False
    relative = path.relative_to(artifacts_dir)
    return relative.parts[0] != "build-info"


def parse_artifact(file_path: Path, build_info_dir: Optional[Path] = None) -> ContractArtifact:
    """
    Parse a Hardhat artifact JSON file.

    Args:
        file_path: Path to artifacts/<source>/<Name>.json
        build_info_dir: artifacts/build-info, searched when the sibling
                        .dbg.json is missing

    Returns:
        ContractArtifact (build_info_path is None when no build-info
        contains the source)

    Raises:
        DefectiveArtifactError: If the ABI or deployable bytecode is missing
    """
    with open(file_path) as f:
        data = json.load(f)

    if data.get("_format") != ARTIFACT_FORMAT:
        raise DefectiveArtifactError(f"Not a Hardhat artifact: {file_path}")

    contract_name = data.get("contractName")
    abi = data.get("abi")
    bytecode = data.get("bytecode")

    if not contract_name or abi is None:
        raise DefectiveArtifactError(f"Missing contract name or ABI in artifact: {file_path}")

    # Interfaces and abstract contracts compile to empty bytecode
    if not bytecode or bytecode == "0x":
        raise DefectiveArtifactError(
            f"Contract '{contract_name}' has no deployable bytecode "
            f"(abstract contract or interface?): {file_path}"
        )

    if data.get("linkReferences"):
        raise DefectiveArtifactError(
            f"Contract '{contract_name}' requires library linking, which is not supported"
        )

    source_name = data.get("sourceName", "")
    build_info_path = _resolve_build_info_path(file_path)
    if build_info_path is None and build_info_dir is not None:
        build_info_path = _search_build_info(build_info_dir, source_name)

    return ContractArtifact(
        contract_name=contract_name,
        source_name=source_name,
        abi=abi,
        bytecode=bytecode,
        build_info_path=build_info_path,
    )


def _resolve_build_info_path(artifact_path: Path) -> Optional[Path]:
    dbg_path = artifact_path.with_name(f"{artifact_path.stem}.dbg.json")
    try:
        with open(dbg_path) as f:
            build_info = json.load(f).get("buildInfo")
    except (FileNotFoundError, json.JSONDecodeError):
        return None

    if not build_info:
        return None
    return (dbg_path.parent / build_info).resolve()


def _search_build_info(build_info_dir: Path, source_name: str) -> Optional[Path]:
    """Newest build-info whose compiler input includes source_name."""
    if not source_name or not build_info_dir.is_dir():
        return None

    for path in sorted(
        build_info_dir.glob("*.json"), key=lambda p: p.stat().st_mtime, reverse=True
    ):
        try:
            with open(path) as f:
                sources = json.load(f).get("input", {}).get("sources", {})
        except json.JSONDecodeError:
            logger.debug("Skipping unreadable build-info %s", path)
            continue
        if source_name in sources:
            return path
    return None


def _candidate_files(artifacts_dir: Path, contract_name: str) -> List[Path]:
    # Fully qualified name: "contracts/Foo.sol:Foo"
    if ":" in contract_name:
        source_name, name = contract_name.rsplit(":", 1)
        candidate = artifacts_dir / source_name / f"{name}.json"
        return [candidate] if candidate.exists() else []

    return [
        path
        for path in sorted(artifacts_dir.rglob(f"{contract_name}.json"))
        if _is_artifact_file(path, artifacts_dir)
    ]


def find_artifact(
    artifacts_dir: Path, contract_name: str, build_info_dir: Optional[Path] = None
) -> ContractArtifact:
    """
    Find the compiled artifact for a contract.

    Args:
        artifacts_dir: Hardhat artifacts directory
        contract_name: Bare ("CyberSpawns721") or fully qualified
                       ("contracts/CyberSpawns721.sol:CyberSpawns721") name
        build_info_dir: Build-info directory to search when an artifact has
                        no .dbg.json

    Returns:
        ContractArtifact

    Raises:
        ContractNotFoundError: If no artifact (or more than one, for a bare
                               name) matches
        DefectiveArtifactError: If the matching artifact cannot be deployed
    """
    if not artifacts_dir.is_dir():
        raise ContractNotFoundError(
            f"Artifacts directory not found at {artifacts_dir}. "
            "Run `npx hardhat compile` first."
        )

    candidates = _candidate_files(artifacts_dir, contract_name)

    if not candidates:
        raise ContractNotFoundError(
            f"Contract '{contract_name}' not found in {artifacts_dir}"
        )

    if len(candidates) > 1:
        sources = ", ".join(str(p.parent.relative_to(artifacts_dir)) for p in candidates)
        raise ContractNotFoundError(
            f"Contract name '{contract_name}' is ambiguous ({sources}); "
            "use a fully qualified name"
        )

    logger.debug("Using artifact %s for %s", candidates[0], contract_name)
    return parse_artifact(candidates[0], build_info_dir)


def load_build_info(artifact: ContractArtifact) -> Dict[str, Any]:
    """
    Load the solc build-info an artifact was compiled in.

    Args:
        artifact: Contract artifact

    Returns:
        Build-info dictionary (solcLongVersion, input, ...)

    Raises:
        DefectiveArtifactError: If the build-info is missing, doesn't contain
                                the artifact's source or has no compiler
                                version
    """
    if artifact.build_info_path is None:
        raise DefectiveArtifactError(
            f"No build-info recorded for {artifact.fully_qualified_name}"
        )

    try:
        with open(artifact.build_info_path) as f:
            build_info = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        raise DefectiveArtifactError(
            f"Cannot read build-info {artifact.build_info_path}: {e}"
        ) from e

    sources = build_info.get("input", {}).get("sources", {})
    if artifact.source_name not in sources:
        raise DefectiveArtifactError(
            f"Build-info {artifact.build_info_path.name} does not contain "
            f"{artifact.source_name}"
        )

    if not build_info.get("solcLongVersion"):
        raise DefectiveArtifactError(
            f"Build-info {artifact.build_info_path.name} does not record the compiler version"
        )

    return build_info
