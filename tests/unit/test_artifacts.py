"""Unit tests for Hardhat artifact loading."""

import json
import shutil
from pathlib import Path

import pytest

from cyberspawns_deployments.artifacts import find_artifact, load_build_info, parse_artifact
from cyberspawns_deployments.exceptions import ContractNotFoundError, DefectiveArtifactError


class TestParseArtifact:
    """Test the parse_artifact function."""

    def test_parses_complete_artifact(self, artifacts_dir: Path):
        """Test parsing an artifact with a debug file next to it."""
        artifact = parse_artifact(
            artifacts_dir / "contracts" / "CyberSpawns721.sol" / "CyberSpawns721.json"
        )

        assert artifact.contract_name == "CyberSpawns721"
        assert artifact.source_name == "contracts/CyberSpawns721.sol"
        assert artifact.bytecode.startswith("0x6080")
        assert any(item["type"] == "constructor" for item in artifact.abi)
        assert artifact.fully_qualified_name == "contracts/CyberSpawns721.sol:CyberSpawns721"

    def test_resolves_build_info_from_debug_file(self, artifacts_dir: Path):
        artifact = parse_artifact(
            artifacts_dir / "contracts" / "CyberSpawns721.sol" / "CyberSpawns721.json"
        )

        expected = (
            artifacts_dir / "build-info" / "3f0e9c2a7b1d4e5f6a7b8c9d0e1f2a3b.json"
        ).resolve()
        assert artifact.build_info_path == expected

    def test_build_info_is_optional(self, artifacts_dir: Path):
        """Test that an artifact without a debug file still parses."""
        artifact = parse_artifact(artifacts_dir / "contracts" / "Splinters.sol" / "Splinters.json")
        assert artifact.build_info_path is None

    def test_interface_has_no_bytecode(self, artifacts_dir: Path):
        """Test that interfaces are rejected as undeployable."""
        interface_file = (
            artifacts_dir
            / "@openzeppelin"
            / "contracts"
            / "token"
            / "ERC721"
            / "IERC721.sol"
            / "IERC721.json"
        )

        with pytest.raises(DefectiveArtifactError) as exc_info:
            parse_artifact(interface_file)

        assert "IERC721" in str(exc_info.value)

    def test_rejects_non_artifact_json(self, tmp_path: Path):
        other = tmp_path / "Other.json"
        other.write_text(json.dumps({"abi": [], "bytecode": "0x60"}))

        with pytest.raises(DefectiveArtifactError):
            parse_artifact(other)

    def test_rejects_unlinked_libraries(self, tmp_path: Path):
        linked = tmp_path / "Linked.json"
        linked.write_text(
            json.dumps(
                {
                    "_format": "hh-sol-artifact-1",
                    "contractName": "Linked",
                    "sourceName": "contracts/Linked.sol",
                    "abi": [],
                    "bytecode": "0x6080__$abc$__",
                    "linkReferences": {"contracts/Lib.sol": {"Lib": [{"length": 20, "start": 2}]}},
                }
            )
        )

        with pytest.raises(DefectiveArtifactError):
            parse_artifact(linked)


class TestFindArtifact:
    """Test the find_artifact function."""

    def test_finds_by_bare_name(self, artifacts_dir: Path):
        artifact = find_artifact(artifacts_dir, "CyberSpawns721")
        assert artifact.contract_name == "CyberSpawns721"

    def test_finds_by_fully_qualified_name(self, artifacts_dir: Path):
        artifact = find_artifact(artifacts_dir, "contracts/Splinters.sol:Splinters")
        assert artifact.contract_name == "Splinters"

    def test_missing_contract_raises(self, artifacts_dir: Path):
        """Test that an absent contract name raises ContractNotFoundError."""
        with pytest.raises(ContractNotFoundError) as exc_info:
            find_artifact(artifacts_dir, "NanoDose")

        assert "NanoDose" in str(exc_info.value)

    def test_missing_fully_qualified_name_raises(self, artifacts_dir: Path):
        with pytest.raises(ContractNotFoundError):
            find_artifact(artifacts_dir, "contracts/Other.sol:Splinters")

    def test_debug_files_are_not_artifacts(self, artifacts_dir: Path):
        with pytest.raises(ContractNotFoundError):
            find_artifact(artifacts_dir, "CyberSpawns721.dbg")

    def test_missing_artifacts_directory(self, tmp_path: Path):
        """Test the message when the project was never compiled."""
        with pytest.raises(ContractNotFoundError) as exc_info:
            find_artifact(tmp_path / "artifacts", "CyberSpawns721")

        assert "hardhat compile" in str(exc_info.value)

    def test_ambiguous_bare_name(self, artifacts_dir: Path):
        """Test that a name compiled from two sources must be qualified."""
        duplicate_dir = artifacts_dir / "contracts" / "legacy" / "Splinters.sol"
        duplicate_dir.mkdir(parents=True)
        shutil.copy(
            artifacts_dir / "contracts" / "Splinters.sol" / "Splinters.json",
            duplicate_dir / "Splinters.json",
        )

        with pytest.raises(ContractNotFoundError) as exc_info:
            find_artifact(artifacts_dir, "Splinters")

        assert "ambiguous" in str(exc_info.value)


class TestLoadBuildInfo:
    """Test the load_build_info function."""

    def test_loads_build_info(self, artifacts_dir: Path):
        artifact = find_artifact(artifacts_dir, "CyberSpawns721")
        build_info = load_build_info(artifact)

        assert build_info["solcLongVersion"] == "0.8.0+commit.c7dfd78e"
        assert "contracts/CyberSpawns721.sol" in build_info["input"]["sources"]

    def test_missing_build_info_raises(self, artifacts_dir: Path):
        artifact = find_artifact(artifacts_dir, "Splinters")

        with pytest.raises(DefectiveArtifactError):
            load_build_info(artifact)

    def test_deleted_build_info_file_raises(self, artifacts_dir: Path):
        artifact = find_artifact(artifacts_dir, "CyberSpawns721")
        artifact.build_info_path.unlink()

        with pytest.raises(DefectiveArtifactError):
            load_build_info(artifact)

    def test_build_info_without_compiler_version_raises(self, artifacts_dir: Path):
        """Test that verification input needs solcLongVersion."""
        artifact = find_artifact(artifacts_dir, "CyberSpawns721")
        build_info = json.loads(artifact.build_info_path.read_text())
        del build_info["solcLongVersion"]
        artifact.build_info_path.write_text(json.dumps(build_info))

        with pytest.raises(DefectiveArtifactError) as exc_info:
            load_build_info(artifact)

        assert "compiler version" in str(exc_info.value)


class TestBuildInfoSearch:
    """Test locating build-info without a .dbg.json file."""

    def _drop_debug_file(self, artifacts_dir: Path) -> None:
        (artifacts_dir / "contracts" / "CyberSpawns721.sol" / "CyberSpawns721.dbg.json").unlink()

    def test_searches_build_info_directory(self, artifacts_dir: Path):
        self._drop_debug_file(artifacts_dir)

        artifact = find_artifact(
            artifacts_dir, "CyberSpawns721", build_info_dir=artifacts_dir / "build-info"
        )

        assert artifact.build_info_path == (
            artifacts_dir / "build-info" / "3f0e9c2a7b1d4e5f6a7b8c9d0e1f2a3b.json"
        )
        assert load_build_info(artifact)["solcLongVersion"] == "0.8.0+commit.c7dfd78e"

    def test_no_search_without_directory(self, artifacts_dir: Path):
        self._drop_debug_file(artifacts_dir)

        artifact = find_artifact(artifacts_dir, "CyberSpawns721")

        assert artifact.build_info_path is None

    def test_source_not_in_any_build_info(self, artifacts_dir: Path):
        """Test that an unrelated build-info is not picked."""
        artifact = find_artifact(
            artifacts_dir, "Splinters", build_info_dir=artifacts_dir / "build-info"
        )

        assert artifact.build_info_path is None

    def test_skips_unreadable_build_info(self, artifacts_dir: Path):
        self._drop_debug_file(artifacts_dir)
        (artifacts_dir / "build-info" / "broken.json").write_text("{not json")

        artifact = find_artifact(
            artifacts_dir, "CyberSpawns721", build_info_dir=artifacts_dir / "build-info"
        )

        assert artifact.build_info_path.name == "3f0e9c2a7b1d4e5f6a7b8c9d0e1f2a3b.json"
