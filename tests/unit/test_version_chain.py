"""Unit tests for omnify_lock.chain.ledger."""

from __future__ import annotations

import json
import re
from datetime import datetime
from pathlib import Path

import pytest

from omnify_lock.chain import (
    VERSION_CHAIN_FILE,
    ChainFormatError,
    build_current_schema_entries,
    compute_block_hash,
    create_deploy_block,
    create_empty_chain,
    default_chain_file_path,
    deploy_version,
    generate_version_name,
    get_chain_summary,
    get_locked_schemas,
    read_version_chain,
    write_version_chain,
)
from omnify_lock.config import Settings
from omnify_lock.hashing import compute_hash
from omnify_lock.models import ChainSchemaEntry, DeployOptions, SchemaFile, VersionChain

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _entry(name: str, content: str = "x") -> ChainSchemaEntry:
    return ChainSchemaEntry(name=name, relative_path=f"{name}.yaml", content_hash=compute_hash(content))


def _write_schema(schemas_dir: Path, name: str, content: str) -> SchemaFile:
    path = schemas_dir / f"{name}.yaml"
    path.write_text(content, encoding="utf-8")
    return SchemaFile(name=name, relative_path=f"{name}.yaml", file_path=str(path))


def _deploy(chain: VersionChain, version: str, *entries: ChainSchemaEntry, environment: str = "production"):
    return create_deploy_block(chain, list(entries), DeployOptions(version=version, environment=environment))


# ---------------------------------------------------------------------------
# compute_block_hash
# ---------------------------------------------------------------------------


class TestComputeBlockHash:
    def test_deterministic(self):
        a = compute_block_hash(None, "v1", "2026-01-01T00:00:00.000Z", "production", [_entry("User")])
        b = compute_block_hash(None, "v1", "2026-01-01T00:00:00.000Z", "production", [_entry("User")])
        assert a == b
        assert re.fullmatch(r"[0-9a-f]{64}", a)

    def test_entry_order_irrelevant(self):
        a = compute_block_hash(None, "v1", "t", "production", [_entry("A"), _entry("B")])
        b = compute_block_hash(None, "v1", "t", "production", [_entry("B"), _entry("A")])
        assert a == b

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"previous_hash": "abc"},
            {"version": "v2"},
            {"locked_at": "t2"},
            {"environment": "staging"},
        ],
    )
    def test_each_committed_field_changes_hash(self, kwargs):
        base = {"previous_hash": None, "version": "v1", "locked_at": "t", "environment": "production"}
        original = compute_block_hash(schemas=[_entry("User")], **base)
        changed = compute_block_hash(schemas=[_entry("User")], **{**base, **kwargs})
        assert original != changed

    def test_schema_content_changes_hash(self):
        a = compute_block_hash(None, "v1", "t", "production", [_entry("User", "a")])
        b = compute_block_hash(None, "v1", "t", "production", [_entry("User", "b")])
        assert a != b


# ---------------------------------------------------------------------------
# Block creation
# ---------------------------------------------------------------------------


class TestCreateDeployBlock:
    def test_empty_chain(self):
        chain = create_empty_chain()
        assert chain.blocks == []
        assert chain.genesis_hash is None
        assert chain.latest_hash is None
        assert chain.type == "omnify-version-chain"
        assert chain.version == 1

    def test_first_block_is_genesis(self):
        chain, block = _deploy(create_empty_chain(), "v1.0.0", _entry("User"))
        assert block.previous_hash is None
        assert chain.genesis_hash == block.block_hash
        assert chain.latest_hash == block.block_hash
        assert chain.blocks == [block]

    def test_blocks_link_to_predecessor(self):
        chain = create_empty_chain()
        hashes = []
        for i in range(4):
            chain, block = _deploy(chain, f"v{i}", _entry("User", str(i)))
            hashes.append(block.block_hash)

        assert chain.genesis_hash == hashes[0]
        assert chain.latest_hash == hashes[-1]
        previous = None
        for block in chain.blocks:
            assert block.previous_hash == previous
            assert block.block_hash == compute_block_hash(
                previous, block.version, block.locked_at, block.environment, block.schemas
            )
            previous = block.block_hash

    def test_input_chain_not_modified(self):
        chain = create_empty_chain()
        _deploy(chain, "v1", _entry("User"))
        assert chain.blocks == []

    def test_duplicate_version_labels_allowed(self):
        chain, first = _deploy(create_empty_chain(), "v1", _entry("User"))
        chain, second = _deploy(chain, "v1", _entry("User"))
        assert [b.version for b in chain.blocks] == ["v1", "v1"]
        assert first.block_hash != second.block_hash

    def test_generated_version_name(self):
        chain, block = create_deploy_block(create_empty_chain(), [_entry("User")], DeployOptions(environment="dev"))
        assert re.fullmatch(r"v\d{4}\.\d{2}\.\d{2}-\d{6}", block.version)

    def test_entries_sorted_by_name(self):
        _, block = _deploy(create_empty_chain(), "v1", _entry("Post"), _entry("Comment"), _entry("User"))
        assert [s.name for s in block.schemas] == ["Comment", "Post", "User"]

    def test_environment_defaults_to_settings(self):
        _, block = create_deploy_block(create_empty_chain(), [_entry("User")], DeployOptions(version="v1"))
        assert block.environment == "production"

    def test_environment_from_env_var(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("OMNIFY_ENVIRONMENT", "staging")
        _, block = create_deploy_block(create_empty_chain(), [_entry("User")], DeployOptions(version="v1"))
        assert block.environment == "staging"
        assert block.block_hash == compute_block_hash(None, "v1", block.locked_at, "staging", block.schemas)

    def test_deploy_options_carry_no_cli_flags(self):
        assert set(DeployOptions.model_fields) == {"version", "environment", "deployed_by", "comment"}


class TestGenerateVersionName:
    def test_format(self):
        assert generate_version_name(datetime(2026, 1, 13, 9, 5, 7)) == "v2026.01.13-090507"


class TestBuildCurrentSchemaEntries:
    def test_hashes_raw_content(self, schemas_dir: Path):
        schema = _write_schema(schemas_dir, "User", "name: User\n")
        entries = build_current_schema_entries([schema])
        assert entries == [
            ChainSchemaEntry(name="User", relative_path="User.yaml", content_hash=compute_hash("name: User\n"))
        ]

    def test_unreadable_files_skipped(self, schemas_dir: Path):
        present = _write_schema(schemas_dir, "User", "a")
        missing = SchemaFile(name="Gone", relative_path="Gone.yaml", file_path=str(schemas_dir / "Gone.yaml"))
        assert [e.name for e in build_current_schema_entries([present, missing])] == ["User"]

    def test_sorted_by_name(self, schemas_dir: Path):
        files = [_write_schema(schemas_dir, n, n) for n in ("Post", "Author")]
        assert [e.name for e in build_current_schema_entries(files)] == ["Author", "Post"]


# ---------------------------------------------------------------------------
# Read / write
# ---------------------------------------------------------------------------


class TestReadWriteVersionChain:
    def test_round_trip(self, tmp_path: Path):
        chain, _ = _deploy(create_empty_chain(), "v1", _entry("User"))
        chain, _ = _deploy(chain, "v2", _entry("User", "changed"), environment="staging")
        path = tmp_path / VERSION_CHAIN_FILE
        write_version_chain(path, chain)
        assert read_version_chain(path) == chain

    def test_on_disk_layout(self, tmp_path: Path):
        chain, _ = _deploy(create_empty_chain(), "v1", _entry("User"))
        path = tmp_path / VERSION_CHAIN_FILE
        write_version_chain(path, chain)

        content = path.read_text(encoding="utf-8")
        assert content.endswith("\n")
        data = json.loads(content)
        assert data["type"] == "omnify-version-chain"
        assert data["genesisHash"] == data["latestHash"]
        assert data["blocks"][0]["previousHash"] is None
        assert "contentHash" in data["blocks"][0]["schemas"][0]

    def test_missing_file_returns_none(self, tmp_path: Path):
        assert read_version_chain(tmp_path / VERSION_CHAIN_FILE) is None

    def test_wrong_type_rejected(self, tmp_path: Path):
        path = tmp_path / VERSION_CHAIN_FILE
        path.write_text(json.dumps({"version": 1, "type": "something-else", "blocks": []}), encoding="utf-8")
        with pytest.raises(ChainFormatError, match="Invalid version chain file format"):
            read_version_chain(path)

    def test_wrong_version_rejected(self, tmp_path: Path):
        path = tmp_path / VERSION_CHAIN_FILE
        path.write_text(json.dumps({"version": 2, "type": "omnify-version-chain", "blocks": []}), encoding="utf-8")
        with pytest.raises(ChainFormatError):
            read_version_chain(path)

    def test_invalid_json_rejected(self, tmp_path: Path):
        path = tmp_path / VERSION_CHAIN_FILE
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ChainFormatError, match="not valid JSON"):
            read_version_chain(path)

    def test_invalid_utf8_rejected(self, tmp_path: Path):
        path = tmp_path / VERSION_CHAIN_FILE
        path.write_bytes(b'{"version": 1, "type": "\xff\xfe"}')
        with pytest.raises(ChainFormatError):
            read_version_chain(path)

    def test_default_chain_file_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        assert default_chain_file_path(tmp_path) == tmp_path / VERSION_CHAIN_FILE
        monkeypatch.setenv("OMNIFY_CHAIN_FILE_NAME", "deploy.chain")
        assert default_chain_file_path(tmp_path) == tmp_path / "deploy.chain"
        assert default_chain_file_path(tmp_path, Settings(chain_file_name="x.chain")) == tmp_path / "x.chain"


# ---------------------------------------------------------------------------
# deploy_version
# ---------------------------------------------------------------------------


class TestDeployVersion:
    def test_first_deploy(self, tmp_path: Path, schemas_dir: Path):
        chain_path = tmp_path / VERSION_CHAIN_FILE
        files = [_write_schema(schemas_dir, "User", "a"), _write_schema(schemas_dir, "Post", "b")]

        result = deploy_version(
            chain_path, files, DeployOptions(version="v1.0.0", environment="production", deployed_by="alice")
        )

        assert result.success is True
        assert result.added_schemas == ["Post", "User"]
        assert result.modified_schemas == []
        assert result.warnings == []
        assert result.block is not None
        assert result.block.deployed_by == "alice"

        chain = read_version_chain(chain_path)
        assert chain.latest_hash == result.block.block_hash
        assert chain.genesis_hash == result.block.block_hash

    def test_modified_schema_warns_but_locks(self, tmp_path: Path, schemas_dir: Path):
        chain_path = tmp_path / VERSION_CHAIN_FILE
        user = _write_schema(schemas_dir, "User", "a")
        deploy_version(chain_path, [user], DeployOptions(version="v1", environment="production"))

        Path(user.file_path).write_text("a changed", encoding="utf-8")
        result = deploy_version(chain_path, [user], DeployOptions(version="v2", environment="production"))

        assert result.success is True
        assert result.modified_schemas == ["User"]
        assert result.added_schemas == []
        assert result.warnings == [
            "Schema 'User' has been modified since last lock. This version will include the new state."
        ]
        assert result.block.schemas[0].content_hash == compute_hash("a changed")

        chain = read_version_chain(chain_path)
        assert len(chain.blocks) == 2
        assert chain.blocks[1].previous_hash == chain.blocks[0].block_hash

    def test_unchanged_schema_neither_added_nor_modified(self, tmp_path: Path, schemas_dir: Path):
        chain_path = tmp_path / VERSION_CHAIN_FILE
        user = _write_schema(schemas_dir, "User", "a")
        deploy_version(chain_path, [user], DeployOptions(version="v1", environment="production"))
        result = deploy_version(chain_path, [user], DeployOptions(version="v2", environment="production"))
        assert result.added_schemas == []
        assert result.modified_schemas == []

    def test_no_schemas_fails_without_writing(self, tmp_path: Path, schemas_dir: Path):
        chain_path = tmp_path / VERSION_CHAIN_FILE
        missing = SchemaFile(name="Gone", relative_path="Gone.yaml", file_path=str(schemas_dir / "Gone.yaml"))

        result = deploy_version(chain_path, [missing], DeployOptions(environment="production"))

        assert result.success is False
        assert result.error == "No schema files found to lock"
        assert result.block is None
        assert not chain_path.exists()

    def test_corrupt_chain_file_raises(self, tmp_path: Path, schemas_dir: Path):
        chain_path = tmp_path / VERSION_CHAIN_FILE
        chain_path.write_text("garbage", encoding="utf-8")
        with pytest.raises(ChainFormatError):
            deploy_version(chain_path, [_write_schema(schemas_dir, "User", "a")], DeployOptions(environment="dev"))


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class TestQueries:
    def test_locked_schemas_latest_wins(self):
        chain, _ = _deploy(create_empty_chain(), "v1", _entry("User", "a"), _entry("Post", "p"))
        chain, _ = _deploy(chain, "v2", _entry("User", "b"))

        locked = get_locked_schemas(chain)
        assert set(locked) == {"User", "Post"}
        assert locked["User"].version == "v2"
        assert locked["User"].hash == compute_hash("b")
        assert locked["Post"].version == "v1"

    def test_locked_schemas_empty_chain(self):
        assert get_locked_schemas(create_empty_chain()) == {}

    def test_summary(self):
        chain, _ = _deploy(create_empty_chain(), "v1", _entry("User"), environment="staging")
        chain, _ = _deploy(chain, "v2", _entry("Post"), environment="production")
        chain, _ = _deploy(chain, "v3", _entry("User"), environment="staging")

        summary = get_chain_summary(chain)
        assert summary.block_count == 3
        assert summary.schema_count == 2
        assert summary.first_version == "v1"
        assert summary.latest_version == "v3"
        assert summary.environments == ["staging", "production"]

    def test_summary_empty_chain(self):
        summary = get_chain_summary(create_empty_chain())
        assert summary.block_count == 0
        assert summary.first_version is None
        assert summary.latest_version is None
