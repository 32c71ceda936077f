"""Tests for the azblock CLI."""

import pytest
import yaml
from typer.testing import CliRunner

from azure_blockstore.backends.memory import InMemoryObjectStore
from azure_blockstore.cli import main as cli_main
from azure_blockstore.identifiers import cid_for

runner = CliRunner()


@pytest.fixture
def backend(monkeypatch):
    """Route every command to one in-memory container."""
    store = InMemoryObjectStore("blocks", chunk_size=8)
    built = []

    def fake_build_object_store(config, service_client=None):
        built.append(config)
        return store

    monkeypatch.setattr(cli_main, "build_object_store", fake_build_object_store)
    store.built_configs = built
    return store


@pytest.fixture
def block_file(tmp_path):
    path = tmp_path / "block.bin"
    path.write_bytes(b"hello blocks")
    return path


def test_put_prints_cid(backend, block_file):
    result = runner.invoke(cli_main.app, ["put", str(block_file)])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == str(cid_for(b"hello blocks"))
    assert backend.size() == 1


def test_get_to_stdout_and_file(backend, block_file, tmp_path):
    cid = runner.invoke(cli_main.app, ["put", str(block_file)]).output.strip()

    result = runner.invoke(cli_main.app, ["get", cid])
    assert result.exit_code == 0
    assert result.stdout_bytes == b"hello blocks"

    out = tmp_path / "out.bin"
    result = runner.invoke(cli_main.app, ["get", cid, "-o", str(out)])
    assert result.exit_code == 0
    assert out.read_bytes() == b"hello blocks"


def test_get_missing(backend):
    result = runner.invoke(cli_main.app, ["get", str(cid_for(b"never stored"))])
    assert result.exit_code == 1
    assert "not found" in result.output


def test_get_invalid_cid(backend):
    result = runner.invoke(cli_main.app, ["get", "not-a-cid"])
    assert result.exit_code == 1
    assert "Invalid CID" in result.output


def test_has_and_rm(backend, block_file):
    cid = runner.invoke(cli_main.app, ["put", str(block_file)]).output.strip()

    result = runner.invoke(cli_main.app, ["has", cid])
    assert result.exit_code == 0
    assert result.output.strip() == "yes"

    result = runner.invoke(cli_main.app, ["rm", cid])
    assert result.exit_code == 0

    result = runner.invoke(cli_main.app, ["has", cid])
    assert result.exit_code == 1
    assert result.output.strip() == "no"

    # Deleting again is fine
    assert runner.invoke(cli_main.app, ["rm", cid]).exit_code == 0


def test_ls(backend, tmp_path):
    for i in range(2):
        path = tmp_path / f"f{i}"
        path.write_bytes(f"content {i}".encode())
        assert runner.invoke(cli_main.app, ["put", str(path)]).exit_code == 0

    result = runner.invoke(cli_main.app, ["ls"])
    assert result.exit_code == 0
    assert "2 blocks" in result.output


def test_ls_empty(backend):
    result = runner.invoke(cli_main.app, ["ls"])
    assert result.exit_code == 0
    assert "No blocks" in result.output


def test_open_missing_container(monkeypatch):
    backend = InMemoryObjectStore("blocks", container_exists=False)
    configs = []

    def fake_build_object_store(config, service_client=None):
        configs.append(config)
        return backend

    monkeypatch.setattr(cli_main, "build_object_store", fake_build_object_store)

    result = runner.invoke(cli_main.app, ["open"])
    assert result.exit_code == 1
    assert "does not exist" in result.output
    assert backend.container_exists is False

    result = runner.invoke(cli_main.app, ["open", "--create"])
    assert result.exit_code == 0
    assert backend.container_exists is True
    assert [c.create_if_missing for c in configs] == [False, True]


def test_config_file_and_overrides(backend, tmp_path, block_file):
    config_path = tmp_path / "store.yaml"
    config_path.write_text(yaml.safe_dump({"container": "from-file", "sharding": {"strategy": "flat"}}))

    result = runner.invoke(
        cli_main.app,
        ["put", str(block_file), "--config", str(config_path), "--container", "override"],
    )
    assert result.exit_code == 0, result.output
    assert backend.built_configs[-1].container == "override"
    assert backend.names() == [str(cid_for(b"hello blocks"))]


def test_invalid_config_file(backend, tmp_path, block_file):
    config_path = tmp_path / "store.yaml"
    config_path.write_text("container: NOT_VALID\n")

    result = runner.invoke(cli_main.app, ["put", str(block_file), "--config", str(config_path)])
    assert result.exit_code == 1
    assert "container" in result.output


def test_version():
    result = runner.invoke(cli_main.app, ["version"])
    assert result.exit_code == 0
    assert "azure-blockstore version" in result.output
