import json
import subprocess
from pathlib import Path

import pytest

from conftest import APP_ID, DEP_ID, DEV_ID, write_cargo_workspace
from lichking import cargo_metadata
from lichking.cargo_metadata import load_metadata_file, parse_cargo_metadata, run_cargo_metadata
from lichking.errors import MetadataError
from lichking.graph import DependencyKind
from lichking.license import File


def test_load_metadata_file(cargo_workspace: Path):
    metadata = load_metadata_file(cargo_workspace)

    assert [package.name for package in metadata.packages] == ["app", "dep", "devdep"]
    assert metadata.graph.root == APP_ID
    assert metadata.workspace_members == [APP_ID]
    assert metadata.by_id(DEP_ID).root == cargo_workspace.parent / "dep"

    kinds = {edge.target: edge.kind for edge in metadata.graph.edges_from(APP_ID)}
    assert kinds == {DEP_ID: DependencyKind.NORMAL, DEV_ID: DependencyKind.DEVELOPMENT}


def test_missing_resolve_leaves_graph_empty(tmp_path: Path):
    metadata = load_metadata_file(write_cargo_workspace(tmp_path, with_resolve=False))
    assert metadata.graph is None


def test_license_file_is_used_without_license():
    metadata = parse_cargo_metadata(
        {
            "packages": [
                {
                    "id": "odd 0.1.0",
                    "name": "odd",
                    "version": "0.1.0",
                    "license": None,
                    "license_file": "LICENSE-ODD",
                    "manifest_path": "/src/odd/Cargo.toml",
                }
            ],
        }
    )
    assert metadata.packages[0].license_id == File(Path("LICENSE-ODD"))


def test_edge_with_several_kinds_is_recorded_per_kind():
    metadata = parse_cargo_metadata(
        {
            "packages": [],
            "resolve": {
                "root": None,
                "nodes": [
                    {
                        "id": "a",
                        "deps": [{"pkg": "b", "dep_kinds": [{"kind": "dev"}, {"kind": None}, {"kind": "build"}]}],
                    },
                    {"id": "b", "deps": []},
                ],
            },
        }
    )
    kinds = [edge.kind for edge in metadata.graph.edges_from("a")]
    assert kinds == [DependencyKind.DEVELOPMENT, DependencyKind.NORMAL, DependencyKind.BUILD]


def test_malformed_metadata(tmp_path: Path):
    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(MetadataError):
        load_metadata_file(broken)
    with pytest.raises(MetadataError):
        parse_cargo_metadata({"packages": [{"name": "no-id"}]})


def test_run_cargo_metadata_builds_command(monkeypatch, cargo_workspace: Path):
    calls = []

    def fake_run(command, **kwargs):
        calls.append(command)
        return subprocess.CompletedProcess(command, 0, stdout=cargo_workspace.read_text(), stderr="")

    monkeypatch.setattr(cargo_metadata.subprocess, "run", fake_run)
    metadata = run_cargo_metadata(Path("work/Cargo.toml"), frozen=True, locked=True, verbose=2, cargo="my-cargo")

    assert calls == [
        [
            "my-cargo",
            "metadata",
            "--format-version",
            "1",
            "--manifest-path",
            str(Path("work/Cargo.toml")),
            "--verbose",
            "--verbose",
            "--frozen",
            "--locked",
        ]
    ]
    assert metadata.graph.root == APP_ID


def test_run_cargo_metadata_uses_cargo_env(monkeypatch):
    calls = []

    def fake_run(command, **kwargs):
        calls.append(command)
        return subprocess.CompletedProcess(command, 0, stdout=json.dumps({"packages": []}), stderr="")

    monkeypatch.setenv("CARGO", "/opt/cargo")
    monkeypatch.setattr(cargo_metadata.subprocess, "run", fake_run)
    run_cargo_metadata(quiet=True)

    assert calls[0][0] == "/opt/cargo"
    assert calls[0][-1] == "--quiet"


def test_cargo_failures_become_metadata_errors(monkeypatch):
    def failing_run(command, **kwargs):
        raise subprocess.CalledProcessError(101, command, output="", stderr="error: could not find Cargo.toml\n")

    monkeypatch.setattr(cargo_metadata.subprocess, "run", failing_run)
    with pytest.raises(MetadataError, match="could not find Cargo.toml"):
        run_cargo_metadata()

    def missing_run(command, **kwargs):
        raise FileNotFoundError(2, "No such file or directory")

    monkeypatch.setattr(cargo_metadata.subprocess, "run", missing_run)
    with pytest.raises(MetadataError, match="Unable to run"):
        run_cargo_metadata(cargo="cargo")
