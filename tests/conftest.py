import json
import sys
from pathlib import Path

import pytest

# Ensure src package is importable without installation
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))

from lichking.license import KnownLicense, template  # noqa: E402

APP_ID = "app 0.1.0 (path+file:///work/app)"
DEP_ID = "dep 1.2.0 (registry+https://github.com/rust-lang/crates.io-index)"
DEV_ID = "devdep 3.0.0 (registry+https://github.com/rust-lang/crates.io-index)"


def _raw_package(package_id: str, name: str, version: str, directory: Path, license: str | None) -> dict:
    return {
        "id": package_id,
        "name": name,
        "version": version,
        "license": license,
        "license_file": None,
        "manifest_path": str(directory / "Cargo.toml"),
    }


def write_cargo_workspace(tmp_path: Path, dep_license: str = "MIT", with_resolve: bool = True) -> Path:
    """Lay out app -> dep (normal) and app -> devdep (dev) and save their cargo metadata."""

    mit = template(KnownLicense.MIT)
    directories = {}
    for name in ("app", "dep", "devdep"):
        directory = tmp_path / name
        directory.mkdir()
        (directory / "LICENSE-MIT").write_text(mit)
        directories[name] = directory

    data = {
        "packages": [
            _raw_package(APP_ID, "app", "0.1.0", directories["app"], "MIT"),
            _raw_package(DEP_ID, "dep", "1.2.0", directories["dep"], dep_license),
            _raw_package(DEV_ID, "devdep", "3.0.0", directories["devdep"], "GPL-3.0-only"),
        ],
        "workspace_members": [APP_ID],
        "workspace_root": str(directories["app"]),
        "resolve": {
            "root": APP_ID,
            "nodes": [
                {
                    "id": APP_ID,
                    "deps": [
                        {"name": "dep", "pkg": DEP_ID, "dep_kinds": [{"kind": None, "target": None}]},
                        {"name": "devdep", "pkg": DEV_ID, "dep_kinds": [{"kind": "dev", "target": None}]},
                    ],
                },
                {"id": DEP_ID, "deps": []},
                {"id": DEV_ID, "deps": []},
            ],
        },
    }
    if not with_resolve:
        data["resolve"] = None

    metadata_file = tmp_path / "metadata.json"
    metadata_file.write_text(json.dumps(data))
    return metadata_file


@pytest.fixture
def mit_text() -> str:
    return template(KnownLicense.MIT)


@pytest.fixture
def cargo_workspace(tmp_path: Path) -> Path:
    return write_cargo_workspace(tmp_path)
