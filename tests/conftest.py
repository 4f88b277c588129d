import json

import pytest
import yaml


@pytest.fixture
def write_spec(tmp_path):
    """Write an OpenAPI document to tmp_path and return its path."""

    def _write(name, paths=None, components=None, servers=None, directory=None):
        document = {
            "openapi": "3.0.1",
            "info": {"title": name, "version": "1.0.0"},
            "paths": paths or {},
        }
        if components is not None:
            document["components"] = components
        if servers is not None:
            document["servers"] = servers

        target_dir = tmp_path if directory is None else tmp_path / directory
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.suffix == ".json":
            path.write_text(json.dumps(document, indent=2))
        else:
            path.write_text(yaml.safe_dump(document, sort_keys=False))
        return path

    return _write
