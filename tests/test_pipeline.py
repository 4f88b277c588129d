import json
import logging

import pytest

from openapi_client_runner.config import ConfigurationError, RunnerConfig
from openapi_client_runner.pipeline import ClientPipeline

LEGACY = "../common/common-schemas.json#/components/schemas/BadRequestDTO"


class FakeGit:
    def __init__(self, repos):
        self.repos = repos
        self.cloned = []
        self.pushed = []

    def clone_to_temp_directory(self, url):
        self.cloned.append(url)
        return self.repos[url]

    def commit_and_push(self, repo_dir, message, token, author_name, author_email):
        self.pushed.append((repo_dir, message, token))
        return True


class FakeDotnet:
    def __init__(self, build_ok=True):
        self.build_ok = build_ok
        self.calls = []

    def update_global_tool(self, package):
        self.calls.append(("update", package))

    def restore(self, project):
        self.calls.append(("restore", project))
        return True

    def build(self, project, configuration="Release", restore=False):
        self.calls.append(("build", project, configuration))
        return self.build_ok


class FakeKiota:
    def __init__(self):
        self.calls = []

    def generate(self, spec_path, client_name, namespace, output_dir):
        self.calls.append((spec_path, client_name, namespace, output_dir))
        (output_dir / "Client.cs").write_text("// generated")


class CopyFixer:
    def fix(self, input_path, output_path):
        output_path.write_text(input_path.read_text())


@pytest.fixture
def repos(tmp_path, write_spec):
    target = tmp_path / "target"
    (target / "src" / "Old").mkdir(parents=True)
    (target / "src" / "Old" / "Stale.cs").write_text("")
    (target / "src" / "Acme.Client.csproj").write_text("<Project />")
    (target / "common").mkdir()
    (target / "common" / "common-schemas.json").write_text("{}")

    specs = tmp_path / "specs"
    write_spec(
        "specs/apps/contacts.json",
        paths={"/": {"get": {"responses": {"400": {"$ref": LEGACY}}}}},
        components={"schemas": {"Contact": {"type": "object"}}},
        servers=[{"url": "https://services.example.com"}],
    )
    write_spec(
        "specs/apps/calendars.yaml",
        paths={"/calendars/": {"get": {"responses": {"200": {"description": "OK"}}}}},
        components={"schemas": {"Contact": {"type": "string"}}},
        servers=[{"url": "https://services.example.com"}],
    )
    write_spec("specs/common/common-schemas.json", components={"schemas": {"BadRequestDTO": {"type": "object"}}})
    return {"target": target, "specs": specs}


def make_pipeline(repos, push=True, build_ok=True, environ=None):
    config = RunnerConfig(
        library="Acme.Client",
        target_repo_url="https://example.com/target",
        specs_repo_url="https://example.com/specs",
        push=push,
    )
    git = FakeGit({"https://example.com/target": repos["target"], "https://example.com/specs": repos["specs"]})
    pipeline = ClientPipeline(
        config,
        git=git,
        dotnet=FakeDotnet(build_ok),
        kiota=FakeKiota(),
        fixer=CopyFixer(),
        environ={"GH__TOKEN": "tok"} if environ is None else environ,
    )
    return pipeline


def test_full_run(repos):
    pipeline = make_pipeline(repos)

    assert pipeline.process() is True

    target = repos["target"]
    merged = json.loads((target / "apps" / "openapi.json").read_text())
    assert sorted(merged["paths"]) == ["/calendars/", "/contacts/"]
    assert [s["url"] for s in merged["servers"]] == ["https://services.example.com"]
    assert sorted(merged["components"]["schemas"]) == ["BadRequestDTO", "Contact", "contacts_Contact"]
    assert merged["info"] == {"title": "Merged HL APIs", "version": "1.0.0"}

    fixed = (target / "apps" / "fixed.json").read_text()
    assert LEGACY not in fixed
    assert '"$ref": "#/components/schemas/BadRequestDTO"' in fixed

    assert not (target / "common" / "common-schemas.json").exists()
    assert not (target / "src" / "Old").exists()
    assert sorted(p.name for p in (target / "src").iterdir()) == ["Acme.Client.csproj", "Client.cs"]

    assert pipeline.kiota.calls == [(target / "apps" / "fixed.json", "HighLevelOpenApiClient", "Acme.Client", target / "src")]
    assert ("update", "Microsoft.OpenApi.Kiota") in pipeline.dotnet.calls
    assert pipeline.git.pushed == [(target, "Automated update", "tok")]


def test_build_failure_stops_before_push(repos, caplog):
    pipeline = make_pipeline(repos, build_ok=False)

    with caplog.at_level(logging.ERROR):
        assert pipeline.process() is False

    assert pipeline.git.pushed == []
    assert "Build was not successful" in caplog.text


def test_missing_token_fails_before_cloning(repos):
    pipeline = make_pipeline(repos, environ={})

    with pytest.raises(ConfigurationError):
        pipeline.process()

    assert pipeline.git.cloned == []


def test_no_push_does_not_need_a_token(repos):
    pipeline = make_pipeline(repos, push=False, environ={})

    assert pipeline.process() is True
    assert pipeline.git.pushed == []


def test_merge_sources_reports_skipped_files(repos, tmp_path):
    (repos["specs"] / "apps" / "broken.yaml").write_text("openapi: [3.0\n")
    pipeline = make_pipeline(repos)

    result = pipeline.merge_sources(repos["specs"], tmp_path / "out.json")

    assert result.skipped_count == 1
    assert json.loads((tmp_path / "out.json").read_text())["paths"]
