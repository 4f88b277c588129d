"""End-to-end run: fetch sources, merge, repair, generate the client, build and push."""

import logging
from pathlib import Path
from typing import Optional, Union

from .config import RunnerConfig, get_variable_strict
from .document import to_json
from .files import build_inputs, delete_all_except, delete_if_exists
from .merge import MergeResult, merge_openapis
from .refs import replace_refs_in_file
from .tools import DotnetClient, GitClient, KiotaGenerator, OpenApiFixer

logger = logging.getLogger(__name__)


class ClientPipeline:
    """Regenerates the client library for one configuration.

    Collaborators are injected so each stage can be swapped out; the defaults
    drive the real git, dotnet and kiota executables.
    """

    def __init__(
        self,
        config: RunnerConfig,
        git: Optional[GitClient] = None,
        dotnet: Optional[DotnetClient] = None,
        kiota: Optional[KiotaGenerator] = None,
        fixer: Optional[OpenApiFixer] = None,
        environ=None,
    ):
        self.config = config
        self.git = git or GitClient()
        self.dotnet = dotnet or DotnetClient()
        self.kiota = kiota or KiotaGenerator(language=config.kiota_language)
        self.fixer = fixer or OpenApiFixer(config.fixer_command)
        self.environ = environ

    def process(self) -> bool:
        """Run every stage in order; False when the build fails and nothing is pushed."""
        config = self.config

        token = None
        if config.push:
            token = get_variable_strict(config.token_env_var, self.environ)

        git_directory = self.git.clone_to_temp_directory(config.target_repo_url)

        apps_directory = git_directory / "apps"
        common_directory = git_directory / "common"
        apps_directory.mkdir(parents=True, exist_ok=True)
        common_directory.mkdir(parents=True, exist_ok=True)

        target_file = apps_directory / "openapi.json"
        fixed_file = apps_directory / "fixed.json"

        delete_if_exists(common_directory / "common-schemas.json")
        delete_if_exists(target_file)

        specs_directory = self.git.clone_to_temp_directory(config.specs_repo_url)
        self.merge_sources(specs_directory, target_file)

        self.fixer.fix(target_file, fixed_file)
        replace_refs_in_file(fixed_file, fixed_file, config.ref_replacements)

        self.dotnet.update_global_tool(config.kiota_package)

        src_directory = git_directory / "src"
        delete_all_except(src_directory, "*.csproj")

        self.kiota.generate(fixed_file, config.client_name, config.library, src_directory)

        return self.build_and_push(git_directory, token)

    def merge_sources(self, specs_directory: Union[str, Path], output_path: Union[str, Path]) -> MergeResult:
        """Merge the ``apps`` and ``common`` specs of a checkout into ``output_path``."""
        specs_directory = Path(specs_directory)
        inputs = build_inputs([specs_directory / "apps", specs_directory / "common"])
        logger.info("Merging %d spec files from %s", len(inputs), specs_directory)

        result = merge_openapis(inputs, self.config.title, self.config.version)
        self._report(result)

        Path(output_path).write_text(to_json(result.document), encoding="utf-8")
        logger.info("Merged OpenAPI document written to %s", output_path)
        return result

    def build_and_push(self, git_directory: Path, token: Optional[str]) -> bool:
        config = self.config
        project = git_directory / "src" / f"{config.library}.csproj"

        self.dotnet.restore(project)

        if not self.dotnet.build(project, config.build_configuration, restore=False):
            logger.error("Build was not successful, exiting...")
            return False

        if not config.push:
            logger.info("Push disabled, leaving changes in %s", git_directory)
            return True

        self.git.commit_and_push(git_directory, config.commit_message, token, config.author_name, config.author_email)
        return True

    @staticmethod
    def _report(result: MergeResult) -> None:
        document = result.document
        logger.info(
            "Merged %d paths and %d schemas (%d file(s) skipped)",
            len(document.paths), len(document.components["schemas"]), result.skipped_count,
        )
        if result.path_collisions:
            logger.warning("%d path(s) were overwritten by later inputs", len(result.path_collisions))
