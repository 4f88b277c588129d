"""Runner configuration: defaults, YAML overrides and required environment."""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from .refs import DEFAULT_REPLACEMENTS


class ConfigurationError(Exception):
    pass


@dataclass
class RunnerConfig:
    library: str = "Soenneker.HighLevel.OpenApiClient"
    client_name: str = "HighLevelOpenApiClient"
    target_repo_url: Optional[str] = None
    specs_repo_url: str = "https://github.com/GoHighLevel/highlevel-api-docs"
    title: str = "Merged HL APIs"
    version: str = "1.0.0"
    commit_message: str = "Automated update"
    author_name: str = "openapi-client-runner"
    author_email: str = "openapi-client-runner@users.noreply.github.com"
    token_env_var: str = "GH__TOKEN"
    kiota_package: str = "Microsoft.OpenApi.Kiota"
    kiota_language: str = "CSharp"
    build_configuration: str = "Release"
    fixer_command: Optional[List[str]] = None
    ref_replacements: List[Tuple[str, str]] = field(default_factory=lambda: list(DEFAULT_REPLACEMENTS))
    push: bool = True

    def __post_init__(self):
        if not self.target_repo_url:
            self.target_repo_url = f"https://github.com/soenneker/{self.library.lower()}"
        self.ref_replacements = [tuple(pair) for pair in self.ref_replacements]
        for pair in self.ref_replacements:
            if len(pair) != 2:
                raise ConfigurationError(f"ref_replacements entries need exactly two strings, got {list(pair)!r}")


def load_config(path: Optional[Union[str, Path]] = None, **overrides: Any) -> RunnerConfig:
    """Build a config from defaults, an optional YAML file, then keyword overrides."""
    values: Dict[str, Any] = {}

    if path is not None:
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must hold a mapping of settings")
        values.update(data)

    values.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(RunnerConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

    return RunnerConfig(**values)


def get_variable_strict(name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Read a required environment variable."""
    environ = os.environ if environ is None else environ
    value = environ.get(name)
    if not value:
        raise ConfigurationError(f"Environment variable {name} is required but not set")
    return value
