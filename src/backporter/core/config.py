"""Application state and configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import platformdirs
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from backporter.core.base import BaseConfig, BaseState
from backporter.core.log import Logger
from backporter.core.yaml_settings import YamlWithIncludesSettingsSource

# ============================================================
# CONFIG MODELS (loaded from YAML/env/CLI)
# ============================================================

class GitConfig(BaseConfig):
    """Repository locations."""

    node_dir: Path = Field(
        default=Path("."),
        description="Downstream Node.js checkout that vendors V8",
    )
    v8_dir: Path = Field(
        default=Path("~/.update-v8/v8"),
        description="Local clone of the upstream V8 repository",
    )
    vendored_dir: str = Field(
        default="deps/v8",
        description="Directory of the vendored V8 copy, relative to node_dir",
    )
    gpg_sign: bool = Field(
        default=False,
        description="GPG-sign commits created by the backport",
    )

    @field_validator("node_dir", "v8_dir")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return Path(value).expanduser()


class VersionConfig(BaseConfig):
    """Version metadata files and patterns."""

    version_header: str = Field(
        default="deps/v8/include/v8-version.h",
        description="V8 version header, relative to node_dir",
    )
    node_version_header: str = Field(
        default="src/node_version.h",
        description=(
            "Node.js version header, relative to node_dir. Read when "
            "--node-major-version is not given"
        ),
    )
    common_gypi: str = Field(
        default="common.gypi",
        description="Build configuration holding the embedder string",
    )
    embedder_key: str = Field(
        default="v8_embedder_string",
        description="Key of the embedder string in common_gypi",
    )
    embedder_platform: str = Field(
        default="node",
        description="Platform prefix of the embedder string (-node.N)",
    )


class MessageConfig(BaseConfig):
    """Commit message conventions."""

    title_prefix: str = Field(
        default="deps: V8:",
        description="Subsystem prefix of the commit title",
    )
    commit_url: str = Field(
        default="https://github.com/v8/v8/commit",
        description="Base URL for Refs: lines, full SHA is appended",
    )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger = Field(
        default=None,
        description="Logger configuration and runtime instance"
    )
    git: GitConfig = Field(
        default_factory=GitConfig,
        description="Repository locations"
    )
    version: VersionConfig = Field(
        default_factory=VersionConfig,
        description="Version metadata files"
    )
    message: MessageConfig = Field(
        default_factory=MessageConfig,
        description="Commit message conventions"
    )

    log_level: str = Field(
        default="info",
        alias="log-level",
        description=(
            "Console log level: 'spew', 'trace', 'debug', 'info', "
            "'warn', 'error', 'fatal'"
        ),
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir()) / "backporter"
        ),
        description="Root directory for log files",
    )

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode='after')
    def _setup_logger(self) -> 'Config':
        """Initialize the global logger once config has loaded."""
        from backporter.core.log import setup_logger

        if self.logger is None:
            self.logger = Logger(level=self.log_level)

        setup_logger(
            log_root=self.log_root,
            run_name="backport",
            level=self.log_level,
            console=self.logger.console,
            file=self.logger.file,
        )
        return self

    def close(self):
        from backporter.core.log import logger
        logger.close()
        super().close()


# ============================================================
# RUNTIME STATE MODELS (mutable during workflow execution)
# ============================================================

class BackportState(BaseState):
    """Backport workflow runtime state."""

    options: Any = Field(
        default=None,
        description="BackportOptions for this run",
    )
    confirm: Any = Field(
        default=None,
        description="Yes/no prompt; the terminal prompt if None",
    )
    resolver: Any = Field(
        default=None,
        description="ConflictResolver; prompts the operator if None",
    )
    run: Any = Field(
        default=None,
        description="RunContext shared by all steps",
    )
    steps: list = Field(
        default_factory=list,
        description="Planned steps, in execution order",
    )
    step_index: int = Field(
        default=0,
        description="Index of the next step to run",
    )
    status: str = Field(
        default="pending",
        description=(
            "Workflow status: pending, running, complete, "
            "cancelled, failed"
        ),
    )
    failed_step: str | None = Field(
        default=None,
        description="Title of the step that failed, if any",
    )

    model_config = ConfigDict(arbitrary_types_allowed=True)


class Runtime(BaseModel):
    """All runtime state, by workflow."""

    backport: BackportState = Field(
        default_factory=BackportState,
        description="Backport workflow runtime state"
    )


# ============================================================
# STATE (config + runtime combined)
# ============================================================

class State(BaseSettings):
    """Complete application state - configuration and runtime.

    This is the object that flows through the workflow graph:
    config is loaded from YAML/env/CLI and left alone, runtime is
    mutated as steps run.
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)"
    )
    runtime: Runtime = Field(
        default_factory=Runtime,
        description="Runtime state (mutates during workflow execution)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to include and merge. "
            "Use --include on CLI or include: in YAML files."
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file="backporter.yaml",
        env_file=".env",
        env_prefix="BACKPORTER_",
        env_nested_delimiter="__",
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore'
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: init, YAML with includes, .env, environment, secrets."""
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )


__all__ = ["State", "Config", "BaseConfig", "BaseState"]
