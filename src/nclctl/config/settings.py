"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  (CLI flags passed by Click)
  2. Env vars     (``NCLCTL_*`` prefix)
  3. TOML file    (``nclctl.toml`` or ``[tool.nclctl]`` in ``pyproject.toml``)
  4. Code defaults baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses ``find_config`` and ``read_config_table`` from
:mod:`nclctl.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any, ClassVar

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from nclctl.config.discovery import find_config, read_config_table
from nclctl.config.models import DisplayConfig, LoaderConfig, PlayConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from the discovered config file or pyproject table."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            try:
                self._data = read_config_table(toml_path)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class NclSettings(BaseSettings):
    """Settings for the nclctl CLI, stored in ``click.Context.obj``.

    Attributes:
        root: Directory relative paths resolve against (parent of
            ``nclctl.toml``, or CWD if no config found).
        config_path: The TOML file in effect, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "NCLCTL_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    play: PlayConfig = Field(default_factory=PlayConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)

    _toml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        show_hidden: bool = False,
        **cli_flags: Any,
    ) -> NclSettings:
        """Construct settings from a CLI invocation.

        An explicit *config_path* that does not exist is an error; without
        one, the config is discovered by walking up from *root*.
        *show_hidden* can only switch ``[display] show_hidden`` on.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if not p.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.ClickException(msg)
            toml_path = p
        else:
            toml_path = find_config(root)

        resolved_root = root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            settings = cls(root=resolved_root, config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None
        if show_hidden and not settings.display.show_hidden:
            display = settings.display.model_copy(update={"show_hidden": True})
            settings = settings.model_copy(update={"display": display})
        return settings
