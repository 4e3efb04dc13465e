"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, the config file only contains
overrides. An empty (or missing) file is a valid configuration. The
sections are composed into :class:`nclctl.config.settings.NclSettings`.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class LoaderConfig(BaseModel):
    """[loader] section."""

    model_config = {"frozen": True}

    strict: bool = False


class PlayConfig(BaseModel):
    """[play] section."""

    model_config = {"frozen": True}

    revert_illegal: bool = True


class DisplayConfig(BaseModel):
    """[display] section."""

    model_config = {"frozen": True}

    show_hidden: bool = False
    max_listed: int = Field(default=20, ge=1)
