from __future__ import annotations

from pathlib import Path
from typing import Any, Type

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from dcmsort.sort.sort_method import FileAction
from dcmsort.sort.types import ChoiceEnum, Layout, SortBy

DEFAULT_CONFIG_FILE = Path().cwd() / "dcmsort.yaml"

CHOICE_FIELDS: dict[str, Type[ChoiceEnum]] = {
    "mode": FileAction,
    "layout": Layout,
    "sort_by": SortBy,
}


class SortSettings(BaseSettings):
    """
    Options of a sorting run.

    Values given explicitly (e.g. from the command line) win over
    `DCMSORT_*` environment variables, which win over the YAML file.
    """

    mode: FileAction = Field(
        default=FileAction.COPY,
        description="How files are placed in the output tree",
    )
    layout: Layout = Field(
        default=Layout.PATIENT_STUDY_SERIES,
        description="Directory levels below the output root",
    )
    sort_by: SortBy = Field(
        default=SortBy.AUTO,
        description="Ordering signal within a series",
    )
    include_phi: bool = Field(
        default=False,
        description="Allow patient name, dates and descriptions in names",
    )
    follow_symlinks: bool = Field(
        default=False,
        description="Descend into symlinked directories while scanning",
    )
    dry_run: bool = Field(
        default=False,
        description="Only report planned operations",
    )
    num_workers: int = Field(
        default=1,
        description="Parallel jobs used to read headers (-1 for all CPUs)",
    )
    report: Path | None = Field(
        default=None,
        description="Write a JSON report of every extracted record here",
    )

    model_config = SettingsConfigDict(
        env_prefix="DCMSORT_",
        yaml_file=(DEFAULT_CONFIG_FILE,),
        extra="ignore",
    )

    @field_validator("mode", "layout", "sort_by", mode="before")
    @classmethod
    def _parse_choice(cls, value: Any, info: ValidationInfo) -> Any:  # noqa: ANN401
        """Accept choices in any case, like the command line does."""
        return CHOICE_FIELDS[info.field_name].validate(value)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
        )

    @classmethod
    def load(
        cls, config_file: Path | None = None, **overrides: Any
    ) -> SortSettings:
        """Build settings, reading `config_file` instead of the default YAML."""
        if config_file is None:
            return cls(**overrides)

        class _FileSettings(cls):  # type: ignore[valid-type,misc]
            model_config = SettingsConfigDict(
                **{**cls.model_config, "yaml_file": (config_file,)}
            )

        return _FileSettings(**overrides)
