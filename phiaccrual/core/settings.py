from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from phiaccrual.core.exception import ConfigurationError
from phiaccrual.core.phi import DistributionModel, ExponentialModel, NormalModel


class DetectorSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PHIACCRUAL_",
        yaml_file="phiaccrual.yaml",
        extra="ignore",
    )

    window_size: Annotated[
        int,
        Field(
            description=(
                "Number of inter-arrival intervals kept in the sliding window.\n"
                "Once the window is full, each new interval evicts the oldest one.\n"
                "Larger windows react more slowly to a change of heartbeat cadence."
            ),
            gt=0,
            default=1000
        )
    ]

    min_samples: Annotated[
        int,
        Field(
            description=(
                "Minimum number of observed intervals before phi is reported.\n"
                "Below this count, phi returns None (no verdict yet)."
            ),
            ge=0,
            default=5
        )
    ]

    model: Annotated[
        Literal["exponential", "normal"],
        Field(
            description=(
                "Distribution assumed for inter-arrival intervals.\n\n"
                "exponential → rate is the reciprocal of the sample mean (default).\n"
                "normal      → normal distribution fitted to mean and standard deviation."
            ),
            default="exponential"
        )
    ]

    min_std_deviation: Annotated[
        float,
        Field(
            description=(
                "Lower bound for the standard deviation used by the normal model,\n"
                "in the same unit as heartbeat timestamps (milliseconds by default).\n"
                "Ignored by the exponential model."
            ),
            gt=0,
            default=100.0
        )
    ]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, YamlConfigSettingsSource(settings_cls)

    def build_model(self) -> DistributionModel:
        match self.model:
            case "normal":
                return NormalModel(min_std_deviation=self.min_std_deviation)
            case _:
                return ExponentialModel()


def load_settings(path: Path | str | None = None, **overrides) -> DetectorSettings:
    """
    Load detector settings.

    Priority: explicit overrides > PHIACCRUAL_* environment variables >
    YAML file. Without a path, './phiaccrual.yaml' is read if it exists.
    """
    if path is None:
        return DetectorSettings(**overrides)

    file = Path(path)
    if not file.is_file():
        raise ConfigurationError(f"Configuration file not found: '{file}'")

    class FileDetectorSettings(DetectorSettings):
        model_config = SettingsConfigDict(yaml_file=file)

    return FileDetectorSettings(**overrides)
