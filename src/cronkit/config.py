import os
from dataclasses import dataclass, field
from typing import Any

DEFAULT_BACKOFF_SCHEDULE = (0.1, 1.0, 5.0, 30.0, 60.0)


@dataclass
class EngineConfig:
    url: str | None = None
    max_name_length: int = 64
    max_backoff_retries: int = 5
    max_backoff_delay: float = 3600.0
    default_backoff_schedule: tuple[float, ...] = DEFAULT_BACKOFF_SCHEDULE

    def __post_init__(self):
        """Validate engine configuration."""
        if self.max_name_length < 1:
            raise ValueError("max_name_length must be at least 1")

        if self.max_backoff_retries < 0:
            raise ValueError("max_backoff_retries must be non-negative")

        if self.max_backoff_delay < 0:
            raise ValueError("max_backoff_delay must be non-negative")

        self.default_backoff_schedule = tuple(float(d) for d in self.default_backoff_schedule)

        if len(self.default_backoff_schedule) > self.max_backoff_retries:
            raise ValueError(
                f"default_backoff_schedule has {len(self.default_backoff_schedule)} entries, "
                f"max_backoff_retries is {self.max_backoff_retries}"
            )

        for delay in self.default_backoff_schedule:
            if delay < 0 or delay > self.max_backoff_delay:
                raise ValueError(
                    f"default_backoff_schedule entries must be between 0 and {self.max_backoff_delay}"
                )

    def create_engine(self) -> "BaseEngine":
        """Create engine instance from this configuration.

        Returns:
            Engine instance

        Raises:
            EngineError: If URL scheme is unsupported
        """
        from cronkit.engines.factory import get_engine

        return get_engine(
            self.url,
            max_name_length=self.max_name_length,
            max_backoff_retries=self.max_backoff_retries,
            max_backoff_delay=self.max_backoff_delay,
            default_backoff_schedule=self.default_backoff_schedule,
        )


@dataclass
class Config:
    """Main cronkit configuration.

    Args:
        engine: Engine configuration (optional, defaults to EngineConfig()
            which selects the in-process LocalEngine)
    """
    engine: EngineConfig = field(default_factory=EngineConfig)

    def __post_init__(self):
        """Ensure engine config exists."""
        if self.engine is None:
            self.engine = EngineConfig()

    def create_engine(self) -> "BaseEngine":
        return self.engine.create_engine()

    @classmethod
    def from_env(cls, prefix: str = "CRONKIT_") -> "Config":
        """Load configuration from environment variables using mappings."""

        def get_env(key: str, default: Any = None, type_cast: Any = str) -> Any:
            value = os.getenv(f"{prefix}{key.upper()}")

            if value is None:
                return default
            if type_cast == int:
                return int(value)
            elif type_cast == float:
                return float(value)
            elif type_cast == tuple:
                return tuple(float(part) for part in value.split(",") if part.strip())
            else:
                return value

        engine_map = {
            "url": ("engine_url", str, None),
            "max_name_length": ("engine_max_name_length", int, 64),
            "max_backoff_retries": ("engine_max_backoff_retries", int, 5),
            "max_backoff_delay": ("engine_max_backoff_delay", float, 3600.0),
            "default_backoff_schedule": (
                "engine_default_backoff_schedule", tuple, DEFAULT_BACKOFF_SCHEDULE
            ),
        }

        kwargs = {}
        for name, (env_name, type_cast, default) in engine_map.items():
            kwargs[name] = get_env(env_name, default=default, type_cast=type_cast)

        return cls(engine=EngineConfig(**kwargs))
