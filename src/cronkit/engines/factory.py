"""Engine factory for creating engines from connection strings."""

from urllib.parse import urlparse

from cronkit.engines.base import BaseEngine
from cronkit.engines.local import LocalEngine
from cronkit.exceptions import EngineError

LOCAL_SCHEMES = ("local", "memory")


def get_engine(engine: BaseEngine | str | None, **kwargs) -> BaseEngine:
    """Create an engine from a connection string or return existing instance.

    Additional keyword arguments are passed to the engine constructor.

    Args:
        engine: Either a BaseEngine instance, a connection string, or None
        **kwargs: Engine-specific options (max_name_length, default_backoff_schedule, etc.)

    Returns:
        BaseEngine instance

    Raises:
        EngineError: If URL scheme is unsupported

    Examples:
        engine = get_engine(None)          # LocalEngine()
        engine = get_engine("local://")    # LocalEngine()
        engine = get_engine(custom_engine) # returned as is
    """
    if engine is None:
        return LocalEngine(**kwargs)

    if isinstance(engine, BaseEngine):
        return engine

    if not isinstance(engine, str):
        raise EngineError(
            f"Engine must be a connection string, BaseEngine instance, or None. "
            f"Got {type(engine).__name__}"
        )

    scheme = urlparse(engine).scheme.lower()

    if scheme in LOCAL_SCHEMES:
        return LocalEngine(**kwargs)

    raise EngineError(
        f"Unsupported engine URL scheme: '{scheme}'. "
        f"Supported schemes: {', '.join(LOCAL_SCHEMES)}. "
        f"To add support for '{scheme}', implement a BaseEngine subclass and pass the instance."
    )
