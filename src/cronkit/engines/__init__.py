"""Scheduling engines for cronkit.

Engines decide when a registered job is due. The driver only talks to them
through BaseEngine.

Example:
    from cronkit.engines import get_engine

    engine = get_engine(None)  # in-process LocalEngine
    handle = engine.create_registration("nightly", "0 3 * * *")
"""

from cronkit.engines.base import BaseEngine
from cronkit.engines.cron import CronExpression
from cronkit.engines.factory import get_engine
from cronkit.engines.local import LocalEngine

__all__ = ["BaseEngine", "CronExpression", "LocalEngine", "get_engine"]
