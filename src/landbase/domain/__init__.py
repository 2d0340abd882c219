"""Domain model for land-base facilities.

This package hosts the facility rules layer.  It exposes:

* Dataclasses describing facilities, the units they host, and the campaign
  aggregate (see :mod:`models`).
* Enumerations and strongly-typed identifiers used across the rules layer.
* Rule configuration objects (see :mod:`rules_config`).
* Pure rule functions per facility kind (:mod:`facility`, :mod:`airbase`,
  :mod:`depot`) and the :mod:`dispatch` layer that routes between them.

Everything operates in memory; persistence goes through :mod:`landbase.savegame`.
"""

from . import (
    airbase,
    capacity,
    depot,
    dispatch,
    enums,
    errors,
    facility,
    models,
    rules_config,
    turn,
)

__all__ = [
    "airbase",
    "capacity",
    "depot",
    "dispatch",
    "enums",
    "errors",
    "facility",
    "models",
    "rules_config",
    "turn",
]
