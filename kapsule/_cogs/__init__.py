"""
Low-level building blocks of the library: clients, configs, structs, helpers.

Nothing here knows about waiting, versions, or projections. The "cogs"
are used by the core (see :mod:`kapsule._core`), never the other way around.
"""
