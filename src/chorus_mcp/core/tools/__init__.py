"""
Chorus tool handlers, one module per entity.

Every public coroutine whose first parameter is ``client`` is picked up by
``chorus_mcp.core.registry`` and exposed as ``chorus_<name>``. Modules
starting with an underscore hold shared helpers and are never scanned.
"""
