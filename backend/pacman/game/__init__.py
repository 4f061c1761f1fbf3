"""Authoritative maze simulation: grid, entities, per-tick engine, sessions
and the wire codec. Nothing in this package knows about Flask or sockets."""
