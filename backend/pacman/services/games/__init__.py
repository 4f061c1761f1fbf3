"""Game services: the lobby, session/stats loops and score persistence.

This package sits between the pure simulation in ``pacman.game`` and the
transport (socket handlers, HTTP routes), keeping Flask out of the simulation.
"""
