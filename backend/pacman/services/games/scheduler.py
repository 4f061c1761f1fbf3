import logging

logger = logging.getLogger(__name__)


def run_session_loop(lobby, session) -> None:
    """Drive one session at its fixed tick until it ends or is stopped.

    - Exactly one loop per session, so ticks never overlap
    - A tick that runs late pushes the schedule back instead of firing a
      burst of catch-up ticks
    - Publishes a snapshot after every tick; the last one carries gameOver
    """
    interval = session.tick_ms / 1000.0
    clock = lobby.clock
    next_due = clock() + interval
    logger.info(f"[loop-start] session={session.id} interval={session.tick_ms}ms")
    while session.is_active:
        lobby.sleep(max(0.0, next_due - clock()))
        if not session.is_active:
            break
        try:
            snapshot = session.tick()
        except Exception:
            logger.exception(f"[loop-crash] session={session.id} tick={session.world.tick}")
            lobby.discard_session(session)
            return
        lobby.publish(session, snapshot)
        if snapshot.game_over:
            lobby.finish_session(session)
            break
        next_due = max(next_due + interval, clock())
    logger.info(f"[loop-stop] session={session.id} ticks={session.world.tick} state={session.state.value}")


def run_stats_loop(lobby, interval_sec: int) -> None:
    """Periodically push lobby_stats to every connection, independent of sessions."""
    while not lobby.closed:
        lobby.sleep(interval_sec)
        if lobby.closed:
            break
        lobby.broadcast_stats()
