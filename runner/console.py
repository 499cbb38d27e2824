"""Terminal workout player.

Usage:
    python -m runner.console sessions
    python -m runner.console play SESSION_ID [--block N --repetition N --exercise N]
    python -m runner.console resume SESSION_ID
    python -m runner.console paused
    python -m runner.console discard SESSION_ID

While playing, press Enter to complete a reps exercise, ``s`` + Enter to
skip the current step, ``p`` to pause and exit, ``q`` to abandon.
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler

from speech_client import (
    ConsoleSink,
    FallbackSink,
    LoggingSink,
    QuotaLimitedSink,
    QuotaTracker,
)
from workout_engine import CueEmitter, PlaybackScheduler, SessionCatalog, WorkoutPlayer
from workout_engine.config import (
    CUE_DELAY_MS,
    SESSIONS_PATH,
    SPEECH_QUOTA_CHARS,
    SPEECH_QUOTA_PATH,
    STATE_DIR,
    TICK_SECONDS,
)
from workout_engine.exceptions import (
    InvalidStartPositionError,
    PausedWorkoutNotFoundError,
    SerializationError,
    SessionNotFoundError,
    StaleResumeError,
    WorkoutAlreadyActiveError,
)
from workout_engine.models.enums import DisplayPhase
from workout_engine.persistence import JsonFileStateRepository
from workout_engine.playback import DisplaySnapshot, format_clock, wall_clock_ms
from workout_engine.queue_builder import build_queue, describe_session

logger = logging.getLogger(__name__)


def build_player(catalog: SessionCatalog) -> WorkoutPlayer:
    """Wire the engine to the on-disk state directory and a console voice."""
    scheduler = PlaybackScheduler(catalog, JsonFileStateRepository(STATE_DIR))
    voice = QuotaLimitedSink(
        ConsoleSink(),
        QuotaTracker(SPEECH_QUOTA_PATH, limit=SPEECH_QUOTA_CHARS),
    )
    emitter = CueEmitter(FallbackSink(voice, LoggingSink()), delivery_delay_ms=CUE_DELAY_MS)
    return WorkoutPlayer(scheduler, emitter)


def format_status(snapshot: DisplaySnapshot) -> str:
    """One status line for the terminal."""
    if snapshot.is_completed:
        return "Workout complete."

    position = f"[{snapshot.queue_index + 1}/{snapshot.queue_length}]"
    if snapshot.phase == DisplayPhase.EXERCISE and snapshot.current_exercise is not None:
        exercise = snapshot.current_exercise
        if exercise.is_timed:
            what = f"{exercise.name} {format_clock(snapshot.remaining_sec)}"
        else:
            what = f"{exercise.name} x{exercise.value} (Enter when done)"
    else:
        upcoming = snapshot.next_exercise.name if snapshot.next_exercise else "?"
        what = f"Rest {format_clock(snapshot.remaining_sec)}, next: {upcoming}"

    block = snapshot.current_block or snapshot.next_block
    block_name = block.name if block is not None else ""
    return (
        f"{position} {block_name} {snapshot.block_repetition}/{snapshot.block_repetitions}"
        f" | {what}"
    )


def run_playback(
    player: WorkoutPlayer,
    read_line: Callable[[], str] = input,
    tick_seconds: int = TICK_SECONDS,
) -> None:
    """Drive *player* until it completes, is paused or is abandoned.

    Ticks come from an APScheduler background job; input is read on the
    calling thread. Both sides go through one lock.
    """
    lock = threading.Lock()
    last_index: list[int | None] = [None]

    def show() -> None:
        snapshot = player.snapshot()
        if snapshot is not None and snapshot.queue_index != last_index[0]:
            last_index[0] = snapshot.queue_index
            print(format_status(snapshot))

    def tick_job() -> None:
        with lock:
            player.tick()
            show()

    ticker = BackgroundScheduler()
    ticker.add_job(tick_job, "interval", seconds=tick_seconds, id="workout_tick")
    ticker.start()
    logger.info("Playback ticking every %d s", tick_seconds)

    with lock:
        show()
    try:
        while True:
            with lock:
                if not player.is_active:
                    break
            try:
                line = read_line().strip().lower()
            except (EOFError, KeyboardInterrupt):
                line = "p"

            with lock:
                if not player.is_active:
                    break
                if line == "":
                    if not player.complete():
                        print("Countdown running; press s to skip it.")
                elif line == "s":
                    player.skip()
                elif line == "p":
                    state = player.pause()
                    print(f"Paused. Continue with: resume {state.session_id}")
                    break
                elif line == "q":
                    player.abandon()
                    print("Workout abandoned.")
                    break
                else:
                    print("Enter = done, s = skip, p = pause, q = quit")
                show()
    finally:
        ticker.shutdown(wait=False)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def cmd_sessions(catalog: SessionCatalog) -> int:
    if not len(catalog):
        print(f"No sessions in {SESSIONS_PATH}")
        return 0
    for session in catalog:
        print(f"{session.id}: {describe_session(session, build_queue(session))}")
    return 0


def cmd_paused(player: WorkoutPlayer) -> int:
    paused = player.paused_workouts()
    if not paused:
        print("No paused workouts.")
        return 0
    now = wall_clock_ms()
    for entry in paused:
        minutes = (now - entry.paused_at_ms) // 60_000
        print(
            f"{entry.session_id}: step {entry.state.queue_index + 1}, "
            f"paused {minutes} min ago"
        )
    return 0


def cmd_play(player: WorkoutPlayer, args: argparse.Namespace) -> int:
    try:
        player.start(args.session_id, args.block, args.repetition, args.exercise)
    except WorkoutAlreadyActiveError as exc:
        print(
            f"Cannot start: {exc}. Continue it with: resume {exc.active_session_id}"
            f" (or remove it with: discard {exc.active_session_id})"
        )
        return 1
    except (SessionNotFoundError, InvalidStartPositionError) as exc:
        print(f"Cannot start: {exc}")
        return 1
    run_playback(player)
    return 0


def cmd_resume(player: WorkoutPlayer, session_id: str) -> int:
    try:
        player.resume(session_id)
    except StaleResumeError as exc:
        print(f"{exc}. Remove it with: discard {exc.session_id}")
        return 1
    except (PausedWorkoutNotFoundError, WorkoutAlreadyActiveError) as exc:
        print(f"Cannot resume: {exc}")
        return 1
    run_playback(player)
    return 0


def cmd_discard(player: WorkoutPlayer, session_id: str) -> int:
    try:
        player.remove_paused(session_id)
    except PausedWorkoutNotFoundError as exc:
        print(exc)
        return 1
    print(f"Discarded saved workout for {session_id}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Circuit workout player")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("sessions", help="List available sessions")
    sub.add_parser("paused", help="List paused workouts")

    play = sub.add_parser("play", help="Start a session")
    play.add_argument("session_id")
    play.add_argument("--block", type=int, default=0, help="Block index (0-based)")
    play.add_argument("--repetition", type=int, default=1, help="Block repetition (1-based)")
    play.add_argument("--exercise", type=int, default=0, help="Exercise index (0-based)")

    resume = sub.add_parser("resume", help="Resume a paused workout")
    resume.add_argument("session_id")

    discard = sub.add_parser("discard", help="Remove a paused or left-over workout record")
    discard.add_argument("session_id")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        catalog = SessionCatalog.from_file(SESSIONS_PATH)
    except FileNotFoundError:
        logger.error("Sessions file not found at %s", SESSIONS_PATH)
        return 1
    except SerializationError as exc:
        logger.error("Invalid sessions file: %s", exc)
        return 1

    if args.command == "sessions":
        return cmd_sessions(catalog)

    player = build_player(catalog)
    if args.command == "paused":
        return cmd_paused(player)
    if args.command == "play":
        return cmd_play(player, args)
    if args.command == "resume":
        return cmd_resume(player, args.session_id)
    return cmd_discard(player, args.session_id)


if __name__ == "__main__":
    sys.exit(main())
