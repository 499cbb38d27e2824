"""Circuit Runner — Streamlit workout player.

Run with:
    streamlit run streamlit_app/app.py

Sessions are read from CIRCUIT_SESSIONS_PATH; paused and running workouts
are kept in CIRCUIT_STATE_DIR, so a reload picks up where it left off.
"""

from __future__ import annotations

import streamlit as st

from speech_client import LoggingSink
from workout_engine import CueEmitter, PlaybackScheduler, SessionCatalog, WorkoutPlayer
from workout_engine.config import CUE_DELAY_MS, SESSIONS_PATH, STATE_DIR, TICK_SECONDS
from workout_engine.exceptions import (
    InvalidStartPositionError,
    PausedWorkoutNotFoundError,
    SerializationError,
    StaleResumeError,
    WorkoutAlreadyActiveError,
)
from workout_engine.persistence import JsonFileStateRepository
from workout_engine.playback import format_clock, wall_clock_ms
from workout_engine.queue_builder import build_queue, describe_session, summarize_queue

from helpers import (
    PHASE_COLORS,
    PHASE_LABELS,
    block_options,
    describe_exercise,
    exercise_options,
    format_duration,
    format_elapsed,
    format_paused_since,
)

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="Circuit Runner",
    page_icon="⏱️",
    layout="centered",
)


# ---------------------------------------------------------------------------
# Cached catalog / per-browser player
# ---------------------------------------------------------------------------


@st.cache_resource
def get_catalog() -> SessionCatalog:
    return SessionCatalog.from_file(SESSIONS_PATH)


def get_player() -> WorkoutPlayer:
    if "player" not in st.session_state:
        scheduler = PlaybackScheduler(get_catalog(), JsonFileStateRepository(STATE_DIR))
        emitter = CueEmitter(LoggingSink(), delivery_delay_ms=CUE_DELAY_MS)
        player = WorkoutPlayer(scheduler, emitter)
        try:
            player.restore()
        except StaleResumeError as exc:
            st.session_state["stale_error"] = (exc.session_id, str(exc))
        st.session_state["player"] = player
    return st.session_state["player"]


def reset_player() -> None:
    st.session_state.pop("player", None)


# ---------------------------------------------------------------------------
# Run view
# ---------------------------------------------------------------------------


@st.fragment(run_every=TICK_SECONDS)
def run_view() -> None:
    player = get_player()
    player.tick()
    for cue in player.take_announced():
        st.toast(cue.text)

    snapshot = player.snapshot()
    if snapshot is None:
        st.rerun()
        return

    if snapshot.is_completed:
        st.success(f"Workout complete in {format_elapsed(snapshot.elapsed_ms)}.")
        st.progress(1.0)
        if st.button("Back to sessions"):
            reset_player()
            st.rerun()
        return

    color = PHASE_COLORS.get(snapshot.phase, "#CCCCCC")
    label = PHASE_LABELS.get(snapshot.phase, snapshot.phase.name)
    if snapshot.current_exercise is not None:
        headline = describe_exercise(snapshot.current_exercise)
    else:
        headline = f"Next: {describe_exercise(snapshot.next_exercise)}"
    st.markdown(
        f'<div style="background:{color};padding:16px 20px;border-radius:8px;">'
        f"<small>{label}</small><h2 style=\"margin:0;\">{headline}</h2></div>",
        unsafe_allow_html=True,
    )

    col_timer, col_block, col_elapsed = st.columns(3)
    col_timer.metric(
        "Remaining",
        format_clock(snapshot.remaining_sec) if snapshot.remaining_sec is not None else "reps",
    )
    block = snapshot.current_block or snapshot.next_block
    col_block.metric(
        block.name if block is not None else "Block",
        f"{snapshot.block_repetition}/{snapshot.block_repetitions}",
    )
    col_elapsed.metric("Elapsed", format_elapsed(snapshot.elapsed_ms))

    st.progress(snapshot.progress)
    st.caption(f"Step {snapshot.queue_index + 1} of {snapshot.queue_length}")
    if snapshot.next_block is not None:
        st.caption(f"Up next: block {snapshot.next_block.name}")

    col_done, col_skip, col_pause, col_quit = st.columns(4)
    if col_done.button("Done", disabled=snapshot.remaining_sec is not None):
        player.complete()
        st.rerun(scope="fragment")
    if col_skip.button("Skip"):
        player.skip()
        st.rerun(scope="fragment")
    if col_pause.button("Pause"):
        player.pause()
        reset_player()
        st.rerun()
    if col_quit.button("Abandon"):
        player.abandon()
        reset_player()
        st.rerun()


# ---------------------------------------------------------------------------
# Session picker
# ---------------------------------------------------------------------------


def picker_view(player: WorkoutPlayer) -> None:
    catalog = get_catalog()
    sessions = list(catalog)
    if not sessions:
        st.info(f"No sessions found in {SESSIONS_PATH}.")
        return

    session = st.selectbox("Session", sessions, format_func=lambda s: s.name or s.id)
    queue = build_queue(session)
    st.caption(describe_session(session, queue))

    blocks = block_options(session)
    if not blocks:
        st.warning("This session has no exercises.")
        start_block, start_rep, start_ex = 0, 1, 0
    else:
        col_block, col_rep, col_ex = st.columns(3)
        start_block = col_block.selectbox(
            "Start block", [i for i, _ in blocks],
            format_func=dict(blocks).get,
        )
        start_rep = col_rep.number_input(
            "Repetition", min_value=1,
            max_value=session.blocks[start_block].repetitions, value=1,
        )
        exercises = exercise_options(session, start_block)
        start_ex = col_ex.selectbox(
            "Exercise", [i for i, _ in exercises],
            format_func=dict(exercises).get,
        )

    if st.button("Start", type="primary"):
        try:
            player.start(session.id, start_block, int(start_rep), start_ex)
            st.rerun()
        except (InvalidStartPositionError, WorkoutAlreadyActiveError) as exc:
            st.error(str(exc))

    with st.expander("Session details"):
        summary = summarize_queue(queue)
        st.write(
            f"{summary.exercise_count} exercises, {summary.pause_count} pauses, "
            f"about {format_duration(summary.estimated_duration_sec)}"
        )
        for index, block in enumerate(session.blocks):
            st.markdown(f"**{index + 1}. {block.name}** × {block.repetitions}")
            for exercise in block.exercises:
                st.markdown(f"- {describe_exercise(exercise)}")


def paused_view(player: WorkoutPlayer) -> None:
    paused = player.paused_workouts()
    if not paused:
        return
    st.subheader("Paused workouts")
    catalog = get_catalog()
    now = wall_clock_ms()
    for entry in paused:
        session = catalog.get(entry.session_id)
        name = session.name if session is not None else entry.session_id
        col_name, col_resume, col_remove = st.columns([3, 1, 1])
        col_name.write(
            f"**{name}** — step {entry.state.queue_index + 1}, "
            f"paused {format_paused_since(entry.paused_at_ms, now)}"
        )
        if col_resume.button("Resume", key=f"resume-{entry.session_id}"):
            try:
                player.resume(entry.session_id)
                st.rerun()
            except StaleResumeError as exc:
                st.error(f"{exc}. Remove it to continue.")
            except (PausedWorkoutNotFoundError, WorkoutAlreadyActiveError) as exc:
                st.error(str(exc))
        if col_remove.button("Remove", key=f"remove-{entry.session_id}"):
            player.remove_paused(entry.session_id)
            st.rerun()


def stale_view(player: WorkoutPlayer) -> None:
    """A left-over run that no longer matches its session blocks new starts."""
    session_id, message = st.session_state["stale_error"]
    col_msg, col_remove = st.columns([4, 1])
    col_msg.warning(message)
    if col_remove.button("Remove", key=f"remove-stale-{session_id}"):
        try:
            player.remove_paused(session_id)
        except PausedWorkoutNotFoundError as exc:
            st.session_state.pop("stale_error", None)
            st.info(str(exc))
            return
        st.session_state.pop("stale_error", None)
        st.rerun()


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------

st.title("Circuit Runner")

try:
    get_catalog()
except (FileNotFoundError, SerializationError) as exc:
    st.error(f"Could not load sessions from {SESSIONS_PATH}: {exc}")
    st.stop()

current = get_player()
if "stale_error" in st.session_state:
    stale_view(current)

if current.state is not None:
    run_view()
else:
    picker_view(current)
    paused_view(current)
