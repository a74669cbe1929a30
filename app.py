"""
Memory Allocation Visualizer — Contiguous Placement Strategies

Interactive front-end for the contiguous memory allocation engine:
    - First-Fit, Next-Fit, Best-Fit and Worst-Fit placement
    - Freeing with coalescing of neighbouring free blocks
    - Compaction
    - Fragmentation statistics and their evolution over time
    - Step recording and playback

Built with Streamlit for the web interface and Plotly for visualizations.
The page only talks to MemoryEngine through its public methods.

Run with: streamlit run app.py
"""

# =============================================================================
# IMPORTS
# =============================================================================

import time                                  # For pacing highlight and playback

import streamlit as st                       # Web application framework

from compare import compare_owner, compare_strategies, most_efficient
from engine import DEFAULT_TOTAL_SIZE, MemoryEngine
from errors import InsufficientMemory, SimulationError
from strategies import Strategy
from utils import block_map_figure, comparison_rows, fragmentation_figure, setup_logging

logger = setup_logging("memsim.app")

# How long a chosen block stays highlighted before the allocation is committed
HIGHLIGHT_DELAY_S = 0.5

# Default delay between playback frames
PLAYBACK_INTERVAL_S = 0.7


# =============================================================================
# STREAMLIT UI - Web Application Interface
# =============================================================================

st.set_page_config(page_title="Memory Allocation Visualizer", layout="wide")
st.title("Memory Allocation Visualizer — First / Next / Best / Worst Fit")

# -----------------------------------------------------------------------------
# SIDEBAR - Simulation Settings
# -----------------------------------------------------------------------------

st.sidebar.header("Simulation Settings")

# Keyed so loading the sample layout can move the widget to its total
st.session_state.setdefault("total_size", DEFAULT_TOTAL_SIZE)
# None means the memory map shows the live session, otherwise a history step
st.session_state.setdefault("view_step", None)

total_size = st.sidebar.number_input(
    "Total memory (KB)",
    min_value=1,
    max_value=1048576,
    step=256,
    key="total_size",
)

strategy = st.sidebar.selectbox(
    "Allocation algorithm",
    options=list(Strategy),
    format_func=lambda s: s.label,
)

playback_speed = st.sidebar.slider(
    "Playback speed (steps/sec)",
    min_value=0.5,
    max_value=5.0,
    value=round(1.0 / PLAYBACK_INTERVAL_S, 1),
)

# -----------------------------------------------------------------------------
# SESSION STATE - Engine Persistence
# -----------------------------------------------------------------------------

# The engine lives in session state so it survives Streamlit reruns.
# Changing the total size starts a fresh empty session.
if "engine" not in st.session_state or st.session_state.engine.total_size != total_size:
    st.session_state.engine = MemoryEngine(int(total_size))
    st.session_state.engine.record_step("start")
    st.session_state.view_step = None

engine: MemoryEngine = st.session_state.engine


def load_sample_layout():
    """Button callback: runs before the widgets, so the total size widget can follow."""
    sample = MemoryEngine.with_sample_layout()
    sample.record_step("sample layout")
    st.session_state.engine = sample
    st.session_state.total_size = sample.total_size
    st.session_state.view_step = None


def step_history(delta: int):
    """Move the viewed history step; stepping past the last one returns to live."""
    last = st.session_state.engine.history_length - 1
    current = st.session_state.view_step
    if current is None:
        current = last if delta < 0 else 0
    else:
        current = max(current + delta, 0)
    st.session_state.view_step = current if current <= last else None


if st.sidebar.button("Reset Memory", key="reset"):
    engine.reset()
    engine.record_step("reset")
    st.session_state.view_step = None
    st.sidebar.success("Memory reset")

if st.sidebar.button("Load Sample Layout", key="load_sample", on_click=load_sample_layout):
    st.sidebar.success(f"Loaded sample layout ({engine.total_size} KB)")

st.sidebar.markdown("---")

# =============================================================================
# MAIN CONTENT AREA - Two Column Layout
# =============================================================================

col1, col2 = st.columns([1, 2])

with col2:
    st.subheader("Memory Map")
    # Placeholder so highlight and playback can redraw in place
    map_slot = st.empty()

# -----------------------------------------------------------------------------
# LEFT COLUMN - Operations
# -----------------------------------------------------------------------------

with col1:
    st.subheader("Operations")

    owner_id = st.text_input("Process ID", value="P1").strip()
    size = st.number_input("Size (KB)", min_value=1, value=100, step=10)

    if st.button("Allocate"):
        try:
            # Decide first, show the choice, then commit
            index = engine.find(int(size), strategy)
            if index is None:
                raise InsufficientMemory(int(size), strategy)
            map_slot.plotly_chart(block_map_figure(engine.blocks, highlight=index), use_container_width=True)
            time.sleep(HIGHLIGHT_DELAY_S)
            engine.commit(index, owner_id, int(size), strategy)
            engine.record_step(f"allocate {owner_id} ({size}) {strategy.label}")
            st.success(f"Allocated {size} KB to {owner_id} using {strategy.label}")
        except InsufficientMemory as exc:
            st.warning(f"Allocation Failed: {exc}")
        except SimulationError as exc:
            st.error(str(exc))

    if st.button("Deallocate"):
        try:
            engine.free(owner_id)
            engine.record_step(f"free {owner_id}")
            st.success(f"Freed {owner_id}")
        except SimulationError as exc:
            st.error(str(exc))

    if st.button("Compact Memory"):
        engine.compact()
        engine.record_step("compact")
        st.success("Memory compacted")

    # ----- Strategy comparison -----
    st.subheader("Compare Algorithms")
    compare_mode = st.radio("Compare by", ["Size", "Existing process"], horizontal=True)
    if st.button("Compare"):
        try:
            if compare_mode == "Size":
                results = compare_strategies(engine, int(size))
            else:
                results = compare_owner(engine, owner_id)
            best = most_efficient(results)
            st.table(comparison_rows(results, best))
            if best is not None:
                st.info(f"{best.label} leaves the smallest leftover")
        except SimulationError as exc:
            st.error(str(exc))

# -----------------------------------------------------------------------------
# RIGHT COLUMN - Visualizations
# -----------------------------------------------------------------------------

with col2:
    map_slot.plotly_chart(block_map_figure(engine.blocks), use_container_width=True)

    # ----- Statistics Display -----
    st.subheader("Statistics")
    stats = engine.get_stats()
    m1, m2, m3 = st.columns(3)
    m1.metric("Used", f"{stats.used} KB", f"{stats.used_pct}%")
    m2.metric("Free", f"{stats.free} KB", f"{stats.free_pct}%")
    m3.metric("Active processes", stats.active)
    m4, m5, m6 = st.columns(3)
    m4.metric("Largest free block", f"{stats.largest_free} KB")
    m5.metric("External fragmentation", f"{stats.external_frag} KB", f"{stats.external_frag_pct}% of free")
    m6.metric("Internal fragmentation", f"{stats.internal_frag} KB")

    # ----- Block table -----
    st.subheader("Blocks")
    st.table([
        {
            "start": start,
            "size": block.size,
            "owner": block.owner_id or "FREE",
            "allocated_by": block.allocated_by.label if block.allocated_by else "",
        }
        for start, block in engine.layout()
    ])

    # ----- Fragmentation over time -----
    st.plotly_chart(fragmentation_figure(engine.fragmentation_timeline()), use_container_width=True)

    # ----- Playback -----
    st.subheader("Playback")
    steps = engine.history_length
    if st.session_state.view_step is not None and st.session_state.view_step >= steps:
        st.session_state.view_step = None

    b1, b2, b3, b4 = st.columns(4)
    b1.button("◀ Step", key="step_back", on_click=step_history, args=(-1,))
    b2.button("Step ▶", key="step_forward", on_click=step_history, args=(1,))
    # Any click reruns the script, which also interrupts a running Play loop
    b3.button("Stop", key="stop", on_click=lambda: st.session_state.update(view_step=None))
    play = b4.button("Play", key="play")

    caption_slot = st.empty()
    if st.session_state.view_step is not None:
        snapshot = engine.get_snapshot_at(st.session_state.view_step)
        map_slot.plotly_chart(block_map_figure(snapshot.blocks), use_container_width=True)
        caption_slot.caption(f"Viewing step {snapshot.step} of {steps - 1}: {snapshot.label or ''}")
    else:
        caption_slot.caption(f"Live memory ({steps} recorded steps)")

    start_step = st.number_input("Start at step", min_value=0, max_value=max(steps - 1, 0), value=0)
    if play:
        # Replay is read-only: the live session is never touched
        for snapshot in engine.replay(int(start_step)):
            map_slot.plotly_chart(block_map_figure(snapshot.blocks), use_container_width=True)
            caption_slot.caption(f"Step {snapshot.step}: {snapshot.label or ''}")
            time.sleep(1.0 / playback_speed)
        st.session_state.view_step = None
        map_slot.plotly_chart(block_map_figure(engine.blocks), use_container_width=True)
        caption_slot.caption(f"Live memory ({steps} recorded steps)")

# =============================================================================
# FOOTER - Usage Tips
# =============================================================================

st.markdown("---")
st.markdown(
    "**Usage tips**:\n"
    "- Pick an algorithm, enter a process id and size, then click **Allocate**.\n"
    "- **Deallocate** frees the block and merges it with free neighbours.\n"
    "- **Compact Memory** slides all processes together into one free region.\n"
    "- Every operation is recorded; use **Step** to walk the history or **Play** to run it, **Stop** returns to live memory."
)
