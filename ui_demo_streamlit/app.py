"""Streamlit demo UI for suggestion-engine."""

from __future__ import annotations

import tempfile
from datetime import datetime, time

from suggestion_engine.adapters import csv_adapter
from suggestion_engine.adapters.memory_store import MemoryStateStore
from suggestion_engine.config import EngineConfig
from suggestion_engine.engine import SuggestionEngine
from suggestion_engine.errors import EngineError


def _parse_uploaded(uploaded_file, config: EngineConfig) -> list:
    with tempfile.NamedTemporaryFile(delete=False, suffix=".csv") as handle:
        handle.write(uploaded_file.getbuffer())
        temp_path = handle.name
    return csv_adapter.parse(temp_path, config)


def _time_of_day_profile(engine: SuggestionEngine, tag: str) -> dict[str, float]:
    """Average probability per hour of day across the modeled month."""

    config = engine.config
    matrix = engine.probabilities(tag).reshape(config.days_modeled, config.slots_per_day)
    per_hour = 60 // config.slot_minutes
    hourly = matrix.reshape(config.days_modeled, -1, per_hour).mean(axis=(0, 2))
    start_hour = config.epoch.hour
    return {f"{(start_hour + offset) % 24:02d}:00": float(value) for offset, value in enumerate(hourly)}


def _engine(st) -> SuggestionEngine:
    if "engine" not in st.session_state:
        st.session_state.engine = SuggestionEngine(MemoryStateStore(), EngineConfig(seed=42))
    return st.session_state.engine


def main() -> None:
    import streamlit as st

    st.set_page_config(page_title="Suggestion Engine Demo", layout="wide")
    st.title("Suggestion Engine: Streamlit Demo")

    engine = _engine(st)
    config = engine.config

    with st.sidebar:
        st.header("Schedule")
        uploaded = st.file_uploader("Import schedule", type=["csv"])
        if st.button("Load demo schedule"):
            engine.import_events(csv_adapter.parse("examples/sample_schedule.csv", config))
        elif uploaded is not None and st.button("Import uploaded file"):
            engine.import_events(_parse_uploaded(uploaded, config))
        if st.button("Reset state"):
            st.session_state.pop("engine", None)
            st.rerun()

    action = st.text_input("What do you want to do?", value="Study for the quiz")
    after_date = st.date_input("Not before", value=config.epoch.date())
    after_time = st.time_input("at", value=time(config.epoch.hour, 0))

    try:
        if st.button("Suggest a time", type="primary"):
            st.session_state.last = engine.suggest(action, after=datetime.combine(after_date, after_time))

        suggestion = st.session_state.get("last")
        if suggestion:
            c1, c2, c3 = st.columns(3)
            c1.metric("Tag", suggestion.tag)
            c2.metric("Start", suggestion.start.strftime("%a %d %b %H:%M"))
            c3.metric("Length", f"{suggestion.length_minutes} min")

            accept, reject = st.columns(2)
            if accept.button("Accept"):
                engine.feedback(suggestion.tag, suggestion.start, suggestion.length_minutes, accepted=True)
                engine.commit(action, suggestion.tag, suggestion.start, suggestion.length_minutes)
                st.success("Scheduled.")
            if reject.button("Reject"):
                engine.feedback(suggestion.tag, suggestion.start, suggestion.length_minutes, accepted=False)
                st.info("Noted; ask again for another time.")

            st.subheader(f"Learned time-of-day profile: {suggestion.tag}")
            st.bar_chart(_time_of_day_profile(engine, suggestion.tag))

        st.subheader("Scheduled events")
        events = [event.to_payload(config.slot_minutes) for event in engine.list_schedule()]
        if events:
            st.table(events)
        else:
            st.write("Nothing scheduled yet.")
        st.caption(f"Recently suggested slots: {engine.recent_slots()}")

    except EngineError as exc:
        st.error(f"Input error: {exc}")


if __name__ == "__main__":
    main()
