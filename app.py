# app.py
import pandas as pd
import streamlit as st

from smart_scheduler.config import load_config
from smart_scheduler.conflicts import ResourceKind
from smart_scheduler.data_loader import build_catalog, load_data
from smart_scheduler.errors import MissingDataError
from smart_scheduler.evaluation import evaluate, occupancy_matrix
from smart_scheduler.export import export_schedule, schedule_to_dataframe
from smart_scheduler.optimizer import RestartOptimizer

st.set_page_config(page_title="Smart Scheduler", layout="wide", initial_sidebar_state="expanded")

st.markdown("""
    <style>
    .schedule-table {
        width: 100%;
        border-collapse: collapse;
        font-family: Arial, sans-serif;
        font-size: 12px;
    }
    .schedule-table th {
        background-color: #f0f2f6;
        border: 1px solid #ddd;
        padding: 8px;
        text-align: center;
        color: #333;
    }
    .schedule-table td {
        border: 1px solid #ddd;
        padding: 4px;
        vertical-align: top;
        background-color: #fff;
        color: #000;
    }
    </style>
""", unsafe_allow_html=True)


# --- HELPERS ---
def get_html_card(subject, group, teacher, room, kind, is_conflict):
    head_bg = "#ffcccc" if is_conflict else "#ffffcc"
    return (
        f"<div style='border:1px solid #999; margin-bottom:4px; overflow:hidden;'>"
        f"<div style='background-color:{head_bg}; padding:2px 4px; font-size:11px; font-weight:bold;'>{subject}</div>"
        f"<div style='padding:2px 4px; font-size:10px;'><b>{group}</b> {teacher} {room}"
        f"<span style='float:right; color:#666;'>({kind})</span></div>"
        f"</div>"
    )


def create_schedule_matrix(schedule, catalog, cfg, filter_mode, filter_val):
    periods = list(range(1, cfg.periods_per_day + 1))
    matrix = pd.DataFrame("", index=periods, columns=cfg.days)
    for p in schedule.placements:
        show = (
            (filter_mode == "Group" and p.group_id == filter_val)
            or (filter_mode == "Teacher" and p.teacher_id == filter_val)
            or (filter_mode == "Room" and p.room_id == filter_val)
        )
        if not show:
            continue
        subject = catalog.subjects_by_id.get(p.subject_id)
        name = subject.subject_name if subject else p.subject_id
        teacher = catalog.teacher_names.get(p.teacher_id) or p.teacher_id
        for s in p.slots:
            if s.day in matrix.columns and s.period in matrix.index:
                matrix.loc[s.period, s.day] += get_html_card(
                    name, p.group_id, teacher, p.room_id, p.kind.value, p.is_conflict
                )
    slot_times = {s.period: f"{s.start}-{s.end}" for s in catalog.timeslots if s.start}
    matrix.index = [f"P{per} {slot_times.get(per, '')}".strip() for per in periods]
    matrix.loc[f"P{cfg.lunch_period} {slot_times.get(cfg.lunch_period, '')}".strip()] = "LUNCH"
    return matrix


def style_occupancy(df):
    """0 = free, 1 = booked, >1 = double booking."""
    def highlight(val):
        if val == 0:
            return "color: #333;"
        if val == 1:
            return "background-color: #90ee90; color: black; font-weight: bold;"
        return "background-color: #ff4b4b; color: white; font-weight: bold;"
    return df.style.map(highlight)


# --- MAIN APP ---
def main():
    if "cfg" not in st.session_state:
        st.session_state.cfg = load_config("config.yaml")
    cfg = st.session_state.cfg

    if "bundle" not in st.session_state:
        st.session_state.bundle = load_data(cfg.data_dir, cfg)
        st.session_state.catalog = build_catalog(st.session_state.bundle)
    bundle = st.session_state.bundle
    catalog = st.session_state.catalog

    with st.sidebar:
        st.title("Smart Scheduler")
        st.markdown("---")
        page = st.radio("Section:", [
            "Run Scheduler",
            "Occupancy Matrices",
            "Timetable by Group",
            "Timetable by Teacher",
            "Timetable by Room",
            "All Sessions",
        ])
        st.markdown("---")
        st.info(
            f"Priority periods 1-{cfg.priority_max_period}\n"
            f"Lunch: period {cfg.lunch_period}\n"
            f"Leaders blocked: {cfg.leader_day} P{cfg.leader_period}"
        )

    result = st.session_state.get("result")

    if page == "Run Scheduler":
        st.header("Input Data and Scheduling")
        tabs = st.tabs(["Teachers", "Rooms", "Groups", "Subjects", "Registrations"])
        for tab, df in zip(tabs, [bundle.teachers, bundle.rooms, bundle.groups, bundle.subjects, bundle.register]):
            with tab:
                st.dataframe(df, height=250, use_container_width=True)

        c1, c2 = st.columns(2)
        attempts = c1.number_input("Attempts", min_value=1, max_value=500, value=cfg.attempts)
        seed = c2.number_input("Seed (0 = random)", min_value=0, value=cfg.seed or 0)

        if st.button("Generate Schedule"):
            cfg.attempts = int(attempts)
            cfg.seed = int(seed) or None
            with st.status("Optimizing...", expanded=True) as status:
                try:
                    result = RestartOptimizer(catalog, cfg).run()
                except MissingDataError as e:
                    status.update(label=str(e), state="error")
                    st.stop()
                st.session_state.result = result
                export_schedule(result.best, cfg.output_file)
                status.update(label="Done", state="complete", expanded=False)

        if result is not None:
            best = result.best
            eval_res = evaluate(best, catalog, cfg)
            m1, m2, m3, m4 = st.columns(4)
            m1.metric("Forced conflicts", best.conflict_count)
            m2.metric("Unplaced jobs", len(best.unplaced))
            m3.metric("Attempts run", result.attempts_run)
            m4.metric("Periods after P%d" % cfg.priority_max_period, eval_res.overflow_slots)
            history = pd.DataFrame(result.history)
            if not history.empty:
                st.line_chart(history.set_index("attempt")[["score", "best_score"]])
            if eval_res.violations:
                st.warning("\n".join(eval_res.violations[:20]))

    elif result is None:
        st.warning("Run the scheduler first.")

    elif page == "Occupancy Matrices":
        st.header("Occupancy Matrices")
        kind_label = st.radio("Resource:", ["Group", "Room", "Teacher"], horizontal=True)
        kind = {"Group": ResourceKind.GROUP, "Room": ResourceKind.ROOM, "Teacher": ResourceKind.TEACHER}[kind_label]
        if kind == ResourceKind.GROUP:
            options = sorted({p.group_id for p in result.best.placements})
        elif kind == ResourceKind.ROOM:
            options = sorted({p.room_id for p in result.best.placements})
        else:
            options = sorted({p.teacher_id for p in result.best.placements})
        selected = st.selectbox(f"{kind_label}:", options)
        if selected is not None:
            df_viz = occupancy_matrix(result.best, cfg, kind, selected)
            st.dataframe(style_occupancy(df_viz), height=480)

    elif page in ("Timetable by Group", "Timetable by Teacher", "Timetable by Room"):
        mode = page.rsplit(" ", 1)[-1]
        st.header(f"Timetable by {mode}")
        if mode == "Group":
            options = [g.group_id for g in catalog.groups] or sorted({p.group_id for p in result.best.placements})
            label = lambda x: x
        elif mode == "Teacher":
            options = [t.teacher_id for t in catalog.teachers]
            label = lambda x: f"{catalog.teacher_names.get(x, '')} ({x})"
        else:
            options = [r.room_id for r in catalog.rooms]
            label = lambda x: x
        selected = st.selectbox(f"{mode}:", options, format_func=label)
        if selected:
            df_m = create_schedule_matrix(result.best, catalog, cfg, mode, selected)
            st.markdown(df_m.to_html(escape=False, classes="schedule-table"), unsafe_allow_html=True)

    elif page == "All Sessions":
        st.header("Final Schedule")
        df_res = schedule_to_dataframe(result.best)
        st.dataframe(df_res, use_container_width=True)
        csv = df_res.to_csv(index=False).encode("utf-8")
        st.download_button("Download CSV", data=csv, file_name="output.csv", mime="text/csv")


if __name__ == "__main__":
    main()
