"""
Streamlit web app for return-to-office compliance tracking.
Calendar view to paint work-location states, sidebar with legend,
policy controls, holiday selection and the validation result.
"""

import asyncio
import logging
from datetime import date
from typing import Optional

import streamlit as st

import dates
from holiday_integration import HolidayIntegration, HolidaySelector
from holiday_provider import HolidaysLibProvider
from monitor import ComplianceMonitor
from settings import load_settings
from states import DateState, state_class, state_style, with_icon
from store import DateStore
from validator import ComplianceWindow, ValidationMode

logger = logging.getLogger("rto.app")

WEEKDAY_ABBR = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def init_session():
    """Create one store / holiday integration / monitor per session."""
    if "store" in st.session_state:
        return

    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    store = DateStore(settings.date_range())
    provider = HolidaysLibProvider()
    integration = HolidayIntegration(store, provider)
    monitor = ComplianceMonitor(store, integration, settings)

    st.session_state.store = store
    st.session_state.provider = provider
    st.session_state.integration = integration
    st.session_state.monitor = monitor

    today = date.today()
    st.session_state.current_year = today.year
    st.session_state.current_month = today.month

    if not settings.holiday_selector.is_empty:
        asyncio.run(integration.apply(settings.holiday_selector))


def on_day_clicked(day: date):
    """Paint the day with the marking mode; painting the same state again clears it."""
    store: DateStore = st.session_state.store
    mode = store.get_marking_mode()
    if store.get_date_state(day) is mode:
        store.clear_date(day)
    else:
        store.mark_date(day, mode, force=True)


def render_day_cell(day_date: date, violating: Optional[ComplianceWindow]):
    """Render a single day cell with its paint button."""
    store: DateStore = st.session_state.store
    integration: HolidayIntegration = st.session_state.integration

    state = store.get_date_state(day_date)
    style = state_style(state)
    classes = [state_class(state)]
    if dates.is_weekend(day_date):
        classes.append("weekend-cell")
    if violating is not None and violating.contains(day_date):
        classes.append("violation")

    iso = dates.format_iso(day_date)
    badge = ""
    if iso in integration.exclusions:
        badge = '<div class="holiday-badge">Public holiday</div>'

    status = with_icon(style, style.label) if state is not None else ""
    st.markdown(f"""
    <div class="day-cell {' '.join(classes)}" style="background:{style.background};color:{style.color}">
        <div class="day-number">{day_date.day}</div>
        <div class="status-emoji">{status}</div>
        {badge}
    </div>
    """, unsafe_allow_html=True)

    in_range = store.get_date_range().contains(day_date)
    st.button(
        style.label,
        key=f"paint_{iso}",
        on_click=on_day_clicked,
        args=(day_date,),
        disabled=not in_range,
        width="stretch",
    )


def render_calendar(violating: Optional[ComplianceWindow]):
    """Render the month header and grid."""
    col1, col2, col3 = st.columns([1, 3, 1])

    with col1:
        if st.button("◀", key="prev_month"):
            first = dates.add_months(date(st.session_state.current_year, st.session_state.current_month, 1), -1)
            st.session_state.current_year, st.session_state.current_month = first.year, first.month
            st.rerun()

    with col2:
        month_name = dates.get_month_name(st.session_state.current_month)
        st.markdown(f"<h2 style='text-align: center'>{month_name} {st.session_state.current_year}</h2>",
                    unsafe_allow_html=True)

    with col3:
        if st.button("▶", key="next_month"):
            first = dates.add_months(date(st.session_state.current_year, st.session_state.current_month, 1), 1)
            st.session_state.current_year, st.session_state.current_month = first.year, first.month
            st.rerun()

    cols = st.columns(7)
    for i, weekday in enumerate(WEEKDAY_ABBR):
        with cols[i]:
            st.markdown(f"<div class='weekday-label'>{weekday}</div>", unsafe_allow_html=True)

    for week in dates.month_grid(st.session_state.current_year, st.session_state.current_month):
        cols = st.columns(7)
        for i, day_date in enumerate(week):
            with cols[i]:
                if day_date is None:
                    st.markdown("<div style='height: 80px;'></div>", unsafe_allow_html=True)
                else:
                    render_day_cell(day_date, violating)


def render_sidebar():
    """Render legend, marking mode, policy, holidays and validation."""
    store: DateStore = st.session_state.store
    integration: HolidayIntegration = st.session_state.integration
    monitor: ComplianceMonitor = st.session_state.monitor
    provider: HolidaysLibProvider = st.session_state.provider

    st.sidebar.header("📊 Legend")
    stats = store.get_statistics()
    for state, count in (
        (DateState.WORKING, stats.working_days),
        (DateState.OOF, stats.oof_days),
        (DateState.HOLIDAY, stats.holiday_days),
    ):
        style = state_style(state)
        st.sidebar.markdown(f"{with_icon(style, f'**{style.label}:**')} {count}")
    st.sidebar.caption(f"{stats.total_marked_days} days marked")

    mode_style = state_style(store.get_marking_mode())
    if st.sidebar.button(f"Painting: {with_icon(mode_style, mode_style.label)}"):
        store.cycle_marking_mode()
        st.rerun()

    if st.sidebar.button("Clear all"):
        store.clear_all()
        st.rerun()

    # Policy
    st.sidebar.markdown("---")
    st.sidebar.header("⚙️ Policy")
    settings = monitor.settings
    new_window_weeks = st.sidebar.number_input(
        "Window (weeks)", min_value=1, value=settings.window_weeks, step=1
    )
    new_min_days = st.sidebar.number_input(
        "Minimum in-office days per window", min_value=0, value=settings.min_compliant_days, step=1
    )
    modes = [m.value for m in ValidationMode]
    new_mode = st.sidebar.selectbox(
        "Validation mode",
        options=modes,
        index=modes.index(settings.validation_mode.value),
        format_func=lambda m: "Strict day count" if m == ValidationMode.STRICT.value else "Average (holiday-adjusted)",
    )
    if (new_window_weeks, new_min_days, new_mode) != (
        settings.window_weeks, settings.min_compliant_days, settings.validation_mode.value
    ):
        monitor.update_policy(int(new_window_weeks), int(new_min_days), new_mode)
        st.rerun()
    if not monitor.settings.is_achievable:
        st.sidebar.error(
            f"{monitor.settings.min_compliant_days} in-office days cannot fit in a "
            f"{monitor.settings.window_weeks}-week window "
            f"(at most {monitor.settings.max_compliant_days} weekdays)"
        )

    # Holidays
    st.sidebar.markdown("---")
    st.sidebar.header("🎉 Holidays")
    countries = [""] + provider.get_available_countries()
    current = integration.selector
    country = st.sidebar.selectbox(
        "Country",
        options=countries,
        index=countries.index(current.country_code) if current.country_code in countries else 0,
        format_func=lambda c: c or "None",
    )
    companies = [""] + provider.get_available_companies(country) if country else [""]
    company = st.sidebar.selectbox(
        "Company",
        options=companies,
        index=companies.index(current.company_name) if current.company_name in companies else 0,
        format_func=lambda c: c or "All public holidays",
    )
    selector = HolidaySelector(country or None, company or None)
    if selector != current:
        asyncio.run(integration.on_settings_changed(selector))
        st.rerun()
    if not current.is_empty:
        st.sidebar.caption(f"{len(integration.exclusions)} weekday holidays excluded")


def render_validation():
    monitor: ComplianceMonitor = st.session_state.monitor
    result = monitor.result or monitor.validate()
    if result.is_valid:
        st.success(result.message)
    else:
        st.error(result.message)
    if result.windows_checked:
        st.caption(f"Overall compliance: {result.overall_compliance:.0f}%")
    return result.violating_window


def main():
    """Main application function."""
    st.set_page_config(
        page_title="RTO Compliance",
        page_icon="🏢",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    st.markdown("""
    <style>
    .day-cell {
        border: 1px solid #eee;
        border-radius: 0.5rem;
        padding: 1.25rem 0.5rem 0.5rem;
        min-height: 90px;
        position: relative;
        text-align: center;
    }
    .day-number {
        position: absolute;
        top: 0.35rem;
        left: 0.5rem;
        font-weight: 600;
        opacity: 0.85;
        font-size: 14px;
    }
    .weekend-cell { opacity: 0.6; }
    .violation { outline: 2px solid #dc2626; }
    .status-emoji { font-size: 18px; margin: 10px 0 5px 0; }
    .holiday-badge {
        font-size: 9px;
        color: red;
        position: absolute;
        bottom: 5px;
        left: 5px;
        right: 5px;
        font-weight: 500;
    }
    .weekday-label { text-align: center; font-weight: bold; padding: 10px; }
    </style>
    """, unsafe_allow_html=True)

    st.title("🏢 RTO Compliance")

    try:
        init_session()
    except ValueError as e:
        st.error(f"Invalid configuration: {e}")
        st.stop()

    render_sidebar()
    violating = render_validation()
    render_calendar(violating)

    st.markdown("---")
    st.markdown("""
    **Instructions:**
    - Click a day to paint it with the current mode; click again to clear it
    - Use the sidebar button to cycle the mode: In office → Out of office → Holiday
    - Every window of consecutive weeks must reach the minimum in-office days
    - Weekends and public holidays never count toward a window
    - The first failing window is outlined in red
    """)


if __name__ == "__main__":
    main()
