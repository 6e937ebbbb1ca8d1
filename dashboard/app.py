"""Streamlit operator page for the checkout/check-in timeline."""

from __future__ import annotations

import datetime
from typing import Any, Dict, Optional

import pandas as pd
import requests
import streamlit as st

from rentops.domain.models import CleaningWindow
from rentops.domain.timeline_position import cleaning_window_span, timeline_percentage

# ==========================================
# Configuration & Constants
# ==========================================
# Point this to your local FastAPI server
API_BASE_URL = "http://127.0.0.1:8000"

AXIS_LABELS = ("00:00", "06:00", "11:00", "14:00", "18:00", "23:59")
BAR_COLORS = {
    "invalid": "#d9534f",
    "critical": "#f0ad4e",
    "normal": "#5cb85c",
}

st.set_page_config(
    page_title="Checkout Timeline",
    page_icon="🧹",
    layout="wide",
)

# ==========================================
# API Helper Functions
# ==========================================
def fetch_checkout_timeline(target_date: str) -> Optional[Dict[str, Any]]:
    """Calls the backend timeline engine for one target date."""
    try:
        response = requests.get(
            f"{API_BASE_URL}/checkout_timeline",
            params={"date": target_date},
            timeout=5,
        )
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        st.error(f"Backend connection failed: {e}")
        return None


def fetch_my_cleanings(assignee_id: str) -> Optional[Dict[str, Any]]:
    try:
        response = requests.get(
            f"{API_BASE_URL}/cleanings/mine",
            params={"assignee_id": assignee_id},
            timeout=5,
        )
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        st.error(f"Could not load cleanings: {e}")
        return None


# ==========================================
# Rendering Helpers
# ==========================================
def _window_state(window: Dict[str, Any]) -> str:
    if window["is_invalid"]:
        return "invalid"
    if window["is_critical"]:
        return "critical"
    return "normal"


def render_timeline_bar(window: Dict[str, Any]) -> None:
    """Draw the cleaning window on a 00:00-24:00 axis."""
    left, width = cleaning_window_span(CleaningWindow(**window))
    color = BAR_COLORS[_window_state(window)]
    # Invalid windows run right-to-left; draw them from the check-in marker.
    bar_left = left + width if width < 0 else left
    labels = "".join(
        f'<span style="position:absolute;left:{timeline_percentage(label)}%;'
        f'font-size:0.7em;color:#888;top:22px">{label}</span>'
        for label in AXIS_LABELS
    )
    st.markdown(
        f"""
        <div style="position:relative;height:40px;background:#f3f3f3;border-radius:4px">
          <div style="position:absolute;left:{bar_left}%;width:{abs(width)}%;height:20px;
                      background:{color};border-radius:4px;color:white;font-size:0.75em;
                      text-align:center">
            {window["start_time"]} - {window["end_time"]}
          </div>
          {labels}
        </div>
        """,
        unsafe_allow_html=True,
    )


def _guest_name(reservation: Optional[Dict[str, Any]]) -> str:
    if not reservation or not reservation.get("guest"):
        return "-"
    guest = reservation["guest"]
    return f"{guest['first_name']} {guest['last_name']}".strip()


# ==========================================
# UI Page Functions
# ==========================================
def render_timeline_page() -> None:
    st.header("🧹 Checkouts & Cleaning Windows")
    st.markdown("Who leaves, who arrives, and how much time is left to clean.")

    tomorrow = datetime.date.today() + datetime.timedelta(days=1)
    target_date = st.date_input("Target Date", tomorrow)

    result = fetch_checkout_timeline(str(target_date))
    if not result:
        return

    entries = result.get("apartments", [])
    if not entries:
        st.info("No checkouts on this date.")
        return

    metric_col1, metric_col2, metric_col3 = st.columns(3)
    metric_col1.metric("Checkouts", len(entries))
    metric_col2.metric(
        "Critical Windows",
        sum(1 for entry in entries if entry["cleaning_window"] and entry["cleaning_window"]["is_critical"]),
    )
    metric_col3.metric(
        "Invalid Windows",
        sum(1 for entry in entries if entry["cleaning_window"] and entry["cleaning_window"]["is_invalid"]),
    )

    for entry in entries:
        apartment = entry["apartment"]
        window = entry["cleaning_window"]
        st.subheader(apartment["name"])

        col1, col2, col3 = st.columns(3)
        col1.write(f"**Out:** {_guest_name(entry['checkout_reservation'])}")
        col2.write(f"**In:** {_guest_name(entry['checkin_reservation'])}")
        if window:
            col3.write(f"**Window:** {window['duration_formatted']}")

        if entry["is_late_checkout"]:
            st.warning("Late checkout requested")
        if entry["is_early_checkin"]:
            st.warning("Early check-in requested")
        for warning in entry.get("warnings", []):
            st.error(f"{warning['code']}: {warning['message']}")

        if window:
            render_timeline_bar(window)

        if entry.get("scheduled_cleanings"):
            df = pd.DataFrame(entry["scheduled_cleanings"])[["assigned_to", "scheduled_start_time", "status"]]
            st.dataframe(df, use_container_width=True)


def render_my_cleanings_page() -> None:
    st.header("📋 My Scheduled Cleanings")
    assignee_id = st.text_input("Staff ID", "cleaner_ivana")

    if st.button("Load Cleanings", type="primary"):
        result = fetch_my_cleanings(assignee_id)
        if result:
            cleanings = result.get("cleanings", [])
            if cleanings:
                df = pd.DataFrame(cleanings)
                st.dataframe(df, use_container_width=True)
            else:
                st.info("No scheduled cleanings assigned.")


# ==========================================
# Main App Router
# ==========================================
def main() -> None:
    st.sidebar.title("Rental Operations")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigation Module",
        ["Checkout Timeline", "My Cleanings"]
    )

    if page == "Checkout Timeline":
        render_timeline_page()
    elif page == "My Cleanings":
        render_my_cleanings_page()

if __name__ == "__main__":
    main()
