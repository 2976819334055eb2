"""CustomerHub Streamlit frontend: customer selector, customer-aware dashboard, connections."""
import os
from datetime import date, timedelta

import streamlit as st

from data_service import DataService, DataServiceError

USER_ID = os.environ.get("CUSTOMERHUB_USER_ID", "default")

TIME_RANGES = {
    "last7days": "Last 7 days",
    "last30days": "Last 30 days",
    "last90days": "Last 90 days",
    "thisYear": "This year",
    "custom": "Custom range",
}

# (title, series key, y field, chart kind)
CHARTS = [
    ("Deployment Frequency", "deploymentFrequency", "count", "bar"),
    ("Lead Time for Changes", "leadTime", "hours", "line"),
    ("Change Failure Rate", "changeFailureRate", "percentage", "line"),
    ("Time to Restore Service", "timeToRestore", "hours", "line"),
]


def init_session():
    if "data_service" not in st.session_state:
        st.session_state.data_service = DataService()
    if "customers" not in st.session_state:
        st.session_state.customers = None
    if "customer" not in st.session_state:
        st.session_state.customer = None
    if "metrics_export" not in st.session_state:
        st.session_state.metrics_export = None


def load_customers(ds: DataService):
    """Fetch customers and the default selection (remembered, else the first one)."""
    customers = ds.list_customers()
    st.session_state.customers = customers
    current = ds.get_current_customer(USER_ID).get("customer")
    if current is None and customers:
        current = customers[0]
    st.session_state.customer = current
    ds.set_customer_context(current)


def customer_selector(ds: DataService):
    st.sidebar.subheader("Customer")
    if st.session_state.customers is None:
        try:
            load_customers(ds)
        except DataServiceError as e:
            st.sidebar.error(f"Failed to load customers: {e.message}")
            st.session_state.customers = []
    customers = st.session_state.customers or []
    if not customers:
        st.sidebar.info("No customers configured")
        return

    ids = [c["id"] for c in customers]
    names = {c["id"]: c["name"] for c in customers}
    current = st.session_state.customer
    index = ids.index(current["id"]) if current and current["id"] in ids else 0
    chosen = st.sidebar.selectbox(
        "Select Customer",
        ids,
        index=index,
        format_func=lambda cid: names.get(cid, cid),
    )
    if current is None or chosen != current["id"]:
        try:
            resp = ds.select_customer(USER_ID, chosen)
            st.session_state.customer = resp["customer"]
            ds.set_customer_context(resp["customer"])
            st.sidebar.success(f"Switched to {resp['customer']['name']}")
        except DataServiceError as e:
            st.sidebar.error(e.message)
    if st.sidebar.button("Reload customers"):
        st.session_state.customers = None
        st.rerun()


def _metric_params(time_range: str, custom_range, project_filter) -> dict:
    if time_range == "custom" and custom_range and len(custom_range) == 2:
        return {
            "startDate": custom_range[0].isoformat(),
            "endDate": custom_range[1].isoformat(),
            "projectId": project_filter,
        }
    return {"timeRange": time_range, "projectId": project_filter}


def export_button(ds: DataService, customer: dict, params: dict):
    """Fetch the CSV only on request; reruns reuse it until the customer or filters change."""
    export_key = (customer["id"], tuple(sorted(params.items())))
    cached = st.session_state.metrics_export
    if cached is None or cached[0] != export_key:
        if not st.button("Prepare export", key="prepare_export"):
            return
        try:
            cached = (export_key, ds.export_metrics(params) or b"")
        except DataServiceError as e:
            st.caption(f"Export unavailable: {e.message}")
            return
        st.session_state.metrics_export = cached
    st.download_button(
        "Export",
        data=cached[1],
        file_name=f"metrics-{customer['id']}.csv",
        mime="text/csv",
    )


def dashboard(ds: DataService):
    customer = st.session_state.customer
    if not customer:
        st.info("Please select a customer to view dashboard")
        return

    col_title, col_refresh = st.columns([4, 1])
    col_title.title(f"Performance Dashboard: {customer['name']}")
    if col_refresh.button("Refresh"):
        st.rerun()

    try:
        projects = ds.get_projects()
    except DataServiceError as e:
        st.warning(f"Failed to fetch projects: {e.message}")
        projects = []

    col_range, col_project = st.columns(2)
    time_range = col_range.selectbox(
        "Time Range", list(TIME_RANGES), index=1, format_func=TIME_RANGES.get
    )
    custom_range = None
    if time_range == "custom":
        today = date.today()
        custom_range = col_range.date_input("Date range", value=(today - timedelta(days=29), today))
    project_labels = {"all": "All Projects", **{p["id"]: p["name"] for p in projects}}
    project_filter = col_project.selectbox(
        "Project", list(project_labels), format_func=lambda pid: project_labels[pid]
    )

    params = _metric_params(time_range, custom_range, project_filter)
    if time_range == "custom" and "startDate" not in params:
        st.info("Pick a start and end date")
        return
    try:
        with st.spinner("Loading metrics..."):
            metrics = ds.get_metrics(params) or {}
    except DataServiceError as e:
        st.error(f"Failed to fetch data: {e.message}")
        return

    export_button(ds, customer, params)

    cols = st.columns(2)
    for i, (title, key, y_field, kind) in enumerate(CHARTS):
        with cols[i % 2]:
            st.subheader(title)
            series = metrics.get(key)
            if not series:
                st.caption("No data available")
            elif kind == "bar":
                st.bar_chart(series, x="date", y=y_field)
            else:
                st.line_chart(series, x="date", y=y_field)


def connections_panel(ds: DataService):
    if not st.session_state.customer:
        return
    st.sidebar.markdown("---")
    st.sidebar.subheader("Connections")
    try:
        for conn in ds.list_connections():
            st.sidebar.caption(f"{conn['name']} ({conn['plugin']})")
    except DataServiceError as e:
        st.sidebar.error(e.message)
    with st.sidebar.form("new_connection", clear_on_submit=True):
        name = st.text_input("Name")
        plugin = st.selectbox("Plugin", ["github", "gitlab", "jira", "jenkins", "bitbucket"])
        endpoint = st.text_input("Endpoint")
        if st.form_submit_button("Add connection") and name:
            try:
                ds.create_connection({"name": name, "plugin": plugin, "endpoint": endpoint or None})
                st.rerun()
            except DataServiceError as e:
                st.error(e.message)


def main():
    st.set_page_config(page_title="CustomerHub", layout="wide")
    init_session()
    ds = st.session_state.data_service

    st.sidebar.title("Apache DevLake")
    st.sidebar.caption("Multi-customer dashboards")
    st.sidebar.markdown("---")
    customer_selector(ds)
    connections_panel(ds)
    dashboard(ds)


if __name__ == "__main__":
    main()
