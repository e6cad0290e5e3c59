#!/usr/bin/env python3
"""
Data Alchemist Streamlit App
============================

Browser front-end with 5 tabs:
1. Upload (clients, workers, tasks as CSV/Excel)
2. Data (search + cell editing)
3. Rules (natural-language rule builder + priority weights)
4. Validate (issues + AI fixes)
5. Export (cleaned workbook + rules config)
"""

import asyncio
import json

import pandas as pd
import streamlit as st
from dotenv import load_dotenv

# Page configuration - MUST be first Streamlit call
st.set_page_config(
    page_title="Data Alchemist",
    page_icon=None,
    layout="wide",
    initial_sidebar_state="expanded"
)

# Load environment variables before settings are read
load_dotenv()

from data_alchemist.config import get_settings
from data_alchemist.models import Correction, EntityType, PriorityWeights
from data_alchemist.services import (
    AIService,
    EditError,
    ExportBlockedError,
    IngestionError,
    Workspace,
    build_workbook,
    ingest_file,
    load_sample_data,
    local_search,
    rules_config_json,
    summarize,
)
from data_alchemist.services.export import RULES_FILE_NAME, WORKBOOK_FILE_NAME
from data_alchemist.utils import configure_structured_logging


configure_structured_logging(get_settings().log_level)

UPLOAD_CARDS = [
    (EntityType.CLIENTS, "Clients Data", "Client information, priorities, and task requests"),
    (EntityType.WORKERS, "Workers Data", "Worker skills, availability, and qualifications"),
    (EntityType.TASKS, "Tasks Data", "Task definitions, requirements, and constraints"),
]
WEIGHT_LABELS = {
    "priority_level": "Priority Level",
    "task_fulfillment": "Task Fulfillment",
    "fairness": "Fairness",
    "workload_balance": "Workload Balance",
    "skill_match": "Skill Match",
}

# Initialize session state
if 'workspace' not in st.session_state:
    st.session_state.workspace = Workspace()
if 'corrections' not in st.session_state:
    st.session_state.corrections = []
if 'search_results' not in st.session_state:
    st.session_state.search_results = []
if 'search_source' not in st.session_state:
    st.session_state.search_source = None


def _workspace() -> Workspace:
    return st.session_state.workspace


def _run_ai(method_name, *args):
    """Run one AIService coroutine in a fresh loop.

    A new service per call keeps the async HTTP client bound to the loop it runs in.
    """
    service = AIService(get_settings())
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        return loop.run_until_complete(getattr(service, method_name)(*args))
    finally:
        loop.close()


def _display_frame(records):
    """Flatten list/dict cells so st.dataframe renders them as text."""
    rows = []
    for record in records:
        rows.append({
            k: (", ".join(map(str, v)) if isinstance(v, list) else json.dumps(v) if isinstance(v, dict) else v)
            for k, v in record.items()
        })
    return pd.DataFrame(rows)


def _format_cell(value):
    if isinstance(value, list):
        return ", ".join(map(str, value))
    if isinstance(value, dict):
        return json.dumps(value)
    return "" if value is None else str(value)


def render_sidebar():
    workspace = _workspace()
    with st.sidebar:
        st.header("Configuration")

        if AIService(get_settings()).api_key_status() == "valid":
            st.success("Gemini API key configured")
        else:
            st.warning("Gemini API key missing")
            st.info("Set GEMINI_API_KEY in your .env file. Search, rules and fixes will use local fallbacks.")

        st.markdown("---")
        st.markdown("### Records")
        col1, col2, col3 = st.columns(3)
        col1.metric("Clients", len(workspace.clients))
        col2.metric("Workers", len(workspace.workers))
        col3.metric("Tasks", len(workspace.tasks))

        summary = summarize(workspace.issues, workspace.total_records)
        st.markdown(f"**Status:** {summary.status}")


def render_upload_tab():
    st.header("AI-Powered Data Ingestion")
    st.markdown("Upload your CSV or Excel files to parse, normalize and validate your data.")

    workspace = _workspace()
    columns = st.columns(3)
    for col, (entity_type, title, description) in zip(columns, UPLOAD_CARDS):
        with col:
            st.subheader(title)
            st.caption(description)
            uploaded_file = st.file_uploader(
                f"Upload {entity_type.value}",
                type=["csv", "xlsx", "xls"],
                key=f"upload_{entity_type.value}",
            )
            if uploaded_file is not None and st.button("Load file", key=f"load_{entity_type.value}"):
                try:
                    records = ingest_file(uploaded_file.name, uploaded_file.getvalue(), entity_type)
                except IngestionError as e:
                    st.error(f"Error processing file: {e}")
                else:
                    workspace.load(entity_type, records)
                    st.session_state.corrections = []
            count = len(workspace.collection(entity_type))
            if count:
                st.success(f"{count} records loaded")

    st.markdown("---")
    if st.button("Load sample data"):
        with st.spinner("Loading samples..."):
            try:
                workspace.load_all(load_sample_data(get_settings().samples_dir))
                st.session_state.corrections = []
                st.success("Sample data loaded")
            except IngestionError as e:
                st.error(f"Error loading sample data: {e}")


def render_search():
    settings = get_settings()
    workspace = _workspace()

    st.subheader("AI-Powered Search")
    query = st.text_input(
        "Search",
        placeholder='e.g. "tasks with duration > 2", "workers with skills python", "priority = 5"',
    )
    col1, col2 = st.columns([1, 1])
    with col1:
        ai_clicked = st.button("AI Search", type="primary")
    with col2:
        if st.button("Clear"):
            st.session_state.search_results = []
            st.session_state.search_source = None
            query = ""

    records = workspace.all_records()
    if ai_clicked and query.strip():
        with st.spinner("Searching..."):
            results, source = _run_ai("search_data", query, records)
        st.session_state.search_results = results
        st.session_state.search_source = source
    elif query.strip():
        st.session_state.search_results = local_search(query, records, settings.instant_search_limit)
        st.session_state.search_source = "local"

    if st.session_state.search_source:
        label = "AI" if st.session_state.search_source == "ai" else "Local"
        st.caption(f"{len(st.session_state.search_results)} results ({label} search)")
        if st.session_state.search_results:
            st.dataframe(_display_frame(st.session_state.search_results), use_container_width=True)


def render_cell_editor(entity_type: EntityType):
    workspace = _workspace()
    rows = workspace.collection(entity_type)
    if not rows:
        return

    st.markdown("**Edit a cell**")
    col1, col2, col3 = st.columns([1, 1, 2])
    with col1:
        row = st.selectbox(
            "Row",
            options=list(range(len(rows))),
            format_func=lambda i: f"{i}: {rows[i].entity_id}",
            key=f"edit_row_{entity_type.value}",
        )
    with col2:
        field = st.selectbox("Field", options=type(rows[0]).columns(), key=f"edit_field_{entity_type.value}")
    with col3:
        current = rows[row].to_record().get(field)
        value = st.text_input(
            "Value",
            value=_format_cell(current),
            key=f"edit_value_{entity_type.value}_{row}_{field}",
        )
    if st.button("Save", key=f"edit_save_{entity_type.value}"):
        try:
            workspace.edit_cell(entity_type, row, field, value)
            st.success(f"Updated {rows[row].entity_id} {field}")
        except EditError as e:
            st.error(str(e))


def render_data_tab():
    workspace = _workspace()
    render_search()
    st.markdown("---")

    entity_tabs = st.tabs(["Clients", "Workers", "Tasks"])
    for tab, entity_type in zip(entity_tabs, EntityType):
        with tab:
            records = [r.to_record() for r in workspace.collection(entity_type)]
            if not records:
                st.info(f"No {entity_type.value} loaded yet")
                continue
            flagged = {i.row for i in workspace.issues if i.entity_type == entity_type and i.type == "error"}
            st.dataframe(_display_frame(records), use_container_width=True)
            if flagged:
                st.caption(f"Rows with errors: {', '.join(map(str, sorted(flagged)))}")
            render_cell_editor(entity_type)


def render_rules_tab():
    workspace = _workspace()
    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Natural Language Rule Builder")
        description = st.text_area(
            "Describe your rule",
            placeholder="e.g. 'Tasks T1 and T2 should run together' or 'GroupA workers should have max 2 tasks per phase'",
            height=120,
        )
        if st.button("Convert to Rule with AI", type="primary"):
            if description.strip():
                with st.spinner("Converting..."):
                    rule = _run_ai("convert_to_rule", description.strip())
                workspace.add_rule(rule)
                st.success(f"Added rule: {rule.name}")
            else:
                st.warning("Enter a rule description first")

    with col2:
        st.subheader("Priority Weights")
        current = workspace.priority_weights.model_dump()
        updated = {}
        for key, label in WEIGHT_LABELS.items():
            updated[key] = st.slider(label, min_value=0, max_value=50, value=current[key], key=f"weight_{key}")
        weights = workspace.set_priority_weights(PriorityWeights(**updated))
        st.markdown(f"**Total:** {weights.total}%")

    st.markdown("---")
    st.subheader("Active Rules")
    if not workspace.rules:
        st.info("No rules created yet")
        return
    for rule in list(workspace.rules):
        c1, c2, c3 = st.columns([4, 1, 1])
        with c1:
            st.markdown(f"**{rule.name}** `{rule.type}`")
            st.caption(rule.description)
            if rule.config:
                st.code(json.dumps(rule.config, indent=2), language="json")
        with c2:
            active = st.checkbox("Active", value=rule.active, key=f"active_{rule.id}")
            if active != rule.active:
                workspace.set_rule_active(rule.id, active)
        with c3:
            if st.button("Remove", key=f"remove_{rule.id}"):
                workspace.remove_rule(rule.id)
                st.rerun()


def render_validate_tab():
    workspace = _workspace()
    summary = summarize(workspace.issues, workspace.total_records)

    st.subheader(
        "Critical Issues" if summary.error_count else "Minor Issues" if summary.warning_count else "All Valid"
    )
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Errors", summary.error_count)
    col2.metric("Warnings", summary.warning_count)
    col3.metric("Records", summary.total_records)
    col4.metric("Data Quality", f"{summary.data_quality}%", summary.quality_label)

    if not workspace.issues:
        return

    left, right = st.columns(2)
    with left:
        st.markdown("### Validation Issues")
        for issue in workspace.issues:
            text = f"**{issue.entity_id}** `{issue.field}`: {issue.message}"
            if issue.suggestion:
                text += f"  \n_{issue.suggestion}_"
            if issue.type == "error":
                st.error(text)
            else:
                st.warning(text)

    with right:
        st.markdown("### AI Corrections")
        if st.button("Generate AI Fixes", type="primary"):
            with st.spinner("Finding fixes..."):
                corrections, source = _run_ai("suggest_corrections", workspace.issues, workspace.collections())
            st.session_state.corrections = corrections
            st.success(f"{len(corrections)} of {len(workspace.issues)} fixes generated ({source})")

        corrections = st.session_state.corrections
        if corrections and len(corrections) < len(workspace.issues):
            st.warning(
                f"AI generated {len(corrections)} fixes for {len(workspace.issues)} errors. "
                "Some errors may need manual fixing."
            )
        for index, correction in enumerate(list(corrections)):
            st.markdown(f"**{correction.entity_id} - {correction.field}**")
            st.caption(correction.reason)
            st.write(f"Current: {json.dumps(correction.current_value, default=str)}")
            if correction.suggested_value is None:
                st.info("Fix manually in the Data tab")
                continue
            st.write(f"Suggested: {json.dumps(correction.suggested_value, default=str)}")
            if st.button("Apply", key=f"apply_{index}"):
                _apply_correction(correction, index)


def _apply_correction(correction: Correction, index: int):
    try:
        _workspace().apply_correction(correction)
    except EditError as e:
        st.error(str(e))
        return
    st.session_state.corrections.pop(index)
    st.rerun()


def render_export_tab():
    workspace = _workspace()
    summary = summarize(workspace.issues, workspace.total_records)

    st.header("Export Clean Data")
    st.markdown("Download your validated and cleaned data along with business rules configuration")

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Records", summary.total_records)
    col2.metric("Data Quality", f"{summary.data_quality}%")
    col3.metric("Rules", len(workspace.rules))
    col4.metric("Weight Total", f"{workspace.priority_weights.total}%")

    if summary.error_count:
        st.error("Fix Errors Before Export")
        return

    try:
        workbook = build_workbook(workspace)
    except ExportBlockedError as e:
        st.error(str(e))
        return

    c1, c2 = st.columns(2)
    with c1:
        st.download_button(
            label="Download cleaned workbook",
            data=workbook,
            file_name=WORKBOOK_FILE_NAME,
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    with c2:
        st.download_button(
            label="Download rules config",
            data=rules_config_json(workspace),
            file_name=RULES_FILE_NAME,
            mime="application/json",
        )


def main():
    """Main application"""
    st.title("Data Alchemist")
    st.caption("AI Resource Allocation Configurator")

    render_sidebar()

    tab1, tab2, tab3, tab4, tab5 = st.tabs(["Upload", "Data", "Rules", "Validate", "Export"])
    has_data = _workspace().total_records > 0

    with tab1:
        render_upload_tab()
    with tab2:
        if has_data:
            render_data_tab()
        else:
            st.info("Upload data to get started")
    with tab3:
        if has_data:
            render_rules_tab()
        else:
            st.info("Upload data to get started")
    with tab4:
        if has_data:
            render_validate_tab()
        else:
            st.info("Upload data to get started")
    with tab5:
        if has_data:
            render_export_tab()
        else:
            st.info("Upload data to get started")


if __name__ == "__main__":
    main()
