import io
import logging

import streamlit as st

from meetingdiff.cli import load_config, make_client
from meetingdiff.dates import api_date
from meetingdiff.errors import GenerationError, UploadError
from meetingdiff.export_excel import write_workbook
from meetingdiff.generate import fetch_stage, generate_spreadsheet
from meetingdiff.ingest import parse_root_servers, parse_service_bodies, parse_snapshots
from meetingdiff.models import GenerationOptions
from meetingdiff.upload import read_naws_codes, upload_naws_codes


st.set_page_config(page_title="BMLT Meeting Changes", layout="wide")


DEFAULTS = {
    "config_path": "./config.yaml",
    "log_output": "",
    "generated": None,
    "workbook_bytes": b"",
}

for key, default in DEFAULTS.items():
    st.session_state.setdefault(key, default)


@st.cache_data(show_spinner=False)
def _root_servers(config_path: str):
    with make_client(load_config(config_path)) as client:
        return parse_root_servers(fetch_stage("root servers", client.list_root_servers))


@st.cache_data(show_spinner=False)
def _snapshots(config_path: str, root_server_id: int):
    with make_client(load_config(config_path)) as client:
        return parse_snapshots(root_server_id, fetch_stage("snapshots", lambda: client.list_snapshots(root_server_id)))


@st.cache_data(show_spinner=False)
def _service_bodies(config_path: str, root_server_id: int, snapshot_date):
    with make_client(load_config(config_path)) as client:
        return parse_service_bodies(
            fetch_stage("service bodies", lambda: client.list_service_bodies(root_server_id, snapshot_date))
        )


st.title("BMLT Meeting Changes")
st.write("Compare two snapshots of a root server and download the changes as a spreadsheet.")


with st.sidebar:
    st.header("Inputs")
    st.text_input("Config YAML", key="config_path")
    log_level = st.selectbox("Log level", options=["INFO", "DEBUG", "WARNING", "ERROR"], index=0)

    try:
        servers = _root_servers(st.session_state["config_path"])
        server = st.selectbox("Root server", options=servers, format_func=lambda s: s.menu_name())
        snapshots = _snapshots(st.session_state["config_path"], server.id) if server else []
    except GenerationError as exc:
        st.error(str(exc))
        st.stop()

    if len(snapshots) < 2:
        st.warning("This root server needs at least two snapshots.")
        st.stop()

    start = st.selectbox("Start snapshot", options=snapshots[:-1], format_func=lambda s: api_date(s.date))
    later = [s for s in snapshots if s.date > start.date]
    end = st.selectbox("End snapshot", options=later, index=len(later) - 1, format_func=lambda s: api_date(s.date))

    try:
        bodies = _service_bodies(st.session_state["config_path"], server.id, end.date)
    except GenerationError as exc:
        st.error(str(exc))
        st.stop()
    service_body = st.selectbox(
        "Service body",
        options=[None] + sorted(bodies, key=lambda b: b.name),
        format_func=lambda b: "All service bodies" if b is None else f"{b.name} ({b.world_id or '-'})",
    )

    show_original = st.checkbox("Show original NAWS codes", value=False)
    include_extra = st.checkbox("Include other meetings sharing a changed NAWS code", value=False)
    exclude_world_id = st.checkbox("Exclude NAWS code updates", value=False)


st.subheader("Generate")
if st.button("Generate Spreadsheet"):
    handler = logging.StreamHandler(stream=io.StringIO())
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))
    with st.spinner("Fetching changes..."):
        try:
            options = GenerationOptions(show_original, include_extra, exclude_world_id)
            with make_client(load_config(st.session_state["config_path"])) as client:
                generated = generate_spreadsheet(client, server, bodies, service_body, start, end, options)
            buffer = io.BytesIO()
            write_workbook(buffer, generated.sheet)
            st.session_state["generated"] = generated
            st.session_state["workbook_bytes"] = buffer.getvalue()
            st.success(f"{len(generated.sheet.rows)} rows ready.")
        except GenerationError as exc:
            st.session_state["generated"] = None
            st.error(str(exc))
        finally:
            handler.flush()
            st.session_state["log_output"] = handler.stream.getvalue()
            root_logger.removeHandler(handler)

generated = st.session_state.get("generated")
if generated is not None:
    st.download_button(
        "Download " + generated.file_name,
        data=st.session_state["workbook_bytes"],
        file_name=generated.file_name,
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
    st.dataframe(
        [dict(zip(generated.sheet.headers, row)) for row in generated.sheet.rows],
        use_container_width=True,
        height=400,
    )

st.subheader("Upload NAWS Codes")
uploaded = st.file_uploader("Spreadsheet with Committee and bmlt_id columns", type=["xlsx"])
if uploaded is not None and st.button("Upload"):
    try:
        upload = read_naws_codes(io.BytesIO(uploaded.getvalue()))
    except UploadError as exc:
        st.error(str(exc))
    else:
        try:
            with make_client(load_config(st.session_state["config_path"])) as client:
                fetch_stage("NAWS code update", lambda: upload_naws_codes(client, server.id, upload))
            st.success(upload.summary())
        except GenerationError as exc:
            st.error(str(exc))
        st.text("\n".join(f"bmlt_id: {u.bmlt_id} code: {u.code}" for u in upload.updates))

st.subheader("Console Output")
st.text_area("Logs", value=st.session_state.get("log_output", ""), height=200)

st.markdown(
    """
### Notes
- New meetings are shaded blue, changed cells red, and deleted meetings struck through.
- Settings in `config.yaml` (API base URL, credentials) apply here as well as on the command line.
- The NAWS code upload needs credentials with write access to the root server.
"""
)
