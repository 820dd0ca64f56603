# forecast_app/ui/pages/forecast.py

from __future__ import annotations

import dash
from dash import html, dcc, callback, Input, Output, State, no_update
import dash_bootstrap_components as dbc

from forecast_app.errors import NoFileSelected
from forecast_app.models import ALL_FIELDS, COMMON_FIELDS, VARIANT_FIELDS
from forecast_app.services.config_form import FIELD_LABELS
from forecast_app.services.state import get_controller
from forecast_app.ui.clients.api_client import SelectedFile
from forecast_app.ui.components.results_view import render_preview, render_results

dash.register_page(__name__, path="/", name="Forecast")

MODEL_OPTIONS = [
    {"label": "CNN", "value": "cnn"},
    {"label": "LSTM", "value": "lstm"},
]
HIDDEN = {"display": "none"}
SHOWN = {}

def _param_input(k: str):
    return dbc.Col(
        dbc.InputGroup([
            dbc.InputGroupText(FIELD_LABELS[k]),
            dbc.Input(id=f"fc-param-{k}", type="text"),
        ]),
        md=4, className="mb-2"
    )

def _param_group(title: str, keys, group_id: str, style=None):
    return html.Div([
        html.H6(title, className="mt-2"),
        dbc.Row([_param_input(k) for k in keys], className="g-2"),
    ], id=group_id, style=style or SHOWN)

layout = dbc.Container([
    dbc.Card([
        dbc.CardHeader("1. Upload Data"),
        dbc.CardBody([
            dbc.Row([
                dbc.Col(dcc.Upload(
                    id="fc-upload",
                    children=html.Div(["Drag and Drop or ", html.A("Select a CSV File")]),
                    accept=".csv",
                    multiple=False,
                    style={"width": "100%", "height": "80px", "lineHeight": "80px", "borderWidth": "1px",
                           "borderStyle": "dashed", "borderRadius": "6px", "textAlign": "center"}
                ), md=7),
                dbc.Col(dbc.Button("Upload", id="fc-btn-upload", color="primary", disabled=True), width="auto"),
                dbc.Col(html.Div(id="fc-file-name"), width="auto"),
                dbc.Col(html.Small("Allowed: .csv"), width="auto"),
            ], className="g-2 align-items-center"),
            html.Div(id="fc-preview", className="mt-3"),
        ])
    ], className="mb-3"),

    html.Div(dbc.Card([
        dbc.CardHeader("2. Configure Model"),
        dbc.CardBody([
            dbc.Row([
                dbc.Col(dbc.InputGroup([
                    dbc.InputGroupText("Target Column"),
                    dbc.Select(id="fc-target", placeholder="Select target column"),
                ]), md=5),
                dbc.Col(dbc.RadioItems(id="fc-model-type", options=MODEL_OPTIONS, value="cnn", inline=True,
                                       style={"marginTop": "6px"}), md=4),
            ], className="g-2"),
            _param_group("Common Parameters", COMMON_FIELDS, "fc-group-common"),
            # 숨겨진 그룹도 마운트 상태 유지 → 토글해도 입력값 보존
            _param_group("CNN Parameters", VARIANT_FIELDS["cnn"], "fc-group-cnn"),
            _param_group("LSTM Parameters", VARIANT_FIELDS["lstm"], "fc-group-lstm", HIDDEN),
            dbc.Button("Train Model", id="fc-btn-train", color="success", className="mt-3"),
        ])
    ], className="mb-3"), id="fc-config-wrap", style=HIDDEN),

    dbc.Row([
        dbc.Col(html.Div(id="fc-error"), width=True),
        dbc.Col(dbc.Button("Retry", id="fc-btn-retry", color="danger", outline=True, style=HIDDEN), width="auto"),
    ], className="g-2 mb-3"),

    html.Div(id="fc-results"),
], fluid=True)

RUNNING_LABELS = [
    (Output("fc-btn-upload", "children"), "Uploading...", "Upload"),
    (Output("fc-btn-train", "children"), "Training...", "Train Model"),
]

# ─────────────────────────────
# 파일 선택
# ─────────────────────────────
@callback(
    Output("gs-revision", "data", allow_duplicate=True),
    Input("fc-upload", "contents"),
    State("fc-upload", "filename"),
    prevent_initial_call=True
)
def _on_select(contents, filename):
    c = get_controller()
    if not contents:
        return no_update
    try:
        c.select_file(SelectedFile.from_contents(contents, filename))
    except NoFileSelected as e:
        c.report_error(e.message)
    return c.revision

# ─────────────────────────────
# Upload / Train / Retry (요청은 한 번에 하나)
# ─────────────────────────────
@callback(
    Output("gs-revision", "data", allow_duplicate=True),
    Input("fc-btn-upload", "n_clicks"),
    Input("fc-btn-train", "n_clicks"),
    Input("fc-btn-retry", "n_clicks"),
    running=RUNNING_LABELS,
    prevent_initial_call=True
)
def _dispatch(_n_upload, _n_train, _n_retry):
    c = get_controller()
    trig = dash.ctx.triggered_id
    if trig == "fc-btn-upload":
        c.upload()
    elif trig == "fc-btn-train":
        c.submit_training()
    elif trig == "fc-btn-retry":
        c.retry()
    else:
        return no_update
    return c.revision

# ─────────────────────────────
# 설정 변경 → draft 갱신 + 보이는 파라미터 그룹
# ─────────────────────────────
@callback(
    Output("fc-group-cnn", "style"),
    Output("fc-group-lstm", "style"),
    [Output(f"fc-param-{k}", "invalid") for k in ALL_FIELDS],
    Input("fc-model-type", "value"),
    [Input(f"fc-param-{k}", "value") for k in ALL_FIELDS],
)
def _on_config(model_type, values):
    c = get_controller()
    if c.dataset is not None:
        if model_type and model_type != c.form.model_type:
            c.change_model_type(model_type)
        for k, v in zip(ALL_FIELDS, values):
            if v is not None and v != c.form.values.get(k):
                c.change_param(k, v)
        shown = c.form.visible_fields()
        errors = c.form.field_errors(c.dataset.columns)
    else:
        shown = COMMON_FIELDS + VARIANT_FIELDS.get(model_type or "cnn", ())
        errors = {}
    cnn_style = SHOWN if "num_filters" in shown else HIDDEN
    lstm_style = SHOWN if "lstm_units" in shown else HIDDEN
    return cnn_style, lstm_style, [k in errors for k in ALL_FIELDS]

# ─────────────────────────────
# 타깃 컬럼 (옵션 세팅 + 선택 반영)
# ─────────────────────────────
@callback(
    Output("fc-target", "options"),
    Output("fc-target", "value"),
    Input("gs-revision", "data"),
    Input("fc-target", "value"),
)
def _target(_rev, value):
    c = get_controller()
    if dash.ctx.triggered_id == "fc-target":
        c.change_target_column(value)
        return no_update, no_update
    if c.dataset is None:
        return [], None
    return [{"label": col, "value": col} for col in c.dataset.columns], c.form.target_column

# ─────────────────────────────
# 렌더
# ─────────────────────────────
@callback(
    Output("fc-file-name", "children"),
    Output("fc-btn-upload", "disabled"),
    Output("fc-preview", "children"),
    Output("fc-config-wrap", "style"),
    Output("fc-model-type", "value"),
    [Output(f"fc-param-{k}", "value") for k in ALL_FIELDS],
    Output("fc-btn-train", "disabled"),
    Output("fc-error", "children"),
    Output("fc-btn-retry", "style"),
    Output("fc-results", "children"),
    Input("gs-revision", "data"),
)
def _render(_rev):
    c = get_controller()
    v = c.view()
    file_badge = dbc.Badge(v.file_name, color="info") if v.file_name else dbc.Badge("no file", color="warning")
    preview = render_preview(c.dataset) if v.show_preview else None
    params = [c.form.values.get(k) for k in ALL_FIELDS]
    error = dbc.Alert(v.error, color="danger", className="py-2") if v.error else None
    results = render_results(c.result) if v.show_results else None
    return (
        file_badge,
        not v.can_upload,
        preview,
        SHOWN if v.show_config else HIDDEN,
        c.form.model_type,
        params,
        not v.can_train,
        error,
        SHOWN if v.can_retry else HIDDEN,
        results,
    )
