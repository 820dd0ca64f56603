# forecast_app/ui/components/results_view.py

from __future__ import annotations
from typing import Any, List, Tuple

from dash import html
import dash_bootstrap_components as dbc

from forecast_app.models import Dataset, TrainingResult

def format_metric(value: float) -> str:
    return f"{value:.4f}"

def epoch_rows(result: TrainingResult) -> List[Tuple[int, str, str]]:
    h = result.history
    return [(i + 1, format_metric(loss), format_metric(val)) for i, (loss, val) in enumerate(zip(h.loss, h.val_loss))]

def plot_src(result: TrainingResult) -> str:
    return f"data:image/png;base64,{result.plot}"

def _cell(v: Any) -> str:
    return "" if v is None else str(v)

def _card(title: str, body: Any) -> dbc.Card:
    return dbc.Card([dbc.CardHeader(title), dbc.CardBody(body)], className="mb-3")

def render_preview(dataset: Dataset) -> html.Div:
    p = dataset.preview
    header = html.Tr([html.Th(c, style={"whiteSpace": "nowrap"}) for c in p.columns])
    rows = [html.Tr([html.Td(_cell(r.get(c)), style={"whiteSpace": "nowrap"}) for c in p.columns]) for r in p.head]
    return html.Div([
        html.H5("Data Preview:"),
        html.P(f"Shape: {p.rows} rows, {p.cols} columns"),
        html.Div(
            dbc.Table([html.Thead(header), html.Tbody(rows)], bordered=True, hover=True, size="sm"),
            style={"overflowX": "auto", "maxHeight": "50vh"},
        ),
    ])

def render_results(result: TrainingResult) -> dbc.Card:
    metrics = dbc.Row([
        dbc.Col(dbc.Card(dbc.CardBody([html.H6("MSE:"), html.P(format_metric(result.mse), id="results-mse")])), md=3),
        dbc.Col(dbc.Card(dbc.CardBody([html.H6("RMSE:"), html.P(format_metric(result.rmse), id="results-rmse")])), md=3),
    ], className="g-2 mb-3")

    plot = html.Img(src=plot_src(result), alt="Prediction Plot", style={"maxWidth": "100%"})

    header = html.Thead(html.Tr([html.Th("Epoch"), html.Th("Training Loss"), html.Th("Validation Loss")]))
    body = html.Tbody([html.Tr([html.Td(e), html.Td(l), html.Td(v)]) for e, l, v in epoch_rows(result)])
    history = dbc.Table([header, body], bordered=True, hover=True, responsive=True, size="sm")

    return _card("3. Results", [
        metrics,
        html.H5("Prediction Plot"),
        html.Div(plot, className="mb-3"),
        html.H5("Training History"),
        html.Div(history, style={"maxHeight": "40vh", "overflowY": "auto"}),
    ])
