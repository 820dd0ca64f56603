# forecast_app/ui/app.py
#
# Dash application factory with:
# - gs-revision store: bumped by page callbacks whenever the session state changes
# - top navbar with the current lifecycle badge
# - page container (pages/forecast.py)

from __future__ import annotations

import dash
from dash import dcc, html, callback, Input, Output
import dash_bootstrap_components as dbc

from forecast_app.config import settings
from forecast_app.services.state import get_controller

# ────────────────────────────────────────────────────────────────────
# Global stores available to every page
# ────────────────────────────────────────────────────────────────────
GLOBAL_STORES = [
    dcc.Store(id="gs-revision", data=0),   # controller.revision at last change
]

def _navbar() -> dbc.Navbar:
    return dbc.Navbar(
        dbc.Container([
            html.Div([
                dbc.NavbarBrand(settings.APP_TITLE, class_name="me-3"),
                dbc.Nav(
                    [dbc.NavItem(dcc.Link("Forecast", href="/", className="nav-link"))],
                    class_name="me-auto",
                    pills=False,
                ),
            ], className="d-flex align-items-center flex-grow-1"),
            dbc.Nav(
                [dbc.Badge(id="nav-state-badge", color="secondary", class_name="me-2 text-uppercase")],
                class_name="ms-auto align-items-center",
                navbar=True,
            ),
        ], fluid=True),
        color="dark",
        dark=True,
        class_name="mb-3",
    )

def build_dash_app(requests_pathname_prefix: str = "/") -> dash.Dash:
    app = dash.Dash(
        __name__,
        use_pages=True,
        suppress_callback_exceptions=True,
        external_stylesheets=[dbc.themes.BOOTSTRAP],
        title=settings.APP_TITLE,
        requests_pathname_prefix=requests_pathname_prefix,
    )

    app.layout = dbc.Container(
        [
            _navbar(),
            dcc.Location(id="_page_location"),
            *GLOBAL_STORES,
            dash.page_container,
        ],
        fluid=True,
    )

    # Lifecycle badge
    @callback(
        Output("nav-state-badge", "children"),
        Output("nav-state-badge", "color"),
        Input("gs-revision", "data"),
        prevent_initial_call=False,
    )
    def _paint_state(_rev):
        v = get_controller().view()
        label = v.status_label + (" …" if v.busy else "")
        return label, v.status_color

    return app
