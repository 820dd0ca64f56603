# forecast_app/main.py

from fastapi import FastAPI
from starlette.middleware.wsgi import WSGIMiddleware

from forecast_app.config import settings
from forecast_app.services.state import get_controller
from forecast_app.ui.app import build_dash_app
from forecast_app.utils.logger import get_logger

logger = get_logger(__name__)

app = FastAPI(
    title=settings.APP_TITLE,
    version="1.0.0",
    docs_url=None,
    redoc_url=None,
)


@app.get("/healthz")
def healthz():
    v = get_controller().view()
    return {"ok": True, "backend": settings.api_root, "state": v.state.value, "busy": v.busy}


# Dash mount at UI_PREFIX
dash_app = build_dash_app(requests_pathname_prefix=settings.UI_PREFIX)
app.mount(settings.UI_PREFIX, WSGIMiddleware(dash_app.server))
logger.info("UI mounted at %s (backend %s)", settings.UI_PREFIX, settings.api_root)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8050)
