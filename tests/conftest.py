import os

# keep test runs from writing log files
os.environ.setdefault("LOG_TO_FILE", "false")

import base64
from unittest.mock import MagicMock

import pytest

from forecast_app.models import Dataset, DatasetPreview, TrainingResult
from forecast_app.services.state import AppStateController
from forecast_app.ui.clients.api_client import SelectedFile

COLUMNS = ["value", "temp", "humidity"]
PLOT_B64 = base64.b64encode(b"\x89PNG fake image").decode()


def make_dataset(columns=None, filename="abc123.csv") -> Dataset:
    columns = list(columns or COLUMNS)
    head = [{c: i * 10 + j for j, c in enumerate(columns)} for i in range(3)]
    preview = DatasetPreview(rows=100, cols=len(columns), columns=columns, head=head)
    return Dataset(filename=filename, columns=columns, preview=preview)


def make_result(loss=(0.5, 0.3), val_loss=(0.6, 0.4), mse=0.1234, rmse=0.3513) -> TrainingResult:
    return TrainingResult.from_payload({
        "mse": mse,
        "rmse": rmse,
        "plot": PLOT_B64,
        "history": {"loss": list(loss), "val_loss": list(val_loss)},
    })


def fake_response(status=200, body=None, raises=None):
    r = MagicMock()
    r.status_code = status
    r.ok = 200 <= status < 300
    if raises is not None:
        r.json.side_effect = raises
    else:
        r.json.return_value = body
    return r


@pytest.fixture
def csv_file():
    return SelectedFile(name="sales.csv", content=b"value,temp,humidity\n1,2,3\n")


@pytest.fixture
def dataset():
    return make_dataset()


@pytest.fixture
def upload_fn(dataset):
    return MagicMock(return_value=dataset)


@pytest.fixture
def train_fn():
    return MagicMock(return_value=make_result())


@pytest.fixture
def controller(upload_fn, train_fn):
    return AppStateController(upload=upload_fn, train=train_fn)


@pytest.fixture
def ready_controller(controller, csv_file):
    controller.select_file(csv_file)
    assert controller.upload()
    return controller
