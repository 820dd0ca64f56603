import pytest

from forecast_app.models import (
    CnnParams, CommonParams, Dataset, DatasetPreview, LstmParams, ModelConfig,
    TrainingParams, TrainingResult, default_values, visible_fields,
)

from conftest import PLOT_B64, make_dataset


def test_preview_from_payload():
    p = DatasetPreview.from_payload({
        "info": {"shape": [120, 2], "columns": ["date", "value"]},
        "head": [{"date": "2020-01-01", "value": 1.5}],
    })
    assert (p.rows, p.cols) == (120, 2)
    assert p.columns == ("date", "value")
    assert p.head[0]["value"] == 1.5


@pytest.mark.parametrize("payload", [
    None,
    [],
    {"head": []},
    {"info": {"columns": ["a"]}, "head": []},
    {"info": {"shape": [1], "columns": ["a"]}, "head": []},
    {"info": {"shape": [3, 2]}, "head": []},
    {"info": {"shape": [3, 2], "columns": ["a", "b"]}},
    {"info": {"shape": [3, 2], "columns": "ab"}, "head": []},
    {"info": {"shape": [3, 2], "columns": ["a", "b"]}, "head": {"a": 1}},
])
def test_preview_from_payload_rejects_malformed(payload):
    with pytest.raises(ValueError):
        DatasetPreview.from_payload(payload)


def test_dataset_requires_columns():
    preview = DatasetPreview(rows=0, cols=0, columns=[])
    with pytest.raises(ValueError):
        Dataset(filename="f.csv", columns=[], preview=preview)


def test_dataset_rejects_duplicate_columns():
    preview = DatasetPreview(rows=1, cols=2, columns=["a", "a"])
    with pytest.raises(ValueError):
        Dataset(filename="f.csv", columns=["a", "a"], preview=preview)


def test_dataset_is_frozen_and_defaults_target_to_first_column():
    ds = make_dataset(["c1", "c2", "c3"])
    assert ds.default_target == "c1"
    with pytest.raises(ValueError):
        ds.filename = "other.csv"


def test_visible_fields_follow_model_type():
    assert visible_fields("cnn") == ("sequence_length", "dense_units", "epochs", "num_filters", "kernel_size")
    assert visible_fields("lstm") == ("sequence_length", "dense_units", "epochs", "lstm_units")
    with pytest.raises(ValueError):
        visible_fields("gru")


def test_default_values_cover_all_six_fields():
    assert default_values() == {
        "sequence_length": 10, "dense_units": 64, "epochs": 50,
        "num_filters": 64, "kernel_size": 3, "lstm_units": 50,
    }


def test_model_config_variant_is_tagged():
    cfg = ModelConfig.model_validate({"target_column": "value", "variant": {"model_type": "lstm", "lstm_units": 32}})
    assert isinstance(cfg.variant, LstmParams)
    assert cfg.model_type == "lstm"


def test_params_must_be_positive():
    with pytest.raises(ValueError):
        CommonParams(epochs=0)
    with pytest.raises(ValueError):
        CnnParams(kernel_size=-1)


def test_training_params_always_carry_six_keys():
    cfg = ModelConfig(target_column="value", common=CommonParams(), variant=CnnParams())
    dumped = TrainingParams.from_config(cfg).model_dump(by_alias=True)
    assert dumped == {
        "sequenceLength": 10, "epochs": 50, "denseUnits": 64,
        "numFilters": 64, "kernelSize": 3, "lstmUnits": 50,
    }


def test_training_params_use_retained_inactive_values():
    cfg = ModelConfig(target_column="value", variant=LstmParams(lstm_units=20))
    dumped = TrainingParams.from_config(cfg, CnnParams(num_filters=8, kernel_size=5)).model_dump(by_alias=True)
    assert (dumped["numFilters"], dumped["kernelSize"], dumped["lstmUnits"]) == (8, 5, 20)


def test_training_result_parses_backend_body():
    r = TrainingResult.from_payload({
        "mse": 0.1234, "rmse": 0.3513, "plot": PLOT_B64,
        "history": {"loss": [0.5, 0.3], "val_loss": [0.6, 0.4]},
    })
    assert r.n_epochs == 2
    assert r.plot_bytes.startswith(b"\x89PNG")


def test_training_result_rejects_unequal_history():
    with pytest.raises(ValueError):
        TrainingResult.from_payload({
            "mse": 0.1, "rmse": 0.2, "plot": PLOT_B64,
            "history": {"loss": [0.5, 0.3], "val_loss": [0.6]},
        })


def test_training_result_rejects_negative_metrics():
    with pytest.raises(ValueError):
        TrainingResult.from_payload({
            "mse": -1.0, "rmse": 0.2, "plot": PLOT_B64,
            "history": {"loss": [], "val_loss": []},
        })


@pytest.mark.parametrize("plot", ["%%% not base64 %%%", "abc"])
def test_training_result_rejects_non_base64_plot(plot):
    with pytest.raises(ValueError):
        TrainingResult.from_payload({
            "mse": 0.1, "rmse": 0.2, "plot": plot,
            "history": {"loss": [], "val_loss": []},
        })
