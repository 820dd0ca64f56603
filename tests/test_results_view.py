from forecast_app.ui.components.results_view import (
    epoch_rows, format_metric, plot_src, render_preview, render_results,
)

from conftest import PLOT_B64, make_dataset, make_result


def _texts(component):
    """Flatten the string children of a dash component tree."""
    out = []
    children = getattr(component, "children", None)
    if isinstance(children, (str, int, float)):
        out.append(str(children))
    elif isinstance(children, (list, tuple)):
        for ch in children:
            if isinstance(ch, (str, int, float)):
                out.append(str(ch))
            else:
                out.extend(_texts(ch))
    elif children is not None:
        out.extend(_texts(children))
    return out


def test_format_metric_four_decimals():
    assert format_metric(0.1234) == "0.1234"
    assert format_metric(0.35129) == "0.3513"
    assert format_metric(2) == "2.0000"


def test_epoch_rows_are_one_indexed():
    result = make_result(loss=(0.5, 0.3), val_loss=(0.6, 0.4))
    assert epoch_rows(result) == [(1, "0.5000", "0.6000"), (2, "0.3000", "0.4000")]


def test_epoch_rows_empty_history():
    assert epoch_rows(make_result(loss=(), val_loss=())) == []


def test_plot_src_is_inline_png():
    assert plot_src(make_result()) == f"data:image/png;base64,{PLOT_B64}"


def test_render_results_shows_metrics_and_rows():
    texts = _texts(render_results(make_result()))
    assert "0.1234" in texts
    assert "0.3513" in texts
    assert "0.5000" in texts and "0.4000" in texts
    assert "Training History" in texts


def test_render_preview_shape_and_cells():
    ds = make_dataset(["a", "b"])
    texts = _texts(render_preview(ds))
    assert "Shape: 100 rows, 2 columns" in texts
    assert "a" in texts and "b" in texts
    assert "11" in texts
