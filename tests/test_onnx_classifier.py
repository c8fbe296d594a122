"""Tests for the ONNX classifier backend."""

import json
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from camera_search.adapters.onnx_classifier import (
    INPUT_SIZE,
    OnnxClassifierBackend,
    OnnxModelHandle,
    load_labels,
    preprocess,
    softmax,
)


def _write_config(path: Path, id2label: dict[str, str]) -> Path:
    path.write_text(json.dumps({"id2label": id2label}), encoding="utf-8")
    return path


def test_load_labels_orders_by_index(tmp_path) -> None:
    config = _write_config(
        tmp_path / "config.json", {"1": "handbag", "0": "backpack, knapsack"}
    )

    assert load_labels(config) == ["backpack, knapsack", "handbag"]


def test_load_labels_requires_mapping(tmp_path) -> None:
    config = tmp_path / "config.json"
    config.write_text("{}", encoding="utf-8")

    with pytest.raises(ValueError):
        load_labels(config)


def test_preprocess_produces_scaled_nchw_tensor() -> None:
    image = np.full((48, 64, 3), 255, dtype=np.uint8)

    tensor = preprocess(image)

    assert tensor.shape == (1, 3, INPUT_SIZE, INPUT_SIZE)
    assert tensor.dtype == np.float32
    assert tensor.max() == pytest.approx(1.0)


def test_softmax_sums_to_one() -> None:
    probabilities = softmax(np.array([1.0, 2.0, 3.0], dtype=np.float32))

    assert probabilities.sum() == pytest.approx(1.0)
    assert probabilities.argmax() == 2


def test_model_handle_returns_top_k_labels() -> None:
    session = MagicMock()
    session.get_inputs.return_value = [SimpleNamespace(name="pixel_values")]
    session.run.return_value = [np.array([[0.1, 3.0, 1.0]], dtype=np.float32)]
    handle = OnnxModelHandle(session=session, labels=["cat", "backpack", "handbag"])

    predictions = handle.classify(np.zeros((8, 8, 3), dtype=np.uint8), top_k=2)

    assert [item["className"] for item in predictions] == ["backpack", "handbag"]
    assert predictions[0]["probability"] > predictions[1]["probability"]
    feed = session.run.call_args.args[1]
    assert feed["pixel_values"].shape == (1, 3, INPUT_SIZE, INPUT_SIZE)


@patch("camera_search.adapters.onnx_classifier.InferenceSession")
@patch("camera_search.adapters.onnx_classifier.hf_hub_download")
def test_backend_load_downloads_model_and_config(
    mock_download: MagicMock, mock_session: MagicMock, tmp_path
) -> None:
    config = _write_config(tmp_path / "config.json", {"0": "backpack"})
    model = tmp_path / "model.onnx"

    def download(repo_id: str, filename: str, local_dir: str) -> str:
        return str(config if filename == "config.json" else model)

    mock_download.side_effect = download
    backend = OnnxClassifierBackend(
        repo_id="org/mobilenet",
        model_file="onnx/model.onnx",
        config_file="config.json",
        models_dir=str(tmp_path / "models"),
    )

    handle = backend.load()

    assert handle.labels == ["backpack"]
    assert handle.session is mock_session.return_value
    assert (tmp_path / "models").is_dir()
    assert mock_session.call_args.args[0] == str(model)
    assert mock_session.call_args.kwargs["providers"] == ["CPUExecutionProvider"]
    filenames = [call.kwargs["filename"] for call in mock_download.call_args_list]
    assert filenames == ["onnx/model.onnx", "config.json"]
