"""ONNX Runtime image classifier backed by a HuggingFace-hosted MobileNet."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from huggingface_hub import hf_hub_download
from onnxruntime import InferenceSession, SessionOptions
from PIL import Image

from camera_search.services.classifier import ClassifierBackend, ModelHandle

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)

INPUT_SIZE = 224


@dataclass(frozen=True)
class OnnxModelHandle(ModelHandle):
    """Loaded inference session plus its label vocabulary."""

    session: InferenceSession
    labels: list[str]

    def classify(self, image: NDArray[np.uint8], top_k: int) -> list[dict[str, object]]:
        """Run inference and return the top-K labels with probabilities."""
        tensor = preprocess(image)
        input_name = self.session.get_inputs()[0].name
        (logits,) = self.session.run(None, {input_name: tensor})
        probabilities = softmax(np.asarray(logits, dtype=np.float32).reshape(-1))
        order = np.argsort(probabilities)[::-1][:top_k]
        return [
            {
                "className": self.labels[index]
                if index < len(self.labels)
                else str(index),
                "probability": float(probabilities[index]),
            }
            for index in order
        ]


class OnnxClassifierBackend(ClassifierBackend):
    """Downloads the model and its label config, then opens a session."""

    def __init__(
        self,
        repo_id: str,
        model_file: str,
        config_file: str,
        models_dir: str,
    ) -> None:
        self._repo_id = repo_id
        self._model_file = model_file
        self._config_file = config_file
        self._models_dir = Path(models_dir)

    def load(self) -> OnnxModelHandle:
        self._models_dir.mkdir(parents=True, exist_ok=True)
        model_path = self._download(self._model_file)
        config_path = self._download(self._config_file)
        labels = load_labels(config_path)

        opts = SessionOptions()
        opts.enable_mem_pattern = True
        opts.enable_mem_reuse = True
        session = InferenceSession(
            str(model_path),
            sess_options=opts,
            providers=["CPUExecutionProvider"],
        )
        logger.info("Loaded %s (%s labels)", self._repo_id, len(labels))
        return OnnxModelHandle(session=session, labels=labels)

    def _download(self, filename: str) -> Path:
        path = Path(
            hf_hub_download(
                repo_id=self._repo_id,
                filename=filename,
                local_dir=str(self._models_dir),
            )
        )
        logger.info("Fetched %s to %s", filename, path)
        return path


def load_labels(config_path: Path) -> list[str]:
    """Read ``id2label`` from a model config into an index-ordered list."""
    config = json.loads(config_path.read_text(encoding="utf-8"))
    id2label = config.get("id2label") or {}
    if not id2label:
        raise ValueError(f"No id2label mapping in {config_path}")
    size = max(int(key) for key in id2label) + 1
    labels = [str(index) for index in range(size)]
    for key, value in id2label.items():
        labels[int(key)] = str(value)
    return labels


def preprocess(image: NDArray[np.uint8]) -> NDArray[np.float32]:
    """Resize to the model input and scale RGB to [-1, 1] in NCHW order."""
    resized = Image.fromarray(image).convert("RGB").resize(
        (INPUT_SIZE, INPUT_SIZE), Image.Resampling.BILINEAR
    )
    array = np.asarray(resized, dtype=np.float32) / 127.5 - 1.0
    return np.transpose(array, (2, 0, 1))[np.newaxis, ...]


def softmax(logits: NDArray[np.float32]) -> NDArray[np.float32]:
    shifted = logits - np.max(logits)
    exp = np.exp(shifted)
    return exp / np.sum(exp)
