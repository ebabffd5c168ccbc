"""
Model file loading
"""

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import yaml
from pydantic import ValidationError

from risk_thinker.assembly import ModelValidationError, assemble_model
from risk_thinker.models import Model
from risk_thinker.schemas import ModelInput
from risk_thinker.severity import SeverityWeights

logger = logging.getLogger(__name__)


def read_model_input(path: Union[str, Path]) -> ModelInput:
    """
    Read a YAML model file into input records.

    Args:
        path: Path to the model file

    Returns:
        Decoded ModelInput

    Raises:
        FileNotFoundError: if the file does not exist
        ModelValidationError: if the file is not valid YAML or has the wrong shape
    """
    model_path = Path(path)
    if not model_path.exists():
        raise FileNotFoundError(f"Model file not found: {model_path}")

    try:
        with model_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ModelValidationError(f"Unable to parse model file {model_path}: {e}") from e

    if not isinstance(data, dict):
        raise ModelValidationError(f"Model file {model_path} must contain a mapping")

    try:
        return ModelInput.model_validate(data)
    except ValidationError as e:
        raise ModelValidationError(f"Invalid model file {model_path}: {e}") from e


def load_model(
    path: Union[str, Path],
    rules: Sequence = (),
    severity_weights: Optional[SeverityWeights] = None,
) -> Model:
    """Read and assemble a model file in one step."""
    model_input = read_model_input(path)
    logger.info("Loaded model file %s", path)
    return assemble_model(model_input, rules, severity_weights)
