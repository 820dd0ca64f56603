# forecast_app/services/config_form.py

"""
Editable model parameters.

Working values are kept for every field of both variants, as typed by the
user, so toggling between CNN and LSTM never loses what was entered. Values
only become a ModelConfig at submit time, after integer coercion.
"""
from __future__ import annotations
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from forecast_app.errors import ConfigurationIncomplete, InvalidParameter
from forecast_app.models import (
    ALL_FIELDS, COMMON_FIELDS, MODEL_TYPES, VARIANT_FIELDS, VARIANT_TYPES,
    CnnParams, CommonParams, LstmParams, ModelConfig, default_values, visible_fields,
)

FIELD_LABELS: Dict[str, str] = {
    "sequence_length": "Sequence Length",
    "dense_units": "Dense Units",
    "epochs": "Epochs",
    "num_filters": "Number of Filters",
    "kernel_size": "Kernel Size",
    "lstm_units": "LSTM Units",
}

def coerce_positive_int(raw: Any) -> Optional[int]:
    """int (not bool), integral float, or a string of digits → int > 0; anything else → None"""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not raw.is_integer():
            return None
        value = int(raw)
    elif isinstance(raw, str):
        s = raw.strip()
        if s.startswith("+"):
            s = s[1:]
        if not s.isdigit() or not s.isascii():
            return None
        value = int(s)
    else:
        return None
    return value if value > 0 else None


class ModelConfigForm:
    def __init__(self, model_type: str = "cnn", target_column: Optional[str] = None):
        self.values: Dict[str, Any] = dict(default_values())
        self.model_type = "cnn"
        self.target_column = target_column
        self.set_model_type(model_type)

    # ---- mutation ------------------------------------------------------
    def set_model_type(self, model_type: str) -> None:
        if model_type not in MODEL_TYPES:
            raise InvalidParameter(f"Unknown model type: {model_type}")
        self.model_type = model_type

    def set_param(self, name: str, raw: Any) -> None:
        if name not in ALL_FIELDS:
            raise InvalidParameter(f"Unknown parameter: {name}")
        self.values[name] = raw

    def set_target_column(self, column: Optional[str]) -> None:
        self.target_column = column or None

    def reset(self, target_column: Optional[str] = None) -> None:
        self.values = dict(default_values())
        self.model_type = "cnn"
        self.target_column = target_column

    # ---- derivation ----------------------------------------------------
    def visible_fields(self) -> Tuple[str, ...]:
        return visible_fields(self.model_type)

    def hidden_fields(self) -> Tuple[str, ...]:
        shown = set(self.visible_fields())
        return tuple(f for f in ALL_FIELDS if f not in shown)

    def field_errors(self, columns: Sequence[str]) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        if not self.target_column or self.target_column not in columns:
            errors["target_column"] = "Select a target column"
        for f in self.visible_fields():
            if coerce_positive_int(self.values.get(f)) is None:
                errors[f] = f"{FIELD_LABELS[f]} must be a positive integer"
        return errors

    def submit(self, columns: Sequence[str]) -> ModelConfig:
        errors = self.field_errors(columns)
        if "target_column" in errors:
            raise ConfigurationIncomplete(details={"target_column": self.target_column})
        if errors:
            raise InvalidParameter("; ".join(errors.values()), details={"fields": sorted(errors)})

        ints = {f: coerce_positive_int(self.values[f]) for f in self.visible_fields()}
        common = CommonParams(**{f: ints[f] for f in COMMON_FIELDS})
        variant = VARIANT_TYPES[self.model_type](**{f: ints[f] for f in VARIANT_FIELDS[self.model_type]})
        return ModelConfig(target_column=self.target_column, common=common, variant=variant)

    def inactive_variant(self) -> Union[CnnParams, LstmParams]:
        """Retained values of the hidden variant; unusable entries fall back to that field's default."""
        other = next(mt for mt in MODEL_TYPES if mt != self.model_type)
        cls = VARIANT_TYPES[other]
        defaults = cls()
        kwargs = {}
        for f in VARIANT_FIELDS[other]:
            v = coerce_positive_int(self.values.get(f))
            kwargs[f] = v if v is not None else getattr(defaults, f)
        return cls(**kwargs)
