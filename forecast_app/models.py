# forecast_app/models.py

from __future__ import annotations
import base64
import binascii
from typing import Annotated, Any, Dict, Literal, Optional, Tuple, Union
from pydantic import (
    BaseModel, ConfigDict, Field, NonNegativeFloat, PositiveInt, field_validator, model_validator,
)

ModelType = Literal["cnn", "lstm"]
MODEL_TYPES: Tuple[str, ...] = ("cnn", "lstm")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())


# ---- Dataset -----------------------------------------------------------
class DatasetPreview(_Frozen):
    rows: int = Field(ge=0)
    cols: int = Field(ge=0)
    columns: Tuple[str, ...]
    head: Tuple[Dict[str, Any], ...] = ()

    @classmethod
    def from_payload(cls, payload: Any) -> "DatasetPreview":
        """
        /preview/{filename} → {"info": {"shape": [rows, cols], "columns": [...]}, "head": [{...}, ...]}
        """
        if not isinstance(payload, dict):
            raise ValueError("preview body must be an object")
        info = payload.get("info")
        if not isinstance(info, dict):
            raise ValueError("preview body has no info")
        shape = info.get("shape")
        if not isinstance(shape, (list, tuple)) or len(shape) != 2:
            raise ValueError("info.shape must be [rows, cols]")
        columns = info.get("columns")
        if not isinstance(columns, list):
            raise ValueError("info.columns must be a list")
        head = payload.get("head")
        if not isinstance(head, list):
            raise ValueError("head must be a list of rows")
        return cls(rows=shape[0], cols=shape[1], columns=columns, head=head)


class Dataset(_Frozen):
    filename: str = Field(min_length=1)
    columns: Tuple[str, ...]
    preview: DatasetPreview

    @field_validator("columns")
    @classmethod
    def _columns_non_empty_and_distinct(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        if not v:
            raise ValueError("dataset has no columns")
        if len(set(v)) != len(v):
            raise ValueError("dataset columns must be distinct")
        return v

    @property
    def default_target(self) -> str:
        return self.columns[0]


# ---- Model configuration -----------------------------------------------
class CommonParams(_Frozen):
    sequence_length: PositiveInt = 10
    dense_units: PositiveInt = 64
    epochs: PositiveInt = 50


class CnnParams(_Frozen):
    model_type: Literal["cnn"] = "cnn"
    num_filters: PositiveInt = 64
    kernel_size: PositiveInt = 3


class LstmParams(_Frozen):
    model_type: Literal["lstm"] = "lstm"
    lstm_units: PositiveInt = 50


VariantParams = Annotated[Union[CnnParams, LstmParams], Field(discriminator="model_type")]
VARIANT_TYPES = {"cnn": CnnParams, "lstm": LstmParams}

COMMON_FIELDS: Tuple[str, ...] = ("sequence_length", "dense_units", "epochs")
VARIANT_FIELDS: Dict[str, Tuple[str, ...]] = {
    "cnn": ("num_filters", "kernel_size"),
    "lstm": ("lstm_units",),
}
ALL_FIELDS: Tuple[str, ...] = COMMON_FIELDS + VARIANT_FIELDS["cnn"] + VARIANT_FIELDS["lstm"]


def visible_fields(model_type: str) -> Tuple[str, ...]:
    """Common fields first, then the fields of the given variant."""
    if model_type not in VARIANT_FIELDS:
        raise ValueError(f"unknown model type: {model_type!r}")
    return COMMON_FIELDS + VARIANT_FIELDS[model_type]


def default_values() -> Dict[str, int]:
    out: Dict[str, int] = dict(CommonParams().model_dump())
    for cls in VARIANT_TYPES.values():
        out.update({k: v for k, v in cls().model_dump().items() if k != "model_type"})
    return out


class ModelConfig(_Frozen):
    target_column: str = Field(min_length=1)
    common: CommonParams = Field(default_factory=CommonParams)
    variant: VariantParams = Field(default_factory=CnnParams)

    @property
    def model_type(self) -> str:
        return self.variant.model_type


class TrainingParams(_Frozen):
    """Wire form of the params object: all six keys, whatever the model type."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sequence_length: PositiveInt = Field(alias="sequenceLength")
    epochs: PositiveInt
    dense_units: PositiveInt = Field(alias="denseUnits")
    num_filters: PositiveInt = Field(alias="numFilters")
    kernel_size: PositiveInt = Field(alias="kernelSize")
    lstm_units: PositiveInt = Field(alias="lstmUnits")

    @classmethod
    def from_config(cls, config: ModelConfig, inactive: Optional[Union[CnnParams, LstmParams]] = None) -> "TrainingParams":
        cnn = config.variant if isinstance(config.variant, CnnParams) else inactive
        lstm = config.variant if isinstance(config.variant, LstmParams) else inactive
        if not isinstance(cnn, CnnParams):
            cnn = CnnParams()
        if not isinstance(lstm, LstmParams):
            lstm = LstmParams()
        return cls(
            sequence_length=config.common.sequence_length,
            epochs=config.common.epochs,
            dense_units=config.common.dense_units,
            num_filters=cnn.num_filters,
            kernel_size=cnn.kernel_size,
            lstm_units=lstm.lstm_units,
        )


# ---- Training result ---------------------------------------------------
class TrainingHistory(_Frozen):
    loss: Tuple[float, ...]
    val_loss: Tuple[float, ...]

    @model_validator(mode="after")
    def _same_length(self) -> "TrainingHistory":
        if len(self.loss) != len(self.val_loss):
            raise ValueError(f"loss and val_loss differ in length ({len(self.loss)} vs {len(self.val_loss)})")
        return self


class TrainingResult(_Frozen):
    mse: NonNegativeFloat
    rmse: NonNegativeFloat
    plot: str  # base64 PNG, 그대로 보관
    history: TrainingHistory

    @field_validator("plot")
    @classmethod
    def _plot_is_base64(cls, v: str) -> str:
        try:
            base64.b64decode(v, validate=True)
        except binascii.Error as e:
            raise ValueError(f"plot is not base64: {e}") from e
        return v

    @classmethod
    def from_payload(cls, payload: Any) -> "TrainingResult":
        if not isinstance(payload, dict):
            raise ValueError("training body must be an object")
        return cls.model_validate(payload)

    @property
    def plot_bytes(self) -> bytes:
        return base64.b64decode(self.plot)

    @property
    def n_epochs(self) -> int:
        return len(self.history.loss)
