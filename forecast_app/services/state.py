# forecast_app/services/state.py

"""
Session state machine behind the forecast page.

    Idle → FileChosen → Uploading → PreviewReady → Training → ResultsReady
                          └──────→ Failed ←──────────┘

- one network operation at a time: the busy flag is taken in a scope and
  always released; any trigger that arrives while busy is ignored
- config edits (model type / params / target) never change the state
- from Failed, retry() repeats the action that failed
"""
from __future__ import annotations
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, Optional, Tuple

from forecast_app.errors import (
    ConfigurationIncomplete, ForecastAppError, NoFileSelected, TrainingError, UploadError,
)
from forecast_app.models import Dataset, TrainingResult
from forecast_app.services.config_form import ModelConfigForm
from forecast_app.ui.clients import api_client as api
from forecast_app.ui.clients.api_client import SelectedFile
from forecast_app.utils.logger import get_logger

logger = get_logger(__name__)


class LifecycleState(str, Enum):
    IDLE = "Idle"
    FILE_CHOSEN = "FileChosen"
    UPLOADING = "Uploading"
    PREVIEW_READY = "PreviewReady"
    TRAINING = "Training"
    RESULTS_READY = "ResultsReady"
    FAILED = "Failed"


STATUS_LABELS = {
    LifecycleState.IDLE: ("no file", "secondary"),
    LifecycleState.FILE_CHOSEN: ("file selected", "info"),
    LifecycleState.UPLOADING: ("uploading", "primary"),
    LifecycleState.PREVIEW_READY: ("ready", "success"),
    LifecycleState.TRAINING: ("training", "primary"),
    LifecycleState.RESULTS_READY: ("results", "success"),
    LifecycleState.FAILED: ("failed", "danger"),
}


@dataclass(frozen=True)
class SessionView:
    state: LifecycleState
    busy: bool
    error: Optional[str]
    file_name: Optional[str]
    can_upload: bool
    can_train: bool
    can_retry: bool
    show_preview: bool
    show_config: bool
    show_results: bool
    visible_fields: Tuple[str, ...]
    status_label: str
    status_color: str


UploadFn = Callable[[SelectedFile], Dataset]
TrainFn = Callable[..., TrainingResult]


class AppStateController:
    def __init__(self, upload: Optional[UploadFn] = None, train: Optional[TrainFn] = None):
        self._upload = upload or api.upload_and_preview
        self._train = train or api.train
        self._lock = threading.Lock()

        self.state = LifecycleState.IDLE
        self.file: Optional[SelectedFile] = None
        self.dataset: Optional[Dataset] = None
        self.form = ModelConfigForm()
        self.result: Optional[TrainingResult] = None
        self.error: Optional[str] = None
        self._edit_error: Optional[str] = None
        self.busy = False
        self.failed_action: Optional[str] = None
        self.revision = 0

    # ---- internals ------------------------------------------------------
    def _changed(self) -> None:
        self.revision += 1

    def _set_state(self, new: LifecycleState) -> None:
        if new is not self.state:
            logger.info("state %s -> %s", self.state.value, new.value)
        self.state = new
        self._changed()

    def _set_error(self, message: Optional[str]) -> None:
        self.error = message
        self._changed()

    def _try_acquire(self) -> bool:
        with self._lock:
            if self.busy:
                return False
            self.busy = True
            return True

    @contextmanager
    def _busy_scope(self) -> Iterator[None]:
        try:
            yield
        finally:
            with self._lock:
                self.busy = False
            self._changed()

    def _fail(self, action: str, message: str) -> None:
        logger.warning("%s failed: %s", action, message)
        self.failed_action = action
        self.error = message
        self._set_state(LifecycleState.FAILED)

    def _ignored(self, trigger: str) -> bool:
        logger.info("ignoring %s: another request is in flight", trigger)
        return False

    # ---- transitions ----------------------------------------------------
    def select_file(self, file: Optional[SelectedFile]) -> bool:
        if self.busy:
            return self._ignored("select-file")
        if file is None:
            return False
        self.file = file
        self.error = None
        logger.info("file selected: %s (%d bytes)", file.name, len(file.content))
        self._set_state(LifecycleState.FILE_CHOSEN)
        return True

    def report_error(self, message: str) -> None:
        """Surface an error raised outside the controller (e.g. an unreadable file) without a transition."""
        logger.warning("error reported: %s", message)
        self._set_error(message)

    def upload(self) -> bool:
        if self.file is None:
            if self.busy:
                return self._ignored("upload")
            self._set_error(NoFileSelected().message)
            return False
        if not self._try_acquire():
            return self._ignored("upload")

        with self._busy_scope():
            self.error = None
            self._set_state(LifecycleState.UPLOADING)
            try:
                dataset = self._upload(self.file)
            except ForecastAppError as e:
                self._fail("upload", e.message)
                return True
            except Exception:
                logger.exception("upload crashed")
                self._fail("upload", UploadError.default_message)
                return True

            self.dataset = dataset
            self.form.reset(dataset.default_target)
            self.result = None
            self.failed_action = None
            self._set_state(LifecycleState.PREVIEW_READY)
        return True

    def _edit(self, trigger: str, apply: Callable[[], None]) -> bool:
        if self.busy:
            return self._ignored(trigger)
        if self.dataset is None:
            logger.debug("%s ignored: no dataset", trigger)
            return False
        try:
            apply()
        except ForecastAppError as e:
            self._edit_error = e.message
            self._set_error(e.message)
            return False
        # 편집 오류만 지움 (업로드/학습 오류는 유지)
        if self._edit_error is not None and self.error is self._edit_error:
            self.error = None
        self._edit_error = None
        self._changed()
        return True

    def change_model_type(self, model_type: str) -> bool:
        return self._edit("change-model-type", lambda: self.form.set_model_type(model_type))

    def change_param(self, name: str, raw: Any) -> bool:
        return self._edit("change-param", lambda: self.form.set_param(name, raw))

    def change_target_column(self, column: Optional[str]) -> bool:
        return self._edit("change-target-column", lambda: self.form.set_target_column(column))

    def submit_training(self) -> bool:
        if self.busy:
            return self._ignored("submit-training")
        if self.dataset is None:
            self._set_error(ConfigurationIncomplete().message)
            return False
        try:
            config = self.form.submit(self.dataset.columns)
        except ForecastAppError as e:
            logger.info("training blocked: %s", e.message)
            self._set_error(e.message)
            return False
        if not self._try_acquire():
            return self._ignored("submit-training")

        with self._busy_scope():
            self.error = None
            self._set_state(LifecycleState.TRAINING)
            try:
                result = self._train(self.dataset.filename, config, self.form.inactive_variant())
            except ForecastAppError as e:
                self._fail("train", e.message)
                return True
            except Exception:
                logger.exception("training crashed")
                self._fail("train", TrainingError.default_message)
                return True

            self.result = result
            self.failed_action = None
            self._set_state(LifecycleState.RESULTS_READY)
        return True

    def retry(self) -> bool:
        if self.busy:
            return self._ignored("retry")
        if self.state is not LifecycleState.FAILED or not self.failed_action:
            return False
        logger.info("retrying %s", self.failed_action)
        if self.failed_action == "upload":
            return self.upload()
        return self.submit_training()

    # ---- derived view ---------------------------------------------------
    def view(self) -> SessionView:
        label, color = STATUS_LABELS[self.state]
        has_dataset = self.dataset is not None
        return SessionView(
            state=self.state,
            busy=self.busy,
            error=self.error,
            file_name=self.file.name if self.file else None,
            can_upload=self.file is not None and not self.busy,
            can_train=has_dataset and not self.busy,
            can_retry=self.state is LifecycleState.FAILED and bool(self.failed_action) and not self.busy,
            show_preview=has_dataset,
            show_config=has_dataset,
            show_results=self.result is not None,
            visible_fields=self.form.visible_fields(),
            status_label=label,
            status_color=color,
        )


_controller: Optional[AppStateController] = None
_controller_lock = threading.Lock()

def get_controller() -> AppStateController:
    """Process-wide controller used by the Dash callbacks (single-user app)."""
    global _controller
    with _controller_lock:
        if _controller is None:
            _controller = AppStateController()
        return _controller

def reset_controller(controller: Optional[AppStateController] = None) -> AppStateController:
    global _controller
    with _controller_lock:
        _controller = controller or AppStateController()
        return _controller
