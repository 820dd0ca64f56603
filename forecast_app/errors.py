# forecast_app/errors.py

"""
Error taxonomy for the upload / preview / training flow.
Each error carries the single human-readable message shown in the UI.
"""
from __future__ import annotations
from typing import Any, Dict, Optional


class ForecastAppError(Exception):
    default_message = "Unexpected error"
    code = "INTERNAL_ERROR"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class NoFileSelected(ForecastAppError):
    default_message = "Please select a file first."
    code = "NO_FILE_SELECTED"


class UploadError(ForecastAppError):
    default_message = "File upload failed"
    code = "UPLOAD_FAILED"


class PreviewError(ForecastAppError):
    default_message = "Failed to get data preview"
    code = "PREVIEW_FAILED"


class ConfigurationIncomplete(ForecastAppError):
    default_message = "Please upload a file and select a target column first."
    code = "CONFIGURATION_INCOMPLETE"


class InvalidParameter(ForecastAppError):
    default_message = "Invalid model parameter"
    code = "INVALID_PARAMETER"


class TrainingError(ForecastAppError):
    default_message = "Model training failed"
    code = "TRAINING_FAILED"
