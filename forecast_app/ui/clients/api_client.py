# forecast_app/ui/clients/api_client.py

from __future__ import annotations
import base64
import binascii
import io
import urllib.parse as up
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

import requests
from pydantic import ValidationError

from forecast_app.config import settings
from forecast_app.errors import NoFileSelected, PreviewError, TrainingError, UploadError
from forecast_app.models import CnnParams, Dataset, DatasetPreview, LstmParams, ModelConfig, TrainingParams, TrainingResult
from forecast_app.utils.logger import get_logger

logger = get_logger(__name__)

# ---- 기본 경로 설정 ----------------------------------------------------
def _url(p: str) -> str:
    if not p.startswith("/"):
        p = "/" + p
    return f"{settings.api_root}{p}"

def _headers(extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    h = {"Accept": "application/json"}
    if extra:
        h.update(extra)
    return h

def _json_or_none(r: requests.Response) -> Any:
    try:
        return r.json()
    except ValueError:
        return None


@dataclass(frozen=True)
class SelectedFile:
    name: str
    content: bytes

    @classmethod
    def from_contents(cls, contents: Optional[str], filename: Optional[str]) -> "SelectedFile":
        """
        dcc.Upload contents ("data:<mime>;base64,<b64data>") → raw bytes
        """
        if not contents:
            raise NoFileSelected()
        if "," not in contents:
            raise NoFileSelected("Selected file could not be read.")
        _, b64data = contents.split(",", 1)
        try:
            raw = base64.b64decode(b64data)
        except (binascii.Error, ValueError):
            raise NoFileSelected("Selected file could not be read.") from None
        return cls(name=filename or "uploaded.csv", content=raw)


# ---- Upload / Preview --------------------------------------------------
def upload_file(file: SelectedFile) -> Tuple[str, List[str]]:
    """
    /upload 멀티파트 업로드 (field "file").
    응답: {"filename": "<server id>", "columns": [...]}
    """
    files = {"file": (file.name, io.BytesIO(file.content))}
    try:
        r = requests.post(_url("/upload"), files=files, timeout=settings.API_TIMEOUT, headers=_headers())
    except requests.RequestException as e:
        logger.warning("upload transport error: %s", e)
        raise UploadError(details={"reason": str(e)}) from e
    if not r.ok:
        logger.warning("upload rejected: status=%s", r.status_code)
        raise UploadError(details={"status": r.status_code})

    body = _json_or_none(r)
    if not isinstance(body, dict) or not body.get("filename") or not isinstance(body.get("columns"), list):
        logger.warning("upload body malformed: %r", body)
        raise UploadError(details={"body": body})
    columns = [str(c) for c in body["columns"]]
    if not columns:
        raise UploadError("Uploaded file has no columns")
    logger.info("uploaded %s as %s (%d columns)", file.name, body["filename"], len(columns))
    return str(body["filename"]), columns

def fetch_preview(filename: str) -> DatasetPreview:
    url = _url(f"/preview/{up.quote(filename, safe='')}")
    try:
        r = requests.get(url, timeout=settings.API_TIMEOUT, headers=_headers())
    except requests.RequestException as e:
        logger.warning("preview transport error: %s", e)
        raise PreviewError(details={"reason": str(e)}) from e
    if not r.ok:
        logger.warning("preview rejected: status=%s", r.status_code)
        raise PreviewError(details={"status": r.status_code})
    try:
        return DatasetPreview.from_payload(_json_or_none(r))
    except ValueError as e:
        logger.warning("preview body malformed: %s", e)
        raise PreviewError(details={"reason": str(e)}) from e

def upload_and_preview(file: SelectedFile) -> Dataset:
    """Upload, then preview the stored file. Either step failing fails the whole operation."""
    filename, columns = upload_file(file)
    preview = fetch_preview(filename)
    try:
        return Dataset(filename=filename, columns=columns, preview=preview)
    except ValidationError as e:
        raise UploadError("Uploaded file has duplicate column names", details={"columns": columns}) from e


# ---- Train -------------------------------------------------------------
def build_train_payload(
    filename: str,
    config: ModelConfig,
    inactive: Optional[Union[CnnParams, LstmParams]] = None,
) -> Dict[str, Any]:
    # 백엔드가 모델 타입에 맞지 않는 파라미터는 무시함 → 6개 키 모두 전송
    params = TrainingParams.from_config(config, inactive)
    return {
        "filename": filename,
        "targetColumn": config.target_column,
        "modelType": config.model_type,
        "params": params.model_dump(by_alias=True),
    }

def train(
    filename: str,
    config: ModelConfig,
    inactive: Optional[Union[CnnParams, LstmParams]] = None,
) -> TrainingResult:
    payload = build_train_payload(filename, config, inactive)
    logger.info("training %s on %s (target=%s)", config.model_type, filename, config.target_column)
    try:
        r = requests.post(_url("/train"), json=payload, timeout=settings.API_TRAIN_TIMEOUT, headers=_headers())
    except requests.RequestException as e:
        logger.warning("train transport error: %s", e)
        raise TrainingError(details={"reason": str(e)}) from e

    body = _json_or_none(r)
    if not r.ok:
        message = body.get("error") if isinstance(body, dict) else None
        logger.warning("train rejected: status=%s error=%r", r.status_code, message)
        raise TrainingError(message if isinstance(message, str) and message else None, details={"status": r.status_code})
    try:
        result = TrainingResult.from_payload(body)
    except ValueError as e:
        logger.warning("train body malformed: %s", e)
        raise TrainingError("Training response was malformed", details={"reason": str(e)}) from e
    logger.info("training done: mse=%.4f rmse=%.4f epochs=%d", result.mse, result.rmse, result.n_epochs)
    return result
