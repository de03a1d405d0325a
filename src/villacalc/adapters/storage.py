# src/villacalc/adapters/storage.py
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, TypeVar

import pandas as pd
from pydantic import BaseModel

M = TypeVar("M", bound=BaseModel)


def write_df(df: pd.DataFrame, path: str, index: bool = True) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    if path.endswith(".parquet"):
        df.to_parquet(path, index=index)
    else:
        df.to_csv(path, index=index)


def read_json(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def save_draft(model: BaseModel, path: str) -> None:
    """Persist an assumption set verbatim."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    Path(path).write_text(model.model_dump_json(indent=2), encoding="utf-8")


def load_draft(model_cls: type[M], path: str) -> M:
    return model_cls.model_validate_json(Path(path).read_text(encoding="utf-8"))
