"""Collect request parameters the same way for GET, form POST and JSON POST."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from fastapi import Request
from starlette.datastructures import UploadFile

from medtools.pipeline.core.exceptions import ValidationError


@dataclass
class RequestParams:
    method: str
    values: dict[str, str] = field(default_factory=dict)
    files: dict[str, UploadFile] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def is_api(self) -> bool:
        """Browser forms send a ``submit`` field; anything else is an API call."""
        return "submit" not in self.values

    def get(self, name: str, default: str = "") -> str:
        return self.values.get(name, default)

    def file(self, name: Optional[str]) -> Optional[UploadFile]:
        return self.files.get(name) if name else None


async def collect_params(request: Request) -> RequestParams:
    """Merge query string and body fields; body fields win."""
    params = RequestParams(
        method=request.method,
        values=dict(request.query_params),
        cookies=dict(request.cookies),
    )
    if request.method != "POST":
        return params

    content_type = request.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationError(message="Invalid JSON request body.", field="body") from e
        if not isinstance(body, dict):
            raise ValidationError(message="Invalid JSON request body.", field="body")
        params.body = body
        params.values.update(
            {key: str(value) for key, value in body.items() if isinstance(value, (str, int, float))}
        )
        return params

    if "form" in content_type:
        form = await request.form()
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                params.files[key] = value
            else:
                params.values[key] = value
    return params
