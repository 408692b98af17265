"""
Credential rotation endpoint (operator only, guarded by `X-API-Key`).
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field, StrictStr
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from api.auth import require_api_key
from api.deps import CredentialStoreDep
from nf_metadata.errors import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cookies"])


class CookiesUpdate(BaseModel):
    cookies: StrictStr = Field(min_length=1)


class CookiesUpdateResult(BaseModel):
    success: bool
    message: str


@router.post("/cookies", response_model=CookiesUpdateResult, dependencies=[Depends(require_api_key)])
async def update_cookies(request: Request, store: CredentialStoreDep) -> dict:
    """Replace the stored upstream session cookies (last write wins)."""
    try:
        body = await request.json()
    except ValueError as exc:
        raise ValidationError("Invalid JSON body") from exc

    try:
        update = CookiesUpdate.model_validate(body)
    except PydanticValidationError as exc:
        raise ValidationError("cookies field is required") from exc

    await run_in_threadpool(store.update, update.cookies)
    return {"success": True, "message": "Cookies updated successfully"}
