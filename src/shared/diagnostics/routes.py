"""Diagnostic routes for checking the API and its MailerLite configuration."""

import json

from fastapi import APIRouter, HTTPException, Request, status

from src.shared.leads.config import get_mailerlite_api_key

router = APIRouter(prefix="/api", tags=["diagnostics"])

API_KEY_PREVIEW_LENGTH = 10


@router.get("/test")
async def test_get():
    return {"message": "Test API working"}


@router.post("/test")
async def test_post(request: Request):
    """Echo the JSON body back to the caller."""
    try:
        data = json.loads(await request.body())
    except (ValueError, UnicodeDecodeError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid request format."
        )
    return {"message": "Test POST working", "received": data}


@router.get("/test-env")
async def test_env():
    """
    Report whether MAILERLITE_API_KEY is present.
    Only the first few characters of the key are ever returned.
    """
    api_key = get_mailerlite_api_key()
    return {
        "hasApiKey": bool(api_key),
        "apiKeyLength": len(api_key) if api_key else 0,
        "apiKeyStart": api_key[:API_KEY_PREVIEW_LENGTH] + "..." if api_key else "none",
    }
