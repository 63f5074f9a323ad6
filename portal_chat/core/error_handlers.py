# portal_chat/core/error_handlers.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

from .exceptions import ChatError

logger = logging.getLogger(__name__)

async def chat_exception_handler(request: Request, exc: ChatError):
    """Handle chat service exceptions"""
    if exc.status_code >= 500:
        logger.error(f"Chat error: {exc.message} - Path: {request.url.path}")
    else:
        logger.info(f"{exc.__class__.__name__}: {exc.message} - Path: {request.url.path}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": exc.message, "type": exc.__class__.__name__},
        headers=headers,
    )

async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions"""
    logger.exception(f"Unexpected error: {exc} - Path: {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"ok": False, "error": "Internal server error", "type": "InternalError"}
    )

def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(ChatError, chat_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
