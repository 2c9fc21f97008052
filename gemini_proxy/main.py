import logging
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import GEMINI_ERROR_MODE, GEMINI_MODEL, LOG_LEVEL, get_api_key
from .llm import UpstreamStatusError, build_payload, generate_content

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger("gemini-proxy")
# httpx logs request URLs, which carry the API key.
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

SERVER_ERROR_MESSAGE = "An error occurred on the server."

app = FastAPI(title="Gemini Proxy API", version="0.1.0")


class PromptIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: Any = None
    is_json: Any = Field(default=None, alias="isJson")


class PromptOut(BaseModel):
    response: str


class ErrorOut(BaseModel):
    message: str


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorOut(message=message).model_dump())


def _is_truthy(value: Any) -> bool:
    # JSON flag semantics: empty arrays and objects still count as set.
    if isinstance(value, (list, dict)):
        return True
    return bool(value)


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        return _error(405, "Method Not Allowed")
    return await http_exception_handler(request, exc)


@app.get("/health")
async def health():
    return {"status": "ok", "model": GEMINI_MODEL, "error_mode": GEMINI_ERROR_MODE}


@app.api_route(
    "/api/gemini",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
)
async def gemini_endpoint(request: Request):
    if request.method != "POST":
        return _error(405, "Method Not Allowed")

    api_key = get_api_key()
    if not api_key:
        logger.error("GEMINI_API_KEY is not set")
        return _error(500, "API key is not configured.")

    try:
        body = PromptIn.model_validate(await request.json())
        payload = build_payload(body.prompt, _is_truthy(body.is_json))
        text = await generate_content(api_key, payload, error_mode=GEMINI_ERROR_MODE)
    except UpstreamStatusError as exc:
        return _error(exc.status_code, exc.message)
    except Exception:
        logger.exception("Error in proxy handler")
        return _error(500, SERVER_ERROR_MESSAGE)

    return PromptOut(response=text).model_dump()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8080)
