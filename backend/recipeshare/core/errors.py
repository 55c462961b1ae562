# 도메인 예외 + FastAPI 예외 핸들러 등록
# 서비스 계층은 HTTPException 대신 아래 예외를 던지고, 응답 변환은 여기서만 한다.

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from recipeshare.core.headers import apply_security_headers

log = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    message = "Server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


# 400
class ValidationError(AppError):
    status_code = 400
    message = "Validation failed"

class MissingRefreshToken(ValidationError):
    message = "Refresh token is required"


# 401
class AuthenticationError(AppError):
    status_code = 401
    message = "Authentication required"

class TokenExpired(AuthenticationError):
    message = "Token has expired"

class TokenInvalid(AuthenticationError):
    message = "Invalid token"

class RefreshRejected(AuthenticationError):
    message = "Invalid refresh token"

class InvalidCredentials(AuthenticationError):
    # 계정 없음/비밀번호 불일치를 구분하지 않는다
    status_code = 400
    message = "Invalid credentials"


# 403
class AuthorizationError(AppError):
    status_code = 403
    message = "Not authorized"

Forbidden = AuthorizationError


# 404
class NotFoundError(AppError):
    status_code = 404
    message = "Not found"


# 409 / 400
class ConflictError(AppError):
    status_code = 409
    message = "Conflict"

class DuplicateAccount(ConflictError):
    status_code = 400
    message = "User already exists"

class DuplicateSave(ConflictError):
    status_code = 400
    message = "Recipe already saved"


class RateLimitError(AppError):
    status_code = 429
    message = "Too many requests, please try again later."


class ServerError(AppError):
    status_code = 500


def _app_error(request: Request, exc: AppError) -> JSONResponse:
    body = {"detail": exc.message}
    if isinstance(exc, TokenExpired):
        body["expired"] = True  # 클라이언트가 refresh 여부를 판단
    if exc.status_code >= 500:
        log.error("%s %s -> %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=body)


def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    # FastAPI 기본 422 대신 400
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
        for e in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": "Validation failed", "errors": errors})


def _rate_limited(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    log.warning("rate limited: %s %s (%s)", request.method, request.url.path, exc.detail)
    return _app_error(request, RateLimitError(exc.detail))


def _unhandled(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled error on %s %s", request.method, request.url.path)
    # 이 응답은 http 미들웨어를 거치지 않으므로 헤더를 직접 붙인다
    response = JSONResponse(status_code=500, content={"detail": "Server error"})
    return apply_security_headers(response, request.url.path)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error)
    app.add_exception_handler(RequestValidationError, _request_validation)
    app.add_exception_handler(RateLimitExceeded, _rate_limited)
    app.add_exception_handler(Exception, _unhandled)
