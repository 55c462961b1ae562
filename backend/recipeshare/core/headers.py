# 공통 보안 헤더: 미들웨어와 500 핸들러가 같이 쓴다
from fastapi import Response

# 인증/사용자 응답은 캐시 금지
NO_STORE_PREFIXES = ("/auth/", "/user/")


def apply_security_headers(response: Response, path: str) -> Response:
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    if path.startswith(NO_STORE_PREFIXES):
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, proxy-revalidate"
        response.headers["Pragma"] = "no-cache"
    return response
