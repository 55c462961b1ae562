# IP당 요청 제한 (slowapi)
# 앱마다 create_app()에서 build_limiter()로 하나 만들어 app.state.limiter에 붙이고,
# 라우터 빌더가 같은 인스턴스로 @limiter.limit을 건다.

from slowapi import Limiter
from slowapi.util import get_remote_address

from recipeshare.core.config import Settings

LOGIN_MSG = "Too many login attempts from this IP, please try again later."
REGISTER_MSG = "Too many registration attempts from this IP, please try again later."
WRITE_MSG = "Too many requests from this IP, please try again later."


def build_limiter(cfg: Settings) -> Limiter:
    return Limiter(key_func=get_remote_address, storage_uri=cfg.RATE_LIMIT_STORAGE_URI)
