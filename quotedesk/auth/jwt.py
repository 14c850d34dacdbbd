from datetime import datetime, timedelta, timezone

import jwt

from quotedesk.config import settings


def create_access_token(*, user_id: str, role: str) -> str:
    now = datetime.now(timezone.utc)
    exp_hours = int(getattr(settings, "jwt_exp_hours", 24))

    payload = {
        "sub": user_id,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=exp_hours)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
