from __future__ import annotations

import re
import secrets
import time

from sqlalchemy import String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

OBJECT_ID_LENGTH = 24
_OBJECT_ID_RE = re.compile(r"[0-9a-fA-F]{24}")


def new_object_id() -> str:
    """24-char hex id: 4-byte creation timestamp followed by 8 random bytes."""
    return f"{int(time.time()) & 0xFFFFFFFF:08x}{secrets.token_hex(8)}"


def is_object_id(value: object) -> bool:
    return isinstance(value, str) and _OBJECT_ID_RE.fullmatch(value) is not None


class Base(DeclarativeBase):
    pass


class ObjectIdMixin:
    id: Mapped[str] = mapped_column(String(OBJECT_ID_LENGTH), primary_key=True, default=new_object_id)
