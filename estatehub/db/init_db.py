from __future__ import annotations

import logging

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session, sessionmaker

import estatehub.models  # noqa: F401  (register tables on Base.metadata)
from estatehub.db.base import Base
from estatehub.models.enums import Role
from estatehub.models.identity import User
from estatehub.security.passwords import hash_password
from estatehub.settings import Settings

logger = logging.getLogger(__name__)


def init_db(engine: Engine, settings: Settings) -> None:
    """
    Create tables and, when configured, seed a bootstrap Admin.

    Admins cannot self-register by default, so a fresh deployment needs
    `ESTATEHUB_BOOTSTRAP_ADMIN_EMAIL` / `ESTATEHUB_BOOTSTRAP_ADMIN_PASSWORD`
    to get its first one.
    """

    Base.metadata.create_all(bind=engine)

    if not settings.bootstrap_admin_email or settings.bootstrap_admin_password is None:
        return

    with sessionmaker(bind=engine, class_=Session)() as db:
        if _has_admin(db):
            return
        _seed_admin(db, settings.bootstrap_admin_email, settings.bootstrap_admin_password.get_secret_value())


def _has_admin(db: Session) -> bool:
    return db.execute(select(User.id).where(User.role == Role.ADMIN).limit(1)).first() is not None


def _seed_admin(db: Session, email: str, password: str) -> None:
    admin = User(
        name="Administrator",
        email=email.strip().lower(),
        role=Role.ADMIN,
        password_hash=hash_password(password),
        is_active=True,
    )
    db.add(admin)
    db.commit()
    logger.info("Bootstrap admin created id=%s", admin.id)
