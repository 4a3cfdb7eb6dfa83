import re
import secrets
import string
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from evalo.core.config import get_settings
from evalo.core.exceptions import CodeGenerationError, InvalidCodeError
from evalo.core.logging import get_logger
from evalo.models.event import Event, EventStatus

settings = get_settings()
logger = get_logger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 4
CODE_PATTERN = re.compile(r"^[A-Z0-9]{4}$")


def generate_code() -> str:
    """Draw a 4-symbol entry code uniformly from A-Z0-9 (36**4 possibilities)"""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def normalize_code(raw: Optional[str]) -> str:
    """
    Normalise student input to the stored code form

    Raises:
        InvalidCodeError: input is not 4 letters/digits after trimming
    """
    code = (raw or "").strip().upper()
    if not CODE_PATTERN.match(code):
        raise InvalidCodeError("Invalid code format, expected 4 letters or digits")
    return code


async def is_code_in_use(db: AsyncSession, code: str) -> bool:
    """Whether an open event currently holds ``code``"""
    stmt = (
        select(Event.id)
        .where(Event.entry_code == code, Event.status == EventStatus.OPEN.value)
        .limit(1)
    )
    return (await db.execute(stmt)).scalar_one_or_none() is not None


async def assign_unique_code(db: AsyncSession, max_attempts: Optional[int] = None) -> str:
    """
    Generate a code not used by any open event

    Codes of closed or archived events may be handed out again, since
    students can only resolve codes of open events.

    Raises:
        CodeGenerationError: every attempt collided
    """
    attempts = max_attempts or settings.ENTRY_CODE_MAX_ATTEMPTS
    for attempt in range(1, attempts + 1):
        code = generate_code()
        if not await is_code_in_use(db, code):
            return code
        logger.debug(f"Entry code collision on attempt {attempt}")

    raise CodeGenerationError(
        f"No free entry code after {attempts} attempts",
        "CODE_SPACE_EXHAUSTED",
        {"attempts": attempts},
    )
