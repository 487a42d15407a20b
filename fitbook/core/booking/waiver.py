"""
Digital health waiver signing.
"""

import datetime as dt
from dataclasses import replace
from typing import Optional
from uuid import uuid4

from .errors import WaiverError
from .models import User

DEFAULT_MAX_FILE_BYTES = 2 * 1024 * 1024


def sign_waiver(
    user: User,
    accepted: bool,
    now: dt.datetime,
    file_data: Optional[str] = None,
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
) -> User:
    """
    Record the trainee's signature.

    The signature is a fresh token plus the signing time. An uploaded
    declaration file (data URL or base64 text) is kept inline on the user.
    """
    if not accepted:
        raise WaiverError("The health declaration must be accepted before signing")

    if file_data is not None:
        file_data = file_data.strip()
        if not file_data:
            raise WaiverError("Uploaded declaration file is empty")
        if len(file_data.encode("utf-8")) > max_file_bytes:
            raise WaiverError(
                f"Uploaded declaration file exceeds {max_file_bytes // 1024} KB"
            )

    return replace(
        user,
        health_declaration_date=now,
        health_declaration_id=uuid4().hex,
        health_declaration_file=file_data if file_data is not None else user.health_declaration_file,
    )
