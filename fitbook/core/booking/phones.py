"""
Phone number canonicalization.

Phone numbers are the trainee identity. Every comparison (login, roster
membership, attendance) goes through normalize_phone so that local
("050...") and international ("972 50...") forms match.
"""

import re
from typing import Optional
from urllib.parse import quote

COUNTRY_PREFIX = "972"
MIN_LOGIN_DIGITS = 9

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(phone: Optional[str]) -> str:
    """Digits only, with the country prefix replaced by a leading 0."""
    if not phone:
        return ""
    cleaned = _NON_DIGITS.sub("", phone)
    if cleaned.startswith(COUNTRY_PREFIX):
        cleaned = "0" + cleaned[len(COUNTRY_PREFIX):]
    return cleaned


def to_dialable(phone: Optional[str]) -> str:
    """International form for messaging links: 0501234567 -> 972501234567."""
    cleaned = normalize_phone(phone)
    if cleaned.startswith("0"):
        cleaned = COUNTRY_PREFIX + cleaned[1:]
    return cleaned


def same_phone(a: Optional[str], b: Optional[str]) -> bool:
    normalized = normalize_phone(a)
    return bool(normalized) and normalized == normalize_phone(b)


def is_valid_login_phone(phone: Optional[str]) -> bool:
    return len(normalize_phone(phone)) >= MIN_LOGIN_DIGITS


def whatsapp_link(phone: str, text: str = "") -> str:
    """wa.me link that opens a chat with the trainee, optionally prefilled."""
    link = f"https://wa.me/{to_dialable(phone)}"
    if text:
        link += f"?text={quote(text)}"
    return link
