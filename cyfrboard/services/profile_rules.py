# cyfrboard/services/profile_rules.py
# Rev 0.2.0
from __future__ import annotations

import re
from typing import Optional

from cyfrboard.models.entities import Profile

# e.g. "+971 50 000 00 00", "+375291234567"
PHONE_RE = re.compile(r"^\+?[0-9\s\-()]{7,20}$")
MIN_PASSWORD_LENGTH = 6


def validate_phone(raw: str) -> tuple[Optional[str], Optional[str]]:
    """Returns (normalized phone, error message); exactly one of them is None."""
    phone = (raw or "").strip()
    if not phone:
        return None, "Please enter a phone number."
    if not PHONE_RE.match(phone):
        return None, "Enter a valid phone number (for example +971 50 000 00 00)."
    return phone, None


def placeholder_label(user_id: str) -> str:
    return f"User {user_id[:8]}"


def display_name(profile: Optional[Profile], user_id: str) -> str:
    # stored order: surname (first_name) then given name (second_name)
    if profile is None:
        return placeholder_label(user_id)
    parts = [p.strip() for p in (profile.first_name, profile.second_name) if p and p.strip()]
    return " ".join(parts) if parts else placeholder_label(user_id)
