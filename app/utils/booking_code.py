"""
Booking reference codes: AX-YYYYMMDD-XXXX
"""
import secrets
from datetime import date
from typing import Optional

# No 0/O or 1/I to keep codes readable over the phone
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_PREFIX = "AX"
SUFFIX_LENGTH = 4


def generate_booking_code(on_date: Optional[date] = None) -> str:
    on_date = on_date or date.today()
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{CODE_PREFIX}-{on_date.strftime('%Y%m%d')}-{suffix}"
