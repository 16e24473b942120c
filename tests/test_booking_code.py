"""
Booking reference code generation.
"""

import re
from datetime import date

from app.utils.booking_code import CODE_ALPHABET, generate_booking_code

CODE_RE = re.compile(r"^AX-\d{8}-[A-Z0-9]{4}$")


def test_code_format_uses_given_date():
    code = generate_booking_code(date(2026, 3, 9))
    assert code.startswith("AX-20260309-")
    assert CODE_RE.match(code)


def test_code_defaults_to_today():
    code = generate_booking_code()
    assert code.split("-")[1] == date.today().strftime("%Y%m%d")


def test_suffix_uses_unambiguous_alphabet():
    for _ in range(200):
        suffix = generate_booking_code().split("-")[2]
        assert len(suffix) == 4
        assert all(ch in CODE_ALPHABET for ch in suffix)
        assert not set(suffix) & {"0", "O", "1", "I"}
