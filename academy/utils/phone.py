from academy.core.config import settings


def digits(phone: str) -> str:
    return "".join(ch for ch in (phone or "").strip() if ch.isdigit())


def normalize_mobile(phone: str) -> str:
    """
    Local numbers are stored in international form without the plus sign:
    "077 123 4567" -> "94771234567". Empty input stays empty.
    """
    number = digits(phone)
    prefix = settings.phone_country_prefix
    if number and not number.startswith(prefix):
        if number.startswith("0"):
            number = number[1:]
        number = prefix + number
    return number
