"""Predicates for the named string formats.

Each predicate takes a string and returns True when it is well formed. The
string schema wraps them into ``format`` assertions.
"""

from __future__ import annotations

import base64
import binascii
import ipaddress
import re
import uuid
from typing import Callable, Dict
from urllib.parse import urlparse

import phonenumbers
from email_validator import EmailNotValidError, validate_email
from phonenumbers import NumberParseException

HEX_PATTERN = re.compile(r"^(0x|0h)?[0-9a-f]+$", re.IGNORECASE)
MD5_PATTERN = re.compile(r"^[a-f0-9]{32}$", re.IGNORECASE)
SHA1_PATTERN = re.compile(r"^[a-f0-9]{40}$", re.IGNORECASE)
ASCII_PATTERN = re.compile(r"^[\x00-\x7F]+$")
BASE64_PATTERN = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")
LOCALE_PATTERN = re.compile(
    r"^[A-Za-z]{2,3}([_-][A-Za-z]{4})?([_-]([A-Za-z]{2}|\d{3}))?$"
)
JWT_PATTERN = re.compile(r"^[A-Za-z0-9_-]{2,}\.[A-Za-z0-9_-]{2,}\.[A-Za-z0-9_-]*$")
LATLNG_PATTERN = re.compile(r"^\(?([-+]?\d+(?:\.\d+)?),\s*([-+]?\d+(?:\.\d+)?)\)?$")
SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:[-_][a-z0-9]+)*$")
DOMAIN_LABEL = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")
TLD_PATTERN = re.compile(r"^([a-z¡-￿]{2,}|xn--[a-z0-9-]{2,})$", re.IGNORECASE)
BTC_PATTERN = re.compile(r"^(bc1|[13])[a-zA-HJ-NP-Z0-9]{25,39}$")
ETH_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
SWIFT_PATTERN = re.compile(r"^[A-Z]{6}[A-Z0-9]{2}([A-Z0-9]{3})?$")
MONGO_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")
CALENDAR_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$")
ZIPCODE_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")

POSTAL_CODE_PATTERNS = {
    "US": r"^\d{5}(-\d{4})?$",
    "JP": r"^\d{3}-\d{4}$",
    "CA": r"^[ABCEGHJKLMNPRSTVXY]\d[ABCEGHJ-NPRSTV-Z][\s-]?\d[ABCEGHJ-NPRSTV-Z]\d$",
    "GB": r"^(gir\s?0aa|[a-z]{1,2}\d[\da-z]?\s?(\d[a-z]{2})?)$",
    "DE": r"^\d{5}$",
    "FR": r"^\d{2}\s?\d{3}$",
    "NL": r"^\d{4}\s?[a-z]{2}$",
    "BR": r"^\d{5}-?\d{3}$",
    "IN": r"^[1-9]\d{5}$",
    "AU": r"^\d{4}$",
    "SE": r"^[1-9]\d{2}\s?\d{2}$",
    "PL": r"^\d{2}-\d{3}$",
    "PT": r"^\d{4}-\d{3}$",
    "RU": r"^\d{6}$",
    "KR": r"^\d{3}(\d{2}|-\d{3})$",
}
POSTAL_CODE_REGEXES = {
    country: re.compile(pattern, re.IGNORECASE) for country, pattern in POSTAL_CODE_PATTERNS.items()
}

# Phone region names that span several countries sharing a calling code
PHONE_PLANS = {"NANP": 1}

URL_SCHEMES = ("http", "https", "ftp")


def is_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_phone(value: str, region: str | None = None) -> bool:
    """E.164 number, optionally restricted to a region or numbering plan."""
    if not value.startswith("+"):
        return False
    try:
        number = phonenumbers.parse(value, None)
    except NumberParseException:
        return False
    if not phonenumbers.is_valid_number(number):
        return False
    if region is None:
        return True
    if region in PHONE_PLANS:
        return number.country_code == PHONE_PLANS[region]
    return phonenumbers.is_valid_number_for_region(number, region.upper())


def is_hex(value: str) -> bool:
    return bool(HEX_PATTERN.match(value))


def is_md5(value: str) -> bool:
    return bool(MD5_PATTERN.match(value))


def is_sha1(value: str) -> bool:
    return bool(SHA1_PATTERN.match(value))


def is_ascii(value: str) -> bool:
    return bool(ASCII_PATTERN.match(value))


def is_base64(value: str) -> bool:
    if not value or len(value) % 4 or not BASE64_PATTERN.match(value):
        return False
    try:
        base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


def is_credit_card(value: str) -> bool:
    """Luhn checksum over 13 to 19 digits; spaces and dashes are ignored."""
    digits = re.sub(r"[\s-]", "", value)
    if not digits.isdigit() or not 13 <= len(digits) <= 19:
        return False
    total = 0
    for position, char in enumerate(reversed(digits)):
        digit = int(char)
        if position % 2:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def is_ip(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def is_country(value: str) -> bool:
    """ISO 3166-1 alpha-2 code, using the region table shipped with phonenumbers."""
    return len(value) == 2 and value.upper() in phonenumbers.SUPPORTED_REGIONS


def is_locale(value: str) -> bool:
    return bool(LOCALE_PATTERN.match(value))


def is_jwt(value: str) -> bool:
    return bool(JWT_PATTERN.match(value))


def is_latlng(value: str) -> bool:
    match = LATLNG_PATTERN.match(value)
    if not match:
        return False
    lat, lng = float(match.group(1)), float(match.group(2))
    return -90 <= lat <= 90 and -180 <= lng <= 180


def is_postal_code(value: str) -> bool:
    return any(regex.match(value) for regex in POSTAL_CODE_REGEXES.values())


def is_zipcode(value: str) -> bool:
    return bool(ZIPCODE_PATTERN.match(value))


def is_slug(value: str) -> bool:
    return bool(SLUG_PATTERN.match(value))


def is_domain(value: str) -> bool:
    """Fully qualified domain name with a top level domain."""
    if len(value) > 253:
        return False
    labels = value.rstrip(".").split(".")
    if len(labels) < 2 or not TLD_PATTERN.match(labels[-1]):
        return False
    return all(DOMAIN_LABEL.match(label) for label in labels[:-1])


def is_url(value: str) -> bool:
    """URL with an optional http(s)/ftp scheme and a fully qualified host."""
    if not value or any(char.isspace() for char in value):
        return False
    candidate = value if "://" in value else f"http://{value}"
    try:
        parsed = urlparse(candidate)
        hostname = parsed.hostname
        parsed.port  # raises ValueError on an invalid port
    except ValueError:
        return False
    if parsed.scheme not in URL_SCHEMES or not hostname:
        return False
    return is_domain(hostname) or is_ip(hostname) or hostname == "localhost"


def is_uuid(value: str) -> bool:
    try:
        parsed = uuid.UUID(value)
    except ValueError:
        return False
    return str(parsed) == value.lower()


def is_btc(value: str) -> bool:
    return bool(BTC_PATTERN.match(value))


def is_eth(value: str) -> bool:
    return bool(ETH_PATTERN.match(value))


def is_swift(value: str) -> bool:
    """BIC code: bank, country (validated), location and optional branch."""
    value = value.upper()
    if not SWIFT_PATTERN.match(value):
        return False
    return is_country(value[4:6])


def is_mongo_id(value: str) -> bool:
    return bool(MONGO_PATTERN.match(value))


def is_calendar_date(value: str) -> bool:
    return bool(CALENDAR_PATTERN.match(value))


# Format name -> (predicate, message template)
FORMATS: Dict[str, tuple[Callable[[str], bool], str]] = {
    "email": (is_email, "Must be an email address."),
    "hex": (is_hex, "Must be hexadecimal."),
    "md5": (is_md5, "Must be a hash in md5 format."),
    "sha1": (is_sha1, "Must be a hash in sha1 format."),
    "ascii": (is_ascii, "Must be ASCII."),
    "base64": (is_base64, "Must be base64."),
    "credit-card": (is_credit_card, "Must be a valid credit card number."),
    "ip": (is_ip, "Must be a valid IP address."),
    "country-code": (is_country, "Must be a valid country code."),
    "locale": (is_locale, "Must be a valid locale code."),
    "jwt": (is_jwt, "Must be a valid JWT token."),
    "latlng": (is_latlng, "Must be a valid lat,lng coordinate."),
    "postal-code": (is_postal_code, "Must be a valid postal code."),
    "zipcode": (is_zipcode, "Must be a valid zipcode."),
    "slug": (is_slug, "Must be a valid slug."),
    "url": (is_url, "Must be a valid URL."),
    "uuid": (is_uuid, "Must be a valid unique id."),
    "domain": (is_domain, "Must be a valid domain."),
    "bitcoin-address": (is_btc, "Must be a valid Bitcoin address."),
    "ethereum-address": (is_eth, "Must be a valid Ethereum address."),
    "swift-code": (is_swift, "Must be a valid SWIFT code."),
    "mongo-object-id": (is_mongo_id, "Must be a valid ObjectId."),
    "date": (is_calendar_date, "Must be an ISO-8601 calendar date."),
}
