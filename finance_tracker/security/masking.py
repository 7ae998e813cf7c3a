"""Masking of secrets and PII before data reaches logs or API consumers"""

import re
from typing import Any, Iterable, Optional

# Keys that never appear unmasked (matched case-insensitively as substrings)
SENSITIVE_FIELDS = [
    "password",
    "passwordhash",
    "token",
    "accesstoken",
    "refreshtoken",
    "secret",
    "apikey",
    "privatekey",
    "creditcard",
    "cvv",
    "ssn",
    "socialsecuritynumber",
    "encryptionkey",
    "accountnumber",
    "account_number",
    "encryption_key",
    "api_key",
]

CREDIT_CARD_PATTERN = re.compile(r"\b\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}\b")
SSN_PATTERN = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")

MASK = "***"


def mask_string(value: str, show_last: int = 4) -> str:
    """Replace all but the last `show_last` characters with asterisks"""
    if not value or len(value) <= show_last:
        return MASK
    masked_length = max(3, len(value) - show_last)
    return "*" * masked_length + value[-show_last:]


def mask_credit_card(card_number: str) -> str:
    if not card_number:
        return MASK
    cleaned = re.sub(r"[\s-]", "", card_number)
    if len(cleaned) < 4:
        return MASK
    return f"****-****-****-{cleaned[-4:]}"


def mask_ssn(ssn: str) -> str:
    if not ssn:
        return MASK
    cleaned = ssn.replace("-", "")
    if len(cleaned) != 9:
        return MASK
    return f"***-**-{cleaned[-4:]}"


def mask_email(email: str) -> str:
    """Keep first and last character of the local part and the whole domain"""
    if not email or "@" not in email:
        return "***@***.***"
    local_part, _, domain = email.partition("@")
    masked_local = local_part[0] + MASK + local_part[-1] if len(local_part) > 2 else MASK
    return f"{masked_local}@{domain}"


def mask_ip_address(ip: str) -> str:
    """Keep the first octet only"""
    if not ip:
        return "***.***.***.***"
    parts = ip.split(".")
    if len(parts) != 4:
        return "***.***.***.***"
    return f"{parts[0]}.***.***.***"


def _is_sensitive_key(key: str, fields: Iterable[str]) -> bool:
    lower_key = key.lower()
    return any(field.lower() in lower_key for field in fields)


def _mask_sensitive_value(key: str, value: Any) -> Any:
    if not isinstance(value, str):
        return MASK
    lower_key = key.lower()
    if "card" in lower_key or "credit" in lower_key:
        return mask_credit_card(value)
    if "ssn" in lower_key or "social" in lower_key:
        return mask_ssn(value)
    if "email" in lower_key:
        return mask_email(value)
    return mask_string(value)


def mask_sensitive_data(
    data: Any,
    mask_emails: bool = False,
    mask_ips: bool = False,
    custom_fields: Optional[Iterable[str]] = None,
) -> Any:
    """
    Recursively mask sensitive fields in dicts and lists.

    Sensitive keys are masked with a strategy picked from the key name
    (card, ssn, email, or generic). Optionally every email-looking string and
    every value under an "ip" key is masked as well. Non-container values are
    returned unchanged; the input is never mutated.
    """
    fields = SENSITIVE_FIELDS + list(custom_fields or [])

    if isinstance(data, (list, tuple)):
        return [mask_sensitive_data(item, mask_emails, mask_ips, custom_fields) for item in data]

    if not isinstance(data, dict):
        return data

    masked = {}
    for key, value in data.items():
        key_str = str(key)

        if _is_sensitive_key(key_str, fields):
            masked[key] = _mask_sensitive_value(key_str, value)
        elif mask_emails and isinstance(value, str) and "@" in value:
            masked[key] = mask_email(value)
        elif mask_ips and isinstance(value, str) and "ip" in key_str.lower():
            masked[key] = mask_ip_address(value)
        elif isinstance(value, (dict, list, tuple)):
            masked[key] = mask_sensitive_data(value, mask_emails, mask_ips, custom_fields)
        else:
            masked[key] = value

    return masked


def mask_sensitive_patterns_in_text(text: str) -> str:
    """Mask card numbers and SSNs embedded in free text"""
    if not text:
        return text
    masked = CREDIT_CARD_PATTERN.sub(lambda m: mask_credit_card(m.group(0)), text)
    return SSN_PATTERN.sub(lambda m: mask_ssn(m.group(0)), masked)


def contains_sensitive_data(data: Any) -> bool:
    if isinstance(data, str):
        return bool(CREDIT_CARD_PATTERN.search(data) or SSN_PATTERN.search(data))
    if isinstance(data, dict):
        return any(
            _is_sensitive_key(str(key), SENSITIVE_FIELDS) or contains_sensitive_data(value)
            for key, value in data.items()
        )
    if isinstance(data, (list, tuple)):
        return any(contains_sensitive_data(item) for item in data)
    return False


def sanitize_for_logging(data: Any) -> Any:
    """Emails and IPs are kept for the audit trail"""
    return mask_sensitive_data(data, mask_emails=False, mask_ips=False)


def sanitize_for_api(data: Any) -> Any:
    return mask_sensitive_data(data, mask_emails=True, mask_ips=True, custom_fields=["useragent", "user_agent"])


def sanitize_error_message(error: Optional[BaseException]) -> str:
    """Error text with card numbers and SSNs masked"""
    if error is None:
        return "An error occurred"
    message = str(error) or type(error).__name__
    return mask_sensitive_patterns_in_text(message)
