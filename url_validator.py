from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None


def validate_wikipedia_url(url: Optional[str]) -> ValidationResult:
    """
    Check that a string is a Wikipedia article URL.

    Pure check with no network access. Returns a result with a
    user-facing error message when the URL is rejected.
    """
    if not url or not url.strip():
        return ValidationResult(False, "Please enter a URL")

    try:
        parsed = urlparse(url.strip())
        hostname = parsed.hostname
    except ValueError:
        return ValidationResult(False, "Please enter a valid URL")
    if not parsed.scheme or not hostname:
        return ValidationResult(False, "Please enter a valid URL")

    if "wikipedia.org" not in hostname:
        return ValidationResult(False, "Please enter a Wikipedia URL")
    if "/wiki/" not in parsed.path:
        return ValidationResult(False, "Please enter a valid Wikipedia article URL")
    return ValidationResult(True)
