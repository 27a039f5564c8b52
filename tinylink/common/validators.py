"""Validation utilities for link creation requests."""

import re
from urllib.parse import urlparse
from typing import Tuple

from ..codes import validate_code, MIN_CODE_LENGTH, MAX_CODE_LENGTH


MAX_URL_LENGTH = 2048

_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

# Whitespace, control characters and characters never valid in a host
_BAD_NETLOC_CHARS = re.compile(r'[\s\x00-\x1f\x7f<>"]')
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a destination URL.
    
    Args:
        url: The URL to validate
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if url is None or url == "":
        return False, "URL is required"
    
    if not isinstance(url, str):
        return False, "URL must be a string"
    
    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"
    
    try:
        result = urlparse(url)
        
        if result.scheme not in ("http", "https"):
            return False, "URL must use http or https protocol"
        
        if not result.hostname:
            return False, "URL must have a valid domain"
        
        if _BAD_NETLOC_CHARS.search(result.netloc):
            return False, "URL host contains invalid characters"
        
        if _CONTROL_CHARS.search(url):
            return False, "URL contains control characters"
        
        # raises ValueError for a non-numeric or out-of-range port
        result.port
        
        return True, ""
        
    except ValueError as e:
        return False, f"Invalid URL format: {e}"


def is_valid_email(email: str) -> Tuple[bool, str]:
    """Validate an owner email address (syntax only).
    
    Args:
        email: The email to validate
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if email is None or email == "":
        return False, "Email is required"
    
    if not isinstance(email, str):
        return False, "Email must be a string"
    
    if not _EMAIL_PATTERN.fullmatch(email):
        return False, "Email address is malformed"
    
    return True, ""


def is_valid_short_code(short_code: str) -> Tuple[bool, str]:
    """Validate a caller-supplied short code.
    
    Args:
        short_code: The short code to validate
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if short_code is None or short_code == "":
        return False, "Short code is required"
    
    if not isinstance(short_code, str):
        return False, "Short code must be a string"
    
    if not validate_code(short_code):
        return False, (
            f"Short code must be {MIN_CODE_LENGTH}-{MAX_CODE_LENGTH} "
            "alphanumeric characters"
        )
    
    return True, ""
