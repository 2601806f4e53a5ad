"""
Core Utilities

Common utility functions used across the admin-manifests tool.
"""

import base64
import logging
import re
import sys
from typing import List

from .constants import ErrorMessages
from .exceptions import ValidationError


def setup_logging(debug: bool = False) -> None:
    """
    Set up logging configuration for the application.
    Separates WARNING/INFO to stdout and ERROR to stderr.

    Args:
        debug: Enable debug logging level
    """
    level = logging.DEBUG if debug else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # stdout handles DEBUG, INFO and WARNING
    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(level)
    stdout_handler.setFormatter(formatter)
    stdout_handler.addFilter(lambda record: record.levelno < logging.ERROR)

    # stderr handles ERROR and CRITICAL only
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.ERROR)
    stderr_handler.setFormatter(formatter)

    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(stderr_handler)

    if debug:
        logger = logging.getLogger(__name__)
        logger.debug("Debug mode enabled")


class ValidationConfig:
    """
    Configuration-driven validation patterns.

    Mirrors the Kubernetes apimachinery rules for DNS-1123 subdomains
    and label values, which user names have to satisfy both.
    """

    DNS1123_SUBDOMAIN = {
        'pattern': r'^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$',
        'max_length': 253,
        'error': (
            "a lowercase RFC 1123 user name must consist of lower case alphanumeric characters, "
            "'-' or '.', and must start and end with an alphanumeric character"
        ),
    }

    LABEL_VALUE = {
        'pattern': r'^(([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9])?$',
        'max_length': 63,
        'error': (
            "a valid user name must be an empty string or consist of alphanumeric characters, "
            "'-', '_' or '.', and must start and end with an alphanumeric character"
        ),
    }


def _check_with_config(value: str, config: dict) -> List[str]:
    """
    Collect validation errors for a value using a ValidationConfig entry.

    Args:
        value: The string to validate
        config: Validation configuration dictionary

    Returns:
        List of error messages, empty when the value is valid
    """
    errors = []
    if len(value) > config['max_length']:
        errors.append(f"must be no more than {config['max_length']} characters")
    if not re.fullmatch(config['pattern'], value):
        errors.append(config['error'])
    return errors


def validate_user_name(user_name: str) -> bool:
    """
    Validate that a user name is both a DNS-1123 subdomain and a valid label value.

    Label value rules are only checked once the subdomain rules pass, and all
    violations of the failing rule set are reported together.

    Args:
        user_name: User name to validate

    Returns:
        bool: True if valid user name

    Raises:
        ValidationError: If the user name is invalid
    """
    errors = _check_with_config(user_name, ValidationConfig.DNS1123_SUBDOMAIN)
    if not errors:
        errors = _check_with_config(user_name, ValidationConfig.LABEL_VALUE)
    if errors:
        raise ValidationError(
            ErrorMessages.ValidationError.INVALID_USER_NAME.format(name=user_name, details="; ".join(errors))
        )
    return True


def sanitize_filename(filename: str) -> str:
    """
    Sanitize a manifest file name by replacing characters that are unsafe in paths.

    Identity names such as ``KubeSaw:12345`` contain a colon, which is
    replaced with a dash the same way as ``+`` and ``/`` from base64 IDs.

    Args:
        filename: Original filename

    Returns:
        str: Sanitized filename safe for filesystem use
    """
    return re.sub(r'[:+/]', '-', filename)


def _is_valid_path_segment(value: str) -> bool:
    """Check whether the value can be used as a single URL path segment"""
    if value in ('.', '..'):
        return False
    return not any(char in value for char in ('/', '%'))


def normalize_identity_user_name(user_id: str) -> str:
    """
    Normalize an external user ID so it can be used in an Identity name.

    IDs that are not valid URL path segments are base64 encoded (without
    padding) and prefixed with ``b64:``.

    Args:
        user_id: ID as issued by the identity provider

    Returns:
        str: Normalized provider user name
    """
    if _is_valid_path_segment(user_id):
        return user_id
    encoded = base64.b64encode(user_id.encode('utf-8')).decode('ascii').rstrip('=')
    return f"b64:{encoded}"
