from datetime import datetime, timezone
from flask import jsonify
import functools
import json
import logging
import time
import requests

logger = logging.getLogger(__name__)


def utc_now_iso():
    """ISO-8601 UTC timestamp with milliseconds, e.g. 2025-01-31T12:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def error_response(message, status):
    return jsonify({'error': message}), status


def parse_json_blob(raw):
    """
    Parses a JSON blob column (onboardingMetadata, estrategia...).
    Dicts are copied, strings are decoded. Anything malformed or not an
    object comes back as an empty dict.
    """
    if isinstance(raw, dict):
        return dict(raw)
    if isinstance(raw, str) and raw:
        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning("Falha ao interpretar JSON armazenado, descartando conteúdo")
            return {}
        if isinstance(parsed, dict):
            return parsed
    return {}


def serialize_json_blob(value):
    """Strings are stored as-is, everything else is JSON-encoded."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def retry_request(retries=3, backoff_factor=0.3, status_codes=(500, 502, 503, 504)):
    """
    Decorator for retrying requests with exponential backoff.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            last_exception = None
            for i in range(retries + 1):
                try:
                    response = func(*args, **kwargs)
                    if response is not None and response.status_code in status_codes and i < retries:
                        logger.warning(f"HTTP {response.status_code}, tentando novamente ({i + 1}/{retries})")
                        time.sleep(backoff_factor * (2 ** i))
                        continue
                    return response
                except requests.exceptions.RequestException as e:
                    last_exception = e
                    is_retryable = False
                    if getattr(e, 'response', None) is not None:
                        if e.response.status_code in status_codes:
                            is_retryable = True
                    elif isinstance(e, (requests.exceptions.Timeout, requests.exceptions.ConnectionError)):
                        is_retryable = True

                    if not is_retryable or i == retries:
                        raise

                    time.sleep(backoff_factor * (2 ** i))
            raise last_exception
        return wrapper
    return decorator
