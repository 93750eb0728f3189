"""HTTP utilities"""

import logging

import requests

from ..api.exceptions import HealthCheckError
from ..constants import DEFAULT_HEALTH_CHECK_TIMEOUT

logger = logging.getLogger(__name__)


def check_health(url: str, timeout: float = DEFAULT_HEALTH_CHECK_TIMEOUT) -> int:
    """
    Request a URL and require a 2xx status

    Redirects are not followed: a 3xx answer fails the check.

    Args:
        url: URL to request (HEAD)
        timeout: Request timeout in seconds

    Returns:
        HTTP status code

    Raises:
        HealthCheckError: If the URL is unreachable or answers non-2xx
    """
    try:
        response = requests.head(url, timeout=timeout, allow_redirects=False)
    except requests.RequestException as e:
        raise HealthCheckError(url, f"Health check failed: {url} is unreachable ({e})") from e

    logger.debug(f"Health check {url} answered {response.status_code}")

    if not 200 <= response.status_code < 300:
        raise HealthCheckError(
            url,
            f"Health check failed: {url} answered {response.status_code}, "
            "a 2xx status code was expected"
        )

    return response.status_code
