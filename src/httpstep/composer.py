"""URL, period, and content-type derivation for a polling step.

All functions here are pure.  The step session calls them on every edit:

* :func:`compose_url` -- base path + path template, verbatim.
* :func:`expand_path` -- fill ``{name}`` placeholders and append a query string.
* :func:`resolve_period` / :func:`derive_period_display` -- convert between the
  stored millisecond period and the (value, unit) pair shown to the user.
* :func:`select_content_type` -- pick the media type a poller should expect.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional, Union

import httpx

from httpstep.exceptions import UnknownTimeUnitError
from httpstep.models import Endpoint

logger = logging.getLogger(__name__)

Number = Union[int, float]

# Scanned in this order by derive_period_display, so the last match is the largest unit
TIME_UNITS: dict[str, int] = {
    "ms": 1,
    "s": 1000,
    "min": 1000 * 60,
    "hour": 1000 * 3600,
    "day": 1000 * 3600 * 24,
}

TIME_UNIT_LABELS: dict[str, str] = {
    "ms": "Milliseconds",
    "s": "Seconds",
    "min": "Minutes",
    "hour": "Hours",
    "day": "Days",
}

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


def compose_url(base_path: str, path_template: str) -> str:
    """Concatenate *base_path* and *path_template* without any normalisation.

    Duplicate slashes are kept and nothing is encoded::

        >>> compose_url("https://api.x.io", "/users/{id}")
        'https://api.x.io/users/{id}'
    """
    return base_path + path_template


def path_parameter_names(path_template: str) -> list[str]:
    """Names of the ``{placeholder}`` segments in *path_template*, in order."""
    return _PLACEHOLDER.findall(path_template)


def expand_path(
    path_template: str,
    path_params: Optional[dict[str, Any]] = None,
    query_params: Optional[dict[str, Any]] = None,
) -> str:
    """Bind path and query parameters to a path template.

    Placeholders without a binding stay verbatim.  Query parameters whose
    value is ``None`` are dropped; the rest are URL-encoded.

    Example::

        >>> expand_path("/users/{id}", {"id": 7}, {"expand": "orders"})
        '/users/7?expand=orders'
    """
    path = path_template
    for name, value in (path_params or {}).items():
        path = path.replace("{" + name + "}", str(value))

    query = {key: value for key, value in (query_params or {}).items() if value is not None}
    if query:
        separator = "&" if "?" in path else "?"
        path += separator + str(httpx.QueryParams(query))
    return path


def unit_multiplier(unit: str) -> int:
    """Return the millisecond multiplier of *unit*.

    Raises:
        UnknownTimeUnitError: If *unit* is not in :data:`TIME_UNITS`.
    """
    try:
        return TIME_UNITS[unit]
    except KeyError:
        raise UnknownTimeUnitError(
            f"Unknown time unit '{unit}'. Expected one of: {', '.join(TIME_UNITS)}"
        ) from None


def resolve_period(value: Number, unit: str, previous: Optional[int] = None) -> Optional[int]:
    """Convert a (value, unit) pair into milliseconds.

    An unknown unit is not an error: *previous* is returned unchanged.
    Range checks on *value* belong to the caller.

    Example::

        >>> resolve_period(5, "s")
        5000
        >>> resolve_period(5, "fortnight", previous=5000)
        5000
    """
    multiplier = TIME_UNITS.get(unit)
    if multiplier is None:
        logger.debug("Ignoring unknown time unit %r", unit)
        return previous
    return round(value * multiplier)


def derive_period_display(period_ms: Optional[Number]) -> tuple[Number, str]:
    """Pick the largest unit that represents *period_ms* exactly.

    Used when a session starts from a stored configuration.  When no unit
    divides the period (zero, negative, or fractional values) the raw value
    is shown in milliseconds; a missing or zero period shows as ``(1, "ms")``,
    the stored default.

    Example::

        >>> derive_period_display(7200000)
        (2, 'hour')
        >>> derive_period_display(1500)
        (1500, 'ms')
    """
    if not period_ms:
        return 1, "ms"

    display: tuple[Number, str] = (period_ms, "ms")
    for unit, multiplier in TIME_UNITS.items():
        if period_ms / multiplier >= 1 and period_ms % multiplier == 0:
            display = (int(period_ms // multiplier), unit)
    return display


def select_content_type(endpoint: Endpoint, method: Optional[str] = None) -> Optional[str]:
    """Return the first media type declared for *method* of *endpoint*.

    Falls back to ``GET``, then to the first operation that declares any
    media type.  ``None`` when the endpoint declares none.
    """
    candidates: list[str] = []
    if method:
        candidates.append(method.upper())
    candidates.append("GET")
    candidates.extend(endpoint.produces)

    for candidate in candidates:
        media_types = endpoint.produces.get(candidate)
        if media_types:
            return media_types[0]
    return None
