"""Configuration session for one HTTP polling step.

A :class:`StepSession` is what a hosting workflow editor drives while the user
edits a step: load a spec, pick an endpoint, bind parameters, adjust the base
path, period and content type, then apply.  The session keeps a single frozen
:class:`~httpstep.models.SessionState` and swaps it for a new one on every
action, so a reader never sees a half-applied edit.

Spec loads are the only suspension points.  Each load takes a ticket when it
starts; a successful result is applied only when its ticket is newer than the
ticket of the endpoints currently shown, so a slow older load cannot
overwrite a newer one.  Failed loads leave endpoints, base path and
configuration untouched and only record ``last_error``.

Nothing reaches the host until :meth:`StepSession.apply` is called.
"""

from __future__ import annotations

import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Optional

from httpstep.composer import (
    TIME_UNITS,
    Number,
    compose_url,
    derive_period_display,
    expand_path,
    resolve_period,
    select_content_type,
)
from httpstep.exceptions import InvalidUsageError
from httpstep.models import LoadResult, SessionState, StepConfiguration, StepRole
from httpstep.parser.spec_loader import SpecLoader

logger = logging.getLogger(__name__)

APPLY_EVENT = "updating the step"


class StepHost(ABC):
    """The workflow editor that owns the step being configured."""

    @abstractmethod
    def update_step_params(self, config: StepConfiguration) -> None:
        """Receive the committed step configuration."""

    def notify(self, event: str) -> None:
        """Receive a notification string for host-side logging. Optional."""


class StepSession:
    """Owns the state of one step-configuration session.

    Args:
        initial: The step's stored configuration, if any.  Its period is
            converted into the (value, unit) pair shown for editing.
        role: Whether the step is a source or a sink.
        loader: The :class:`~httpstep.parser.spec_loader.SpecLoader` used for
            spec loads.  A default loader is created when omitted.
        host: Receiver of :meth:`apply`.  Without a host, :meth:`apply` only
            returns the configuration.

    Example::

        session = StepSession(StepConfiguration(period=5000), StepRole.SOURCE)
        await session.load_url("https://api.chucknorris.io/documentation")
        session.select_endpoint(0)
        config = session.apply()
    """

    def __init__(
        self,
        initial: Optional[StepConfiguration] = None,
        role: StepRole = StepRole.SOURCE,
        loader: Optional[SpecLoader] = None,
        host: Optional[StepHost] = None,
    ) -> None:
        config = initial.model_copy() if initial is not None else StepConfiguration()
        value, unit = derive_period_display(config.period)
        self._state = SessionState(
            role=role,
            config=config,
            period_value=value,
            time_unit=unit,
        )
        self._loader = loader or SpecLoader()
        self._host = host
        self._tickets = itertools.count(1)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def config(self) -> StepConfiguration:
        return self._state.config

    # ------------------------------------------------------------------ #
    # Spec loading
    # ------------------------------------------------------------------ #

    async def load_url(self, url: str) -> LoadResult:
        """Load the spec at *url*; on success the base path becomes its origin."""
        return await self._load(url, self._loader.load(url))

    async def load_text(self, text: str) -> LoadResult:
        """Load a spec from uploaded document text."""
        return await self._load(None, self._loader.load_text(text))

    async def load_document(self, document: dict[str, Any]) -> LoadResult:
        """Load a spec the host has already deserialised."""
        return await self._load(None, self._loader.load(document))

    async def load_file(self, path: str) -> LoadResult:
        """Load a spec from a local file."""
        return await self._load(path, self._loader.load_file(path))

    async def _load(self, source: Optional[str], loading: Awaitable[LoadResult]) -> LoadResult:
        ticket = next(self._tickets)
        result = await loading

        if ticket < self._state.endpoints_ticket:
            logger.debug(
                "Discarding spec load #%d, endpoints from load #%d are newer",
                ticket,
                self._state.endpoints_ticket,
            )
            return result

        if not result.ok:
            self._replace(last_error=result.error)
            return result

        base_path = result.base_path if result.base_path is not None else self._state.base_path
        self._replace(
            spec_source=source,
            endpoints=result.endpoints,
            endpoints_ticket=ticket,
            base_path=base_path,
            selected_index=None,
            path_suffix="",
            last_error=None,
            config=self._state.config.model_copy(update={"url": compose_url(base_path, "")}),
        )
        return result

    # ------------------------------------------------------------------ #
    # Endpoint and URL edits
    # ------------------------------------------------------------------ #

    def select_endpoint(self, index: int) -> SessionState:
        """Select the endpoint at *index* of the loaded list.

        The URL becomes base path + path template and, when the endpoint
        declares response media types, the content type follows.

        Raises:
            InvalidUsageError: If no endpoint exists at *index*.
        """
        endpoints = self._state.endpoints
        if not 0 <= index < len(endpoints):
            raise InvalidUsageError(
                f"No endpoint at index {index} ({len(endpoints)} endpoints loaded)"
            )

        endpoint = endpoints[index]
        update: dict[str, Any] = {"url": compose_url(self._state.base_path, endpoint.name)}
        content_type = select_content_type(endpoint)
        if content_type is not None:
            update["content_type"] = content_type

        return self._replace(
            selected_index=index,
            path_suffix=endpoint.name,
            config=self._state.config.model_copy(update=update),
        )

    def select_endpoint_by_name(self, name: str) -> SessionState:
        """Select the endpoint whose path template is *name*.

        Raises:
            InvalidUsageError: If no loaded endpoint has that path.
        """
        for index, endpoint in enumerate(self._state.endpoints):
            if endpoint.name == name:
                return self.select_endpoint(index)
        raise InvalidUsageError(f"No endpoint with path '{name}'")

    def set_parameters(
        self,
        path_params: Optional[dict[str, Any]] = None,
        query_params: Optional[dict[str, Any]] = None,
    ) -> SessionState:
        """Bind path and query parameters to the selected endpoint's template.

        Raises:
            InvalidUsageError: If no endpoint is selected.
        """
        endpoint = self._state.selected_endpoint
        if endpoint is None:
            raise InvalidUsageError("Select an endpoint before binding parameters")

        suffix = expand_path(endpoint.name, path_params, query_params)
        return self._replace(
            path_suffix=suffix,
            config=self._state.config.model_copy(
                update={"url": compose_url(self._state.base_path, suffix)}
            ),
        )

    def set_base_path(self, base_path: str) -> SessionState:
        return self._replace(
            base_path=base_path,
            config=self._state.config.model_copy(
                update={"url": compose_url(base_path, self._state.path_suffix)}
            ),
        )

    def set_content_type(self, content_type: str) -> SessionState:
        return self._replace(
            config=self._state.config.model_copy(update={"content_type": content_type})
        )

    # ------------------------------------------------------------------ #
    # Period edits
    # ------------------------------------------------------------------ #

    def set_period_value(self, value: Number) -> SessionState:
        """Change the period value, keeping the current unit."""
        return self._set_period(value, self._state.time_unit)

    def set_time_unit(self, unit: str) -> SessionState:
        """Change the period unit, keeping the current value.

        An unknown unit leaves the session unchanged.
        """
        if unit not in TIME_UNITS:
            logger.debug("Ignoring unknown time unit %r", unit)
            return self._state
        return self._set_period(self._state.period_value, unit)

    def _set_period(self, value: Number, unit: str) -> SessionState:
        previous = self._state.config.period
        period = resolve_period(value, unit, previous=previous)
        if period is None or period <= 0:
            # Shown as typed; the stored period stays positive
            period = previous
        return self._replace(
            period_value=value,
            time_unit=unit,
            config=self._state.config.model_copy(update={"period": period}),
        )

    # ------------------------------------------------------------------ #
    # Commit
    # ------------------------------------------------------------------ #

    def apply(self) -> StepConfiguration:
        """Hand the current configuration to the host.

        Forwards whatever the session holds, including after a failed load.
        """
        config = self._state.config.model_copy()
        if self._host is not None:
            self._host.notify(APPLY_EVENT)
            self._host.update_step_params(config)
        return config

    def _replace(self, **changes: Any) -> SessionState:
        self._state = self._state.model_copy(update=changes)
        return self._state
