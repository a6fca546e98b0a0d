"""Canonical Pydantic models shared across all httpstep modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OutputConfig`, :class:`RequestConfig`, :class:`GlobalConfig`, and
    :class:`SavedStep`.

**Step models** -- exchanged with the hosting workflow editor:
    :class:`StepRole` and :class:`StepConfiguration`.

**Parser output models** -- produced by the spec loader and consumed by the
composer and the session:
    :class:`HTTPMethod`, :class:`SpecVersion`, :class:`Endpoint`,
    :class:`LoadResult`, and :class:`SessionState`.

Parser output and session models are frozen: a new spec load or a new user
action produces new instances rather than mutating existing ones.
"""

from __future__ import annotations

import enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_SPEC_URL = "https://api.chucknorris.io/documentation"


# --- Config ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format used when no --json/--plain flag is given"
    )


class RequestConfig(BaseModel):
    """HTTP settings used when fetching a spec document by URL."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/httpstep/config.json``.

    Loaded and saved by :func:`~httpstep.config.load_global_config` and
    :func:`~httpstep.config.save_global_config`. Environment variables can
    override individual fields, see :func:`~httpstep.config.resolve_config`.
    """

    default_spec_url: str = Field(
        default=DEFAULT_SPEC_URL,
        description="Spec URL offered when no document is given",
    )
    default_period: int = Field(
        default=1000, gt=0, description="Polling period (ms) for new steps"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Step models ---


class StepRole(str, enum.Enum):
    """Role of the workflow step being configured."""

    SOURCE = "source"
    SINK = "sink"

    @classmethod
    def from_step_name(cls, name: str) -> StepRole:
        """Infer the role from a step name for hosts that do not declare one.

        A step whose name contains ``"source"`` is a source, anything else is
        treated as a sink.
        """
        return cls.SOURCE if "source" in name else cls.SINK


class StepConfiguration(BaseModel):
    """Configuration of one HTTP polling step, as handed back to the host.

    ``period`` is always stored in milliseconds. The unit the user picked to
    enter it is presentation state and lives in :class:`SessionState` only.
    """

    model_config = ConfigDict(populate_by_name=True)

    url: str = ""
    period: int = Field(default=1, gt=0, description="Milliseconds between polls")
    content_type: str = Field(default="", alias="contentType")


class SavedStep(BaseModel):
    """A named step configuration stored under ``<config_dir>/steps/``."""

    name: str
    role: StepRole = StepRole.SOURCE
    spec: Optional[str] = Field(
        default=None, description="URL or file the endpoint was picked from"
    )
    step: StepConfiguration = Field(default_factory=StepConfiguration)


# --- Parser output models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised in OpenAPI path-item objects.

    ``TRACE`` only exists in OpenAPI 3.x; Swagger 2.0 path items never
    declare it.
    """

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class SpecVersion(str, enum.Enum):
    """Major document versions the loader validates against."""

    SWAGGER_2_0 = "2.0"
    OPENAPI_3_0 = "3.0"
    OPENAPI_3_1 = "3.1"


class Endpoint(BaseModel):
    """One path item of a parsed OpenAPI document.

    ``name`` is the raw path template (``/users/{id}``) and doubles as the
    display label and the suffix appended to the base path. ``operations``
    is keyed by upper-case method name (``"GET"``) and holds the
    dereferenced operation objects as plain dicts.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path_item: Optional[dict[str, Any]] = None
    operations: dict[str, dict[str, Any]] = Field(default_factory=dict)
    produces: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Response media types declared per method",
    )

    @property
    def methods(self) -> list[str]:
        """Declared method names, in declaration order."""
        return list(self.operations)


class LoadResult(BaseModel):
    """Outcome of one spec load.

    A failed load always carries an empty endpoint list and a message in
    ``error``; a successful load of a document without paths carries an
    empty list and ``error=None``.
    """

    model_config = ConfigDict(frozen=True)

    endpoints: list[Endpoint] = Field(default_factory=list)
    error: Optional[str] = None
    base_path: Optional[str] = Field(
        default=None, description="Base path derived from the input, if any"
    )
    version: Optional[SpecVersion] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(
        cls,
        endpoints: list[Endpoint],
        base_path: Optional[str] = None,
        version: Optional[SpecVersion] = None,
    ) -> LoadResult:
        return cls(endpoints=endpoints, base_path=base_path, version=version)

    @classmethod
    def failure(cls, error: str) -> LoadResult:
        return cls(error=error)


class SessionState(BaseModel):
    """Snapshot of one step-configuration session.

    Replaced wholesale by :class:`~httpstep.session.StepSession` on every
    user action; never mutated in place.
    """

    model_config = ConfigDict(frozen=True)

    role: StepRole = StepRole.SOURCE
    spec_source: Optional[str] = None
    base_path: str = ""
    endpoints: list[Endpoint] = Field(default_factory=list)
    selected_index: Optional[int] = None
    path_suffix: str = ""
    period_value: Union[int, float] = 1
    time_unit: str = "ms"
    config: StepConfiguration = Field(default_factory=StepConfiguration)
    last_error: Optional[str] = None
    endpoints_ticket: int = Field(
        default=0, description="Ticket of the load that produced the endpoints"
    )

    @property
    def selected_endpoint(self) -> Optional[Endpoint]:
        if self.selected_index is None:
            return None
        return self.endpoints[self.selected_index]
