"""httpstep -- Configure HTTP polling steps from OpenAPI 2.0/3.0/3.1 specs.

A workflow editor hands this package a spec URL (or uploaded spec text), lets
the user pick one of the declared endpoints, and gets back a
:class:`~httpstep.models.StepConfiguration`: the request URL to poll, the
polling period in milliseconds, and the expected response content type.

Typical use from a host::

    session = StepSession(StepConfiguration(period=5000), StepRole.SOURCE, host=editor)
    await session.load_url("https://api.chucknorris.io/documentation")
    session.select_endpoint(0)
    session.apply()

Modules:
    parser: Spec loading, validation, ``$ref`` resolution, endpoint extraction.
    composer: URL, period, and content-type derivation.
    session: Immutable session state and the host boundary.
    models: Pydantic models shared across the package.
    config: XDG-aware global defaults and saved steps.
    exceptions: Exception hierarchy with exit-code mapping.
    app: The ``httpstep`` command line.
"""

__version__ = "0.1.0"
