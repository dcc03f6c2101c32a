"""Service layer: use-case orchestration over units of work and ports.

- :mod:`samplecat.services.auth` handles register, login, refresh and logout.
- :mod:`samplecat.services.users` handles profiles and account lifecycle.
- :mod:`samplecat.services.samples` handles the sample catalog.
- :mod:`samplecat.services._shared` holds the base service, errors and ports.

Import services from their modules; this package does not re-export them so
that low-level modules can depend on :mod:`samplecat.services._shared.errors`
without pulling the whole layer in.
"""
