"""hubdeck -- multi-profile client for the GitHub API and GitHub Enterprise.

A *profile* bundles a connection (host, token, polling interval), behavioral
settings (browser, notifications, theme) and the location of the profile's
local data file. The :class:`~hubdeck.profiles.store.ProfileStore` owns the
list of profiles: it loads and upgrades records written by older versions,
validates every profile before accepting it, and verifies the active
credential against the remote API before the profile is used.

Typical workflow::

    hubdeck profiles add --host api.github.com --token env:GITHUB_TOKEN
    hubdeck status
    hubdeck status --index 1

Modules:
    app: Typer application factory, composition root and CLI entry point.
    models: Pydantic models for profiles, identity and app configuration.
    config: XDG-aware configuration and credential source resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    theme: Effective display theme resolution.
    platform: Dark-mode, theme and restart collaborators.
"""

__version__ = "0.4.0"
