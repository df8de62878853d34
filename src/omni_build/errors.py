# src/omni_build/errors.py
"""Exceptions raised by omni-build.

Each error subclasses the builtin the CLI already treats as a controlled
termination, so `main()` reports the message without an internal-error banner.
"""


class ConfigError(ValueError):
    """Configuration is missing, malformed, or names an invalid main file."""


class DependencyMissingError(RuntimeError):
    """An optional node package required by the requested feature is absent."""

    def __init__(self, package: str, feature: str) -> None:
        self.package = package
        self.feature = feature
        super().__init__(
            f'{feature} is powered by "{package}", '
            f"please install it via `npm i {package} -D`"
        )


class BuildError(RuntimeError):
    """The external bundler or packager reported a failure."""

    def __init__(self, msg: str, *, output: str = "", code: int | None = None) -> None:
        self.output = output
        self.returncode = code
        super().__init__(f"{msg}\n{output}".rstrip() if output else msg)


class RuntimeLaunchError(FileNotFoundError):
    """The resolved main file does not exist when the app is launched."""


class ReadinessTimeoutError(RuntimeError):
    """A renderer url did not become reachable in time."""

    def __init__(self, url: str, timeout: float) -> None:
        self.url = url
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout:g}s waiting for renderer: {url}")
