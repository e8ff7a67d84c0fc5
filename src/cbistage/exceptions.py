class CBIStageError(Exception):
    """Base exception for all application-specific errors."""

    pass


# --- 1. Errors related to loading and parsing configuration / manifests ---
class ConfigurationError(CBIStageError):
    """Base class for errors encountered while finding, reading, or parsing config files."""

    pass


class ConfigFileMissingError(ConfigurationError):
    """Raised when a configuration or manifest file cannot be found."""

    pass


class ConfigParsingError(ConfigurationError):
    """Raised when a YAML file is syntactically incorrect."""

    pass


class ConfigValidationError(ConfigurationError):
    """Raised when the configuration fails structural validation (e.g., Pydantic)."""

    pass


# --- 2. Errors related to the logical validity of inputs ---
class DefinitionError(CBIStageError):
    """Base class for errors in the definition of contexts and pod specs."""

    pass


class ContextDefinitionError(DefinitionError):
    """Raised when a context descriptor carries fields that are invalid for its kind."""

    pass


class PodSpecDefinitionError(DefinitionError):
    """Raised when a pod manifest cannot be understood as a pod spec."""

    pass


# --- 3. Errors that occur while staging a context into a pod spec ---
class StagingError(CBIStageError):
    """Base class for errors raised while planning context staging."""

    pass


class PathEscapeError(StagingError):
    """Raised when a computed path would leave its base directory."""

    def __init__(self, base: str, relative: str, reason: str = ""):
        self.base = base
        self.relative = relative
        msg = f"path '{relative}' escapes base directory '{base}'"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class UnsupportedContextKind(StagingError):
    """Raised when no staging strategy is registered for a context kind."""

    def __init__(self, kind, supported=None):
        self.kind = kind
        msg = f"unsupported context kind: {kind!r}"
        if supported:
            msg = f"{msg}. Supported kinds: {sorted(supported)}"
        super().__init__(msg)


class IndexOutOfRange(StagingError, IndexError):
    """Raised when the target container index does not address a main container."""

    def __init__(self, index: int, count: int):
        self.index = index
        self.count = count
        super().__init__(
            f"target container index {index} out of range for pod spec with {count} container(s)"
        )


class DuplicateResourceName(StagingError):
    """Raised when an injected volume, init container or mount collides with an existing one."""

    def __init__(self, resource: str, name: str):
        self.resource = resource
        self.name = name
        super().__init__(f"{resource} '{name}' already exists in the pod spec")
