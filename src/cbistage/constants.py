from enum import Enum

# --- Log and Debug ---
# Short aliases for module names to keep CLI/env concise
LOG_ALIAS_MAP = {
    "plan": "cbistage.planner",
    "pln": "cbistage.planner",
    "mut": "cbistage.mutator",
    "mutator": "cbistage.mutator",
    "path": "cbistage.io.path",
    "io": "cbistage.io",
    "stg": "cbistage.bases.strategies",
    "strategy": "cbistage.bases.strategies",
    "ctx": "cbistage.datacls.contexts",
    "pod": "cbistage.datacls.pod",
    "conf": "cbistage.config",
    "rty": "cbistage.registry",
    "fac": "cbistage.factories",
    "cli": "cbistage.cli",
}

# Top-level modules within cbistage for auto-prefixing
KNOWN_TOP_MODULES = {
    "io",
    "bases",
    "datacls",
    "utils",
    "exceptions",
    "config",
    "registry",
    "factories",
    "planner",
    "mutator",
    "cli",
}

LOG_LEVELS_ENV = "CBISTAGE_LOG_LEVELS"


# --- Context kinds ---
class ContextKind(str, Enum):
    """Wire tags of BuildJob.spec.context.kind"""
    GIT = "Git"
    CONFIGMAP = "ConfigMap"
    HTTP = "HTTP"
    RCLONE = "Rclone"


# key of the kind-specific block in the CRD shape of a context
CONTEXT_PAYLOAD_KEYS = {
    ContextKind.GIT: "git",
    ContextKind.CONFIGMAP: "configMapRef",
    ContextKind.HTTP: "http",
    ContextKind.RCLONE: "rclone",
}

# plugin selector labels the controller adds for each context kind
CONTEXT_LABELS = {
    ContextKind.GIT: "context.git",
    ContextKind.CONFIGMAP: "context.configmap",
    ContextKind.HTTP: "context.http",
    ContextKind.RCLONE: "context.rclone",
}


# --- Staging helper ---
DEFAULT_HELPER_IMAGE = "containerbuilding/cbipluginhelper:latest"
DEFAULT_HELPER_HOME = "/root"
HELPER_IMAGE_ENV = "CBISTAGE_HELPER_IMAGE"
HELPER_HOME_ENV = "CBISTAGE_HELPER_HOME"

POPULATE_GIT = "populate-git"
POPULATE_HTTP = "populate-http"
POPULATE_RCLONE = "populate-rclone"
DEREF_COPY_COMMAND = ["cp", "-rL"]

# --- Paths and names ---
CONTEXT_SUBPATH = "context"
SSH_DIR = ".ssh"
# legacy SSH key directory of rclone SFTP remotes
LEGACY_SSH_DIR = ".ssh.OLD"
RCLONE_CONFIG_DIR = ".config/rclone"
INIT_SUFFIX = "init"

GIT_PREFIX = "cbi-gitcontext"
CONFIGMAP_PREFIX = "cbi-cmcontext"
HTTP_PREFIX = "cbi-httpcontext"
RCLONE_PREFIX = "cbi-rclonecontext"

# owner read-only, the most restrictive mode kubelet accepts for key files
SECRET_FILE_MODE = 0o400

# symlink expansions allowed while resolving one path
MAX_SYMLINK_EXPANSIONS = 255
