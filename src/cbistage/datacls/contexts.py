"""
CBI Stage Context Descriptors

One frozen model per context kind, each carrying only the fields valid for
that kind. Construction is the only validation point: an instance that exists
is a complete, well-formed descriptor.
"""

from typing import Any, Dict, Optional, Type, Union
import logging

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from .. import constants
from ..constants import ContextKind
from ..exceptions import ContextDefinitionError, UnsupportedContextKind

logger = logging.getLogger(__name__)


class LocalObjectReference(BaseModel):
    """
        Reference to a secret or config map in the namespace of the build job.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")
    name: str = ""


def _ref_or_none(value: Optional[LocalObjectReference]) -> Optional[LocalObjectReference]:
    """An empty reference is the CRD's way of saying 'not set'"""
    if value is None or not value.name:
        return None
    return value


def _required(value: str, field: str, kind: ContextKind) -> str:
    if not value:
        raise ContextDefinitionError(f"{kind.value} context requires a non-empty '{field}'.")
    return value


def _relative_sub_path(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    if value.startswith("/"):
        raise ContextDefinitionError(f"subPath must be relative, got '{value}'.")
    return value


class ContextBase(BaseModel):
    """
    Common behavior of all context descriptors.

    Subclasses pin `kind` through its default; any other value is rejected.
    """
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    kind: ContextKind

    @field_validator("kind")
    @classmethod
    def check_kind(cls, value: ContextKind) -> ContextKind:
        expected = cls.model_fields["kind"].default
        if value != expected:
            raise ContextDefinitionError(
                f"{cls.__name__} only accepts kind '{expected.value}', got '{value.value}'."
            )
        return value

    @property
    def label(self) -> str:
        """Plugin selector label the controller adds for this kind"""
        return constants.CONTEXT_LABELS[self.kind]

    def to_manifest(self) -> Dict[str, Any]:
        """Render the CRD wire shape: `{kind: ..., <payload key>: {...}}`"""
        payload = self.model_dump(by_alias=True, exclude_none=True, exclude={"kind"})
        return {"kind": self.kind.value, constants.CONTEXT_PAYLOAD_KEYS[self.kind]: payload}


class GitContext(ContextBase):
    """
        A git repository, fetched with `git clone` semantics.
        `revision` may be a commit, branch or tag; absent means the remote's default branch.
    """
    kind: ContextKind = ContextKind.GIT
    url: str
    revision: Optional[str] = None
    sub_path: Optional[str] = Field(None, alias="subPath")
    ssh_secret_ref: Optional[LocalObjectReference] = Field(None, alias="sshSecretRef")

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        return _required(value, "url", ContextKind.GIT)

    @field_validator("revision")
    @classmethod
    def empty_revision(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @field_validator("sub_path")
    @classmethod
    def check_sub_path(cls, value: Optional[str]) -> Optional[str]:
        return _relative_sub_path(value)

    @field_validator("ssh_secret_ref")
    @classmethod
    def empty_ssh_secret_ref(cls, value):
        return _ref_or_none(value)


class ConfigMapContext(ContextBase):
    """
        A config map whose keys are the files of the context.
    """
    kind: ContextKind = ContextKind.CONFIGMAP
    config_map_ref: LocalObjectReference = Field(alias="configMapRef")

    @field_validator("config_map_ref")
    @classmethod
    def check_config_map_ref(cls, value: LocalObjectReference) -> LocalObjectReference:
        _required(value.name, "configMapRef.name", ContextKind.CONFIGMAP)
        return value

    def to_manifest(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "configMapRef": self.config_map_ref.model_dump()}


class HTTPContext(ContextBase):
    """
        A tar (or tar+gz) archive reachable over http:// or https://.
    """
    kind: ContextKind = ContextKind.HTTP
    url: str
    sub_path: Optional[str] = Field(None, alias="subPath")

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        return _required(value, "url", ContextKind.HTTP)

    @field_validator("sub_path")
    @classmethod
    def check_sub_path(cls, value: Optional[str]) -> Optional[str]:
        return _relative_sub_path(value)


class RcloneContext(ContextBase):
    """
        A remote location synced with rclone.
        `secret_ref` holds the contents of ~/.config/rclone, `ssh_secret_ref` the
        contents of ~/.ssh.OLD (only needed for SFTP remotes).
    """
    kind: ContextKind = ContextKind.RCLONE
    remote: str = Field(alias="remote", validation_alias=AliasChoices("remote", "Remote"))
    path: str = Field(alias="path", validation_alias=AliasChoices("path", "Path"))
    secret_ref: LocalObjectReference = Field(alias="secretRef")
    ssh_secret_ref: Optional[LocalObjectReference] = Field(None, alias="sshSecretRef")

    @field_validator("remote")
    @classmethod
    def check_remote(cls, value: str) -> str:
        return _required(value, "remote", ContextKind.RCLONE)

    @field_validator("path")
    @classmethod
    def check_path(cls, value: str) -> str:
        return _required(value, "path", ContextKind.RCLONE)

    @field_validator("secret_ref")
    @classmethod
    def check_secret_ref(cls, value: LocalObjectReference) -> LocalObjectReference:
        _required(value.name, "secretRef.name", ContextKind.RCLONE)
        return value

    @field_validator("ssh_secret_ref")
    @classmethod
    def empty_ssh_secret_ref(cls, value):
        return _ref_or_none(value)

    @property
    def location(self) -> str:
        """`remote:path` as understood by rclone"""
        return f"{self.remote}:{self.path}"


Context = Union[GitContext, ConfigMapContext, HTTPContext, RcloneContext]

CONTEXT_CLASSES: Dict[ContextKind, Type[ContextBase]] = {
    ContextKind.GIT: GitContext,
    ContextKind.CONFIGMAP: ConfigMapContext,
    ContextKind.HTTP: HTTPContext,
    ContextKind.RCLONE: RcloneContext,
}


def _build(context_class: Type[ContextBase], data: Dict[str, Any]) -> Context:
    """Instantiate a descriptor, turning pydantic errors into ContextDefinitionError"""
    data = {k: v for k, v in data.items() if v is not None}
    try:
        return context_class.model_validate(data)
    except ValidationError as e:
        raise ContextDefinitionError(f"Invalid {context_class.__name__}:\n{e}") from e


def _ref(name: Optional[str]) -> Optional[Dict[str, str]]:
    return {"name": name} if name else None


# -------------------------
#
#   SMART CONSTRUCTORS
#
# -------------------------

def git_context(url: str, revision: Optional[str] = None, sub_path: Optional[str] = None,
                ssh_secret: Optional[str] = None) -> GitContext:
    return _build(GitContext, {
        "url": url,
        "revision": revision,
        "subPath": sub_path,
        "sshSecretRef": _ref(ssh_secret),
    })


def configmap_context(config_map: str) -> ConfigMapContext:
    return _build(ConfigMapContext, {"configMapRef": _ref(config_map) or {"name": ""}})


def http_context(url: str, sub_path: Optional[str] = None) -> HTTPContext:
    return _build(HTTPContext, {"url": url, "subPath": sub_path})


def rclone_context(remote: str, path: str, secret: str, ssh_secret: Optional[str] = None) -> RcloneContext:
    return _build(RcloneContext, {
        "remote": remote,
        "path": path,
        "secretRef": _ref(secret) or {"name": ""},
        "sshSecretRef": _ref(ssh_secret),
    })


# -------------------------
#
#   CRD PARSING
#
# -------------------------

def _is_blank(value: Any) -> bool:
    """The CRD serializes unused blocks as zero values, e.g. `http: {url: '', subPath: ''}`"""
    if isinstance(value, dict):
        return all(_is_blank(v) for v in value.values())
    return not value


def parse_context(raw: Union[Context, Dict[str, Any]]) -> Context:
    """
    Build a context descriptor from its manifest form.

    Accepts both the CRD shape (`{kind: Git, git: {url: ...}}`) and the flat
    shape (`{kind: Git, url: ...}`). A non-empty block belonging to another
    kind is rejected instead of being ignored.

    Raises:
        UnsupportedContextKind: If `kind` is missing or unknown.
        ContextDefinitionError: If the fields do not form a valid descriptor.
    """
    if isinstance(raw, ContextBase):
        return raw
    if not isinstance(raw, dict):
        raise ContextDefinitionError(f"Context must be a mapping, got {type(raw).__name__}.")

    kind_value = raw.get("kind")
    try:
        kind = ContextKind(kind_value)
    except ValueError:
        raise UnsupportedContextKind(kind_value, supported=[k.value for k in ContextKind])

    payload_key = constants.CONTEXT_PAYLOAD_KEYS[kind]
    for other_kind, key in constants.CONTEXT_PAYLOAD_KEYS.items():
        if other_kind is not kind and not _is_blank(raw.get(key)):
            raise ContextDefinitionError(
                f"Context of kind '{kind.value}' must not carry a '{key}' block."
            )

    foreign_keys = set(constants.CONTEXT_PAYLOAD_KEYS.values()) - {payload_key}
    data = {k: v for k, v in raw.items() if k not in foreign_keys}
    if kind is not ContextKind.CONFIGMAP:
        payload = data.pop(payload_key, None) or {}
        if not isinstance(payload, dict):
            raise ContextDefinitionError(f"'{payload_key}' must be a mapping.")
        overlap = set(payload) & set(data)
        if overlap:
            raise ContextDefinitionError(
                f"Fields {sorted(overlap)} are given both inside and outside '{payload_key}'."
            )
        data.update(payload)

    logger.debug(f"Parsing {kind.value} context with fields {sorted(data)}")
    return _build(CONTEXT_CLASSES[kind], data)
