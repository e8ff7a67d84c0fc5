"""
CBI Stage Pod Spec Models

The subset of Kubernetes core/v1 the staging planner reads and writes.
Unknown keys are kept as extra fields so that a manifest survives a
load/plan/dump cycle untouched apart from the appended entries.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..exceptions import PodSpecDefinitionError
from ..utils.util import to_camel

logger = logging.getLogger(__name__)


class K8sModel(BaseModel):
    """
        Base of all manifest models: camelCase keys, extra keys preserved.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_manifest(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_defaults=True)


class VolumeMount(K8sModel):
    name: str
    mount_path: str
    read_only: Optional[bool] = None
    sub_path: Optional[str] = None


class EnvVar(K8sModel):
    name: str
    value: Optional[str] = None


class Container(K8sModel):
    """
        A main or init container.
    """
    name: str
    image: Optional[str] = None
    command: List[str] = Field(default_factory=list)
    args: List[str] = Field(default_factory=list)
    env: List[EnvVar] = Field(default_factory=list)
    volume_mounts: List[VolumeMount] = Field(default_factory=list)


class EmptyDirVolumeSource(K8sModel):
    pass


class SecretVolumeSource(K8sModel):
    secret_name: str
    default_mode: Optional[int] = None


class ConfigMapVolumeSource(K8sModel):
    name: str
    default_mode: Optional[int] = None


class Volume(K8sModel):
    """
        A named volume. The planner only creates emptyDir, secret and configMap
        volumes; other sources given by the caller are kept as extra fields.
    """
    name: str
    empty_dir: Optional[EmptyDirVolumeSource] = None
    secret: Optional[SecretVolumeSource] = None
    config_map: Optional[ConfigMapVolumeSource] = None

    @model_validator(mode='after')
    def check_single_source(self) -> 'Volume':
        """Check at most one of the known volume sources is set"""
        sources = [s for s in (self.empty_dir, self.secret, self.config_map) if s is not None]
        if len(sources) > 1:
            raise PodSpecDefinitionError(f"Volume '{self.name}' must have exactly one volume source.")
        return self

    @classmethod
    def empty(cls, name: str) -> 'Volume':
        return cls(name=name, empty_dir=EmptyDirVolumeSource())

    @classmethod
    def from_secret(cls, name: str, secret_name: str, default_mode: Optional[int] = None) -> 'Volume':
        return cls(name=name, secret=SecretVolumeSource(secret_name=secret_name, default_mode=default_mode))

    @classmethod
    def from_config_map(cls, name: str, config_map_name: str) -> 'Volume':
        return cls(name=name, config_map=ConfigMapVolumeSource(name=config_map_name))


class PodSpec(K8sModel):
    """
    An execution pod template: ordered init containers, ordered main
    containers and a set of named volumes.
    """
    containers: List[Container] = Field(default_factory=list)
    init_containers: List[Container] = Field(default_factory=list)
    volumes: List[Volume] = Field(default_factory=list)

    @model_validator(mode='after')
    def check_unique_names(self) -> 'PodSpec':
        """Volume names and container names must be unique within the pod"""
        for what, names in (
            ("volume", [v.name for v in self.volumes]),
            ("container", [c.name for c in self.init_containers + self.containers]),
        ):
            seen = set()
            for name in names:
                if name in seen:
                    raise PodSpecDefinitionError(f"Duplicate {what} name '{name}' in pod spec.")
                seen.add(name)
        return self

    def to_manifest(self) -> Dict[str, Any]:
        manifest = super().to_manifest()
        # containers is required by the API server even when empty
        manifest.setdefault("containers", [])
        return manifest

    @classmethod
    def from_manifest(cls, data: Dict[str, Any]) -> 'PodSpec':
        """
        Build a PodSpec from a bare pod spec or any manifest embedding one
        (Pod, PodTemplate, Job).
        """
        spec, _ = unwrap_manifest(data)
        try:
            return cls.model_validate(spec)
        except ValidationError as e:
            raise PodSpecDefinitionError(f"Invalid pod spec:\n{e}") from e


def unwrap_manifest(data: Dict[str, Any]) -> Tuple[Dict[str, Any], Callable[[Dict[str, Any]], Dict[str, Any]]]:
    """
    Locate the pod spec inside a manifest.

    Returns:
        Tuple of the pod spec mapping and a function that re-embeds a new pod
        spec mapping into a copy of the original manifest.
    """
    if not isinstance(data, dict):
        raise PodSpecDefinitionError(f"Pod manifest must be a mapping, got {type(data).__name__}.")

    path: List[str] = []
    kind = data.get("kind")
    if kind == "Pod":
        path = ["spec"]
    elif kind == "PodTemplate":
        path = ["template", "spec"]
    elif kind is not None and isinstance(data.get("spec"), dict) and "template" in data["spec"]:
        # Job, Deployment and friends
        path = ["spec", "template", "spec"]
    elif kind is not None:
        raise PodSpecDefinitionError(f"Manifest of kind '{kind}' does not contain a pod spec.")

    spec: Any = data
    for key in path:
        if not isinstance(spec, dict) or not isinstance(spec.get(key), dict):
            raise PodSpecDefinitionError(f"Manifest of kind '{kind}' has no '{'.'.join(path)}'.")
        spec = spec[key]

    def embed(new_spec: Dict[str, Any]) -> Dict[str, Any]:
        if not path:
            return new_spec
        result = dict(data)
        cursor = result
        for key in path[:-1]:
            cursor[key] = dict(cursor[key])
            cursor = cursor[key]
        cursor[path[-1]] = new_spec
        return result

    logger.debug(f"Located pod spec at '{'.'.join(path) or '<root>'}' of {kind or 'bare'} manifest")
    return spec, embed
