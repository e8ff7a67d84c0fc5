from typing import List, Optional
import logging

from .datacls import Container, EnvVar, PodSpec, Volume, VolumeMount
from .exceptions import DuplicateResourceName, IndexOutOfRange, PodSpecDefinitionError

logger = logging.getLogger(__name__)


class PodSpecMutator:
    """
    Append-only handle on a pod spec for the duration of one staging call.

    Existing volumes, containers and mounts are never renamed or removed. Every
    append is checked against the names already present, so a collision is
    reported instead of producing an ambiguous pod spec.
    """

    def __init__(self, pod_spec: PodSpec, target_container_idx: int):
        count = len(pod_spec.containers)
        if not isinstance(target_container_idx, int) or isinstance(target_container_idx, bool) \
                or not 0 <= target_container_idx < count:
            raise IndexOutOfRange(target_container_idx, count)
        self._pod_spec = pod_spec
        self.target_idx = target_container_idx
        self.added_volumes: List[str] = []
        self.added_init_containers: List[str] = []
        logger.debug(
            f"[Mutator] Targeting container '{self.target.name}' (index {self.target_idx}) "
            f"of a pod spec with {count} container(s)."
        )

    @property
    def pod_spec(self) -> PodSpec:
        return self._pod_spec

    @property
    def target(self) -> Container:
        return self._pod_spec.containers[self.target_idx]

    def _require_volume(self, mount: VolumeMount, owner: str):
        if not any(v.name == mount.name for v in self._pod_spec.volumes):
            raise PodSpecDefinitionError(
                f"Container '{owner}' mounts volume '{mount.name}' which is not defined in the pod spec."
            )

    def add_volume(self, volume: Volume):
        if any(v.name == volume.name for v in self._pod_spec.volumes):
            raise DuplicateResourceName("volume", volume.name)
        self._pod_spec.volumes.append(volume)
        self.added_volumes.append(volume.name)
        logger.debug(f"[Mutator] Added volume '{volume.name}'.")

    def add_init_container(self, container: Container):
        # init and main containers share one name space
        names = {c.name for c in self._pod_spec.init_containers + self._pod_spec.containers}
        if container.name in names:
            raise DuplicateResourceName("init container", container.name)
        for mount in container.volume_mounts:
            self._require_volume(mount, container.name)
        self._pod_spec.init_containers.append(container)
        self.added_init_containers.append(container.name)
        logger.debug(f"[Mutator] Added init container '{container.name}' running {container.command + container.args}.")

    def mount_target(self, mount: VolumeMount):
        target = self.target
        self._require_volume(mount, target.name)
        for existing in target.volume_mounts:
            if existing.name == mount.name:
                raise DuplicateResourceName("volume mount", mount.name)
            if existing.mount_path == mount.mount_path:
                raise DuplicateResourceName("mount path", mount.mount_path)
        target.volume_mounts.append(mount)
        logger.debug(f"[Mutator] Mounted '{mount.name}' at '{mount.mount_path}' in '{target.name}'.")

    def set_target_env(self, name: str, value: Optional[str]):
        """Set an environment variable of the target container, replacing a previous value"""
        target = self.target
        target.env = [e for e in target.env if e.name != name]
        target.env.append(EnvVar(name=name, value=value))
        logger.debug(f"[Mutator] Set env '{name}={value}' in '{target.name}'.")
