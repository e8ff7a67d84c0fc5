"""
CBI Stage Strategy Implementations

This module contains the concrete staging strategies, one per context kind.

Concrete classes:
- GitStrategy: clone a repository with the helper
- ConfigMapStrategy: copy a config map into an emptyDir, dereferencing symlinks
- HTTPStrategy: download and unpack an archive with the helper
- RcloneStrategy: sync a remote location with the helper
"""

from typing import List, Optional
import logging

from typing_extensions import override

from ..abstractions import FetchStrategy, StagingStrategy
from ..datacls import (
    ConfigMapContext,
    Container,
    GitContext,
    HTTPContext,
    RcloneContext,
    SecretMount,
    Volume,
    VolumeMount,
)
from ..io import secure_join
from ..protocols import PodSpecMutatorProtocol
from ..constants import ContextKind
from .. import constants

logger = logging.getLogger(__name__)


# ============================================================================
# GIT
# ============================================================================

class GitStrategy(FetchStrategy):
    """
    Clones `url` at `revision` into an emptyDir.
    An SSH secret, when referenced, becomes the helper user's ~/.ssh.
    """
    kind = ContextKind.GIT
    prefix = constants.GIT_PREFIX

    @override
    def fetch_args(self, context: GitContext, destination: str) -> List[str]:
        args = [constants.POPULATE_GIT, context.url, destination]
        if context.revision:
            args += ["--revision", context.revision]
        return args

    @override
    def sub_path(self, context: GitContext) -> Optional[str]:
        return context.sub_path

    @override
    def secret_mounts(self, context: GitContext) -> List[SecretMount]:
        if context.ssh_secret_ref is None:
            return []
        return [SecretMount("ssh", context.ssh_secret_ref.name, constants.SSH_DIR)]


# ============================================================================
# CONFIG MAP
# ============================================================================

class ConfigMapStrategy(StagingStrategy):
    """
    Stages a config map through two volumes.

    Config map volumes expose keys as symlinks, so the raw volume is only seen
    by the init container, which copies it with `cp -rL` into an emptyDir.
    Only the emptyDir reaches the target container.
    """
    kind = ContextKind.CONFIGMAP
    prefix = constants.CONFIGMAP_PREFIX

    @property
    def raw_mount_path(self) -> str:
        return f"/{self.name('tmp')}"

    @override
    def stage(self, context: ConfigMapContext, mutator: PodSpecMutatorProtocol) -> str:
        self.check_kind(context)
        raw_vol_name = self.name("tmp")
        vol_name = self.name()
        context_path = secure_join(self.mount_path, constants.CONTEXT_SUBPATH)

        mutator.add_volume(Volume.from_config_map(raw_vol_name, context.config_map_ref.name))
        mutator.add_volume(Volume.empty(vol_name))
        mutator.mount_target(VolumeMount(name=vol_name, mount_path=self.mount_path))

        init_container = Container(
            name=self.name(constants.INIT_SUFFIX),
            image=self.helper.image,
            command=constants.DEREF_COPY_COMMAND + [self.raw_mount_path, context_path],
            volume_mounts=[
                VolumeMount(name=vol_name, mount_path=self.mount_path),
                VolumeMount(name=raw_vol_name, mount_path=self.raw_mount_path, read_only=True),
            ],
        )
        mutator.add_init_container(init_container)
        logger.debug(
            f"[{self.prefix}] Config map '{context.config_map_ref.name}' is copied "
            f"from '{self.raw_mount_path}' to '{context_path}'."
        )
        return context_path


# ============================================================================
# HTTP
# ============================================================================

class HTTPStrategy(FetchStrategy):
    """
    Downloads a tar archive from `url` and unpacks it into an emptyDir.
    """
    kind = ContextKind.HTTP
    prefix = constants.HTTP_PREFIX

    @override
    def fetch_args(self, context: HTTPContext, destination: str) -> List[str]:
        return [constants.POPULATE_HTTP, context.url, destination]

    @override
    def sub_path(self, context: HTTPContext) -> Optional[str]:
        return context.sub_path


# ============================================================================
# RCLONE
# ============================================================================

class RcloneStrategy(FetchStrategy):
    """
    Syncs `remote:path` into an emptyDir.
    The rclone config secret is required; the SSH secret is only needed for
    SFTP remotes using key-based authentication.
    """
    kind = ContextKind.RCLONE
    prefix = constants.RCLONE_PREFIX

    @override
    def fetch_args(self, context: RcloneContext, destination: str) -> List[str]:
        return [constants.POPULATE_RCLONE, context.location, destination]

    @override
    def secret_mounts(self, context: RcloneContext) -> List[SecretMount]:
        mounts = [SecretMount("config", context.secret_ref.name, constants.RCLONE_CONFIG_DIR)]
        if context.ssh_secret_ref is not None:
            mounts.append(SecretMount("ssh", context.ssh_secret_ref.name, constants.LEGACY_SSH_DIR))
        return mounts
