"""
CBI Stage Abstract Base Classes

This module contains the abstract base class of staging strategies.

Dependencies:
- protocols.py: Protocol definitions (structural types)
- datacls/: Context descriptors and pod spec models
- io/: Path guard
"""

from abc import ABC, abstractmethod
from typing import ClassVar, List, Optional
import logging

from .datacls import Container, ContextBase, Helper, SecretMount, Volume, VolumeMount
from .exceptions import DefinitionError
from .io import secure_join
from .protocols import PodSpecMutatorProtocol
from .constants import ContextKind
from . import constants

logger = logging.getLogger(__name__)


class StagingStrategy(ABC):
    """
    Abstract class describing how one kind of context is staged into a pod.

    Subclasses define `kind` and `prefix`. Every volume and init container a
    strategy creates is named after its prefix, so strategies never collide
    with each other inside one pod spec.
    """

    kind: ClassVar[ContextKind]
    prefix: ClassVar[str]

    def __init__(self, helper: Optional[Helper] = None):
        self.helper = helper or Helper()

    @property
    def mount_path(self) -> str:
        return f"/{self.prefix}"

    def name(self, suffix: str = "") -> str:
        """Resource name under this strategy's prefix"""
        return f"{self.prefix}-{suffix}" if suffix else self.prefix

    def check_kind(self, context: ContextBase):
        if context.kind != self.kind:
            raise DefinitionError(
                f"{self.__class__.__name__} stages '{self.kind.value}' contexts, got '{context.kind.value}'."
            )

    @abstractmethod
    def stage(self, context: ContextBase, mutator: PodSpecMutatorProtocol) -> str:
        """
        Appends volumes, mounts and init containers for `context`.

        Args:
            context: The context descriptor to stage.
            mutator: Handle on the pod spec being planned.
        Returns:
            The absolute in-pod path where the target container finds the content.
        """
        pass


class FetchStrategy(StagingStrategy, ABC):
    """
    Abstract base class for contexts fetched by the helper into one emptyDir.

    The volume is mounted at the same path in the target container and in a
    single init container that runs the helper's fetch sub-command into
    `<mount>/context`. Credential secrets are mounted into the init container
    only. Subclasses must implement `fetch_args` and may override
    `sub_path` and `secret_mounts`.
    """

    @abstractmethod
    def fetch_args(self, context: ContextBase, destination: str) -> List[str]:
        """
        Helper arguments that populate `destination` with the context.
        """
        pass

    def sub_path(self, context: ContextBase) -> Optional[str]:
        return None

    def secret_mounts(self, context: ContextBase) -> List[SecretMount]:
        return []

    def stage(self, context: ContextBase, mutator: PodSpecMutatorProtocol) -> str:
        self.check_kind(context)
        vol_name = self.name()
        mutator.add_volume(Volume.empty(vol_name))
        mutator.mount_target(VolumeMount(name=vol_name, mount_path=self.mount_path))

        context_path = secure_join(self.mount_path, constants.CONTEXT_SUBPATH)
        init_container = Container(
            name=self.name(constants.INIT_SUFFIX),
            image=self.helper.image,
            args=self.fetch_args(context, context_path),
            volume_mounts=[VolumeMount(name=vol_name, mount_path=self.mount_path)],
        )

        content_path = context_path
        sub_path = self.sub_path(context)
        if sub_path:
            content_path = secure_join(context_path, sub_path)
            logger.debug(f"[{self.prefix}] Selected sub path '{sub_path}' -> '{content_path}'")

        for secret in self.secret_mounts(context):
            secret_vol_name = self.name(secret.suffix)
            secret_mount_path = secure_join(self.helper.home_dir, secret.directory)
            mutator.add_volume(
                Volume.from_secret(secret_vol_name, secret.secret_name, default_mode=constants.SECRET_FILE_MODE)
            )
            init_container.volume_mounts.append(
                VolumeMount(name=secret_vol_name, mount_path=secret_mount_path, read_only=True)
            )
            logger.debug(
                f"[{self.prefix}] Mounted secret '{secret.secret_name}' at '{secret_mount_path}' "
                f"in init container only."
            )

        mutator.add_init_container(init_container)
        return content_path
