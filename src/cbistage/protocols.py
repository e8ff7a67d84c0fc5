"""
CBI Stage Protocol Definitions

This module contains the Protocol definitions of the staging pipeline.

Protocols are the foundation layer with no dependencies on the concrete
strategy or mutator implementations.
"""

from typing import Protocol, Any, Optional, runtime_checkable


@runtime_checkable
class PodSpecMutatorProtocol(Protocol):
    """
    Protocol for the append-only handle strategies use to edit a pod spec.
    """

    target_idx: int

    @property
    def pod_spec(self) -> Any:
        ...

    @property
    def target(self) -> Any:
        """The main container that consumes the staged context"""
        ...

    def add_volume(self, volume: Any) -> None:
        ...

    def add_init_container(self, container: Any) -> None:
        ...

    def mount_target(self, mount: Any) -> None:
        ...

    def set_target_env(self, name: str, value: Optional[str]) -> None:
        ...


@runtime_checkable
class StagingStrategyProtocol(Protocol):
    """
    Protocol for context staging strategies.

    A strategy turns one kind of context descriptor into volumes, mounts and
    init containers, and reports where the target container finds the content.
    """

    prefix: str

    def stage(self, context: Any, mutator: PodSpecMutatorProtocol) -> str:
        """
        Append the staging steps for `context` through `mutator`.

        Args:
            context: Context descriptor of the strategy's kind
            mutator: Handle on the pod spec being planned

        Returns:
            Absolute in-pod path of the staged content
        """
        ...
