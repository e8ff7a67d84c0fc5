import logging
from typing import Any, Dict, Optional, Union

from .datacls import ContextBase, Helper, PodSpec, StagedContext, parse_context
from .exceptions import IndexOutOfRange
from .factories import StrategyFactory
from .mutator import PodSpecMutator

logger = logging.getLogger(__name__)


class ContextPlanner:
    """
    Plans the staging of a build context into an execution pod spec.

    Planning only describes work: the generated init containers fetch the
    context when the pod runs. Init containers complete in order before any
    main container starts, so the returned path is populated by the time the
    target container reads it.
    """

    def __init__(self, helper: Optional[Helper] = None, factory: Optional[StrategyFactory] = None):
        self.helper = helper or Helper()
        self.factory = factory or StrategyFactory(self.helper)
        logger.debug(f"ContextPlanner initialized with helper '{self.helper.image}' (home '{self.helper.home_dir}').")

    def stage(self, context: Union[ContextBase, Dict[str, Any]], pod_spec: PodSpec,
              target_container_idx: int, env_var: Optional[str] = None) -> StagedContext:
        """
        Stages `context` into a copy of `pod_spec`; the input is left untouched.

        Args:
            context: Context descriptor, or its manifest form.
            pod_spec: Pod spec holding at least the target container.
            target_container_idx: Index of the main container consuming the context.
            env_var: If set, the content path is also exported to the target
                container under this environment variable.
        Returns:
            StagedContext with the content path and the augmented pod spec.
        """
        count = len(pod_spec.containers)
        if not isinstance(target_container_idx, int) or isinstance(target_container_idx, bool) \
                or not 0 <= target_container_idx < count:
            raise IndexOutOfRange(target_container_idx, count)
        context = parse_context(context)

        strategy = self.factory.create(context.kind)
        planned = pod_spec.model_copy(deep=True)
        mutator = PodSpecMutator(planned, target_container_idx)
        logger.debug(f"[Planner] Staging {context.kind.value} context with {strategy.__class__.__name__}...")

        path = strategy.stage(context, mutator)
        if env_var:
            mutator.set_target_env(env_var, path)

        logger.info(
            f"[Planner] Staged {context.kind.value} context for container '{mutator.target.name}' at '{path}' "
            f"(+{len(mutator.added_volumes)} volume(s), +{len(mutator.added_init_containers)} init container(s))."
        )
        return StagedContext(path=path, pod_spec=planned)

    def plan(self, context: Union[ContextBase, Dict[str, Any]], pod_spec: PodSpec,
             target_container_idx: int, env_var: Optional[str] = None) -> str:
        """
        Stages `context` into `pod_spec` in place and returns the content path.

        The pod spec is only modified when planning succeeds; on any error it
        is left exactly as it was passed in.
        """
        staged = self.stage(context, pod_spec, target_container_idx, env_var=env_var)
        pod_spec.containers = staged.pod_spec.containers
        pod_spec.init_containers = staged.pod_spec.init_containers
        pod_spec.volumes = staged.pod_spec.volumes
        return staged.path


def plan(context: Union[ContextBase, Dict[str, Any]], pod_spec: PodSpec, target_container_idx: int,
         helper: Optional[Helper] = None, env_var: Optional[str] = None) -> str:
    """Module-level shortcut for `ContextPlanner(helper).plan(...)`"""
    return ContextPlanner(helper).plan(context, pod_spec, target_container_idx, env_var=env_var)
