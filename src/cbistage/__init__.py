"""
CBI Stage (Container Build Injection context stager)

Plans how the build context of a container-image build job is materialized
inside the execution pod before the build container starts.

Main modules:
- io: Path guard for in-pod paths
- datacls: Context descriptors, pod spec models and build job manifests
- bases: Concrete staging strategies (Git, ConfigMap, HTTP, Rclone)
- registry: Static context kind -> strategy table
- factories: Strategy creation
- mutator: Append-only pod spec editing
- planner: Context staging planner
- config: Configuration loading and validation
- utils: Logging and helpers

Quick start example:
```python
from cbistage import ContextPlanner, PodSpec, git_context

pod_spec = PodSpec.model_validate({"containers": [{"name": "builder", "image": "docker:dind"}]})
path = ContextPlanner().plan(git_context("https://github.com/example/app.git", revision="main"), pod_spec, 0)
```
"""

__version__ = "0.3.0"

from .protocols import StagingStrategyProtocol, PodSpecMutatorProtocol
from .abstractions import StagingStrategy, FetchStrategy
from .datacls import (
    Context,
    GitContext,
    ConfigMapContext,
    HTTPContext,
    RcloneContext,
    git_context,
    configmap_context,
    http_context,
    rclone_context,
    parse_context,
    PodSpec,
    Container,
    Volume,
    VolumeMount,
    Helper,
    StagedContext,
)
from .io import secure_join, PodPath
from .registry import strategy_registry
from .mutator import PodSpecMutator
from .planner import ContextPlanner, plan
from .config import Config, ConfigModel
from .exceptions import (
    CBIStageError,
    ConfigurationError,
    DefinitionError,
    ContextDefinitionError,
    StagingError,
    PathEscapeError,
    UnsupportedContextKind,
    IndexOutOfRange,
    DuplicateResourceName,
)

__all__ = [
    # Version
    '__version__',
    # Protocols
    'StagingStrategyProtocol',
    'PodSpecMutatorProtocol',
    # Abstractions
    'StagingStrategy',
    'FetchStrategy',
    # Data classes
    'Context',
    'GitContext',
    'ConfigMapContext',
    'HTTPContext',
    'RcloneContext',
    'git_context',
    'configmap_context',
    'http_context',
    'rclone_context',
    'parse_context',
    'PodSpec',
    'Container',
    'Volume',
    'VolumeMount',
    'Helper',
    'StagedContext',
    # IO
    'secure_join',
    'PodPath',
    # Planning
    'strategy_registry',
    'PodSpecMutator',
    'ContextPlanner',
    'plan',
    # Config
    'Config',
    'ConfigModel',
    # Exceptions
    'CBIStageError',
    'ConfigurationError',
    'DefinitionError',
    'ContextDefinitionError',
    'StagingError',
    'PathEscapeError',
    'UnsupportedContextKind',
    'IndexOutOfRange',
    'DuplicateResourceName',
]
