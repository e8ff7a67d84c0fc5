from .contexts import (
    Context,
    ContextBase,
    GitContext,
    ConfigMapContext,
    HTTPContext,
    RcloneContext,
    LocalObjectReference,
    CONTEXT_CLASSES,
    git_context,
    configmap_context,
    http_context,
    rclone_context,
    parse_context,
)
from .pod import (
    PodSpec,
    Container,
    Volume,
    VolumeMount,
    EnvVar,
    EmptyDirVolumeSource,
    SecretVolumeSource,
    ConfigMapVolumeSource,
    unwrap_manifest,
)
from .job import BuildJob, BuildJobSpec, load_context
from .staged import StagedContext, Helper, SecretMount

__all__ = [
    # Contexts
    'Context',
    'ContextBase',
    'GitContext',
    'ConfigMapContext',
    'HTTPContext',
    'RcloneContext',
    'LocalObjectReference',
    'CONTEXT_CLASSES',
    'git_context',
    'configmap_context',
    'http_context',
    'rclone_context',
    'parse_context',
    # Pod
    'PodSpec',
    'Container',
    'Volume',
    'VolumeMount',
    'EnvVar',
    'EmptyDirVolumeSource',
    'SecretVolumeSource',
    'ConfigMapVolumeSource',
    'unwrap_manifest',
    # Job
    'BuildJob',
    'BuildJobSpec',
    'load_context',
    # Results
    'StagedContext',
    'Helper',
    'SecretMount',
]
