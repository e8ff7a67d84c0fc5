from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from .. import constants
from .pod import PodSpec


class Helper(BaseModel):
    """
        The staging helper image run by every generated init container,
        and the home directory of the user it runs as.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    image: str = constants.DEFAULT_HELPER_IMAGE
    home_dir: str = Field(constants.DEFAULT_HELPER_HOME, alias="homeDir")


class StagedContext(BaseModel):
    """
        Result of staging a context: the in-pod path the target container reads
        the context from, and the pod spec carrying the staging steps.
        The path is populated once every init container has completed.
    """
    model_config = ConfigDict(frozen=True)

    path: str
    pod_spec: PodSpec


class SecretMount(NamedTuple):
    """A credential secret mounted into an init container only"""
    suffix: str
    secret_name: str
    directory: str
