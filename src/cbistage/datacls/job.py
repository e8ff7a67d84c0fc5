from typing import Any, Dict
import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .. import constants
from ..constants import ContextKind
from ..exceptions import ContextDefinitionError
from .contexts import Context, parse_context

logger = logging.getLogger(__name__)


class BuildJobSpec(BaseModel):
    """
        Class Validation Model describe `BuildJob.spec`.
        Only `context` is interpreted here; registry, language and plugin
        selector belong to the controller and are passed through.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    registry: Dict[str, Any] = Field(default_factory=dict)
    language: Dict[str, Any] = Field(default_factory=dict)
    context: Context
    plugin_selector: str = Field("", alias="pluginSelector")

    @field_validator("context", mode="before")
    @classmethod
    def parse_context_field(cls, value: Any) -> Context:
        return parse_context(value)


class BuildJob(BaseModel):
    """
        Class Validation Model describe a `BuildJob` manifest.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    api_version: str = Field("cbi.containerbuilding.github.io/v1alpha1", alias="apiVersion")
    kind: str = "BuildJob"
    metadata: Dict[str, Any] = Field(default_factory=dict)
    spec: BuildJobSpec

    @property
    def name(self) -> str:
        return self.metadata.get("name", "")


def load_context(data: Dict[str, Any]) -> Context:
    """
    Extract the context descriptor from a BuildJob manifest, or parse `data`
    itself when it is a bare context.
    """
    if not isinstance(data, dict):
        raise ContextDefinitionError(f"Expected a mapping, got {type(data).__name__}.")

    if data.get("kind") in {k.value for k in ContextKind}:
        logger.debug("Manifest is a bare context descriptor.")
        return parse_context(data)

    try:
        job = BuildJob.model_validate(data)
    except ValidationError as e:
        raise ContextDefinitionError(f"Invalid BuildJob manifest:\n{e}") from e
    logger.debug(
        f"Loaded BuildJob '{job.name}' with {job.spec.context.kind.value} context "
        f"(label '{constants.CONTEXT_LABELS[job.spec.context.kind]}')"
    )
    return job.spec.context
