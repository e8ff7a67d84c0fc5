import os
import yaml
import logging
from typing import Dict, Any, Optional
from pydantic import BaseModel, Field, ValidationError, field_validator, ConfigDict

from . import constants
from .datacls import Helper
from .exceptions import (
    ConfigParsingError,
    ConfigFileMissingError,
    ConfigValidationError,
)


logger = logging.getLogger(__name__)


def load_yaml_document(path: str, what: str = "Configuration file") -> Any:
    """
    Read a single YAML document from `path`.

    Raises:
        ConfigFileMissingError: If the file does not exist.
        ConfigParsingError: If the file is not valid YAML.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        logger.debug(f"Successfully parsed YAML from '{path}'.")
        return data
    except FileNotFoundError:
        raise ConfigFileMissingError(f"{what} not found at: {path}")
    except yaml.YAMLError as e:
        raise ConfigParsingError(f"Error parsing YAML file '{path}': {e}")


class HelperModel(BaseModel):
    """
        Class Config-Validation Model describe `helper`
    """
    image: str = constants.DEFAULT_HELPER_IMAGE
    home_dir: str = Field(constants.DEFAULT_HELPER_HOME, alias="homeDir")
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @field_validator("home_dir")
    @classmethod
    def check_home_dir(cls, value: str) -> str:
        """Secrets are mounted below the home directory, which must be absolute"""
        if not value.startswith("/"):
            raise ValueError(f"homeDir must be an absolute path, got '{value}'")
        return value


class ConfigModel(BaseModel):
    """
        Class Config-Validation Model desribe top-level of config
    """
    helper: HelperModel = Field(default_factory=HelperModel)
    target_container: int = Field(0, alias="targetContainer", ge=0)
    context_env: Optional[str] = Field(None, alias="contextEnv")
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class Config:
    """
    Loads and validates the stager configuration using Pydantic models.
    Environment variables override the helper settings of the file.
    """
    def __init__(self, config_path: Optional[str] = None, env: Optional[Dict[str, str]] = None):
        self.path = config_path
        env = os.environ if env is None else env
        raw_data: Dict[str, Any] = {}
        if self.path:
            logger.info(f"Loading configuration from '{self.path}'...")
            raw_data = self._load_raw_config()
        else:
            logger.debug("No configuration file given, using defaults.")

        raw_data = self._apply_env(raw_data, env)
        try:
            self.model = ConfigModel.model_validate(raw_data)
            logger.debug(f"Configuration model validated successfully: \n{self.model.model_dump_json(indent=2)}")
        except ValidationError as e:
            raise ConfigValidationError(f"Configuration validation failed:\n{e}")

    def _load_raw_config(self) -> Dict[str, Any]:
        config_data = load_yaml_document(self.path)
        if config_data is None:
            return {}
        if not isinstance(config_data, dict):
            raise ConfigParsingError("Configuration file must be a YAML document containing a dictionary.")
        return config_data

    @staticmethod
    def _apply_env(raw_data: Dict[str, Any], env) -> Dict[str, Any]:
        helper = dict(raw_data.get("helper") or {})
        if env.get(constants.HELPER_IMAGE_ENV):
            helper["image"] = env[constants.HELPER_IMAGE_ENV]
            logger.debug(f"Helper image overridden by {constants.HELPER_IMAGE_ENV}.")
        if env.get(constants.HELPER_HOME_ENV):
            helper.pop("home_dir", None)
            helper["homeDir"] = env[constants.HELPER_HOME_ENV]
            logger.debug(f"Helper home overridden by {constants.HELPER_HOME_ENV}.")
        if helper:
            return {**raw_data, "helper": helper}
        return raw_data

    @property
    def helper(self) -> Helper:
        return Helper(image=self.model.helper.image, home_dir=self.model.helper.home_dir)

    @property
    def target_container(self) -> int:
        return self.model.target_container

    @property
    def context_env(self) -> Optional[str]:
        return self.model.context_env
