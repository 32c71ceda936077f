"""Base configuration model with YAML loading capabilities."""

from pathlib import Path
from typing import TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from .errors import ConfigurationError

T = TypeVar("T", bound="ConfigModel")


class ConfigModel(BaseModel):
    """Base model with YAML loading/saving capabilities."""

    @classmethod
    def from_yaml(cls: type[T], path: Path) -> T:
        """
        Load and validate configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Validated configuration model instance

        Raises:
            ConfigurationError: On file not found, invalid YAML, or validation errors
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise cls._yaml_error(e, path) from e
        except OSError as e:
            raise ConfigurationError(f"Error reading configuration file {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Expected a mapping at the top of {path.name}")

        try:
            return cls(**data)
        except ValidationError as e:
            raise cls._validation_error(e, path.name) from e

    @classmethod
    def from_dict(cls: type[T], data: dict, source: str = "<dict>") -> T:
        """Validate configuration from an in-memory mapping."""
        try:
            return cls(**data)
        except ValidationError as e:
            raise cls._validation_error(e, source) from e

    @classmethod
    def load_or_default(cls: type[T], path: Path | None, **defaults) -> T:
        """
        Load from YAML or create with default values.

        Args:
            path: Optional path to YAML configuration file
            **defaults: Default values if file not provided

        Returns:
            Configuration model instance
        """
        if path and Path(path).exists():
            return cls.from_yaml(path)
        return cls.from_dict(defaults)

    def to_yaml(self, path: Path):
        """
        Write configuration to YAML file.

        Args:
            path: Path to write YAML file
        """
        Path(path).write_text(self.to_yaml_string())

    def to_yaml_string(self) -> str:
        """Convert configuration to YAML string."""
        return yaml.safe_dump(
            self.model_dump(mode="json", exclude_unset=False),
            default_flow_style=False,
            sort_keys=False,
        )

    @classmethod
    def _validation_error(cls, error: ValidationError, source: str) -> ConfigurationError:
        """Flatten pydantic errors into one readable message."""
        lines = [f"Invalid {cls.__name__} configuration: {source}"]
        for err in error.errors():
            field_path = ".".join(str(loc) for loc in err["loc"]) or "<root>"
            if "missing" in err["type"]:
                lines.append(f"  Missing required field: {field_path}")
            else:
                lines.append(f"  {field_path}: {err['msg']}")
        return ConfigurationError("\n".join(lines))

    @classmethod
    def _yaml_error(cls, error: yaml.YAMLError, path: Path) -> ConfigurationError:
        message = f"Invalid YAML syntax in: {path.name}"
        # Try to extract line number from error
        mark = getattr(error, "problem_mark", None)
        if mark is not None:
            message += f" (line {mark.line + 1}, column {mark.column + 1})"
        return ConfigurationError(f"{message}\n{error}")
