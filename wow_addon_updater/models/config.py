"""
Pydantic models for the YAML configuration file.
Provides validation for both game profiles.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ProfileConfig(BaseModel):
    """Install directory and addon list of one game client."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    path: str = ""
    addons: list[str] = Field(default_factory=list)

    @field_validator("path", mode="before")
    @classmethod
    def validate_path(cls, v):
        """Treats an empty YAML value as an unset path."""
        return "" if v is None else v

    @field_validator("addons", mode="before")
    @classmethod
    def validate_addons(cls, v):
        """Drops blank entries while keeping the configured order."""
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError("addons must be a list of URLs.")
        return [str(url).strip() for url in v if url is not None and str(url).strip()]

    @model_validator(mode="after")
    def validate_install_path(self) -> "ProfileConfig":
        """An addon list is useless without a directory to install into."""
        if self.addons and not self.path:
            raise ValueError("A 'path' is required when addons are configured.")
        return self


class UpdaterConfig(BaseModel):
    """A validated configuration model for the application."""

    classic: ProfileConfig = Field(default_factory=ProfileConfig)
    retail: ProfileConfig = Field(default_factory=ProfileConfig)

    @field_validator("classic", "retail", mode="before")
    @classmethod
    def validate_profile(cls, v):
        """An empty section in the YAML file parses as ``None``."""
        return {} if v is None else v

    def profile(self, name: str) -> ProfileConfig:
        """Returns the configuration of the profile called ``name``."""
        return getattr(self, name)
