# config_manager/i18n.py
from typing import Dict, ClassVar
from pydantic import BaseModel, Field, ConfigDict
from ..i18n import t


class Description(BaseModel):
    """
    Represents a field description using i18n keys.
    """

    i18n_key: str = Field(..., description="i18n key for centralized translations")

    def get(self) -> str:
        """Retrieves the description in the current language."""
        return t(self.i18n_key)


class I18nMixin(BaseModel):
    """
    Mixin for Pydantic models to support internationalization.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    # Class variable for field descriptions - not a model field
    DESCRIPTIONS: ClassVar[Dict[str, Description | str]] = {}

    def get_field_description(self, field_name: str) -> str:
        """
        Get the description for a field using the i18n system.

        Args:
            field_name: The name of the field.

        Returns:
            The description for the field, or the field name when none is declared.
        """
        description = self.DESCRIPTIONS.get(field_name)
        if isinstance(description, Description):
            return description.get()
        elif isinstance(description, str):
            return description
        return field_name

    def get_all_descriptions(self) -> Dict[str, str]:
        """Get all field descriptions in the current language."""
        return {name: self.get_field_description(name) for name in self.DESCRIPTIONS}
