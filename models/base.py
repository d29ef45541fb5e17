"""
Shared pydantic base for records that travel as camelCase JSON.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Record(BaseModel):
    """Base for every persisted or transmitted record."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """Serialize with camelCase keys, dropping unset optional fields."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
