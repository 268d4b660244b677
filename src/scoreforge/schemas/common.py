# src/scoreforge/schemas/common.py

"""Common Pydantic schemas used across multiple resources."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing to camelCase while accepting snake_case too.

    Python code builds these models with snake_case field names; the API
    reads and writes the camelCase aliases.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
