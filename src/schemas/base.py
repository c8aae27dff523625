"""Base model for wire schemas (camelCase JSON, snake_case Python)."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base for every request/response schema.

    JSON uses camelCase (``copyCount``, ``totalPages``); Python code uses the
    snake_case field names. Both spellings are accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
