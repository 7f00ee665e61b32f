"""
Base schema translating storage field names to the external API naming.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Storage attributes are snake_case; the public boundary is camelCase.

    Both spellings are accepted on input, and model_dump(by_alias=True)
    produces the external form.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_api(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
