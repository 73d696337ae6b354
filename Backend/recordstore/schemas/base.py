from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    JSON uses camelCase keys (what the frontend sends and reads);
    snake_case field names are accepted on input as well.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    message: str


class CreatedResponse(MessageResponse):
    id: int
