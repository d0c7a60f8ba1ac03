# classorder/schemas/base.py

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class CamelModel(BaseModel):
    """
    Внутри snake_case, наружу camelCase (peopleCount, bankName, ...).
    На входе принимаются оба варианта.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

class OkResponse(BaseModel):
    ok: bool = True
