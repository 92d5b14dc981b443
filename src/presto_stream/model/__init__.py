from typing import Any, Type, TypeVar

import pydantic
from pydantic import ConfigDict

Model = TypeVar("Model", bound="PrestoBaseModel")


class PrestoBaseModel(pydantic.BaseModel):
    # Coordinator payloads carry many fields we don't model, keep them around
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @classmethod
    def parse_model(cls: Type[Model], *args: Any, **kwargs: Any) -> Model:
        return cls.model_validate(*args, **kwargs)
