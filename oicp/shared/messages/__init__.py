from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict


class BaseModel(PydanticBaseModel):
    """
    Changing default pydantic configuration to suit our needs for handling
    the data types and messages of the Open InterCharge Protocol (OICP)
    """

    model_config = ConfigDict(
        # Allow input by alias (the wire name) or field name
        populate_by_name=True,
        # Forbid extra attributes during model initialization
        extra="forbid",
        # OICP values are immutable, changes go through a ResponseBuilder
        frozen=True,
        # Cancellation tokens are opaque objects handed over by the transport
        arbitrary_types_allowed=True,
    )

    def __str__(self):
        return self.__class__.__name__
