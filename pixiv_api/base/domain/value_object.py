# (c) Nelen & Schuurmans

from pydantic import BaseModel
from pydantic import ConfigDict

__all__ = ["ValueObject"]


class ValueObject(BaseModel):
    """Immutable record decoded from (or sent to) the API.

    Unknown fields in API responses are ignored, so that additions on the
    server side do not break decoding.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)
