# (c) Nelen & Schuurmans

from typing import Any
from typing import Union

__all__ = ["Json", "Id"]


Json = dict[str, Any]
# pixiv ids are integers in JSON but are sometimes passed around as strings
Id = Union[int, str]
