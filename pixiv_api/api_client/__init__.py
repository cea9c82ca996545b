from .api_provider import *  # NOQA
from .exceptions import *  # NOQA
from .sync_api_provider import *  # NOQA
