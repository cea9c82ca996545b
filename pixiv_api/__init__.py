# -*- coding: utf-8 -*-
from .base.domain.exceptions import *  # NOQA
from .base.domain.pagination import *  # NOQA
from .base.domain.types import *  # NOQA
from .base.domain.value_object import ValueObject  # NOQA
from .api_client import *  # NOQA
from .models import *  # NOQA
from .pages import *  # NOQA
from .responses import *  # NOQA
from .oauth2.refresh_token import *  # NOQA
from .settings import PixivSettings  # NOQA
from .gateway import *  # NOQA

# fmt: off
__version__ = '0.1.0.dev0'
# fmt: on
