from .refresh_token import *  # NOQA
