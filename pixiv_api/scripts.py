"""Walk through the pages of pixiv app API listings."""
import argparse
import logging
import os

from .gateway import SyncPixivGateway
from .oauth2.refresh_token import PixivAuthSettings
from .settings import PixivSettings

logger = logging.getLogger(__name__)


def get_parser():
    """Return argument parser."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        dest="verbose",
        default=False,
        help="Verbose output",
    )
    parser.add_argument(
        "--refresh-token",
        default=os.environ.get("PIXIV_REFRESH_TOKEN"),
        help="OAuth2 refresh token (default: $PIXIV_REFRESH_TOKEN)",
    )
    parser.add_argument("--client-id", default=os.environ.get("PIXIV_CLIENT_ID", ""))
    parser.add_argument(
        "--client-secret", default=os.environ.get("PIXIV_CLIENT_SECRET", "")
    )
    parser.add_argument(
        "--max-pages",
        type=int,
        default=None,
        help="Stop after this many pages",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    user_illusts = subparsers.add_parser(
        "user-illusts", help="List the illusts of a user"
    )
    user_illusts.add_argument("user_id", type=int)
    return parser


def print_user_illusts(
    gateway: SyncPixivGateway, user_id: int, max_pages: int | None = None
) -> int:
    """Print 'id<TAB>title' for every illust of a user; returns the page count."""
    count = 0
    for page in gateway.user_illusts(user_id).iter_pages():
        for illust in page.items:
            print(f"{illust.id}\t{illust.title}")
        count += 1
        if max_pages is not None and count >= max_pages:
            break
    return count


def main():  # pragma: no cover
    """Call main command with args from parser.

    This method is called when you run 'pixiv-api', this is configured in
    'pyproject.toml'.
    """
    options = get_parser().parse_args()
    if options.verbose:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    try:
        settings = PixivSettings(
            auth=PixivAuthSettings(
                client_id=options.client_id,
                client_secret=options.client_secret,
                refresh_token=options.refresh_token or "",
            )
        )
        with SyncPixivGateway.from_settings(settings) as gateway:
            pages = print_user_illusts(gateway, options.user_id, options.max_pages)
        logger.info(f"fetched {pages} page(s)")
    except Exception:
        logger.exception("An exception has occurred.")
        return 1
    return 0
