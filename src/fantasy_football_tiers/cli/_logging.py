import logging
import sys

_PACKAGE_LOGGER = "fantasy_football_tiers"


def configure_logging(*, verbose: bool = False) -> None:
    """Send tier-engine logs to stderr.

    Strategy fallbacks (warnings) always show. ``verbose`` adds cache hits,
    computed-tier summaries and sweeper activity. Other libraries stay at WARNING.
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.WARNING)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root.addHandler(handler)

    logging.getLogger(_PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
