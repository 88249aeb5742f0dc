"""
fangirl CLI - build a playlist of new albums from the artists you follow.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Sequence

from .auth import acquire_client
from .config import load_config, load_dotenv_file
from .error_handling import ConfigurationError, setup_logging
from .workflow import run

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv_file()

    try:
        config = load_config(argv)
    except ConfigurationError as e:
        setup_logging()
        logger.error(f"Failed to initialize a configuration: {e}")
        return EXIT_CONFIG

    setup_logging("DEBUG" if config.verbose else "INFO", log_dir=config.log_dir)
    logger.debug(f"Configuration: {config!r}")

    try:
        sp = acquire_client(config)
        result = run(config, sp)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.error(f"fangirl run failed: {e}", exc_info=True)
        return EXIT_FAILURE

    if result.build is not None:
        logger.info(
            f"✅ Done: {result.build.albums_imported:,} albums, "
            f"{result.build.tracks_added:,} tracks"
        )
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
