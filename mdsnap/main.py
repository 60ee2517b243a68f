"""
mdsnap entrypoints - the local server and a one-shot clipboard conversion.
"""

import asyncio
import sys

import uvicorn

from mdsnap.app import build_app
from mdsnap.config import get_settings
from mdsnap.shared.errors import MdSnapError
from mdsnap.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


def main() -> None:
    """Run the mdsnap server."""
    settings = get_settings()
    app = build_app(settings)

    print(f"Starting mdsnap on http://{settings.host}:{settings.port}")
    print(f"Docs: http://{settings.host}:{settings.port}/docs")

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


async def _convert_once() -> int:
    from mdsnap.modules.clipboard.service import ClipboardService
    from mdsnap.modules.render.service import get_render_service

    service = get_render_service()
    try:
        result = await ClipboardService(render_service=service).convert()
    except MdSnapError as e:
        logger.error(f"Conversion failed: [{e.code}] {e.message}")
        return 1
    finally:
        await service.aclose()

    logger.info(f"Converted clipboard to {result.width}x{result.height} PNG")
    return 0


def convert() -> None:
    """Convert the clipboard once; bind this to an OS-level shortcut."""
    setup_logging(get_settings().log_level)
    sys.exit(asyncio.run(_convert_once()))


if __name__ == "__main__":
    main()
