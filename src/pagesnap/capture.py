"""
Live page capture.

Resolves everything the renderers would otherwise have to ask the browser
for (geometry, computed style, viewport, ready state) up front, so the
snapshot itself runs synchronously over a parsed tree.

Usage:
    document = await capture_page(page)
    result = generate_snapshot(document, registry, "interactive")
"""

import logging
from typing import Optional, Tuple

from playwright.async_api import Page

from .exceptions import CaptureError
from .host import BBOX_STAMP, STYLE_STAMP, PageDocument

logger = logging.getLogger(__name__)


# =============================================================================
# JavaScript
# =============================================================================

STAMP_JS = """
(attrs) => {
    let stamped = 0;
    for (const el of document.querySelectorAll('*')) {
        try {
            const rect = el.getBoundingClientRect();
            el.setAttribute(attrs.bbox, [
                Math.round(rect.x),
                Math.round(rect.y),
                Math.round(rect.width),
                Math.round(rect.height),
            ].join(','));

            const style = window.getComputedStyle(el);
            el.setAttribute(attrs.style, [
                style.display,
                style.visibility,
                style.opacity,
            ].join('|'));
            stamped++;
        } catch (e) {}
    }
    return stamped;
}
"""

UNSTAMP_JS = """
(attrs) => {
    for (const el of document.querySelectorAll(`[${attrs.bbox}], [${attrs.style}]`)) {
        el.removeAttribute(attrs.bbox);
        el.removeAttribute(attrs.style);
    }
}
"""

VIEWPORT_JS = "() => [window.innerWidth, window.innerHeight]"

READY_STATE_JS = "() => document.readyState"

_STAMP_ARGS = {"bbox": BBOX_STAMP, "style": STYLE_STAMP}


# =============================================================================
# Capture
# =============================================================================

async def _viewport(page: Page) -> Optional[Tuple[int, int]]:
    size = page.viewport_size
    if size:
        return size["width"], size["height"]
    try:
        width, height = await page.evaluate(VIEWPORT_JS)
        return int(width), int(height)
    except Exception as e:
        logger.warning(f"Could not read viewport size for {page.url}: {e}")
        return None


async def _ready_state(page: Page) -> str:
    try:
        return await page.evaluate(READY_STATE_JS)
    except Exception as e:
        logger.debug(f"Could not read readyState for {page.url}: {e}")
        return "unknown"


async def capture_page(page: Page, *, stamp: bool = True, parser: str = "lxml") -> PageDocument:
    """
    Capture a live Playwright page as a ``PageDocument``.

    Args:
        page: Playwright page to read
        stamp: Record geometry and computed style on every element first
        parser: BeautifulSoup parser for the captured markup

    Returns:
        PageDocument carrying the page's URL, title, viewport and ready state

    Raises:
        CaptureError: The page content could not be read
    """
    stamped = False
    if stamp:
        try:
            count = await page.evaluate(STAMP_JS, _STAMP_ARGS)
            stamped = True
            logger.debug(f"Stamped {count} elements on {page.url}")
        except Exception as e:
            logger.warning(f"Error stamping page {page.url}, capturing without geometry: {e}")

    try:
        html = await page.content()
    except Exception as e:
        raise CaptureError(f"Could not read page content: {e}", url=page.url) from e
    finally:
        if stamped:
            try:
                await page.evaluate(UNSTAMP_JS, _STAMP_ARGS)
            except Exception as e:
                logger.warning(f"Error removing capture stamps from {page.url}: {e}")

    try:
        title = await page.title()
    except Exception as e:
        logger.debug(f"Could not read title for {page.url}: {e}")
        title = None

    return PageDocument.from_html(
        html,
        parser=parser,
        url=page.url,
        title=title,
        viewport=await _viewport(page),
        ready_state=await _ready_state(page),
    )
