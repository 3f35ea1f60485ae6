"""PDF export: Chromium (Playwright), WeasyPrint, or the fpdf2 fallback."""

from __future__ import annotations

import asyncio
import logging

from resume_studio.errors import InvalidInputError, RenderEngineUnavailableError, RenderError
from resume_studio.rendering.html import render_html
from resume_studio.rendering.layout import ResumeLayout

logger = logging.getLogger(__name__)

PDF_ENGINES = ("chromium", "weasyprint", "fpdf")

CHROMIUM_ARGS = ["--no-sandbox", "--disable-dev-shm-usage", "--font-render-hinting=none"]
ZERO_MARGIN = {"top": "0", "right": "0", "bottom": "0", "left": "0"}


def engine_order(engine: str, fallback: bool = True) -> tuple[str, ...]:
    """Engines to try, starting at ``engine``."""
    if engine not in PDF_ENGINES:
        raise InvalidInputError(
            f"Unknown PDF engine: {engine!r}. Choose one of: {', '.join(PDF_ENGINES)}"
        )
    if not fallback:
        return (engine,)
    return PDF_ENGINES[PDF_ENGINES.index(engine):]


async def chromium_pdf(html: str, executable_path: str | None = None) -> bytes:
    """Print ``html`` with headless Chromium. The browser is closed on every path."""
    try:
        from playwright.async_api import Error as PlaywrightError
        from playwright.async_api import async_playwright
    except ImportError as exc:
        raise RenderEngineUnavailableError("Playwright is not installed.") from exc

    async with async_playwright() as p:
        launch_kwargs: dict = {"headless": True, "args": CHROMIUM_ARGS}
        if executable_path:
            launch_kwargs["executable_path"] = executable_path
        try:
            browser = await p.chromium.launch(**launch_kwargs)
        except PlaywrightError as exc:
            raise RenderEngineUnavailableError(f"Could not launch Chromium: {exc}") from exc

        try:
            page = await browser.new_page()
            await page.set_content(html, wait_until="networkidle")
            await page.emulate_media(media="print")
            return await page.pdf(
                format="A4",
                print_background=True,
                prefer_css_page_size=True,
                margin=ZERO_MARGIN,
            )
        finally:
            await browser.close()


def _render_chromium(layout: ResumeLayout, executable_path: str | None) -> bytes:
    return asyncio.run(chromium_pdf(render_html(layout), executable_path))


def _render_weasyprint(layout: ResumeLayout, executable_path: str | None) -> bytes:
    try:
        from weasyprint import HTML
    except (ImportError, OSError) as exc:
        raise RenderEngineUnavailableError("WeasyPrint is not available.") from exc
    return HTML(string=render_html(layout)).write_pdf()


def _render_fpdf(layout: ResumeLayout, executable_path: str | None) -> bytes:
    from resume_studio.export.pdf_fallback import layout_to_pdf_fpdf2

    return layout_to_pdf_fpdf2(layout)


_ENGINES = {
    "chromium": _render_chromium,
    "weasyprint": _render_weasyprint,
    "fpdf": _render_fpdf,
}


def render_pdf(
    layout: ResumeLayout,
    *,
    engine: str = "chromium",
    fallback: bool = True,
    executable_path: str | None = None,
) -> bytes:
    """Render ``layout`` to A4 PDF bytes.

    With ``fallback`` an unavailable engine falls through to the next one in
    ``PDF_ENGINES``. Failures other than availability are not retried.
    """
    tried: list[str] = []
    for name in engine_order(engine, fallback):
        try:
            pdf_bytes = _ENGINES[name](layout, executable_path)
        except RenderEngineUnavailableError as exc:
            logger.warning("PDF engine %s unavailable: %s", name, exc.message)
            tried.append(name)
            continue
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(f"PDF rendering failed ({name}): {exc}") from exc
        logger.info("Rendered PDF with %s (%d bytes)", name, len(pdf_bytes))
        return pdf_bytes

    raise RenderEngineUnavailableError(f"No PDF engine available (tried: {', '.join(tried)}).")
