"""Branded error pages.

Maps an error code to a deterministic OCTOmatiz-branded HTML document and
the HTTP status code it is served with. Pages are rendered from the
``templates/error_page.html`` Jinja2 template with autoescaping, so any
input, including an unknown code or a hostile slug, yields a complete and
safe document.
"""

from dataclasses import dataclass

from jinja2 import Environment, PackageLoader, select_autoescape

from octomatiz.types import ErrorCode

BRAND_NAME = "OCTOmatiz"
BRAND_ICON = "\U0001f419"  # octopus

GENERIC = "GENERIC"


@dataclass(frozen=True)
class ErrorPage:
    """Rendered error page with its HTTP status."""

    html: str
    status_code: int


@dataclass(frozen=True)
class _ErrorMessage:
    title: str
    message: str
    emoji: str


_MESSAGES: dict[str, _ErrorMessage] = {
    ErrorCode.KV_UNAVAILABLE.value: _ErrorMessage(
        title="Layanan Tidak Tersedia",
        message="Maaf, layanan sedang tidak tersedia. Silakan coba beberapa saat lagi.",
        emoji="\U0001f527",
    ),
    ErrorCode.KV_READ_ERROR.value: _ErrorMessage(
        title="Gagal Memuat Halaman",
        message="Terjadi kesalahan saat memuat halaman. "
        "Silakan refresh atau coba lagi nanti.",
        emoji="\U0001f635",
    ),
    ErrorCode.KV_WRITE_ERROR.value: _ErrorMessage(
        title="Gagal Menyimpan",
        message="Terjadi kesalahan saat menyimpan halaman. Silakan coba lagi.",
        emoji="\U0001f4be",
    ),
    ErrorCode.NOT_FOUND.value: _ErrorMessage(
        title="Halaman Tidak Ditemukan",
        message="Halaman yang Anda cari tidak ditemukan.",
        emoji="\U0001f50d",
    ),
    GENERIC: _ErrorMessage(
        title="Terjadi Kesalahan",
        message="Maaf, terjadi kesalahan. Silakan coba lagi nanti.",
        emoji="\U0001f614",
    ),
}

_STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.KV_UNAVAILABLE: 503,
    ErrorCode.KV_READ_ERROR: 503,
    ErrorCode.KV_WRITE_ERROR: 500,
}

_templates = Environment(
    loader=PackageLoader("octomatiz", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
_ERROR_TEMPLATE = _templates.get_template("error_page.html")


def _coerce_code(error_code: ErrorCode | str | None) -> ErrorCode | None:
    if isinstance(error_code, ErrorCode):
        return error_code
    try:
        return ErrorCode(error_code)
    except ValueError:
        return None


def status_for_error(error_code: ErrorCode | str | None) -> int:
    """Return the HTTP status code for an error code.

    NOT_FOUND maps to 404, KV_UNAVAILABLE and KV_READ_ERROR to 503,
    KV_WRITE_ERROR and anything unrecognized to 500.
    """
    code = _coerce_code(error_code)
    if code is None:
        return 500
    return _STATUS_CODES[code]


def render_error_page(
    error_code: ErrorCode | str | None, slug: str | None = None
) -> ErrorPage:
    """Render the branded error page for an error code.

    Args:
        error_code: Error code; unknown values fall back to a generic message.
        slug: Page slug, mentioned in the NOT_FOUND message when given.

    Returns:
        ErrorPage with the HTML document and its status code.
    """
    code = _coerce_code(error_code)
    status_code = status_for_error(code)
    entry = _MESSAGES[code.value] if code is not None else _MESSAGES[GENERIC]

    html = _ERROR_TEMPLATE.render(
        brand_name=BRAND_NAME,
        brand_icon=BRAND_ICON,
        status_code=status_code,
        title=entry.title,
        message=entry.message,
        emoji=entry.emoji,
        missing_slug=slug if code is ErrorCode.NOT_FOUND else None,
    )
    return ErrorPage(html=html, status_code=status_code)


__all__ = [
    "BRAND_ICON",
    "BRAND_NAME",
    "GENERIC",
    "ErrorPage",
    "render_error_page",
    "status_for_error",
]
