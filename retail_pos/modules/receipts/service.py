# retail_pos/modules/receipts/service.py
"""
Receipt generation after a sale commits.

The HTML document is rendered synchronously (cheap, needed for the
preview); the PDF file is written on a background thread so no store
transaction or caller waits on it. A failed PDF is logged and reported on
the job, and never touches the sale.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional
import logging
import threading

from ...database.repositories.sales_repo import Sale
from ...errors import ReceiptError
from ...utils.loggers import log_event
from .formatter import ReceiptFormatter

_log = logging.getLogger(__name__)

PdfWriter = Callable[[str, Path, int], None]


def write_pdf_weasyprint(html: str, target: Path, width_mm: int) -> None:
    """Render `html` to `target` with WeasyPrint on a roll of `width_mm`."""
    try:
        from weasyprint import HTML, CSS
    except ImportError as e:
        raise ReceiptError("WeasyPrint is not available; install weasyprint to write PDF receipts.") from e
    css = CSS(string=f"@page {{ size: {width_mm}mm auto; margin: 0; }}")
    HTML(string=html).write_pdf(str(target), stylesheets=[css])


@dataclass
class ReceiptResult:
    success: bool
    path: Optional[Path] = None
    message: str = ""


class ReceiptJob:
    """Handle on one receipt: HTML now, PDF when the worker finishes."""

    def __init__(self, sale_id: int, html: str, path: Path, width: int):
        self.sale_id = sale_id
        self.html = html
        self.path = path
        self.width = width
        self.result: Optional[ReceiptResult] = None
        self._done = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def done(self) -> bool:
        return self._done.is_set()

    def wait(self, timeout: Optional[float] = None) -> Optional[ReceiptResult]:
        self._done.wait(timeout)
        return self.result

    def _finish(self, result: ReceiptResult) -> None:
        self.result = result
        self._done.set()


class ReceiptService:
    def __init__(
        self,
        receipts_dir: Path | str,
        formatter: Optional[ReceiptFormatter] = None,
        pdf_writer: PdfWriter = write_pdf_weasyprint,
        *,
        background: bool = True,
    ):
        self.receipts_dir = Path(receipts_dir)
        self.formatter = formatter or ReceiptFormatter()
        self.pdf_writer = pdf_writer
        self.background = background

    def target_path(self, sale_id: int) -> Path:
        return self.receipts_dir / f"recibo_venda_{sale_id}.pdf"

    def generate(self, sale: Sale, width=None) -> ReceiptJob:
        """
        Render the receipt HTML and start writing the PDF.
        Raises ReceiptError only if the HTML itself cannot be produced.
        """
        w = self.formatter.normalize_width(width)
        html = self.formatter.render_html(sale, w)
        job = ReceiptJob(sale.sale_id, html, self.target_path(sale.sale_id), w)

        if self.background:
            t = threading.Thread(
                target=self._write_pdf,
                args=(job,),
                name=f"receipt-{sale.sale_id}",
                daemon=True,
            )
            job._thread = t
            t.start()
        else:
            self._write_pdf(job)
        return job

    def _write_pdf(self, job: ReceiptJob) -> None:
        try:
            self.receipts_dir.mkdir(parents=True, exist_ok=True)
            self.pdf_writer(job.html, job.path, job.width)
        except Exception as e:  # worker thread: report, never raise
            msg = f"PDF receipt for sale #{job.sale_id} failed: {e}"
            log_event(_log, "receipt", "failed", msg, {"sale_id": job.sale_id}, level=logging.WARNING)
            job._finish(ReceiptResult(success=False, path=None, message=msg))
            return
        log_event(_log, "receipt", "rendered", f"Receipt written for sale #{job.sale_id}",
                  {"sale_id": job.sale_id, "path": str(job.path)})
        job._finish(ReceiptResult(success=True, path=job.path, message=""))
