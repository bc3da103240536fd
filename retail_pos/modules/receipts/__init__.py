from .formatter import ReceiptFormatter
from .service import ReceiptJob, ReceiptResult, ReceiptService, write_pdf_weasyprint

__all__ = [
    "ReceiptFormatter",
    "ReceiptJob",
    "ReceiptResult",
    "ReceiptService",
    "write_pdf_weasyprint",
]
