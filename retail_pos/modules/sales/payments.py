# retail_pos/modules/sales/payments.py
from __future__ import annotations

import enum
import unicodedata

from ...errors import ValidationError


def _fold(text: str) -> str:
    """lower-case, strip accents and surrounding whitespace"""
    s = unicodedata.normalize("NFD", str(text).strip().lower())
    return "".join(ch for ch in s if not unicodedata.combining(ch))


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    DEBIT = "debit"
    CREDIT = "credit"
    PIX = "pix"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, raw) -> "PaymentMethod":
        """
        Normalise free-form input ('Dinheiro', 'Cartão (Débito)', ' PIX ')
        to one of the five methods. Unknown non-empty text is OTHER.
        """
        if isinstance(raw, cls):
            return raw
        if raw is None or not str(raw).strip():
            raise ValidationError("Payment method is required.")
        s = _fold(raw)
        if s in _EXACT:
            return _EXACT[s]
        # 'cartao (credito)' / 'credit card' etc.
        if "credit" in s:
            return cls.CREDIT
        if "debit" in s:
            return cls.DEBIT
        if "pix" in s:
            return cls.PIX
        if "dinheiro" in s or "cash" in s:
            return cls.CASH
        return cls.OTHER


_EXACT = {
    "cash": PaymentMethod.CASH,
    "dinheiro": PaymentMethod.CASH,
    "debit": PaymentMethod.DEBIT,
    "debito": PaymentMethod.DEBIT,
    "credit": PaymentMethod.CREDIT,
    "credito": PaymentMethod.CREDIT,
    "pix": PaymentMethod.PIX,
    "other": PaymentMethod.OTHER,
    "outro": PaymentMethod.OTHER,
}

_LABELS = {
    PaymentMethod.CASH: "Dinheiro",
    PaymentMethod.DEBIT: "Cartão (Débito)",
    PaymentMethod.CREDIT: "Cartão (Crédito)",
    PaymentMethod.PIX: "Pix",
    PaymentMethod.OTHER: "Outro",
}
