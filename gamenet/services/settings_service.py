from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from sqlalchemy.orm import Session

from gamenet.core import errors
from gamenet.models.setting import Setting

DEFAULT_TAX_ENABLED = False
DEFAULT_TAX_RATE = Decimal("10")  # percent


@dataclass(frozen=True)
class TaxSettings:
    enabled: bool
    rate: Decimal  # percent

    def as_dict(self) -> dict:
        return {"taxEnabled": self.enabled, "taxRate": float(self.rate)}


def get_tax_settings(db: Session) -> TaxSettings:
    enabled = db.get(Setting, "TAX_ENABLED")
    rate = db.get(Setting, "TAX_RATE")
    rate_value = DEFAULT_TAX_RATE
    if rate and rate.str_value:
        try:
            rate_value = Decimal(rate.str_value)
        except InvalidOperation:
            rate_value = DEFAULT_TAX_RATE
    return TaxSettings(
        enabled=bool(enabled.int_value) if enabled and enabled.int_value is not None else DEFAULT_TAX_ENABLED,
        rate=rate_value,
    )


def _upsert(db: Session, key: str, int_value=None, str_value=None) -> None:
    s = db.get(Setting, key)
    if not s:
        db.add(Setting(key=key, int_value=int_value, str_value=str_value))
    else:
        s.int_value = int_value
        s.str_value = str_value


def set_tax_settings(db: Session, enabled: bool | None = None, rate=None) -> TaxSettings:
    if rate is not None:
        rate = Decimal(str(rate))
        if rate < 0 or rate > 100:
            raise errors.ValidationError("tax rate must be between 0 and 100")
        _upsert(db, "TAX_RATE", str_value=str(rate))
    if enabled is not None:
        _upsert(db, "TAX_ENABLED", int_value=1 if enabled else 0)
    db.commit()
    return get_tax_settings(db)


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_tax(db: Session, base: int) -> tuple[int, int]:
    """(tax, total) for a pre-tax amount. Tax is zero while disabled."""
    tax_settings = get_tax_settings(db)
    if not tax_settings.enabled:
        return 0, base
    tax = round_half_up(Decimal(base) * tax_settings.rate / Decimal(100))
    return tax, base + tax
