"""
Fixed-point monetary value.

Every amount in the ledger is an integer magnitude plus a count of decimal
places, so ``MonetaryValue(1550, 2)`` means 15.50. Values are never held as
binary floats; the exchange rate travels alongside the amount for display
purposes and is never applied to the magnitude.
"""

from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from functools import total_ordering
from typing import Optional

from pocketledger.config import (
    DEFAULT_CURRENCY,
    DEFAULT_EXCHANGE_RATE,
    DEFAULT_SCALE,
)


def _require_int(value, label: str) -> int:
    # bool is an int subclass but never a valid magnitude or scale
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{label} must be an integer, got {value!r}")
    return value


@total_ordering
@dataclass(frozen=True, eq=False)
class MonetaryValue:
    """
    An exact amount of money: ``magnitude / 10 ** scale`` in ``currency``.

    Attributes:
        magnitude: Integer amount in the smallest unit for this scale
        scale: Number of decimal places (>= 0)
        currency: ISO currency code
        exchange_rate: Rate to the reference currency, display only
    """

    magnitude: int
    scale: int = DEFAULT_SCALE
    currency: str = DEFAULT_CURRENCY
    exchange_rate: float = DEFAULT_EXCHANGE_RATE

    def __post_init__(self):
        _require_int(self.magnitude, "magnitude")
        _require_int(self.scale, "scale")
        if self.scale < 0:
            raise ValueError(f"scale must be >= 0, got {self.scale}")
        if not self.currency or not isinstance(self.currency, str):
            raise ValueError(f"Invalid currency: {self.currency!r}")
        if isinstance(self.exchange_rate, bool) or not isinstance(
            self.exchange_rate, (int, float)
        ):
            raise ValueError(f"Invalid exchange_rate: {self.exchange_rate!r}")
        if self.exchange_rate <= 0:
            raise ValueError(f"exchange_rate must be positive, got {self.exchange_rate}")
        object.__setattr__(self, "exchange_rate", float(self.exchange_rate))

    # =========================================================================
    # Scale handling
    # =========================================================================

    def rescale(self, scale: int) -> "MonetaryValue":
        """
        Return the same amount expressed with ``scale`` decimal places.

        Raises:
            ValueError: If the new scale is negative or would drop
                non-zero digits
        """
        _require_int(scale, "scale")
        if scale < 0:
            raise ValueError(f"scale must be >= 0, got {scale}")

        delta = scale - self.scale
        if delta >= 0:
            return replace(self, magnitude=self.magnitude * 10**delta, scale=scale)

        factor = 10 ** (-delta)
        if self.magnitude % factor:
            raise ValueError(f"Rescaling {self} to scale {scale} would lose precision")
        return replace(self, magnitude=self.magnitude // factor, scale=scale)

    def align(self, other: "MonetaryValue") -> tuple["MonetaryValue", "MonetaryValue"]:
        """Rescale both operands to the larger of the two scales."""
        scale = max(self.scale, other.scale)
        return self.rescale(scale), other.rescale(scale)

    def _check_currency(self, other: "MonetaryValue"):
        if self.currency != other.currency:
            raise ValueError(
                f"Cannot combine {self.currency} and {other.currency} amounts"
            )

    def _normalized(self) -> tuple[int, int]:
        magnitude, scale = self.magnitude, self.scale
        while scale > 0 and magnitude % 10 == 0:
            magnitude //= 10
            scale -= 1
        return magnitude, scale

    # =========================================================================
    # Arithmetic and comparison
    # =========================================================================

    def __add__(self, other):
        if not isinstance(other, MonetaryValue):
            return NotImplemented
        self._check_currency(other)
        left, right = self.align(other)
        return replace(left, magnitude=left.magnitude + right.magnitude)

    def __sub__(self, other):
        if not isinstance(other, MonetaryValue):
            return NotImplemented
        self._check_currency(other)
        left, right = self.align(other)
        return replace(left, magnitude=left.magnitude - right.magnitude)

    def __neg__(self):
        return self.negate()

    def __eq__(self, other):
        if not isinstance(other, MonetaryValue):
            return NotImplemented
        if self.currency != other.currency:
            return False
        left, right = self.align(other)
        return left.magnitude == right.magnitude

    def __lt__(self, other):
        if not isinstance(other, MonetaryValue):
            return NotImplemented
        self._check_currency(other)
        left, right = self.align(other)
        return left.magnitude < right.magnitude

    def __hash__(self):
        return hash((self._normalized(), self.currency))

    def negate(self) -> "MonetaryValue":
        return replace(self, magnitude=-self.magnitude)

    @property
    def is_negative(self) -> bool:
        return self.magnitude < 0

    # =========================================================================
    # Formatting and parsing
    # =========================================================================

    def format(self) -> str:
        """Render the amount as a decimal string, e.g. ``15.50``."""
        sign = "-" if self.magnitude < 0 else ""
        digits = abs(self.magnitude)
        if self.scale == 0:
            return f"{sign}{digits}"
        whole, fraction = divmod(digits, 10**self.scale)
        return f"{sign}{whole}.{fraction:0{self.scale}d}"

    def __str__(self):
        return self.format()

    @classmethod
    def parse(
        cls,
        text: str,
        scale: Optional[int] = None,
        currency: str = DEFAULT_CURRENCY,
        exchange_rate: float = DEFAULT_EXCHANGE_RATE,
    ) -> "MonetaryValue":
        """
        Parse a decimal string such as ``"15.50"`` without float conversion.

        Args:
            text: Decimal text, optionally signed
            scale: Target scale; defaults to the number of digits given
            currency: Currency code of the result
            exchange_rate: Display exchange rate of the result

        Raises:
            ValueError: If the text is not a finite decimal or does not fit
                the requested scale exactly
        """
        try:
            value = Decimal(str(text).strip())
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {text!r}") from e
        if not value.is_finite():
            raise ValueError(f"Invalid amount: {text!r}")

        sign, digits, exponent = value.as_tuple()
        magnitude = int("".join(str(d) for d in digits) or "0")
        if exponent > 0:
            magnitude *= 10**exponent
        if sign:
            magnitude = -magnitude

        parsed = cls(
            magnitude=magnitude,
            scale=-exponent if exponent < 0 else 0,
            currency=currency,
            exchange_rate=exchange_rate,
        )
        return parsed.rescale(scale) if scale is not None else parsed

    # =========================================================================
    # Storage and transport
    # =========================================================================

    def to_columns(self) -> tuple[int, int]:
        """Return the ``(amount, amount_decimal)`` storage pair."""
        return self.magnitude, self.scale

    @classmethod
    def from_columns(
        cls,
        amount,
        amount_decimal,
        currency: str = DEFAULT_CURRENCY,
        exchange_rate: float = DEFAULT_EXCHANGE_RATE,
    ) -> "MonetaryValue":
        """Rebuild a value from its storage pair, rejecting non-integer data."""
        return cls(
            magnitude=_require_int(amount, "amount"),
            scale=_require_int(amount_decimal, "amount_decimal"),
            currency=currency,
            exchange_rate=exchange_rate,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "amount": self.magnitude,
            "amount_decimal": self.scale,
            "currency": self.currency,
            "exchange_rate": self.exchange_rate,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MonetaryValue":
        """Create a MonetaryValue from its dictionary representation."""
        return cls.from_columns(
            data["amount"],
            data.get("amount_decimal", DEFAULT_SCALE),
            currency=data.get("currency") or DEFAULT_CURRENCY,
            exchange_rate=data.get("exchange_rate", DEFAULT_EXCHANGE_RATE),
        )
