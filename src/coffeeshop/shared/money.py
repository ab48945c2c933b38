"""Money value object — non-negative amounts fixed at two decimal places."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Float

from coffeeshop.domain import coffeeshop

_CENTS = Decimal("0.01")


def _quantize(value) -> Decimal:
    # str() keeps float inputs like 2.005 from picking up binary noise
    return Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)


@coffeeshop.value_object
class Money:
    """Monetary amount rounded half-up to cents.

    Arithmetic never mutates; every operation returns a new Money. Direct
    construction only accepts whole cents; ``Money.of()`` rounds on the way in.
    """

    amount = Float(required=True, min_value=0.0)

    @invariant.post
    def amount_must_be_whole_cents(self):
        if self.amount is not None and _quantize(self.amount) != Decimal(str(self.amount)):
            raise ValidationError({"amount": [f"Amount must be in whole cents: {self.amount}"]})

    @classmethod
    def of(cls, amount) -> "Money":
        if amount is None:
            raise ValidationError({"amount": ["Amount is required"]})
        try:
            value = _quantize(amount)
        except InvalidOperation:
            raise ValidationError({"amount": [f"Invalid amount: {amount!r}"]}) from None
        if value < 0:
            raise ValidationError({"amount": ["Amount cannot be negative"]})
        return cls(amount=float(value))

    @classmethod
    def zero(cls) -> "Money":
        return cls.of(0)

    def as_decimal(self) -> Decimal:
        return _quantize(self.amount)

    def add(self, other: "Money") -> "Money":
        return Money.of(self.as_decimal() + other.as_decimal())

    def subtract(self, other: "Money") -> "Money":
        result = self.as_decimal() - other.as_decimal()
        if result < 0:
            raise ValidationError({"amount": ["Result cannot be negative"]})
        return Money.of(result)

    def multiply(self, multiplier) -> "Money":
        return Money.of(self.as_decimal() * Decimal(str(multiplier)))

    def is_greater_than(self, other: "Money") -> bool:
        return self.as_decimal() > other.as_decimal()

    def __str__(self) -> str:
        return f"{self.as_decimal()}"
