"""Category aggregate — the VAT rate source of truth for its products."""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, String

from ordering.catalogue.events import CategoryTaxRateChanged
from ordering.domain import ordering


@ordering.aggregate
class Category:
    name = String(required=True, max_length=100)
    tax_rate = Float(required=True, min_value=0.0, max_value=1.0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def name_must_not_be_blank(self):
        if not (self.name or "").strip():
            raise ValidationError({"name": ["Category name is required"]})

    @classmethod
    def create(cls, name, tax_rate):
        now = datetime.now(UTC)
        return cls(name=name.strip(), tax_rate=tax_rate, created_at=now, updated_at=now)

    def change_tax_rate(self, new_rate):
        previous_rate = self.tax_rate
        now = datetime.now(UTC)
        self.tax_rate = new_rate
        self.updated_at = now

        self.raise_(
            CategoryTaxRateChanged(
                category_id=str(self.id),
                previous_rate=previous_rate,
                new_rate=new_rate,
                changed_at=now,
            )
        )
