"""Merchandise stock ledger.

Stock is checked when an order is placed and decremented exactly once, when the
payment is approved. The decrement is a conditional UPDATE so concurrent
approvals cannot drive a variant below zero.
"""

import typing as t
import uuid

import structlog
from django.db.models import F

from events.exceptions import InsufficientStock, VariantNotFound
from events.models import Event, MerchandiseVariant, Registration

logger = structlog.get_logger(__name__)


class Selection(t.NamedTuple):
    variant_id: uuid.UUID
    quantity: int


def reserve_check(variant: MerchandiseVariant, quantity: int) -> None:
    """Fail with InsufficientStock if ``quantity`` exceeds the remaining stock. Read-only."""
    if quantity < 1:
        raise InsufficientStock("Quantity must be at least 1.", variant_id=str(variant.pk))
    if quantity > variant.stock:
        raise InsufficientStock(
            f"Only {variant.stock} left of {variant.name}.",
            variant_id=str(variant.pk),
            available=variant.stock,
            requested=quantity,
        )


def validate_selection(event: Event, selection: t.Iterable[Selection]) -> list[tuple[MerchandiseVariant, int]]:
    """Resolve and check a merchandise selection against the event's variants.

    Quantities for the same variant are summed before checking.

    Raises:
        VariantNotFound: a variant does not exist or belongs to another event.
        InsufficientStock: a quantity exceeds the remaining stock, or nothing was selected.
    """
    quantities: dict[uuid.UUID, int] = {}
    for item in selection:
        quantities[item.variant_id] = quantities.get(item.variant_id, 0) + item.quantity
    if not quantities:
        raise InsufficientStock("Select at least one item.")

    variants = {v.pk: v for v in MerchandiseVariant.objects.filter(event=event, pk__in=quantities)}
    resolved: list[tuple[MerchandiseVariant, int]] = []
    for variant_id, quantity in quantities.items():
        variant = variants.get(variant_id)
        if variant is None:
            raise VariantNotFound(variant_id=str(variant_id))
        reserve_check(variant, quantity)
        resolved.append((variant, quantity))
    return resolved


def commit(registration: Registration) -> None:
    """Decrement stock for every line item of ``registration``.

    Must run inside the approval transaction: if any line cannot be served the
    raised InsufficientStock rolls back the decrements already applied.
    """
    for item in registration.items.select_related("variant").order_by("position"):
        updated = MerchandiseVariant.objects.filter(pk=item.variant_id, stock__gte=item.quantity).update(
            stock=F("stock") - item.quantity
        )
        if not updated:
            available = MerchandiseVariant.objects.filter(pk=item.variant_id).values_list("stock", flat=True).first()
            logger.warning(
                "stock_commit_failed",
                registration_id=str(registration.pk),
                variant_id=str(item.variant_id),
                requested=item.quantity,
                available=available,
            )
            raise InsufficientStock(
                f"Not enough stock left for {item.variant.name}.",
                variant_id=str(item.variant_id),
                available=available or 0,
                requested=item.quantity,
            )
        logger.info(
            "stock_committed",
            registration_id=str(registration.pk),
            variant_id=str(item.variant_id),
            quantity=item.quantity,
        )
