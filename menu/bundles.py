"""Tagged shapes for the content of a bundle (combinado) promotion.

Every bundle item is exactly one of:

* ``FixedSelection``: a product (optionally a specific variant) always included.
* ``ChoiceGroup``: a labelled slot where the customer picks one ``ChoiceOption``.

The database stores both shapes in one table with an ``is_choice_group`` flag;
``BundlePromotionItem.as_shape()`` converts a row into one of these.
"""
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class ChoiceOption:
    product_id: int
    variant_id: Optional[int] = None
    sort_order: int = 0


@dataclass(frozen=True)
class FixedSelection:
    # None only while a bundle is being assembled; BundleBuilder rejects it on save.
    product_id: Optional[int]
    variant_id: Optional[int] = None
    quantity: int = 1
    sort_order: int = 0
    item_id: Optional[int] = None

    @property
    def product_ids(self) -> Tuple[int, ...]:
        return (self.product_id,) if self.product_id is not None else ()


@dataclass(frozen=True)
class ChoiceGroup:
    label: str
    options: Tuple[ChoiceOption, ...] = field(default_factory=tuple)
    quantity: int = 1
    sort_order: int = 0
    item_id: Optional[int] = None

    @property
    def product_ids(self) -> Tuple[int, ...]:
        return tuple(option.product_id for option in self.options)


BundleShape = Union[FixedSelection, ChoiceGroup]
