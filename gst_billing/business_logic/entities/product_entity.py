# gst_billing/business_logic/entities/product_entity.py
from dataclasses import dataclass, field
from typing import Optional
from decimal import Decimal
from .base_entity import BaseEntity

@dataclass
class ProductEntity(BaseEntity):
    name: str
    rate: Decimal = field(default_factory=lambda: Decimal("0"))
    unit: str = field(default="Pcs")          # e.g. Kg, Gm, Pcs, Box
    packing: Optional[str] = field(default=None) # free text, e.g. "1 kg", "250 gm"
