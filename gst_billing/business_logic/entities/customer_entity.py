# gst_billing/business_logic/entities/customer_entity.py
from dataclasses import dataclass, field
from typing import Optional
from .base_entity import BaseEntity

@dataclass
class CustomerEntity(BaseEntity):
    name: str
    city: str = field(default="")
    phone: Optional[str] = field(default=None)
