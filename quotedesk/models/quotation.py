# quotedesk/models/quotation.py
from datetime import datetime
from decimal import Decimal
from typing import List
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quotedesk.db import Base

from .customer import Customer
from .product import Product
from .user import User

ZERO = Decimal("0.00")


def _money(**kw):
    return mapped_column(Numeric(10, 2), nullable=False, default=ZERO, **kw)


class Quotation(Base):
    __tablename__ = "quotations"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    quotation_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)

    customer_id: Mapped[str] = mapped_column(ForeignKey("customers.id"), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    branch: Mapped[str] = mapped_column(String(100), nullable=False)

    # --- breakdown snapshot (taken at save time) ---
    subtotal: Mapped[Decimal] = _money()  # gross revenue
    product_cost: Mapped[Decimal] = _money()
    total_costs: Mapped[Decimal] = _money()
    total_without_invoice: Mapped[Decimal] = _money()
    invoice_percent: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("5.00")
    )
    invoice_amount: Mapped[Decimal] = _money()
    total_with_invoice: Mapped[Decimal] = _money()
    company_profit: Mapped[Decimal] = _money()
    profit_percent: Mapped[Decimal] = _money()
    tithe: Mapped[Decimal] = _money()
    net_profit: Mapped[Decimal] = _money()
    discount_percent: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=ZERO
    )
    discount_amount: Mapped[Decimal] = _money()
    total: Mapped[Decimal] = _money()  # final total to the customer

    # --- header ---
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    valid_until: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    shipping_included: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    warranty_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    pdf_title: Mapped[str | None] = mapped_column(String(200), nullable=True)

    responsible_id: Mapped[str | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    responsible_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    responsible_position: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # admin-calculated versions are copies of a salesperson's proposal
    admin_calculated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    original_quotation_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    # per-quotation commission override set by an admin (percent)
    commission: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    customer: Mapped[Customer] = relationship(lazy="joined")
    user: Mapped[User] = relationship(foreign_keys=[user_id], lazy="joined")

    items: Mapped[List["QuotationItem"]] = relationship(
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="QuotationItem.position",
    )
    costs: Mapped[List["QuotationCost"]] = relationship(
        back_populates="quotation",
        cascade="all, delete-orphan",
        order_by="QuotationCost.position",
    )


class QuotationItem(Base):
    __tablename__ = "quotation_items"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    quotation_id: Mapped[str] = mapped_column(ForeignKey("quotations.id"), nullable=False, index=True)
    product_id: Mapped[str] = mapped_column(ForeignKey("products.id"), nullable=False)
    position: Mapped[int] = mapped_column(nullable=False, default=0)

    quantity: Mapped[Decimal] = mapped_column(  # area in m²
        Numeric(12, 3), nullable=False, default=ZERO
    )
    unit_price: Mapped[Decimal] = _money()
    unit_cost: Mapped[Decimal] = _money()
    subtotal: Mapped[Decimal] = _money()
    total_cost: Mapped[Decimal] = _money()

    quotation: Mapped[Quotation] = relationship(back_populates="items")
    product: Mapped[Product] = relationship(lazy="joined")


class QuotationCost(Base):
    __tablename__ = "quotation_costs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    quotation_id: Mapped[str] = mapped_column(ForeignKey("quotations.id"), nullable=False, index=True)
    cost_id: Mapped[str | None] = mapped_column(ForeignKey("costs.id"), nullable=True, index=True)
    position: Mapped[int] = mapped_column(nullable=False, default=0)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    calculation_type: Mapped[str] = mapped_column(String(20), nullable=False, default="fixed")
    unit_value: Mapped[Decimal] = _money()
    quantity: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("1.00")
    )
    percentage_value: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=ZERO
    )
    total_value: Mapped[Decimal] = _money()
    supplier: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    quotation: Mapped[Quotation] = relationship(back_populates="costs")
