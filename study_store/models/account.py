from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from study_store.database import Base


class AccountEntry(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default="buyer")
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    purchases = relationship(
        "PurchaseEntry",
        back_populates="account",
        order_by="PurchaseEntry.id",
        cascade="all, delete-orphan",
    )


class PurchaseEntry(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    invoice = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    account = relationship("AccountEntry", back_populates="purchases")
