"""
Loyalty program models. The program definition itself (tiers, rewards, rules)
is stored as a settings document; these tables track customer progress.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class LoyaltyAccount(Base):
    __tablename__ = "loyalty_accounts"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), unique=True, nullable=False)
    total_points = Column(Integer, default=0, nullable=False)  # Lifetime points, drives the tier
    available_points = Column(Integer, default=0, nullable=False)  # Spendable balance
    rewards_redeemed = Column(Integer, default=0, nullable=False)
    current_tier = Column(String(50), default="bronze")
    joined_at = Column(DateTime, server_default=func.now())
    last_activity = Column(DateTime, server_default=func.now())

    customer = relationship("Customer", back_populates="loyalty_account")
    transactions = relationship(
        "LoyaltyTransaction",
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="LoyaltyTransaction.created_at.desc()",
    )


class LoyaltyTransaction(Base):
    __tablename__ = "loyalty_transactions"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("loyalty_accounts.id"), nullable=False)
    points = Column(Integer, nullable=False)  # Negative for redemptions
    action = Column(String(50), nullable=False)  # purchase, manual, redeem
    description = Column(String(255), nullable=True)
    reward_id = Column(String(100), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    account = relationship("LoyaltyAccount", back_populates="transactions")
