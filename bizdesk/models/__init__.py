"""
SQLAlchemy ORM models package.

All models are imported here so that:
  1. Base.metadata knows every table before create_all() runs
  2. Other modules can import from bizdesk.models directly
"""

from bizdesk.models.user import User, UserRole, Role  # noqa: F401
from bizdesk.models.product import Product, ProductPrice  # noqa: F401
from bizdesk.models.offer import Offer  # noqa: F401
from bizdesk.models.subscription import Subscription  # noqa: F401
from bizdesk.models.wallet import Wallet, UserWallet  # noqa: F401
from bizdesk.models.transaction import Transaction  # noqa: F401
from bizdesk.models.budget import BudgetPlan, BudgetItem  # noqa: F401
from bizdesk.models.split_bill import SplitBill, SplitBillItem, SplitBillParticipant  # noqa: F401
