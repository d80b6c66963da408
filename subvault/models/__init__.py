"""ORM Models: SQLAlchemy declarative models for all vault entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Vault is the aggregate root; every other entity is scoped by vault_id

Design Decisions:
    - One file per entity; all imported here so Base.metadata is complete
      before create_all() or Alembic autogenerate runs
"""

from subvault.models.vault import Vault  # noqa: F401
from subvault.models.credential import Credential  # noqa: F401
from subvault.models.subscription import Subscription  # noqa: F401
from subvault.models.tag import Tag  # noqa: F401
from subvault.models.notification_setting import NotificationSetting  # noqa: F401
from subvault.models.ai_config import AIConfig  # noqa: F401
from subvault.models.ai_chat import AIChat  # noqa: F401
from subvault.models.ai_report import AIReport  # noqa: F401
