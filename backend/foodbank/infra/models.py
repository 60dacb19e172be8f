"""Central registry for SQLAlchemy models.

Importing this module loads every ORM class so relationships declared by
string name resolve, and so ``Base.metadata`` is complete for Alembic and the
test schema.
"""

from foodbank.domain.organizations import db_models as organization_db_models  # noqa: F401
from foodbank.domain.users import db_models as user_db_models  # noqa: F401
from foodbank.domain.volunteers import db_models as volunteer_db_models  # noqa: F401
from foodbank.domain.clients import db_models as client_db_models  # noqa: F401
from foodbank.domain.inventory import db_models as inventory_db_models  # noqa: F401
