"""Database models — re-exports all models.

Import from here:  from boqcore.models import User, Shop, ...
Or from submodules: from boqcore.models.catalog import Shop
"""

from .base import Base  # noqa: F401

# Auth & Users
from .auth import ROLES, User  # noqa: F401

# Taxonomy
from .taxonomy import Category, Product, Subcategory  # noqa: F401

# Catalog: shops, templates, submissions, materials
from .catalog import (  # noqa: F401
    ApprovableMixin,
    Material,
    MaterialSubmission,
    MaterialTemplate,
    Shop,
)

# BOQ projects, versions, items
from .boq import (  # noqa: F401
    PROJECT_STATUSES,
    VERSION_STATUSES,
    BoqItem,
    BoqProject,
    BoqVersion,
)
