from .auth import User
from .documents import Document, EntityType
from .properties import Shop

__all__ = [
    'User',
    'Document', 'EntityType',
    'Shop',
]
