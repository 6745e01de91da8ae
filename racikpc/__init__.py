from .models import Monitor, Part, PartCategory, User
from .partlist import BuildSession

__all__ = ["BuildSession", "Monitor", "Part", "PartCategory", "User"]
