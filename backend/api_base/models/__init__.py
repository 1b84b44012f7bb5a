# Models package init
from api_base.models.example import Example

__all__ = ["Example"]
