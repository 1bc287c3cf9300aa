from src.models.base import Base
from src.models.launch import LaunchAnalysis

__all__ = [
    "Base",
    "LaunchAnalysis",
]
