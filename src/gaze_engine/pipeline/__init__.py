from .broadcaster import Broadcaster

__all__ = ["Broadcaster"]
