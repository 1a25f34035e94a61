from pulse.config.settings import settings

__all__ = ["settings"]
