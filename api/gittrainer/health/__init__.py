from gittrainer.health.router import router


__all__ = ["router"]
