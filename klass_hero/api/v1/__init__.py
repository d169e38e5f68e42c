from klass_hero.api.v1.router import router

__all__ = ["router"]
