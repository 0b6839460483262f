from .container import AppContainer, build_container, get_container, reset_container

__all__ = ["AppContainer", "build_container", "get_container", "reset_container"]
