from .session import RequestsComputeSession

__all__: list[str] = ["RequestsComputeSession"]
