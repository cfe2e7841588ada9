from src.services import project_service, sprint_service


__all__ = [
    "project_service",
    "sprint_service",
]
