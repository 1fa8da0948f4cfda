from fastapi import Depends, Request

from .container import ApplicationContainer


def get_container(request: Request) -> ApplicationContainer:
    container = getattr(request.app.state, "container", None)
    if not container:
        raise RuntimeError("Application container not initialised.")
    return container


def get_user_guard(container: ApplicationContainer = Depends(get_container)):
    return container.user_guard


def get_admin_guard(container: ApplicationContainer = Depends(get_container)):
    return container.admin_guard


def get_user_auth_service(container: ApplicationContainer = Depends(get_container)):
    return container.user_auth_service


def get_admin_auth_service(container: ApplicationContainer = Depends(get_container)):
    return container.admin_auth_service


def get_admin_service(container: ApplicationContainer = Depends(get_container)):
    return container.admin_service


def get_user_service(container: ApplicationContainer = Depends(get_container)):
    return container.user_service
