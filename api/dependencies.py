"""Request-scoped access to the components create_app() built."""

from fastapi import Request


def get_generator(request: Request):
    return request.app.state.generator


def get_health_checker(request: Request):
    return request.app.state.health_checker
