"""FastAPI dependencies for services built at startup."""

from fastapi import Request

from springbucks.services.coffee import CoffeeService


def get_coffee_service(request: Request) -> CoffeeService:
    return request.app.state.coffee_service
