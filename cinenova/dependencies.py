from fastapi import Request

from cinenova.services.catalog import CatalogService
from cinenova.services.transfer import TransferService


def get_catalog(request: Request) -> CatalogService:
    return request.app.state.catalog


def get_transfer(request: Request) -> TransferService:
    return request.app.state.transfer
