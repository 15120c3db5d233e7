"""Node, balance, import and transaction endpoints.

Every ``/nodes/{asset_id}/...`` route resolves the asset to a client
first; unknown assets answer 404 through the ``NotFoundError`` handler
installed by the app factory.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from coins_oracle.clients.base import CoinClient, require_importer
from coins_oracle.errors import CapabilityUnsupportedError, OracleError
from coins_oracle.resolver import CoinResolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/nodes")

ERROR_INVALID_REQUEST = 101
ERROR_CODE_CANNOT_IMPORT = 201
ERROR_CODE_BALANCE_ERROR = 202
ERROR_CODE_GET_TRANSACTION_ERROR = 301
ERROR_CODE_GET_INFO_ERROR = 401


class ImportAddressRequest(BaseModel):
    """Body of an address import request."""

    addr: str = Field(..., min_length=1, description="Address to start tracking")


def error_response(message: str, code: int, status_code: int = 400) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"data": None, "error": message, "code": code},
    )


def get_coin_resolver(request: Request) -> CoinResolver:
    return request.app.state.resolver


def get_coin_client(asset_id: str, resolver: CoinResolver = Depends(get_coin_resolver)) -> CoinClient:
    return resolver.get(asset_id)


@router.get("")
async def get_nodes(noinfo: str = "", resolver: CoinResolver = Depends(get_coin_resolver)):
    """List every registered node.

    Live chain state is attached unless ``noinfo`` is "true" (any casing);
    any other value is treated as false.
    """
    nodes = await resolver.get_nodes(info=noinfo.lower() != "true")
    return {"data": {"nodes": [node.to_dict() for node in nodes]}}


@router.get("/{asset_id}/info")
async def get_info(asset_id: str, client: CoinClient = Depends(get_coin_client)):
    try:
        info = await client.get_info()
    except OracleError as e:
        logger.error(f"error getting info for coin: {asset_id}, err: {e}")
        return error_response("unable to get node information for given coin", ERROR_CODE_GET_INFO_ERROR)

    return {"data": info.to_dict()}


@router.get("/{asset_id}/addrs/{addr}/balance")
async def get_wallet_balance(asset_id: str, addr: str, client: CoinClient = Depends(get_coin_client)):
    try:
        balance = await client.get_balance(addr)
    except OracleError as e:
        logger.error(f"error getting balance for wallet address: {addr} for coin: {asset_id}, err: {e}")
        return error_response("could not get balance of given address", ERROR_CODE_BALANCE_ERROR)

    return {"data": balance.to_dict()}


@router.post("/{asset_id}/addrs/import")
async def import_address(asset_id: str, request: Request, client: CoinClient = Depends(get_coin_client)):
    """Ask the node to start tracking an address."""
    try:
        payload = ImportAddressRequest.model_validate(await request.json())
    except ValueError:
        return error_response("missing addr field in request", ERROR_INVALID_REQUEST)

    try:
        importer = require_importer(client, asset_id)
    except CapabilityUnsupportedError as e:
        return error_response(str(e), ERROR_CODE_CANNOT_IMPORT)

    try:
        await importer.import_address(payload.addr)
    except OracleError as e:
        logger.error(f"error importing address: {payload.addr} for coin: {asset_id}, err: {e}")
        return error_response("could not import address", ERROR_CODE_CANNOT_IMPORT)

    return {"data": "success"}


@router.get("/{asset_id}/txs/{tx_hash}")
async def get_transaction_by_hash(asset_id: str, tx_hash: str, client: CoinClient = Depends(get_coin_client)):
    try:
        tx = await client.get_transaction_by_hash(tx_hash)
    except OracleError as e:
        logger.error(f"error getting transaction for hash: {tx_hash} for coin: {asset_id}, err: {e}")
        return error_response(
            "could not return transaction details for the given hash/id",
            ERROR_CODE_GET_TRANSACTION_ERROR,
        )

    return {"data": {"transaction": tx.to_dict()}}
