"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from gated_feedback.db.session import get_db
from gated_feedback.services.rpc import ChainRpcClient, get_rpc_client

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_rpc_client_dep() -> ChainRpcClient:
    """Return the shared node client; tests override this dependency."""
    return get_rpc_client()


RpcClientDep = Annotated[ChainRpcClient, Depends(get_rpc_client_dep)]
