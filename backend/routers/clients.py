from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from crud import clients as crud_clients
from schemas.clients import Client, ClientCreate, ClientUpdate
from schemas.users import UserContext
from services.exceptions import ReferentialIntegrityError
from utils.auth_utils import require_role, get_user_identifier

router = APIRouter(prefix="/clients", tags=["Clients"])
logger = logging.getLogger("clients")

admin_only = require_role(["admin"])

@router.post("/", response_model=Client, status_code=status.HTTP_201_CREATED)
def create_client(
    client: ClientCreate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(admin_only)
):
    db_client = crud_clients.create_client(db, client, get_user_identifier(user))
    logger.info(f"Client '{db_client.name}' created by user {get_user_identifier(user)}")
    return db_client

@router.get("/", response_model=List[Client])
def read_clients(
    search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user: UserContext = Depends(admin_only)
):
    return crud_clients.get_clients(db, search=search, skip=skip, limit=limit)

@router.get("/{client_id}", response_model=Client)
def read_client(client_id: int, db: Session = Depends(get_db), user: UserContext = Depends(admin_only)):
    db_client = crud_clients.get_client(db, client_id)
    if db_client is None:
        raise HTTPException(status_code=404, detail="Client not found")
    return db_client

@router.patch("/{client_id}", response_model=Client)
def update_client(
    client_id: int,
    client: ClientUpdate,
    db: Session = Depends(get_db),
    user: UserContext = Depends(admin_only)
):
    db_client = crud_clients.get_client(db, client_id)
    if db_client is None:
        raise HTTPException(status_code=404, detail="Client not found")
    db_client = crud_clients.update_client(db, db_client, client, get_user_identifier(user))
    logger.info(f"Client '{db_client.name}' (ID: {client_id}) updated by user {get_user_identifier(user)}")
    return db_client

@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(
    client_id: int,
    db: Session = Depends(get_db),
    user: UserContext = Depends(admin_only)
):
    db_client = crud_clients.get_client(db, client_id)
    if db_client is None:
        raise HTTPException(status_code=404, detail="Client not found")
    try:
        crud_clients.delete_client(db, db_client, get_user_identifier(user))
    except ReferentialIntegrityError as e:
        logger.warning(f"Refused to delete client {client_id}: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    logger.info(f"Client (ID: {client_id}) deleted by user {get_user_identifier(user)}")
