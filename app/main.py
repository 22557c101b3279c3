import base64
import binascii
import hashlib
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from . import models
from .db import get_db, init_db

LEDGER_ADDRESS = os.getenv("DEALROOM_LEDGER_ADDRESS", "0x5fbdb2315678afecb367f032d93f642f64180aa3")


def _paused() -> bool:
    return os.getenv("DEALROOM_LEDGER_PAUSED", "").lower() in ("1", "true", "yes")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize database schema at startup.
    init_db()
    yield


app = FastAPI(title="Deal Room Ledger", version="0.1", lifespan=lifespan)


class StatusOut(BaseModel):
    available: bool
    address: str


class DataIn(BaseModel):
    value: str  # base64


class DataOut(BaseModel):
    key: str
    value: str  # base64, empty when the key was never written


class CommitOut(BaseModel):
    status: str
    tx_hash: str


def _tx_hash(key: str, value: bytes, created_at: str) -> str:
    return "0x" + hashlib.sha256(key.encode("utf-8") + value + created_at.encode("ascii")).hexdigest()


@app.get("/status", response_model=StatusOut)
def status():
    return StatusOut(available=not _paused(), address=LEDGER_ADDRESS)


@app.get("/data/{key}", response_model=DataOut)
def get_data(key: str, db: Session = Depends(get_db)):
    entry = db.query(models.LedgerEntry).filter(models.LedgerEntry.key == key).first()
    value = base64.b64encode(entry.value).decode("ascii") if entry else ""
    return DataOut(key=key, value=value)


@app.put("/data/{key}", response_model=CommitOut)
def set_data(key: str, payload: DataIn, db: Session = Depends(get_db)):
    if _paused():
        raise HTTPException(status_code=503, detail="Ledger is paused")
    try:
        value = base64.b64decode(payload.value, validate=True)
    except binascii.Error:
        raise HTTPException(status_code=400, detail="Value is not valid base64")
    created_at = datetime.now(timezone.utc).isoformat()
    entry = db.query(models.LedgerEntry).filter(models.LedgerEntry.key == key).first()
    if entry:
        entry.value = value
        entry.updated_at = created_at
    else:
        entry = models.LedgerEntry(key=key, value=value, updated_at=created_at)
    tx_hash = _tx_hash(key, value, created_at)
    db.add(entry)
    db.add(models.LedgerTransaction(tx_hash=tx_hash, key=key, size=len(value), created_at=created_at))
    db.commit()
    return CommitOut(status="committed", tx_hash=tx_hash)
