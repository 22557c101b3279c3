from sqlalchemy import Column, Integer, LargeBinary, String

from .db import Base


class LedgerEntry(Base):
    __tablename__ = "ledger_entries"

    key = Column(String, primary_key=True)
    value = Column(LargeBinary, nullable=False)
    updated_at = Column(String, nullable=False)


class LedgerTransaction(Base):
    __tablename__ = "ledger_transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tx_hash = Column(String, unique=True, index=True, nullable=False)
    key = Column(String, index=True, nullable=False)
    size = Column(Integer, nullable=False)
    created_at = Column(String, nullable=False)
