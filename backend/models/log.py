# backend/models/log.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from database import Base

# Audit entry written after every mutating action (see utils/audit.py)
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)

    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action = Column(String(50), index=True)     # e.g. STOCK_EXIT, PURCHASE_STATUS
    resource = Column(String(50), index=True)   # e.g. stock, purchases, trusses
    status = Column(String(20), index=True)     # SUCCESS / FAIL
    ip = Column(String(64), nullable=True)

    # Identifiers and quantities relevant to the action
    meta = Column(JSON, nullable=True)

    user = relationship("User", lazy="joined", uselist=False)
