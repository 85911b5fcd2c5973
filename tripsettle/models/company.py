"""
Company model for the shipping companies that hand loads to the carrier.
"""
from sqlalchemy import Column, String, Integer, Enum as SQLEnum
from sqlalchemy.orm import relationship
from tripsettle.db.base import BaseModel
import enum


class TrustLevel(str, enum.Enum):
    """Whether the carrier fronts the shortfall risk for this company."""
    TRUSTED = "trusted"
    COD_REQUIRED = "cod_required"


class Company(BaseModel):
    """Shipping company that owns loads and receives receivables."""
    __tablename__ = "companies"
    
    owner_id = Column(Integer, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    trust_level = Column(SQLEnum(TrustLevel), default=TrustLevel.COD_REQUIRED, nullable=False)
    
    # Relationships
    loads = relationship("Load", back_populates="company")
