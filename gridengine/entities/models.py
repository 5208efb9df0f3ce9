# gridengine/entities/models.py
"""Entity tables queried through the grid engine.

Only the columns that grids filter, sort or display are modelled here.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, Numeric, String

from gridengine.core.database import Base


class Acquisition(Base):
    __tablename__ = "acquisitions"

    acquisition_id = Column(Integer, primary_key=True, index=True)
    acquisition_number = Column(String(50), nullable=True)
    buyer = Column(String(150), nullable=True)
    assignee = Column(String(150), nullable=True)
    deal_status = Column(String(50), nullable=True)
    county_name = Column(String(100), nullable=True)
    operator_name = Column(String(150), nullable=True)
    total_bonus = Column(Numeric(14, 2), nullable=True)
    consideration_fee = Column(Numeric(14, 2), nullable=True)
    total_gross_acres = Column(Numeric(12, 4), nullable=True)
    total_net_acres = Column(Numeric(12, 4), nullable=True)
    effective_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    paid_date = Column(Date, nullable=True)
    closing_days = Column(Integer, nullable=True)
    liens = Column(Boolean, nullable=True)
    is_active = Column(Boolean, nullable=True, default=True)


class LetterAgreement(Base):
    __tablename__ = "letter_agreements"

    letter_agreement_id = Column(Integer, primary_key=True, index=True)
    seller_last_name = Column(String(100), nullable=True)
    seller_name = Column(String(150), nullable=True)
    created_on = Column(DateTime, nullable=True)
    effective_date = Column(Date, nullable=True)
    banking_days = Column(Integer, nullable=True)
    total_bonus = Column(Numeric(14, 2), nullable=True)
    deal_status = Column(String(50), nullable=True)
    county_name = Column(String(100), nullable=True)
    operator_name = Column(String(150), nullable=True)
    land_man = Column(String(100), nullable=True)
    acquisition_id = Column(Integer, nullable=True)


class Buyer(Base):
    __tablename__ = "buyers"

    buyer_id = Column(Integer, primary_key=True, index=True)
    buyer_name = Column(String(150), nullable=False)
    default_buyer = Column(Boolean, nullable=True, default=False)
    default_commission = Column(Numeric(8, 4), nullable=True)
    contact_name = Column(String(100), nullable=True)
    contact_email = Column(String(150), nullable=True)
    city = Column(String(100), nullable=True)
    state_code = Column(String(2), nullable=True)
    zip_code = Column(String(10), nullable=True)


class Operator(Base):
    __tablename__ = "operators"

    operator_id = Column(Integer, primary_key=True, index=True)
    operator_name = Column(String(150), nullable=False)
    contact_name = Column(String(100), nullable=True)
    contact_email = Column(String(150), nullable=True)
    contact_phone = Column(String(30), nullable=True)
    city = Column(String(100), nullable=True)
    state_code = Column(String(2), nullable=True)
    zip_code = Column(String(10), nullable=True)


class County(Base):
    __tablename__ = "counties"

    county_id = Column(Integer, primary_key=True, index=True)
    county_name = Column(String(100), nullable=False)
    state_code = Column(String(2), nullable=True)
    contact_name = Column(String(100), nullable=True)
    contact_email = Column(String(150), nullable=True)
    city = Column(String(100), nullable=True)
    zip_code = Column(String(10), nullable=True)


class Referrer(Base):
    __tablename__ = "referrers"

    referrer_id = Column(Integer, primary_key=True, index=True)
    referrer_name = Column(String(150), nullable=False)
    referrer_tax_id = Column(String(20), nullable=True)
    contact_name = Column(String(100), nullable=True)
    contact_email = Column(String(150), nullable=True)
    city = Column(String(100), nullable=True)
    state_code = Column(String(2), nullable=True)
    zip_code = Column(String(10), nullable=True)
