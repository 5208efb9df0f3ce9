"""Sample entities for local development (GRIDENGINE_SEED_SAMPLE_DATA=true)."""

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from gridengine.entities.models import Acquisition, Buyer, County, LetterAgreement, Operator, Referrer

logger = logging.getLogger(__name__)

BUYERS = [
    ("Permian Oil Partners", Decimal("3.0000"), "Midland", "TX"),
    ("Red River Royalties", Decimal("2.0000"), "Shreveport", "LA"),
    ("Boiling Springs Oil Co", Decimal("2.5000"), "Tulsa", "OK"),
    ("Eagle Ford Minerals", Decimal("1.7500"), "San Antonio", "TX"),
    ("Anadarko Basin Oil Trust", None, "Oklahoma City", "OK"),
]

OPERATORS = [
    ("Pioneer Natural Resources", "Irving", "TX"),
    ("Devon Energy", "Oklahoma City", "OK"),
    ("Continental Resources", "Oklahoma City", "OK"),
    ("EOG Resources", "Houston", "TX"),
]

COUNTIES = [("Reeves", "TX"), ("Midland", "TX"), ("Kingfisher", "OK"), ("Karnes", "TX")]

REFERRERS = [("Smith Land Services", "75-1234567"), ("Basin Title Group", "73-7654321")]

DEAL_STATUSES = ["Open", "Pending", "Closed", "Dead"]


def _is_empty(session: Session, model) -> bool:
    return not session.execute(select(func.count()).select_from(model)).scalar()


def seed_sample_entities(session: Session) -> int:
    """Insert sample rows into empty entity tables. Returns the number added."""
    added = []
    today = date.today()

    if _is_empty(session, Buyer):
        added += [
            Buyer(buyer_name=name, default_commission=commission, city=city, state_code=state,
                  default_buyer=index == 0)
            for index, (name, commission, city, state) in enumerate(BUYERS)
        ]
    if _is_empty(session, Operator):
        added += [Operator(operator_name=name, city=city, state_code=state) for name, city, state in OPERATORS]
    if _is_empty(session, County):
        added += [County(county_name=name, state_code=state) for name, state in COUNTIES]
    if _is_empty(session, Referrer):
        added += [Referrer(referrer_name=name, referrer_tax_id=tax_id) for name, tax_id in REFERRERS]
    if _is_empty(session, Acquisition):
        for index in range(12):
            added.append(
                Acquisition(
                    acquisition_number=f"ACQ-{1000 + index}",
                    buyer=BUYERS[index % len(BUYERS)][0],
                    deal_status=DEAL_STATUSES[index % len(DEAL_STATUSES)],
                    county_name=COUNTIES[index % len(COUNTIES)][0],
                    operator_name=OPERATORS[index % len(OPERATORS)][0],
                    total_bonus=Decimal(25000 * (index + 1)),
                    total_gross_acres=Decimal("160.0000") * (index % 3 + 1),
                    effective_date=today - timedelta(days=30 * index),
                    due_date=today + timedelta(days=10 * (index % 4)),
                    closing_days=15 + index,
                    liens=index % 5 == 0,
                    is_active=index % 4 != 3,
                )
            )
    if _is_empty(session, LetterAgreement):
        for index in range(6):
            added.append(
                LetterAgreement(
                    seller_last_name=["Adams", "Baker", "Clark", "Davis", "Evans", "Foster"][index],
                    seller_name=f"Seller {index + 1}",
                    created_on=datetime.now() - timedelta(days=7 * index),
                    effective_date=today - timedelta(days=7 * index),
                    banking_days=10 + index,
                    total_bonus=Decimal(40000 + 5000 * index),
                    deal_status=DEAL_STATUSES[index % len(DEAL_STATUSES)],
                    county_name=COUNTIES[index % len(COUNTIES)][0],
                    operator_name=OPERATORS[index % len(OPERATORS)][0],
                )
            )

    session.add_all(added)
    session.commit()
    logger.info(f"Seeded {len(added)} sample entities")
    return len(added)
