"""
Pricing configuration — single row, created with defaults on first read
"""

import logging

from sqlalchemy.orm import Session

from shipday.models import PricingConfig
from shipday.models.pricing import DEFAULT_ECONOMY, DEFAULT_EXPRESS, DEFAULT_SATCHEL
from shipday.schemas.pricing import PricingUpdate

logger = logging.getLogger(__name__)


def get_pricing(db: Session) -> PricingConfig:
    config = db.query(PricingConfig).order_by(PricingConfig.id).first()
    if config is None:
        config = PricingConfig(
            economy=dict(DEFAULT_ECONOMY),
            express=dict(DEFAULT_EXPRESS),
            satchel=dict(DEFAULT_SATCHEL),
        )
        db.add(config)
        db.commit()
        db.refresh(config)
        logger.info("Pricing config initialised with defaults")
    return config


def update_pricing(db: Session, patch: PricingUpdate) -> PricingConfig:
    """Merge per tier; keys not given keep their current value."""
    config = get_pricing(db)
    changes = patch.model_dump(by_alias=True, exclude_none=True)
    for tier, values in changes.items():
        # New dict so the JSON column is flagged dirty
        setattr(config, tier, {**(getattr(config, tier) or {}), **values})
    db.commit()
    db.refresh(config)
    logger.info(f"Pricing config updated: {', '.join(changes) or 'no changes'}")
    return config
