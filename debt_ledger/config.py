import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from .service import DEFAULT_CURRENCY, DEFAULT_LOCATION, DEFAULT_PRODUCTS

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseModel):
    admin_secret: str = "IB0o"
    data_dir: str = "data"
    products: tuple[str, ...] = DEFAULT_PRODUCTS
    currency: str = DEFAULT_CURRENCY
    fallback_location: str = DEFAULT_LOCATION
    title: str = "Produce Debt Tracker"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        load_dotenv(env_file)
        values = {
            "admin_secret": os.getenv("DEBT_LEDGER_ADMIN_SECRET"),
            "data_dir": os.getenv("DEBT_LEDGER_DATA_DIR"),
            "currency": os.getenv("DEBT_LEDGER_CURRENCY"),
            "fallback_location": os.getenv("DEBT_LEDGER_FALLBACK_LOCATION"),
            "title": os.getenv("DEBT_LEDGER_TITLE"),
            "log_level": os.getenv("DEBT_LEDGER_LOG_LEVEL"),
        }
        products = os.getenv("DEBT_LEDGER_PRODUCTS")
        if products:
            values["products"] = tuple(p.strip() for p in products.split(",") if p.strip())
        return cls(**{k: v for k, v in values.items() if v})


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
