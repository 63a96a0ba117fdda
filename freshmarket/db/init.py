import logging

from freshmarket.db.session import Base, Database
from freshmarket.models.order import Order
from freshmarket.models.product import Product
from freshmarket.models.user import User

log = logging.getLogger(__name__)


def init_db(database: Database):
    # Create all tables
    Base.metadata.create_all(bind=database.engine)
    log.info("Ensured tables: %s", ", ".join(model.__tablename__ for model in (User, Product, Order)))
