from agroshop.models.user import User
from agroshop.models.product import Product
from agroshop.models.farmer import Farmer
from agroshop.models.bill import Bill, BillItem
from agroshop.models.payment import Payment
from agroshop.models.account import CustomerAccount, InterestCharge
from agroshop.db import changes  # registers the commit listeners
from agroshop.db.session import engine, Base

def init_db(bind=None):
    # Create all tables
    Base.metadata.create_all(bind=bind or engine)
