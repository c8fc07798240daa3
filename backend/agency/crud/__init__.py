from . import crud_client
from . import crud_client_payment
from . import crud_agency_settings
from .crud_client import get_client, get_client_by_contract_number, apply_credit
from .crud_client_payment import list_payments_for_client
from .crud_agency_settings import get_agency_settings
