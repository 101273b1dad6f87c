"""CRUD operations for payouts."""

from stellarbill.crud._base import CRUDOrganization
from stellarbill.models.payout import Payout

payout = CRUDOrganization(Payout)
