"""
Service Dental de Viewr

Ce service gère :
- L'inventaire (lots et fournisseurs)
- Les dossiers patients et schémas dentaires
- Les rendez-vous
- Les tâches du cabinet
"""

from .app import create_dental_app
from .handlers import build_registry
from .models import Supplier, Lot, DentalPatient, DentalAppointment, Task

__all__ = [
    "create_dental_app",
    "build_registry",
    "Supplier",
    "Lot",
    "DentalPatient",
    "DentalAppointment",
    "Task"
]
