"""
Viewr Microservices Architecture

Ce package contient la passerelle HTTP et les microservices Viewr :
- API Gateway (routage HTTP -> RabbitMQ par en-tête x-target-queue)
- Dental Service (inventaire, patients, rendez-vous, tâches)
- Auth Service (plans d'abonnement)
- Notification Service (stockage des notifications)
"""

__version__ = "1.0.0"
__author__ = "Viewr Team"

# Services disponibles
SERVICES = {
    "gateway": {
        "name": "API Gateway",
        "port": 3000,
        "description": "HTTP entry point & RabbitMQ dispatch"
    },
    "dental": {
        "name": "Dental Service",
        "port": 3020,
        "queue": "dental_queue",
        "description": "Dental inventory, patients, appointments & tasks"
    },
    "auth": {
        "name": "Auth Service",
        "port": 3010,
        "queue": "auth_queue",
        "description": "Plans & establishments"
    },
    "notification": {
        "name": "Notification Service",
        "port": 3030,
        "queue": "notification_queue",
        "description": "Notification storage"
    }
}
